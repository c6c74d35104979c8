"""
UC: Cadastro de clientes.

O documento (CPF/CNPJ) é gravado só com dígitos; 11 dígitos indicam
Pessoa Física, os demais Pessoa Jurídica. Excluir um cliente não exclui
pedidos nem OS associados (as referências são apenas por id).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from gestao.config import DB_PATH
from gestao.adapters.parsers import somente_digitos
from gestao.infra.repositories import ClienteRepo, OrdemServicoRepo, PedidoRepo, agora_iso
from gestao.infra.logger import log_system_event


def _tipo_pessoa(documento: str) -> str:
    return "Pessoa Física" if len(documento) == 11 else "Pessoa Jurídica"


def cadastrar_cliente(tenant_id: str, dados: Dict[str, Any], db_path: str = DB_PATH) -> str:
    nome = (dados.get("nome") or "").strip()
    if not nome:
        raise ValueError("Informe o nome do cliente.")
    documento = somente_digitos(dados.get("documento"))
    doc = {
        **dados,
        "nome": nome,
        "documento": documento,
        "tipo": _tipo_pessoa(documento),
        "recorrente": bool(dados.get("recorrente", False)),
        "data_cadastro": agora_iso(),
    }
    cliente_id = ClienteRepo(db_path, tenant_id).insert(doc)
    log_system_event("cliente_cadastrado", {"cliente_id": cliente_id, "tipo": doc["tipo"]})
    return cliente_id


def atualizar_cliente(tenant_id: str, cliente_id: str, dados: Dict[str, Any],
                      db_path: str = DB_PATH) -> Dict[str, Any]:
    campos = {k: v for k, v in dados.items() if k != "id"}
    if "documento" in campos:
        campos["documento"] = somente_digitos(campos["documento"])
        campos["tipo"] = _tipo_pessoa(campos["documento"])
    return ClienteRepo(db_path, tenant_id).update(cliente_id, campos)


def excluir_cliente(tenant_id: str, cliente_id: str, db_path: str = DB_PATH) -> None:
    ClienteRepo(db_path, tenant_id).delete(cliente_id)
    log_system_event("cliente_excluido", {"cliente_id": cliente_id})


def buscar_clientes(tenant_id: str, termo: Optional[str] = None, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Clientes em ordem de nome; ``termo`` busca em nome, documento e email."""
    clientes = ClienteRepo(db_path, tenant_id).get_all(ordenar_por="nome")
    t = (termo or "").strip().lower()
    if not t:
        return clientes
    return [
        c for c in clientes
        if t in (c.get("nome") or "").lower()
        or t in (c.get("documento") or "").lower()
        or t in (c.get("email") or "").lower()
    ]


def historico_cliente(tenant_id: str, cliente_id: str, db_path: str = DB_PATH) -> Dict[str, List[Dict[str, Any]]]:
    """Pedidos e ordens de serviço vinculados ao cliente."""
    pedidos = [
        p for p in PedidoRepo(db_path, tenant_id).get_all(ordenar_por="dataCriacao", desc=True)
        if p.get("clientId") == cliente_id
    ]
    ordens = [
        o for o in OrdemServicoRepo(db_path, tenant_id).get_all(ordenar_por="data_recebimento", desc=True)
        if o.get("cliente_id") == cliente_id
    ]
    return {"pedidos": pedidos, "ordens_servico": ordens}
