"""
UC: Ordens de serviço (reparos).
- abrir_os(): registra a OS como Recebido, com valor estimado.
- editar_os(): altera dados descritivos; o status muda só pela
  reconciliação (gestao.usecases.reconciliacao.reconciliar_os).
- excluir_os(), listar_os() com busca por cliente/equipamento/id.

OS não tem vínculo com o estoque.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from gestao.config import DB_PATH
from gestao.adapters.parsers import parse_numero_ou_zero
from gestao.domain.status import StatusOS, parse_status_os
from gestao.infra.repositories import OrdemServicoRepo, agora_iso
from gestao.infra.logger import log_system_event


def abrir_os(tenant_id: str, dados: Dict[str, Any], db_path: str = DB_PATH) -> str:
    if not (dados.get("cliente_nome") or "").strip():
        raise ValueError("Informe o nome do cliente da OS.")
    if not (dados.get("equipamento") or "").strip():
        raise ValueError("Informe o equipamento da OS.")
    doc = {
        **dados,
        "data_recebimento": agora_iso(),
        "status": StatusOS.RECEBIDO.value,
        "valor_estimado": parse_numero_ou_zero(dados.get("valor_estimado")),
        "valor_final": 0,
        "cliente_id": dados.get("cliente_id"),
    }
    os_id = OrdemServicoRepo(db_path, tenant_id).insert(doc)
    log_system_event("os_aberta", {"os_id": os_id, "equipamento": doc.get("equipamento")})
    return os_id


def editar_os(tenant_id: str, os_id: str, dados: Dict[str, Any], db_path: str = DB_PATH) -> Dict[str, Any]:
    """Mescla campos descritivos. ``status`` e ``valor_final`` são ignorados aqui."""
    campos = {k: v for k, v in dados.items() if k not in ("status", "valor_final", "id")}
    if "valor_estimado" in campos:
        campos["valor_estimado"] = parse_numero_ou_zero(campos["valor_estimado"])
    return OrdemServicoRepo(db_path, tenant_id).update(os_id, campos)


def excluir_os(tenant_id: str, os_id: str, db_path: str = DB_PATH) -> None:
    OrdemServicoRepo(db_path, tenant_id).delete(os_id)
    log_system_event("os_excluida", {"os_id": os_id})


def listar_os(tenant_id: str, status: Union[str, StatusOS, None] = None,
              busca: Optional[str] = None, db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """OS mais recentes primeiro, filtradas por status e termo de busca."""
    alvo = parse_status_os(status) if status else None
    termo = (busca or "").strip().lower()
    out: List[Dict[str, Any]] = []
    for ordem in OrdemServicoRepo(db_path, tenant_id).get_all(ordenar_por="data_recebimento", desc=True):
        if alvo is not None and parse_status_os(ordem.get("status")) != alvo:
            continue
        if termo:
            alvo_busca = " ".join(
                str(ordem.get(k) or "") for k in ("cliente_nome", "equipamento", "id")
            ).lower()
            if termo not in alvo_busca:
                continue
        out.append(ordem)
    return out
