"""
UC: Pedidos de venda (criação, edição e listagem).

Toda gravação de pedido passa pela reconciliação, que confirma status,
estoque e demais campos numa única unidade atômica.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from gestao.config import DB_PATH
from gestao.adapters.parsers import parse_numero_ou_zero
from gestao.domain.erros import NaoEncontrado
from gestao.domain.models import ComponentePedido
from gestao.domain.status import StatusPedido, parse_status_pedido
from gestao.infra.repositories import PedidoRepo, agora_iso, novo_id
from gestao.usecases.reconciliacao import reconciliar_pedido, registrar_pedido
from gestao.infra.logger import log_system_event

# Campos que a edição de pedido pode alterar diretamente
CAMPOS_EDITAVEIS = (
    "clientName", "clientId", "total", "costPrice", "profitMargin", "notes", "components",
)


def _limpar_componentes(componentes: Any) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for comp in componentes or []:
        c = ComponentePedido.from_doc(comp)
        linha = {"id": c.id, "name": c.name, "price": c.price, "qty": c.qty,
                 "category": c.category, "sku": c.sku}
        out.append({k: v for k, v in linha.items() if v is not None})
    return out


def criar_pedido(tenant_id: str, dados: Dict[str, Any], valor_final: Any = None,
                 db_path: str = DB_PATH) -> str:
    """Grava o pedido já no status pedido (Pendente por omissão).

    A inserção e a movimentação de estoque do status inicial são confirmadas
    juntas; se a reconciliação falhar, nenhum pedido é gravado.
    """
    status_desejado = parse_status_pedido(dados.get("status"))
    doc = {k: dados.get(k) for k in CAMPOS_EDITAVEIS if dados.get(k) is not None}
    doc["components"] = _limpar_componentes(dados.get("components"))
    doc["total"] = parse_numero_ou_zero(dados.get("total"))
    doc["costPrice"] = parse_numero_ou_zero(dados.get("costPrice"))
    doc["dataCriacao"] = agora_iso()
    pedido_id = novo_id()
    registrar_pedido(tenant_id, pedido_id, doc, status_desejado, valor_final, db_path=db_path)
    log_system_event("pedido_criado", {"pedido_id": pedido_id, "status": status_desejado.value})
    return pedido_id


def atualizar_pedido(tenant_id: str, pedido_id: str, dados: Dict[str, Any],
                     valor_final: Any = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Edita o pedido; status e demais campos são gravados juntos ou nada é.

    Com ``components`` e um status de CONSUMO, a baixa usa a lista nova.
    """
    repo = PedidoRepo(db_path, tenant_id)
    campos = {k: dados[k] for k in CAMPOS_EDITAVEIS if k in dados}
    if "components" in campos:
        campos["components"] = _limpar_componentes(campos["components"])
    if dados.get("status") is None and not campos:
        atual = repo.get(pedido_id)
        if atual is None:
            raise NaoEncontrado("pedidos", pedido_id)
        return atual
    reconciliar_pedido(tenant_id, pedido_id, dados.get("status"), valor_final,
                       db_path=db_path, campos=campos)
    return repo.get(pedido_id)


def listar_pedidos(tenant_id: str, status: Union[str, StatusPedido, None] = None,
                   db_path: str = DB_PATH) -> List[Dict[str, Any]]:
    """Pedidos mais recentes primeiro; ``status`` filtra por um status."""
    alvo: Optional[StatusPedido] = parse_status_pedido(status) if status else None
    pedidos = PedidoRepo(db_path, tenant_id).get_all(ordenar_por="dataCriacao", desc=True)
    if alvo is None:
        return pedidos
    return [p for p in pedidos if parse_status_pedido(p.get("status")) == alvo]
