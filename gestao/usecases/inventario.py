"""
UC: Livro de estoque (inventário).
- ajustar_estoque(): aplica variações em lote, tudo ou nada.
- aplicar_deltas(): mesma regra dentro de uma UnidadeAtomica já aberta
  (usada pela reconciliação para gravar estoque e status juntos).
- listar_disponiveis(): itens com quantidade > 0 para o montador, com
  filtros de categoria e compatibilidade.
- cadastrar_item() / listar_inventario() / remover_item(): manutenção.

Obs.:
- A quantidade é gravada como texto ("4", "2.5") nos documentos.
- Textos não numéricos valem 0.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from gestao.config import DB_PATH
from gestao.adapters.parsers import formatar_quantidade, parse_numero, parse_numero_ou_zero
from gestao.domain.erros import EstoqueInsuficiente, NaoEncontrado
from gestao.domain.models import ItemInventario
from gestao.infra.repositories import InventarioRepo, UnidadeAtomica, executar_atomico
from gestao.infra.logger import (
    log_transaction, log_estoque, log_system_event
)

ItemDelta = Union[Mapping[str, Any], Tuple[str, Any]]


def _agrupar_deltas(itens: Iterable[ItemDelta]) -> "OrderedDict[str, float]":
    """Normaliza ``{"id", "delta"}`` ou ``(id, delta)`` e soma ids repetidos."""
    agrupado: "OrderedDict[str, float]" = OrderedDict()
    for item in itens:
        if isinstance(item, Mapping):
            item_id, delta = item.get("id"), item.get("delta")
        else:
            item_id, delta = item
        if not item_id:
            raise ValueError("Item sem 'id' no ajuste de estoque.")
        num = parse_numero(delta)
        if num is None:
            raise ValueError(f"Variação inválida para o item {item_id}: {delta!r}")
        agrupado[str(item_id)] = agrupado.get(str(item_id), 0.0) + num
    return agrupado


def aplicar_deltas(unidade: UnidadeAtomica, itens: Iterable[ItemDelta]) -> Dict[str, float]:
    """Valida e enfileira os ajustes numa unidade atômica.

    Todos os itens são lidos e verificados antes de qualquer escrita ser
    enfileirada; a primeira falha interrompe sem deixar escrita pendente.

    Raises:
        NaoEncontrado: item inexistente.
        EstoqueInsuficiente: quantidade resultante negativa.

    Returns:
        ``{item_id: nova_quantidade}``.
    """
    agrupado = _agrupar_deltas(itens)
    novas: Dict[str, float] = {}
    for item_id, delta in agrupado.items():
        doc = unidade.get("inventario", item_id)
        if doc is None:
            raise NaoEncontrado("inventario", item_id)
        atual = parse_numero_ou_zero(doc.get("quantity"))
        nova = atual + delta
        if nova < 0:
            raise EstoqueInsuficiente(
                item_id, doc.get("component") or doc.get("name"),
                disponivel=atual, solicitado=-delta,
            )
        novas[item_id] = nova

    for item_id, nova in novas.items():
        unidade.update("inventario", item_id, {"quantity": formatar_quantidade(nova)})
        log_estoque(
            "baixa" if agrupado[item_id] < 0 else "estorno",
            item_id, agrupado[item_id], quantidade_nova=nova,
        )
    return novas


def ajustar_estoque(tenant_id: str, itens: Iterable[ItemDelta], db_path: str = DB_PATH) -> Dict[str, float]:
    """Aplica ``quantidade = atual + delta`` em todos os itens, ou em nenhum."""
    itens = list(itens)
    log_system_event("ajustar_estoque_start", {"tenant_id": tenant_id, "itens": len(itens)})
    try:
        novas = executar_atomico(db_path, tenant_id, lambda u: aplicar_deltas(u, itens))
        log_transaction("ajustar_estoque", {"tenant_id": tenant_id, "itens": itens}, result=novas)
        return novas
    except Exception as e:
        log_transaction("ajustar_estoque", {"tenant_id": tenant_id, "itens": itens}, error=str(e))
        raise


# -------------------------
# Consulta para o montador
# -------------------------

def listar_disponiveis(
    tenant_id: str,
    categoria: Optional[str] = None,
    socket: Optional[str] = None,
    ram_type: Optional[str] = None,
    db_path: str = DB_PATH,
) -> List[Dict[str, Any]]:
    """Itens com estoque (> 0), filtrados por categoria e compatibilidade.

    ``socket`` restringe placas-mãe ao soquete da CPU escolhida e
    ``ram_type`` restringe memórias ao tipo suportado pela placa-mãe.
    Os filtros de compatibilidade só se aplicam às respectivas categorias.
    """
    itens = InventarioRepo(db_path, tenant_id).fetch_por_categoria(categoria)
    out: List[Dict[str, Any]] = []
    for item in itens:
        if parse_numero_ou_zero(item.get("quantity")) <= 0:
            continue
        cat = item.get("category")
        if socket and cat == "Placa-Mãe" and item.get("socket") != socket:
            continue
        if ram_type and cat == "RAM" and item.get("ramType") != ram_type:
            continue
        out.append(item)
    return out


# -------------------------
# Manutenção de itens
# -------------------------

def cadastrar_item(tenant_id: str, item: Union[ItemInventario, Dict[str, Any]], db_path: str = DB_PATH) -> str:
    dados = item.to_doc() if isinstance(item, ItemInventario) else dict(item)
    num = parse_numero(dados.get("quantity", 0))
    if num is None or num < 0:
        raise ValueError(f"Quantidade inválida: {dados.get('quantity')!r}")
    dados["quantity"] = formatar_quantidade(num)
    item_id = InventarioRepo(db_path, tenant_id).insert(dados)
    log_estoque("cadastro", item_id, num, categoria=dados.get("category"))
    return item_id


def listar_inventario(tenant_id: str, db_path: str = DB_PATH) -> List[ItemInventario]:
    docs = InventarioRepo(db_path, tenant_id).get_all(ordenar_por="component")
    return [ItemInventario.from_doc(d) for d in docs]


def remover_item(tenant_id: str, item_id: str, db_path: str = DB_PATH) -> None:
    InventarioRepo(db_path, tenant_id).delete(item_id)
    log_estoque("remocao", item_id, 0)
