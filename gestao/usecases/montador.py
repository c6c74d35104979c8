"""
UC: Montador de PC (cotação, PC montado e pedido).

- cotar(): custo, potência, preço sugerido e compatibilidade da seleção.
- salvar_pc_montado(): baixa uma unidade de cada um dos 8 componentes e
  cria o PC montado na mesma unidade atômica.
- gerar_pedido(): cria um pedido Pendente com os 8 componentes; o estoque
  só sai quando o pedido for reconciliado para Enviados/Entregues.

A seleção é ``{slot: documento do inventário}`` com slots ``cpu, mobo,
ram, gpu, storage, psu, case, cooler``, normalmente montada com
carregar_selecao() a partir dos ids escolhidos.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from gestao.config import DB_PATH, DEFAULTS
from gestao.adapters.parsers import formatar_quantidade, parse_numero_ou_zero
from gestao.domain.erros import NaoEncontrado
from gestao.domain.models import Cotacao
from gestao.domain.precificacao import (
    CATEGORIA_POR_SLOT,
    COMPONENTES_BASE,
    ROTULOS,
    custo_total,
    potencia_estimada,
    preco_sugerido,
    slots_faltando,
    verificar_compatibilidade,
)
from gestao.infra.repositories import InventarioRepo, UnidadeAtomica, agora_iso, executar_atomico
from gestao.usecases.inventario import aplicar_deltas
from gestao.usecases.pedidos import criar_pedido
from gestao.infra.logger import log_transaction, log_system_event


def carregar_selecao(tenant_id: str, ids: Mapping[str, Optional[str]],
                     db_path: str = DB_PATH) -> Dict[str, Dict[str, Any]]:
    """Converte ``{slot: item_id}`` em ``{slot: documento}`` do inventário.

    Raises:
        ValueError: slot desconhecido ou item de categoria diferente do slot.
        NaoEncontrado: item inexistente.
    """
    repo = InventarioRepo(db_path, tenant_id)
    selecao: Dict[str, Dict[str, Any]] = {}
    for slot, item_id in ids.items():
        if slot not in CATEGORIA_POR_SLOT:
            raise ValueError(f"Slot desconhecido: {slot!r}")
        if not item_id:
            continue
        item = repo.get(item_id)
        if item is None:
            raise NaoEncontrado("inventario", item_id)
        if item.get("category") != CATEGORIA_POR_SLOT[slot]:
            raise ValueError(
                f"Item {item_id} ({item.get('category')}) não serve para {ROTULOS[slot]}."
            )
        selecao[slot] = item
    return selecao


def cotar(selecao: Mapping[str, Optional[Mapping[str, Any]]], margem: Any = None) -> Cotacao:
    m = DEFAULTS.margem_lucro if margem is None else margem
    custo = custo_total(selecao)
    faltando = slots_faltando(selecao)
    return Cotacao(
        custo=custo,
        potencia_estimada=potencia_estimada(selecao),
        margem=parse_numero_ou_zero(m),
        preco_sugerido=preco_sugerido(custo, m),
        pronto=not faltando,
        faltando=faltando,
        incompatibilidades=verificar_compatibilidade(selecao),
    )


def _exigir_completa(selecao: Mapping[str, Any]) -> None:
    faltando = slots_faltando(selecao)
    if faltando:
        nomes = ", ".join(ROTULOS[s] for s in faltando)
        raise ValueError(f"Selecione todos os 8 componentes principais. Faltando: {nomes}")


def _linhas_componentes(selecao: Mapping[str, Mapping[str, Any]]) -> list:
    return [
        {
            "category": ROTULOS[slot],
            "id": selecao[slot]["id"],
            "name": selecao[slot].get("component") or selecao[slot].get("name"),
            "price": selecao[slot].get("price"),
            "sku": selecao[slot].get("sku") or "N/A",
            "qty": 1,
        }
        for slot in COMPONENTES_BASE
    ]


def salvar_pc_montado(
    tenant_id: str,
    nome: str,
    selecao: Mapping[str, Mapping[str, Any]],
    margem: Any = None,
    db_path: str = DB_PATH,
) -> str:
    """Baixa 1 unidade de cada componente e grava o PC montado (tudo ou nada)."""
    if not nome or not nome.strip():
        raise ValueError("Informe um nome para o PC montado.")
    _exigir_completa(selecao)
    cot = cotar(selecao, margem)
    dados = {
        "name": nome.strip(),
        "costPrice": formatar_quantidade(cot.custo),
        "profitMargin": cot.margem,
        "suggestedPrice": formatar_quantidade(cot.preco_sugerido),
        "estimatedPower": cot.potencia_estimada,
        "status": "Pronto para Venda",
        "components": [
            {k: v for k, v in linha.items() if k in ("id", "name", "price", "qty")}
            for linha in _linhas_componentes(selecao)
        ],
        "quantity": "1",
        "dataMontagem": agora_iso(),
    }

    def _passo(unidade: UnidadeAtomica) -> str:
        aplicar_deltas(unidade, [(selecao[slot]["id"], -1) for slot in COMPONENTES_BASE])
        return unidade.insert("pcs_montados", dados)

    try:
        pc_id = executar_atomico(db_path, tenant_id, _passo)
    except Exception as e:
        log_transaction("salvar_pc_montado", {"nome": nome}, error=str(e))
        raise
    log_transaction("salvar_pc_montado", {"nome": nome}, result={"pc_id": pc_id})
    return pc_id


def gerar_pedido(
    tenant_id: str,
    cliente: Mapping[str, Any],
    selecao: Mapping[str, Mapping[str, Any]],
    margem: Any = None,
    notas: Optional[str] = None,
    db_path: str = DB_PATH,
) -> str:
    """Cria um pedido Pendente a partir da seleção completa."""
    _exigir_completa(selecao)
    cot = cotar(selecao, margem)
    pedido_id = criar_pedido(tenant_id, {
        "clientName": cliente.get("nome") or cliente.get("clientName"),
        "clientId": cliente.get("id"),
        "components": _linhas_componentes(selecao),
        "costPrice": cot.custo,
        "total": cot.preco_sugerido,
        "profitMargin": cot.margem,
        "notes": notas,
    }, db_path=db_path)
    log_system_event("pedido_montador", {"pedido_id": pedido_id, "total": cot.preco_sugerido})
    return pedido_id
