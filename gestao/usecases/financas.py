"""
UC: Livro de lançamentos financeiros (Receitas e Despesas).

- adicionar_lancamento() / adicionar_lancamento_venda(): inclusão.
- atualizar_lancamento(): edição; Receita vinculada propaga o novo valor
  para o pedido (``total``) ou OS (``valorTotal``). O inverso não ocorre.
- excluir_lancamento(), listar_lancamentos() com os filtros da tela.
- calcular_resumo() / resumo(): receita, despesa e lucro líquido, sempre
  recalculados a partir de todos os lançamentos.
- assinar_resumo(): entrega o resumo recalculado a cada mudança.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from gestao.config import DB_PATH
from gestao.adapters.parsers import parse_numero, parse_numero_ou_zero
from gestao.domain.erros import NaoEncontrado
from gestao.domain.models import DESPESA, RECEITA, TIPOS_LANCAMENTO, Resumo
from gestao.infra.eventos import Assinatura, barramento
from gestao.infra.repositories import (
    OrdemServicoRepo, PedidoRepo, TransacaoRepo, agora_iso
)
from gestao.infra.logger import (
    log_transaction, log_financas, log_system_event
)


def _validar_lancamento(dados: Dict[str, Any]) -> Dict[str, Any]:
    tipo = dados.get("tipo")
    if tipo not in TIPOS_LANCAMENTO:
        raise ValueError(f"Tipo de lançamento inválido: {tipo!r} (use Receita ou Despesa).")
    valor = parse_numero(dados.get("valor"))
    if valor is None:
        raise ValueError(f"Valor de lançamento inválido: {dados.get('valor')!r}")
    return {**dados, "valor": valor}


def adicionar_lancamento(tenant_id: str, dados: Dict[str, Any], db_path: str = DB_PATH) -> str:
    """Inclui um lançamento e devolve o id gerado.

    ``data`` é carimbada no momento da inclusão quando não informada;
    ``pedidoId`` e ``os_id`` ausentes são gravados como ``None``.
    """
    novo = _validar_lancamento(dados)
    novo.setdefault("categoria", "Geral")
    novo.setdefault("descricao", "")
    novo["data"] = novo.get("data") or agora_iso()
    novo["pedidoId"] = novo.get("pedidoId") or None
    novo["os_id"] = novo.get("os_id") or None
    lancamento_id = TransacaoRepo(db_path, tenant_id).insert(novo)
    log_financas("insert", lancamento_id, novo["valor"], tipo=novo["tipo"],
                 pedidoId=novo["pedidoId"], os_id=novo["os_id"])
    return lancamento_id


def adicionar_lancamento_venda(
    tenant_id: str,
    dados: Dict[str, Any],
    pedido_id: Optional[str] = None,
    os_id: Optional[str] = None,
    db_path: str = DB_PATH,
) -> str:
    """Receita vinculada a um pedido ou OS (ou venda avulsa)."""
    if pedido_id:
        categoria = "Venda de Pedido"
    elif os_id:
        categoria = "Serviço de OS"
    else:
        categoria = "Venda Geral"
    return adicionar_lancamento(tenant_id, {
        "tipo": RECEITA,
        "categoria": categoria,
        "valor": dados.get("valor"),
        "clienteId": dados.get("clienteId"),
        "clienteNome": dados.get("clienteNome"),
        "descricao": dados.get("descricao", ""),
        "pedidoId": pedido_id,
        "os_id": os_id,
    }, db_path=db_path)


def _propagar_valor(tenant_id: str, lancamento: Dict[str, Any], valor: float, db_path: str) -> None:
    pedido_id = lancamento.get("pedidoId") or lancamento.get("pedido_id")
    os_id = lancamento.get("os_id") or lancamento.get("osId")
    if pedido_id:
        repo, campo, doc_id = PedidoRepo(db_path, tenant_id), "total", pedido_id
    elif os_id:
        repo, campo, doc_id = OrdemServicoRepo(db_path, tenant_id), "valorTotal", os_id
    else:
        return
    # update levanta NaoEncontrado se o documento vinculado não existir
    repo.update(doc_id, {campo: valor, "dataAtualizacao": agora_iso()})
    log_financas("propagate", lancamento.get("id"), valor, colecao=repo.colecao, doc_id=doc_id)


def atualizar_lancamento(
    tenant_id: str, lancamento_id: str, campos: Dict[str, Any], db_path: str = DB_PATH
) -> Dict[str, Any]:
    """Edita um lançamento; Receita vinculada propaga o valor ao documento pai."""
    repo = TransacaoRepo(db_path, tenant_id)
    original = repo.get(lancamento_id)
    if original is None:
        raise NaoEncontrado("transacoes", lancamento_id)

    campos = dict(campos)
    if "valor" in campos:
        valor = parse_numero(campos["valor"])
        if valor is None:
            raise ValueError(f"Valor de lançamento inválido: {campos['valor']!r}")
        campos["valor"] = valor
    if "tipo" in campos and campos["tipo"] not in TIPOS_LANCAMENTO:
        raise ValueError(f"Tipo de lançamento inválido: {campos['tipo']!r}")

    try:
        atualizado = repo.update(lancamento_id, {**campos, "dataAtualizacao": agora_iso()})
        log_financas("update", lancamento_id, atualizado.get("valor"), campos=list(campos))
        if atualizado.get("tipo") == RECEITA and "valor" in campos:
            _propagar_valor(tenant_id, atualizado, campos["valor"], db_path)
        return atualizado
    except Exception as e:
        log_transaction("atualizar_lancamento", {"id": lancamento_id, "campos": campos}, error=str(e))
        log_system_event("atualizar_lancamento_error", {"id": lancamento_id, "error": str(e)}, level="error")
        raise


def excluir_lancamento(tenant_id: str, lancamento_id: str, db_path: str = DB_PATH) -> None:
    TransacaoRepo(db_path, tenant_id).delete(lancamento_id)
    log_financas("delete", lancamento_id)


# -------------------------
# Consulta e resumo
# -------------------------

def _como_data(valor: Union[str, date, datetime, None]) -> Optional[str]:
    if valor is None or valor == "":
        return None
    if isinstance(valor, datetime):
        return valor.date().isoformat()
    if isinstance(valor, date):
        return valor.isoformat()
    return str(valor)[:10]


def listar_lancamentos(
    tenant_id: str,
    tipo: Optional[str] = None,
    categoria: Optional[str] = None,
    inicio: Union[str, date, None] = None,
    fim: Union[str, date, None] = None,
    busca: Optional[str] = None,
    db_path: str = DB_PATH,
) -> List[Dict[str, Any]]:
    """Lançamentos mais recentes primeiro, com filtros opcionais.

    ``inicio``/``fim`` são inclusivos (comparação por ``YYYY-MM-DD``);
    ``busca`` procura na descrição e na categoria, sem diferenciar caixa.
    """
    ini, fim_ = _como_data(inicio), _como_data(fim)
    termo = (busca or "").strip().lower()
    out: List[Dict[str, Any]] = []
    for t in TransacaoRepo(db_path, tenant_id).get_all(ordenar_por="data", desc=True):
        dia = _como_data(t.get("data"))
        if tipo and t.get("tipo") != tipo:
            continue
        if categoria and t.get("categoria") != categoria:
            continue
        if ini and (dia is None or dia < ini):
            continue
        if fim_ and (dia is None or dia > fim_):
            continue
        if termo and termo not in f"{t.get('descricao') or ''} {t.get('categoria') or ''}".lower():
            continue
        out.append(t)
    return out


def calcular_resumo(lancamentos: Iterable[Dict[str, Any]]) -> Resumo:
    """Dobra os lançamentos em receita total, despesa total e lucro líquido."""
    receita = 0.0
    despesa = 0.0
    for t in lancamentos:
        valor = parse_numero_ou_zero(t.get("valor"))
        if t.get("tipo") == RECEITA:
            receita += valor
        elif t.get("tipo") == DESPESA:
            despesa += valor
    return Resumo(receita_total=receita, despesa_total=despesa, lucro_liquido=receita - despesa)


def resumo(tenant_id: str, db_path: str = DB_PATH) -> Resumo:
    return calcular_resumo(TransacaoRepo(db_path, tenant_id).get_all())


def assinar_resumo(
    tenant_id: str, callback: Callable[[Resumo], None], db_path: str = DB_PATH
) -> Assinatura:
    """Entrega o resumo agora e após cada mudança confirmada nos lançamentos.

    O resumo é sempre recalculado do zero. Cancele a assinatura (ou use-a
    como context manager) ao sair de escopo.
    """
    def _ao_mudar(tenant: str, colecao: str) -> None:
        callback(resumo(tenant, db_path=db_path))

    assinatura = barramento.assinar(tenant_id, "transacoes", _ao_mudar)
    callback(resumo(tenant_id, db_path=db_path))
    return assinatura
