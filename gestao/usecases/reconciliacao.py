"""
UC: Reconciliação de status (estoque + status + financeiro).

- reconciliar_pedido(): muda o status de um pedido, baixando ou estornando
  o estoque dos componentes na mesma unidade atômica da gravação do status.
  Outros campos do pedido (inclusive ``components``) podem ir junto.
- registrar_pedido(): grava um pedido novo já no status pedido, com a baixa
  de estoque na mesma unidade atômica da inserção.
- excluir_pedido(): estorna o estoque (transição implícita para Cancelado)
  e remove o pedido, na mesma unidade atômica.
- reconciliar_os(): muda o status de uma ordem de serviço (sem estoque).

Fluxo do pedido:
1. Lê o pedido; mesmo status e nenhum campo → nada a fazer.
2. Cancelado não sai de Cancelado (TransicaoInvalida). Componentes só mudam
   se o pedido não permanece em CONSUMO.
3. Multiplicador pela pertinência ao conjunto CONSUMO (-1, 0, +1). A baixa
   usa a lista de componentes nova; o estorno, a gravada.
4. Ajusta todos os componentes ou nenhum (EstoqueInsuficiente aborta tudo).
5. A primeira entrada em Entregues exige valor final positivo, gravado com
   a data de entrega. Um pedido que já tem valor final o mantém e não gera
   nova Receita ao voltar para Entregues.
6. Depois da confirmação, registra a Receita. Se esse lançamento falhar,
   levanta SucessoParcial: estoque e status já estão corretos e apenas o
   lançamento deve ser refeito. Não há desfazer automático do estoque.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple, Union

from gestao.config import DB_PATH
from gestao.adapters.parsers import parse_numero, parse_numero_ou_zero
from gestao.domain.erros import (
    NaoEncontrado, SucessoParcial, TransicaoInvalida, ValorFinalInvalido
)
from gestao.domain.models import RECEITA, ComponentePedido
from gestao.domain.status import (
    CONSUMO,
    DEBITO,
    SEM_EFEITO,
    StatusOS,
    StatusPedido,
    finaliza_os,
    finaliza_pedido,
    multiplicador_estoque,
    parse_status_os,
    parse_status_pedido,
    validar_transicao_os,
    validar_transicao_pedido,
)
from gestao.infra.repositories import UnidadeAtomica, agora_iso, executar_atomico
from gestao.usecases.financas import adicionar_lancamento
from gestao.usecases.inventario import aplicar_deltas
from gestao.infra.logger import (
    log_transaction, log_system_event
)


@dataclass
class ResultadoReconciliacao:
    """Resultado de uma mudança de status já confirmada."""
    doc_id: str
    status_anterior: str
    status_novo: str
    multiplicador: int = SEM_EFEITO
    valor_final: Optional[float] = None
    lancamento_id: Optional[str] = None
    postado: bool = False
    quantidades: Dict[str, float] = field(default_factory=dict)

    @property
    def sem_mudanca(self) -> bool:
        return self.status_anterior == self.status_novo


def _exigir_valor_final(valor: Any) -> float:
    num = None if isinstance(valor, bool) else parse_numero(valor)
    if num is None or num <= 0:
        raise ValorFinalInvalido(valor)
    return num


def _ja_finalizado(doc: Dict[str, Any]) -> bool:
    """Valor final positivo gravado: a venda ou o serviço já virou Receita."""
    return parse_numero_ou_zero(doc.get("valor_final")) > 0


def _transicionar_pedido(
    unidade: UnidadeAtomica,
    pedido_id: str,
    pedido: Dict[str, Any],
    novo: Optional[StatusPedido],
    valor_final: Any,
    campos: Dict[str, Any],
) -> ResultadoReconciliacao:
    """Valida a mudança, ajusta o estoque na unidade e completa ``campos``."""
    antigo = parse_status_pedido(pedido.get("status"))
    novo = novo or antigo
    res = ResultadoReconciliacao(pedido_id, antigo.value, novo.value)
    if "components" in campos and antigo in CONSUMO and novo in CONSUMO:
        raise TransicaoInvalida(
            "Componentes de pedidos enviados ou entregues não podem ser alterados."
        )
    if antigo == novo:
        return res

    validar_transicao_pedido(antigo, novo)
    campos["status"] = novo.value
    if finaliza_pedido(antigo, novo) and not _ja_finalizado(pedido):
        res.valor_final = _exigir_valor_final(valor_final)
        campos["valor_final"] = res.valor_final
        campos["data_entrega"] = agora_iso()

    res.multiplicador = multiplicador_estoque(antigo, novo)
    if res.multiplicador != SEM_EFEITO:
        origem = campos if res.multiplicador == DEBITO and "components" in campos else pedido
        componentes = [ComponentePedido.from_doc(c) for c in origem.get("components") or []]
        res.quantidades = aplicar_deltas(
            unidade, [(c.id, c.qty * res.multiplicador) for c in componentes]
        )
    return res


def _preparar_pedido(
    unidade: UnidadeAtomica,
    pedido_id: str,
    novo: Optional[StatusPedido],
    valor_final: Any,
    campos_extras: Optional[Dict[str, Any]] = None,
) -> Tuple[ResultadoReconciliacao, Dict[str, Any]]:
    pedido = unidade.get("pedidos", pedido_id)
    if pedido is None:
        raise NaoEncontrado("pedidos", pedido_id)
    campos = dict(campos_extras or {})
    res = _transicionar_pedido(unidade, pedido_id, pedido, novo, valor_final, campos)
    if campos:
        campos["dataAtualizacao"] = agora_iso()
        unidade.update("pedidos", pedido_id, campos)
    return res, {**pedido, **campos}


def _postar_receita(tenant_id: str, res: ResultadoReconciliacao, lancamento: Dict[str, Any],
                    db_path: str) -> None:
    try:
        res.lancamento_id = adicionar_lancamento(tenant_id, lancamento, db_path=db_path)
        res.postado = True
    except Exception as e:
        log_system_event(
            "lancamento_pendente",
            {"doc_id": res.doc_id, "lancamento": lancamento, "error": str(e)},
            level="error",
        )
        raise SucessoParcial(res, lancamento, e) from e


def _executar_pedido(
    operacao: str,
    tenant_id: str,
    dados_log: Dict[str, Any],
    passo: Callable[[UnidadeAtomica], Tuple[ResultadoReconciliacao, Dict[str, Any]]],
    db_path: str,
) -> Tuple[ResultadoReconciliacao, Dict[str, Any]]:
    log_system_event(f"{operacao}_start", dados_log)
    try:
        res, pedido = executar_atomico(db_path, tenant_id, passo)
    except Exception as e:
        log_transaction(operacao, dados_log, error=str(e))
        log_system_event(f"{operacao}_error", {**dados_log, "error": str(e)}, level="error")
        raise

    if res.valor_final is not None:
        cliente = pedido.get("clientName") or pedido.get("client") or "N/A"
        _postar_receita(tenant_id, res, {
            "tipo": RECEITA,
            "categoria": "Venda de Produto",
            "descricao": f"Pedido {res.doc_id[:6]} - {cliente}",
            "valor": res.valor_final,
            "origem": "Pedido",
            "pedidoId": res.doc_id,
            "clienteId": pedido.get("clientId"),
        }, db_path)

    log_transaction(operacao, dados_log, result={
        "de": res.status_anterior, "para": res.status_novo,
        "multiplicador": res.multiplicador, "postado": res.postado,
    })
    return res, pedido


def reconciliar_pedido(
    tenant_id: str,
    pedido_id: str,
    novo_status: Union[str, StatusPedido, None],
    valor_final: Any = None,
    db_path: str = DB_PATH,
    campos: Optional[Dict[str, Any]] = None,
) -> ResultadoReconciliacao:
    """Aplica a mudança de status de um pedido com efeito no estoque e no caixa.

    Args:
        tenant_id: Empresa dona do pedido.
        pedido_id: ID do pedido.
        novo_status: Status de destino (rótulo ou ``StatusPedido``);
            ``None`` mantém o atual.
        valor_final: Valor final da venda, obrigatório na primeira entrada
            em Entregues.
        campos: Outros campos gravados na mesma unidade atômica. Se trouxer
            ``components``, a baixa de estoque usa a lista nova.

    Raises:
        NaoEncontrado, TransicaoInvalida, ValorFinalInvalido,
        EstoqueInsuficiente, Conflito: nada foi gravado.
        SucessoParcial: status e estoque gravados, lançamento não.
    """
    dados_log = {"tenant_id": tenant_id, "pedido_id": pedido_id, "novo_status": str(novo_status)}
    novo = parse_status_pedido(novo_status) if novo_status is not None else None
    res, _ = _executar_pedido(
        "reconciliar_pedido", tenant_id, dados_log,
        lambda u: _preparar_pedido(u, pedido_id, novo, valor_final, campos),
        db_path,
    )
    return res


def registrar_pedido(
    tenant_id: str,
    pedido_id: str,
    doc: Dict[str, Any],
    novo_status: Union[str, StatusPedido],
    valor_final: Any = None,
    db_path: str = DB_PATH,
) -> ResultadoReconciliacao:
    """Insere ``doc`` (status Pendente) já transicionado para ``novo_status``.

    A inserção e a baixa de estoque são confirmadas juntas: se a transição
    falhar, o pedido não é gravado.
    """
    dados_log = {"tenant_id": tenant_id, "pedido_id": pedido_id, "novo_status": str(novo_status)}
    novo = parse_status_pedido(novo_status)
    base = {**doc, "status": StatusPedido.PENDENTE.value}

    def _passo(unidade: UnidadeAtomica) -> Tuple[ResultadoReconciliacao, Dict[str, Any]]:
        campos: Dict[str, Any] = {}
        res = _transicionar_pedido(unidade, pedido_id, base, novo, valor_final, campos)
        final = {**base, **campos}
        unidade.insert("pedidos", final, doc_id=pedido_id)
        return res, final

    res, _ = _executar_pedido("registrar_pedido", tenant_id, dados_log, _passo, db_path)
    return res


def excluir_pedido(tenant_id: str, pedido_id: str, db_path: str = DB_PATH) -> ResultadoReconciliacao:
    """Exclui o pedido; se o estoque já tinha saído, devolve-o antes.

    O estorno (transição para Cancelado) e a remoção são confirmados juntos:
    se o estorno falhar, o pedido permanece.
    """
    dados_log = {"tenant_id": tenant_id, "pedido_id": pedido_id}

    def _passo(unidade: UnidadeAtomica) -> ResultadoReconciliacao:
        pedido = unidade.get("pedidos", pedido_id)
        if pedido is None:
            raise NaoEncontrado("pedidos", pedido_id)
        status = parse_status_pedido(pedido.get("status"))
        if status in CONSUMO:
            res, _ = _preparar_pedido(unidade, pedido_id, StatusPedido.CANCELADO, None)
        else:
            res = ResultadoReconciliacao(pedido_id, status.value, status.value)
        unidade.delete("pedidos", pedido_id)
        return res

    try:
        res = executar_atomico(db_path, tenant_id, _passo)
    except Exception as e:
        log_transaction("excluir_pedido", dados_log, error=str(e))
        raise
    log_transaction("excluir_pedido", dados_log, result={"multiplicador": res.multiplicador})
    return res


# -------------------------
# Ordens de serviço
# -------------------------

def _preparar_os(
    unidade: UnidadeAtomica, os_id: str, novo: StatusOS, valor_final: Any
) -> Tuple[ResultadoReconciliacao, Dict[str, Any]]:
    ordem = unidade.get("ordens_servico", os_id)
    if ordem is None:
        raise NaoEncontrado("ordens_servico", os_id)
    antigo = parse_status_os(ordem.get("status"))
    res = ResultadoReconciliacao(os_id, antigo.value, novo.value)
    if antigo == novo:
        return res, ordem

    validar_transicao_os(antigo, novo)
    campos: Dict[str, Any] = {"status": novo.value, "dataAtualizacao": agora_iso()}
    if finaliza_os(antigo, novo) and not _ja_finalizado(ordem):
        res.valor_final = _exigir_valor_final(valor_final)
        campos["valor_final"] = res.valor_final
        campos["data_entrega"] = agora_iso()
    unidade.update("ordens_servico", os_id, campos)
    return res, ordem


def reconciliar_os(
    tenant_id: str,
    os_id: str,
    novo_status: Union[str, StatusOS],
    valor_final: Any = None,
    db_path: str = DB_PATH,
) -> ResultadoReconciliacao:
    """Muda o status de uma OS; a primeira entrada em Entregue/Pago registra a Receita."""
    dados_log = {"tenant_id": tenant_id, "os_id": os_id, "novo_status": str(novo_status)}
    log_system_event("reconciliar_os_start", dados_log)
    try:
        novo = parse_status_os(novo_status)
        res, ordem = executar_atomico(
            db_path, tenant_id, lambda u: _preparar_os(u, os_id, novo, valor_final)
        )
    except Exception as e:
        log_transaction("reconciliar_os", dados_log, error=str(e))
        log_system_event("reconciliar_os_error", {**dados_log, "error": str(e)}, level="error")
        raise

    if res.valor_final is not None:
        _postar_receita(tenant_id, res, {
            "tipo": RECEITA,
            "categoria": "Ordem de Serviço",
            "descricao": (
                f"OS {os_id[:8]} - {ordem.get('equipamento') or 'N/A'} "
                f"({ordem.get('cliente_nome') or 'N/A'})"
            ),
            "valor": res.valor_final,
            "origem": "OS",
            "os_id": os_id,
            "cliente_id": ordem.get("cliente_id"),
        }, db_path)

    log_transaction("reconciliar_os", dados_log, result={
        "de": res.status_anterior, "para": res.status_novo, "postado": res.postado,
    })
    return res
