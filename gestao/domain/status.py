"""
Máquinas de status de Pedidos e Ordens de Serviço.

Regras:
    - Pedido: Pendente → Processando → Enviados → Entregues, e Cancelado
      a partir de qualquer status não terminal. Cancelado é terminal.
    - O efeito no estoque depende apenas da pertinência ao conjunto
      ``CONSUMO`` (Enviados, Entregues), nunca do caminho percorrido.
    - OS: Recebido → Diagnóstico → Aguardando Peça → Em Reparação →
      Aguardando Cliente → Entregue/Pago, e Cancelado. Só a entrada em
      Entregue/Pago gera lançamento financeiro; OS não movimenta estoque.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from gestao.domain.erros import TransicaoInvalida


class StatusPedido(str, Enum):
    PENDENTE = "Pendente"
    PROCESSANDO = "Processando"
    ENVIADOS = "Enviados"
    ENTREGUES = "Entregues"
    CANCELADO = "Cancelado"


class StatusOS(str, Enum):
    RECEBIDO = "Recebido"
    DIAGNOSTICO = "Diagnóstico"
    AGUARDANDO_PECA = "Aguardando Peça"
    EM_REPARACAO = "Em Reparação"
    AGUARDANDO_CLIENTE = "Aguardando Cliente"
    ENTREGUE_PAGO = "Entregue/Pago"
    CANCELADO = "Cancelado"


# Status em que os componentes do pedido já saíram do estoque
CONSUMO = frozenset({StatusPedido.ENVIADOS, StatusPedido.ENTREGUES})

DEBITO = -1
SEM_EFEITO = 0
ESTORNO = 1


def parse_status_pedido(valor: Union[str, StatusPedido, None]) -> StatusPedido:
    """Converte o rótulo gravado no documento para ``StatusPedido``.

    Documento sem status é tratado como ``Pendente``, como na tela de pedidos.
    """
    if valor is None or valor == "":
        return StatusPedido.PENDENTE
    try:
        return StatusPedido(valor)
    except ValueError:
        raise TransicaoInvalida(f"Status de pedido desconhecido: {valor!r}.") from None


def parse_status_os(valor: Union[str, StatusOS, None]) -> StatusOS:
    if valor is None or valor == "":
        return StatusOS.RECEBIDO
    try:
        return StatusOS(valor)
    except ValueError:
        raise TransicaoInvalida(f"Status de OS desconhecido: {valor!r}.") from None


def multiplicador_estoque(antigo: StatusPedido, novo: StatusPedido) -> int:
    """Retorna -1 (baixa), +1 (estorno) ou 0 para a transição ``antigo → novo``."""
    estava = antigo in CONSUMO
    esta = novo in CONSUMO
    if esta and not estava:
        return DEBITO
    if estava and not esta:
        return ESTORNO
    return SEM_EFEITO


def validar_transicao_pedido(antigo: StatusPedido, novo: StatusPedido) -> None:
    if antigo == StatusPedido.CANCELADO and novo != antigo:
        raise TransicaoInvalida("Pedidos cancelados não podem ter seu status alterado.")


def validar_transicao_os(antigo: StatusOS, novo: StatusOS) -> None:
    if antigo == StatusOS.CANCELADO and novo != antigo:
        raise TransicaoInvalida("Ordens de serviço canceladas não podem ter seu status alterado.")


def finaliza_pedido(antigo: StatusPedido, novo: StatusPedido) -> bool:
    """True na entrada em Entregues; pedidos com valor final gravado não repetem a finalização."""
    return novo == StatusPedido.ENTREGUES and antigo != StatusPedido.ENTREGUES


def finaliza_os(antigo: StatusOS, novo: StatusOS) -> bool:
    return novo == StatusOS.ENTREGUE_PAGO and antigo != StatusOS.ENTREGUE_PAGO
