"""
Erros de domínio do sistema de gestão.

Toda falha que chega ao usuário herda de ``ErroGestao`` e carrega uma
mensagem legível. As camadas de aplicação registram o erro no log e o
propagam; quem decide como exibi-lo é o adaptador (CLI, UI).
"""

from __future__ import annotations

from typing import Any, Optional


class ErroGestao(Exception):
    """Base de todos os erros do sistema."""

    codigo: str = "ERRO_GESTAO"

    def __init__(self, mensagem: str):
        super().__init__(mensagem)
        self.mensagem = mensagem


class NaoEncontrado(ErroGestao):
    """Item, pedido, OS ou lançamento inexistente."""

    codigo: str = "NAO_ENCONTRADO"

    def __init__(self, colecao: str, item_id: str):
        super().__init__(f"Registro '{item_id}' não encontrado em '{colecao}'.")
        self.colecao = colecao
        self.item_id = item_id


class EstoqueInsuficiente(ErroGestao):
    """O ajuste deixaria a quantidade de um item negativa."""

    codigo: str = "ESTOQUE_INSUFICIENTE"

    def __init__(self, item_id: str, nome: Optional[str] = None,
                 disponivel: float = 0.0, solicitado: float = 0.0):
        rotulo = nome or item_id
        super().__init__(
            f"Estoque insuficiente para o item \"{rotulo}\" "
            f"(disponível: {disponivel:g}, necessário: {solicitado:g})."
        )
        self.item_id = item_id
        self.disponivel = disponivel
        self.solicitado = solicitado


class TransicaoInvalida(ErroGestao):
    """Mudança de status não permitida (ex.: sair de Cancelado)."""

    codigo: str = "TRANSICAO_INVALIDA"


class ValorFinalInvalido(ErroGestao):
    """Valor final ausente, não numérico ou menor/igual a zero."""

    codigo: str = "VALOR_FINAL_INVALIDO"

    def __init__(self, valor: Any):
        super().__init__(
            f"Valor final inválido ou não fornecido: {valor!r}. "
            "Informe um valor numérico maior que zero."
        )
        self.valor = valor


class Conflito(ErroGestao):
    """Outro processo alterou o documento entre a leitura e a escrita."""

    codigo: str = "CONFLITO"

    def __init__(self, colecao: str, doc_id: str):
        super().__init__(
            f"Conflito de concorrência em '{colecao}/{doc_id}'. Tente novamente."
        )
        self.colecao = colecao
        self.doc_id = doc_id


class SucessoParcial(ErroGestao):
    """
    Estoque e status foram gravados, mas o lançamento financeiro falhou.

    ``resultado`` é o resultado já confirmado; ``causa`` a exceção original.
    O lançamento deve ser refeito (``lancamento_pendente``), nunca o estoque.
    """

    codigo: str = "SUCESSO_PARCIAL"

    def __init__(self, resultado: Any, lancamento_pendente: dict, causa: BaseException):
        super().__init__(
            f"Status e estoque atualizados, mas o lançamento financeiro falhou: {causa}"
        )
        self.resultado = resultado
        self.lancamento_pendente = lancamento_pendente
        self.causa = causa


class NaoAutenticado(ErroGestao):
    """Nenhuma empresa (tenant) informada para a operação."""

    codigo: str = "NAO_AUTENTICADO"

    def __init__(self, mensagem: str = "Usuário não autenticado: empresa não informada."):
        super().__init__(mensagem)


class PermissaoNegada(ErroGestao):
    """Acesso negado pelo armazenamento."""

    codigo: str = "PERMISSAO_NEGADA"
