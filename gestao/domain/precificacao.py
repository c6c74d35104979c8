"""
Regras de precificação e compatibilidade do montador de PC.

Este módulo contém funções puras: preço sugerido a partir do custo e da
margem de lucro, custo e potência de uma seleção de componentes e as
verificações de compatibilidade (soquete, tipo de memória e fonte).
São usadas pelo caso de uso do montador e pela edição de pedidos.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from gestao.adapters.parsers import parse_numero, parse_numero_ou_zero


# Slots obrigatórios de um PC montado e a categoria de inventário de cada um
COMPONENTES_BASE = ("cpu", "mobo", "ram", "gpu", "storage", "psu", "case", "cooler")

CATEGORIA_POR_SLOT = {
    "cpu": "CPU",
    "mobo": "Placa-Mãe",
    "ram": "RAM",
    "gpu": "GPU",
    "storage": "Armazenamento",
    "psu": "Fonte",
    "case": "Gabinete",
    "cooler": "Cooler",
}

ROTULOS = {
    "cpu": "Processador (CPU)",
    "mobo": "Placa-Mãe",
    "ram": "Memória RAM",
    "gpu": "Placa de Vídeo (GPU)",
    "storage": "Armazenamento",
    "psu": "Fonte (PSU)",
    "case": "Gabinete",
    "cooler": "Cooler",
}

Selecao = Mapping[str, Optional[Mapping[str, Any]]]


def preco_sugerido(custo: Any, margem: Any) -> float:
    """Calcula o preço de venda para uma margem sobre o preço de venda.

    ``preço = custo / (1 - margem/100)``.

    Regras:
        - Margem fora de ``[0, 100)`` (ou não numérica) é tratada como 0,
          evitando divisão por zero e preço negativo.
        - Custo menor ou igual a zero resulta em 0, qualquer que seja a margem.

    Args:
        custo: Custo total dos componentes.
        margem: Margem de lucro em percentual (ex.: 20 para 20%).

    Returns:
        Preço sugerido. ``preco_sugerido(100, 20) == 125``.
    """
    c = parse_numero(custo)
    if c is None or c <= 0:
        return 0.0
    m = parse_numero(margem)
    if m is None or m < 0 or m >= 100:
        m = 0.0
    return c / (1 - m / 100)


def custo_total(selecao: Selecao) -> float:
    """Soma o preço dos componentes selecionados nos slots base."""
    return sum(
        parse_numero_ou_zero((selecao.get(slot) or {}).get("price"))
        for slot in COMPONENTES_BASE
    )


def _potencia_item(item: Mapping[str, Any]) -> int:
    bruto = item.get("power")
    if bruto is None:
        bruto = item.get("estimatedPower")
    num = parse_numero(bruto)
    return int(num) if num is not None else 0


def potencia_estimada(selecao: Selecao) -> int:
    """Soma o consumo estimado (W) dos componentes selecionados."""
    return sum(_potencia_item(selecao.get(slot) or {}) for slot in COMPONENTES_BASE)


def verificar_compatibilidade(selecao: Selecao) -> Dict[str, str]:
    """Retorna ``{slot: mensagem}`` para cada incompatibilidade encontrada.

    - Placa-mãe com soquete diferente da CPU.
    - Memória com tipo diferente do suportado pela placa-mãe.
    - Fonte com potência (``watt``) abaixo do consumo estimado.
    """
    problemas: Dict[str, str] = {}
    cpu = selecao.get("cpu")
    mobo = selecao.get("mobo")
    ram = selecao.get("ram")
    psu = selecao.get("psu")

    if cpu and mobo and cpu.get("socket") != mobo.get("socket"):
        problemas["mobo"] = (
            f"Socket {mobo.get('socket')} incompatível com CPU {cpu.get('socket')}"
        )
    if mobo and ram and mobo.get("ramType") != ram.get("ramType"):
        problemas["ram"] = (
            f"RAM {ram.get('ramType')} incompatível com Placa-Mãe {mobo.get('ramType')}"
        )
    if psu:
        watt = parse_numero(psu.get("watt"))
        watt = int(watt) if watt is not None else 0
        consumo = potencia_estimada(selecao)
        if watt > 0 and consumo > watt:
            problemas["psu"] = f"Fonte de {watt}W pode ser insuficiente para {consumo}W"
    return problemas


def slots_faltando(selecao: Selecao) -> list:
    return [slot for slot in COMPONENTES_BASE if not selecao.get(slot)]
