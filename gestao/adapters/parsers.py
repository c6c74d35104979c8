"""
Utilidades de parsing para valores numéricos e documentos.

Os documentos guardam quantidades e preços como texto conversível em
número (por exemplo ``"5"``, ``"2.5"``) e a interface aceita valores em
reais digitados pelo usuário (``"R$ 1.500,00"``). Este módulo concentra a
interpretação robusta desses textos.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

_NUM_RE = re.compile(r"[-+]?\d[\d.,]*")
_NAO_DIGITO_RE = re.compile(r"\D")


def parse_numero(valor: Any) -> Optional[float]:
    """Interpreta um número vindo de um documento ou do usuário.

    Aceita ``int``/``float`` e strings com ponto ou vírgula decimal. Quando
    ambos aparecem, o último separador é o decimal e o outro é separador de
    milhar. Prefixos como ``R$`` são ignorados.

    Exemplos:
        "4"            → 4.0
        "2,5"          → 2.5
        "R$ 1.500,00"  → 1500.0
        "1,234.5"      → 1234.5
        "abc"          → None

    Returns:
        O número como ``float`` ou ``None`` se não for possível interpretar
        (inclui ``NaN``, infinito e booleanos).
    """
    if valor is None or isinstance(valor, bool):
        return None
    if isinstance(valor, (int, float)):
        num = float(valor)
        return num if math.isfinite(num) else None
    s = str(valor).strip()
    if not s:
        return None
    m = _NUM_RE.search(s)
    if not m:
        return None
    txt = m.group(0).rstrip(".,")
    if "," in txt and "." in txt:
        if txt.rfind(",") > txt.rfind("."):
            txt = txt.replace(".", "").replace(",", ".")
        else:
            txt = txt.replace(",", "")
    elif "," in txt:
        txt = txt.replace(",", ".")
    # "1.2.3" não é um número válido
    if txt.count(".") > 1:
        return None
    try:
        num = float(txt)
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def parse_numero_ou_zero(valor: Any) -> float:
    """Como ``parse_numero``, mas devolve 0.0 para valores inválidos."""
    num = parse_numero(valor)
    return num if num is not None else 0.0


def formatar_quantidade(num: float) -> str:
    """Formata quantidade para gravação como texto (``4.0`` → ``"4"``)."""
    if float(num).is_integer():
        return str(int(num))
    return repr(float(num))


def somente_digitos(txt: Optional[str]) -> str:
    """Remove tudo que não é dígito (CPF/CNPJ, telefone)."""
    if txt is None:
        return ""
    return _NAO_DIGITO_RE.sub("", str(txt))
