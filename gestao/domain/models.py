"""
Modelos (dataclasses) do domínio.

Observação importante:
- Os repositórios gravam dicionários (documentos JSON); as dataclasses
  servem para tipagem/clareza dos valores calculados e dos itens de
  entrada. Use ``to_doc()`` quando precisar gravar uma delas.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from gestao.adapters.parsers import parse_numero_ou_zero


# Categorias de inventário usadas pelo montador
CATEGORIAS = (
    "CPU", "Placa-Mãe", "RAM", "GPU", "Armazenamento", "Fonte", "Gabinete", "Cooler",
)

RECEITA = "Receita"
DESPESA = "Despesa"
TIPOS_LANCAMENTO = (RECEITA, DESPESA)


@dataclass
class ItemInventario:
    """Item de estoque (componente)."""
    id: str
    component: str
    category: str
    quantity: str = "0"              # texto conversível em número
    price: float = 0.0
    sku: Optional[str] = None
    socket: Optional[str] = None     # CPU / Placa-Mãe
    ramType: Optional[str] = None    # Placa-Mãe / RAM
    watt: Optional[int] = None       # Fonte
    power: Optional[int] = None      # consumo estimado (W)

    @property
    def quantidade(self) -> float:
        return parse_numero_ou_zero(self.quantity)

    def to_doc(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "ItemInventario":
        return cls(
            id=doc["id"],
            component=doc.get("component") or doc.get("name") or doc["id"],
            category=doc.get("category") or "",
            quantity=str(doc.get("quantity", "0")),
            price=parse_numero_ou_zero(doc.get("price")),
            sku=doc.get("sku"),
            socket=doc.get("socket"),
            ramType=doc.get("ramType"),
            watt=doc.get("watt"),
            power=doc.get("power"),
        )


@dataclass
class ComponentePedido:
    """Linha de componente de um pedido (referência fraca ao inventário)."""
    id: str
    name: Optional[str] = None
    price: float = 0.0
    qty: float = 1.0
    category: Optional[str] = None
    sku: Optional[str] = None

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "ComponentePedido":
        qty = doc.get("qty")
        if qty is None:
            qty = doc.get("quantity")
        return cls(
            id=str(doc["id"]),
            name=doc.get("name"),
            price=parse_numero_ou_zero(doc.get("price")),
            qty=parse_numero_ou_zero(qty),
            category=doc.get("category"),
            sku=doc.get("sku"),
        )


@dataclass
class Resumo:
    """Resumo financeiro derivado dos lançamentos."""
    receita_total: float = 0.0
    despesa_total: float = 0.0
    lucro_liquido: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class Cotacao:
    """Resultado do montador de PC para a seleção atual."""
    custo: float
    potencia_estimada: int
    margem: float
    preco_sugerido: float
    pronto: bool
    faltando: List[str] = field(default_factory=list)
    incompatibilidades: Dict[str, str] = field(default_factory=dict)
