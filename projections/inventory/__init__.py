"""
POS Projections — Inventory Read Model
========================================
Pure views over the current catalog: reorder list, stock status,
and inventory valuation at cost.

All functions accept any iterable of Product and return fresh
values. Empty input gives empty/zero output, never an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from core.primitives.product import Product


class StockStatus(Enum):
    OUT = "OUT"   # stock == 0 and at/below reorder level
    LOW = "LOW"   # 0 < stock <= reorder level
    OK = "OK"


def stock_status(product: Product) -> StockStatus:
    if product.stock > product.reorder_level:
        return StockStatus.OK
    if product.stock == 0:
        return StockStatus.OUT
    return StockStatus.LOW


def stock_fill_ratio(product: Product) -> float:
    """
    Fraction of the stock bar to fill (0..1).

    The bar spans max(stock, 2 x reorder level, 1) so a product at its
    reorder level shows half full.
    """
    span = max(product.stock, product.reorder_level * 2, 1)
    return product.stock / span


# ══════════════════════════════════════════════════════════════
# REORDER
# ══════════════════════════════════════════════════════════════

def reorder_list(products: Iterable[Product]) -> List[Product]:
    """Products with stock <= reorder level, lowest stock first."""
    return sorted(
        (p for p in products if p.stock <= p.reorder_level),
        key=lambda p: p.stock,
    )


def low_stock_count(products: Iterable[Product]) -> int:
    return sum(1 for p in products if p.stock <= p.reorder_level)


# ══════════════════════════════════════════════════════════════
# VALUATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CategoryValuation:
    category: str
    value: Decimal
    units: int
    product_count: int


@dataclass(frozen=True)
class InventoryValuation:
    by_category: Tuple[CategoryValuation, ...]
    total: Decimal

    def for_category(self, category: str) -> Decimal:
        for row in self.by_category:
            if row.category == category:
                return row.value
        return Decimal(0)

    def to_dict(self) -> dict:
        return {
            "total": str(self.total),
            "by_category": {row.category: str(row.value) for row in self.by_category},
        }


def inventory_valuation(products: Iterable[Product]) -> InventoryValuation:
    """Per-category sum of cost x stock (unknown cost counts as 0)."""
    values: Dict[str, Decimal] = {}
    units: Dict[str, int] = {}
    counts: Dict[str, int] = {}
    for product in products:
        key = str(product.category)
        values[key] = values.get(key, Decimal(0)) + product.stock_value
        units[key] = units.get(key, 0) + product.stock
        counts[key] = counts.get(key, 0) + 1

    rows = tuple(
        CategoryValuation(
            category=key,
            value=values[key],
            units=units[key],
            product_count=counts[key],
        )
        for key in sorted(values, key=lambda k: (-values[k], k))
    )
    return InventoryValuation(
        by_category=rows,
        total=sum((row.value for row in rows), Decimal(0)),
    )
