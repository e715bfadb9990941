"""
POS Core Primitives — Shared Value Objects
============================================
Immutable building blocks consumed by the catalog, retail and
reporting layers:

    money    — Decimal coercion and validation helpers
    product  — Product snapshot, Category newtype, "All" sentinel
    sale     — SaleItem snapshot and the committed Sale record

Pure Python, frozen dataclasses, no I/O.
"""

from core.primitives.money import (
    ZERO,
    quantize_money,
    to_count,
    to_money,
    to_non_negative_count,
    to_non_negative_money,
)
from core.primitives.product import (
    ALL_CATEGORIES,
    UNCATEGORIZED,
    Category,
    Product,
    matches_category,
)
from core.primitives.sale import Sale, SaleItem, compute_subtotal, compute_tax

__all__ = [
    "ZERO",
    "quantize_money",
    "to_money",
    "to_non_negative_money",
    "to_count",
    "to_non_negative_count",
    "ALL_CATEGORIES",
    "UNCATEGORIZED",
    "Category",
    "Product",
    "matches_category",
    "Sale",
    "SaleItem",
    "compute_subtotal",
    "compute_tax",
]
