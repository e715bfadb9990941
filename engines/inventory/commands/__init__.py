"""
POS Inventory Engine — Request Objects
========================================
Typed catalog requests. Raw form/import input is coerced and
validated here, in __post_init__, before the catalog store writes
anything.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from core.errors import ValidationError
from core.primitives.money import (
    to_count,
    to_non_negative_count,
    to_non_negative_money,
)
from core.primitives.product import UNCATEGORIZED, Category, Product


PATCHABLE_FIELDS = frozenset({
    "name", "category", "price", "cost", "stock", "reorder_level", "image_url",
})


def _clean_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            "name must be a non-empty string.", details={"field": "name"},
        )
    return value.strip()


def _clean_cost(value: Any) -> Optional[Decimal]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_non_negative_money(value, "cost")


# ══════════════════════════════════════════════════════════════
# REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductCreateRequest:
    """Add a product to the catalog (manual entry or bulk import)."""
    name: Any
    price: Any
    stock: Any
    category: Any = UNCATEGORIZED
    cost: Any = None
    reorder_level: Any = 0
    image_url: str = ""

    def __post_init__(self):
        object.__setattr__(self, "name", _clean_name(self.name))
        object.__setattr__(self, "price", to_non_negative_money(self.price, "price"))
        object.__setattr__(self, "stock", to_non_negative_count(self.stock, "stock"))
        object.__setattr__(self, "category", Category(self.category))
        object.__setattr__(self, "cost", _clean_cost(self.cost))
        reorder_level = 0 if self.reorder_level is None else self.reorder_level
        object.__setattr__(
            self, "reorder_level",
            to_non_negative_count(reorder_level, "reorder_level"),
        )
        object.__setattr__(self, "image_url", self.image_url or "")

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> ProductCreateRequest:
        unknown = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown product fields: {sorted(unknown)}.",
                details={"fields": sorted(unknown)},
            )
        if "name" not in fields or "price" not in fields or "stock" not in fields:
            raise ValidationError("name, price and stock are required.")
        return cls(**dict(fields))

    def to_product(self, product_id: str) -> Product:
        return Product(
            id=product_id,
            name=self.name,
            category=self.category,
            price=self.price,
            cost=self.cost,
            stock=self.stock,
            reorder_level=self.reorder_level,
            image_url=self.image_url,
        )


@dataclass(frozen=True)
class ProductUpdateRequest:
    """Partial edit of an existing product. `id` is never patchable."""
    product_id: str
    patch: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.product_id:
            raise ValidationError("product_id must be non-empty.")
        unknown = set(self.patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Cannot update fields: {sorted(unknown)}.",
                details={"fields": sorted(unknown)},
            )
        cleaned: Dict[str, Any] = {}
        for key, value in self.patch.items():
            if key == "name":
                cleaned[key] = _clean_name(value)
            elif key == "category":
                cleaned[key] = Category(value)
            elif key == "price":
                cleaned[key] = to_non_negative_money(value, "price")
            elif key == "cost":
                cleaned[key] = _clean_cost(value)
            elif key in ("stock", "reorder_level"):
                cleaned[key] = to_non_negative_count(value, key)
            else:
                cleaned[key] = value or ""
        object.__setattr__(self, "patch", cleaned)

    def apply_to(self, product: Product) -> Product:
        return replace(product, **self.patch)


@dataclass(frozen=True)
class StockAdjustRequest:
    """Signed stock change (top-up, count correction, sale issue)."""
    product_id: str
    delta: Any
    reason: str = "MANUAL"
    reference_id: Optional[str] = None

    def __post_init__(self):
        if not self.product_id:
            raise ValidationError("product_id must be non-empty.")
        object.__setattr__(self, "delta", to_count(self.delta, "delta"))
