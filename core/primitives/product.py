"""
POS Product Primitive — Catalog Product and Category
=====================================================
A Product is an immutable snapshot. The catalog store replaces the
snapshot on every edit, so a Product held by a caller never changes
underneath it.

RULES:
- name is non-empty
- price >= 0, cost >= 0 or None (unknown)
- stock >= 0, reorder_level >= 0
- category is a Category, never the reserved "All" sentinel
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from core.errors import ValidationError


ALL_CATEGORIES = "All"


class Category(str):
    """
    Free-form category name.

    Surrounding whitespace is dropped. Matching is case-sensitive, but
    the "All" pseudo-category is rejected in any casing, as is the empty
    string.
    """

    def __new__(cls, value: str) -> "Category":
        if isinstance(value, Category):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(
                "category must be a non-empty string.",
                details={"field": "category"},
            )
        value = value.strip()
        if value.lower() == ALL_CATEGORIES.lower():
            raise ValidationError(
                f"'{ALL_CATEGORIES}' is reserved and cannot be used as a category.",
                details={"field": "category"},
            )
        return super().__new__(cls, value)


UNCATEGORIZED = Category("Uncategorized")


def matches_category(category: str, selected: str) -> bool:
    """True when `selected` is the "All" filter or equals `category` exactly."""
    return selected == ALL_CATEGORIES or category == selected


@dataclass(frozen=True)
class Product:
    """
    Catalog product snapshot.

    Fields:
        id:            Stable identifier, never reused
        name:          Display name
        category:      Category (free-form, case-sensitive)
        price:         Selling price per unit
        cost:          Acquisition cost per unit (None = unknown)
        stock:         On-hand quantity
        reorder_level: Stock at or below which the product is low
        image_url:     Remote URL or inline data URL
    """
    id: str
    name: str
    category: Category
    price: Decimal
    stock: int
    reorder_level: int = 0
    cost: Optional[Decimal] = None
    image_url: str = ""

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValidationError("id must be a non-empty string.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError(
                "name must be a non-empty string.", details={"field": "name"},
            )
        if not isinstance(self.category, Category):
            raise ValidationError("category must be a Category.")
        if not isinstance(self.price, Decimal) or self.price < 0:
            raise ValidationError(
                "price must be a non-negative Decimal.", details={"field": "price"},
            )
        if self.cost is not None and (
            not isinstance(self.cost, Decimal) or self.cost < 0
        ):
            raise ValidationError(
                "cost must be a non-negative Decimal.", details={"field": "cost"},
            )
        if not isinstance(self.stock, int) or self.stock < 0:
            raise ValidationError(
                "stock must be a non-negative integer.", details={"field": "stock"},
            )
        if not isinstance(self.reorder_level, int) or self.reorder_level < 0:
            raise ValidationError(
                "reorder_level must be a non-negative integer.",
                details={"field": "reorder_level"},
            )

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.reorder_level

    @property
    def unit_cost(self) -> Decimal:
        """Cost with unknown treated as zero."""
        return self.cost if self.cost is not None else Decimal(0)

    @property
    def stock_value(self) -> Decimal:
        return self.unit_cost * self.stock

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": str(self.category),
            "price": str(self.price),
            "cost": str(self.cost) if self.cost is not None else None,
            "stock": self.stock,
            "reorder_level": self.reorder_level,
            "image_url": self.image_url,
        }
