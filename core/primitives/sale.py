"""
POS Sale Primitive — Sale Items and Completed Sales
=====================================================
SaleItem is a denormalized snapshot of a Product taken when it was
added to a cart. Sale is the committed, immutable record.

RULES (NON-NEGOTIABLE):
- SaleItem.price is fixed at sale time, never re-read from the catalog
- Sale.subtotal == sum(item.price * item.quantity)
- Sale.total == Sale.subtotal + Sale.tax
- Sales are never mutated after creation
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from core.errors import ValidationError
from core.primitives.product import Product


@dataclass(frozen=True)
class SaleItem:
    """Line snapshot: product identity, price, and quantity."""
    id: str
    name: str
    price: Decimal
    quantity: int
    cost: Optional[Decimal] = None
    category: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValidationError("SaleItem id must be non-empty.")
        if not isinstance(self.price, Decimal) or self.price < 0:
            raise ValidationError("SaleItem price must be a non-negative Decimal.")
        if not isinstance(self.quantity, int) or isinstance(self.quantity, bool):
            raise ValidationError("quantity must be an integer.")
        if self.quantity < 1:
            raise ValidationError(
                f"quantity must be >= 1, got {self.quantity}.",
                details={"field": "quantity"},
            )

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> SaleItem:
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            cost=product.cost,
            category=str(product.category),
        )

    def with_quantity(self, quantity: int) -> SaleItem:
        return replace(self, quantity=quantity)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def line_cost(self) -> Decimal:
        """Cost of goods for this line; unknown cost counts as zero."""
        if self.cost is None:
            return Decimal(0)
        return self.cost * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
            "cost": str(self.cost) if self.cost is not None else None,
            "category": self.category,
        }


def compute_subtotal(items: Iterable[SaleItem]) -> Decimal:
    return sum((item.line_total for item in items), Decimal(0))


def compute_tax(subtotal: Decimal, tax_rate: Decimal) -> Decimal:
    return subtotal * tax_rate


@dataclass(frozen=True)
class Sale:
    """
    Completed sale. Immutable audit record.

    Build with Sale.build() so the totals are derived from the items.
    """
    id: str
    items: Tuple[SaleItem, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    date: datetime

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Sale id must be non-empty.")
        if not isinstance(self.items, tuple):
            raise TypeError("items must be a tuple of SaleItem.")
        if not self.items:
            raise ValidationError("A sale must contain at least one item.")
        if not isinstance(self.date, datetime):
            raise ValidationError("date must be a datetime.")
        if self.subtotal != compute_subtotal(self.items):
            raise ValidationError(
                f"Sale {self.id}: subtotal {self.subtotal} does not match items."
            )
        if self.total != self.subtotal + self.tax:
            raise ValidationError(
                f"Sale {self.id}: total {self.total} != subtotal + tax."
            )

    @classmethod
    def build(
        cls,
        *,
        sale_id: str,
        items: Iterable[SaleItem],
        tax_rate: Decimal,
        date: datetime,
    ) -> Sale:
        frozen_items = tuple(items)
        subtotal = compute_subtotal(frozen_items)
        tax = compute_tax(subtotal, tax_rate)
        return cls(
            id=sale_id,
            items=frozen_items,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            date=date,
        )

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "items": [item.to_dict() for item in self.items],
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "total": str(self.total),
            "date": self.date.isoformat(),
        }
