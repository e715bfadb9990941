"""
POS Retail Engine — Cart / Order Builder
==========================================
Transient aggregation of selected products into a pending sale.

RULES:
- One line per product id; repeated adds increase the quantity
- Line quantity is always >= 1; setting it below 1 removes the line
- Price and name are snapshotted when the line is first added
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from core.config import DEFAULT_SETTINGS
from core.errors import NotFoundError, ValidationError
from core.primitives.money import to_count, to_money
from core.primitives.product import Product
from core.primitives.sale import SaleItem, compute_subtotal, compute_tax


class Cart:
    """Pending order for one checkout session."""

    def __init__(self, tax_rate: Optional[Decimal] = None):
        rate = DEFAULT_SETTINGS.tax_rate if tax_rate is None else tax_rate
        self._tax_rate = to_money(rate, "tax rate")
        self._lines: Dict[str, SaleItem] = {}

    @property
    def tax_rate(self) -> Decimal:
        return self._tax_rate

    # ── Mutations ─────────────────────────────────────────────

    def add_item(self, product: Product, quantity: int = 1) -> SaleItem:
        quantity = to_count(quantity, "quantity")
        if quantity < 1:
            raise ValidationError(
                f"quantity must be >= 1, got {quantity}.",
                details={"field": "quantity"},
            )
        existing = self._lines.get(product.id)
        if existing is not None:
            line = existing.with_quantity(existing.quantity + quantity)
        else:
            line = SaleItem.from_product(product, quantity)
        self._lines[product.id] = line
        return line

    def set_quantity(self, product_id: str, quantity: int) -> Optional[SaleItem]:
        """Absolute set. Below 1 removes the line and returns None."""
        quantity = to_count(quantity, "quantity")
        if quantity < 1:
            self.remove_item(product_id)
            return None
        existing = self._lines.get(product_id)
        if existing is None:
            raise NotFoundError("Cart line", product_id)
        line = existing.with_quantity(quantity)
        self._lines[product_id] = line
        return line

    def remove_item(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    # ── Totals ────────────────────────────────────────────────

    def subtotal(self) -> Decimal:
        return compute_subtotal(self._lines.values())

    def tax(self) -> Decimal:
        return compute_tax(self.subtotal(), self._tax_rate)

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()

    # ── Queries ───────────────────────────────────────────────

    def lines(self) -> List[SaleItem]:
        return list(self._lines.values())

    def quantity_of(self, product_id: str) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line is not None else 0

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines
