"""
POS Retail Engine — Sale Commit and Checkout Service
======================================================
commit_sale() is the only place where the catalog and the ledger
change together.

Protocol:
1. Cart must be non-empty
2. Every line's product must exist with stock >= line quantity
3. Build the Sale (fresh id, frozen items, derived totals, clock date)
4. Append the Sale to the ledger
5. Issue stock for every line
6. Clear the cart, return the Sale

All checks (1, 2) run before any write. Steps 2-5 run while holding
the catalog lock. Every catalog and ledger read takes its store's lock,
so a single read never sees a half-applied write. A caller that reads
both stores and needs them to agree holds `catalog.lock` around the
reads, as ReportingService does; it then sees the sale in both stores
or in neither.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.errors import InsufficientStockError, NotFoundError, ValidationError
from core.primitives.money import quantize_money
from core.primitives.product import Product
from core.primitives.sale import Sale
from core.time import Clock, SystemClock
from engines.inventory.services import CatalogStore
from engines.retail.cart import Cart
from engines.retail.events import STOCK_ISSUE_REASON
from engines.retail.ledger import TransactionLedger

logger = logging.getLogger("pos.retail")


def new_sale_id() -> str:
    return f"SALE-{uuid.uuid4().hex[:12].upper()}"


# ══════════════════════════════════════════════════════════════
# SALE COMMIT PROTOCOL
# ══════════════════════════════════════════════════════════════

def _check_stock(cart: Cart, catalog: CatalogStore) -> None:
    for line in cart.lines():
        product = catalog.find(line.id)
        if product is None:
            raise NotFoundError("Product", line.id)
        if product.stock < line.quantity:
            raise InsufficientStockError(
                product_id=product.id,
                product_name=product.name,
                requested=line.quantity,
                available=product.stock,
            )


def commit_sale(
    cart: Cart,
    catalog: CatalogStore,
    ledger: TransactionLedger,
    *,
    clock: Optional[Clock] = None,
    id_factory: Callable[[], str] = new_sale_id,
) -> Sale:
    """Record the cart as a Sale and deduct its quantities from stock."""
    if cart.is_empty:
        raise ValidationError("empty cart")

    clock = clock or SystemClock()
    with catalog.lock:
        _check_stock(cart, catalog)

        sale = Sale.build(
            sale_id=id_factory(),
            items=cart.lines(),
            tax_rate=cart.tax_rate,
            date=clock.now_utc(),
        )
        ledger.record(sale)
        for item in sale.items:
            catalog.adjust_stock(
                item.id,
                -item.quantity,
                reason=STOCK_ISSUE_REASON,
                reference_id=sale.id,
            )

    cart.clear()
    logger.info(
        f"Sale committed: {sale.id} lines={len(sale.items)} "
        f"subtotal={sale.subtotal} tax={sale.tax} total={sale.total}"
    )
    return sale


# ══════════════════════════════════════════════════════════════
# RECEIPT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Receipt:
    """Display-ready receipt. Amounts are rounded to cents."""
    sale_id: str
    lines: Tuple[ReceiptLine, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    tax_label: str
    currency: str
    issued_at: str

    @classmethod
    def from_sale(cls, sale: Sale, settings: StoreSettings = DEFAULT_SETTINGS) -> Receipt:
        return cls(
            sale_id=sale.id,
            lines=tuple(
                ReceiptLine(
                    name=item.name,
                    quantity=item.quantity,
                    unit_price=quantize_money(item.price),
                    line_total=quantize_money(item.line_total),
                )
                for item in sale.items
            ),
            subtotal=quantize_money(sale.subtotal),
            tax=quantize_money(sale.tax),
            total=quantize_money(sale.total),
            tax_label=settings.tax.display_label,
            currency=settings.currency,
            issued_at=sale.date.isoformat(),
        )

    def render(self) -> List[str]:
        out = [f"Receipt ID: {self.sale_id}"]
        for line in self.lines:
            out.append(f"{line.name} x{line.quantity}  {line.line_total}")
        out.append(f"Subtotal: {self.subtotal}")
        out.append(f"{self.tax_label}: {self.tax}")
        out.append(f"Total: {self.total} {self.currency}")
        return out


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class RetailService:
    """
    Checkout session over a shared catalog and ledger.

    Each service owns one Cart. Stores are injected so several
    sessions (or tests) can share or isolate them explicitly.
    """

    def __init__(
        self,
        *,
        catalog: CatalogStore,
        ledger: TransactionLedger,
        settings: StoreSettings = DEFAULT_SETTINGS,
        clock: Optional[Clock] = None,
        sale_id_factory: Callable[[], str] = new_sale_id,
    ):
        self._catalog = catalog
        self._ledger = ledger
        self._settings = settings
        self._clock = clock or SystemClock()
        self._sale_id_factory = sale_id_factory
        self._cart = Cart(tax_rate=settings.tax_rate)
        self._last_sale: Optional[Sale] = None

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def last_sale(self) -> Optional[Sale]:
        return self._last_sale

    def add_to_cart(self, product_id: str, quantity: int = 1):
        product: Product = self._catalog.get(product_id)
        return self._cart.add_item(product, quantity)

    def set_quantity(self, product_id: str, quantity: int):
        return self._cart.set_quantity(product_id, quantity)

    def remove_from_cart(self, product_id: str) -> None:
        self._cart.remove_item(product_id)

    def checkout(self) -> Sale:
        sale = commit_sale(
            self._cart,
            self._catalog,
            self._ledger,
            clock=self._clock,
            id_factory=self._sale_id_factory,
        )
        self._last_sale = sale
        return sale

    def receipt(self, sale: Optional[Sale] = None) -> Receipt:
        sale = sale or self._last_sale
        if sale is None:
            raise ValidationError("No completed sale to print.")
        return Receipt.from_sale(sale, self._settings)
