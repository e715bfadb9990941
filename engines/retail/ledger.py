"""
POS Retail Engine — Transaction Ledger
========================================
Append-only history of completed sales.

No update or delete operations exist. Insertion order is commit
order; history(chronological=True) re-sorts by the sale date for
callers that cannot rely on sales arriving in timestamp order.
"""

from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from typing import Dict, Iterable, Iterator, List, Optional

from core.errors import NotFoundError, ValidationError
from core.primitives.sale import Sale
from engines.retail.events import (
    RETAIL_SALE_COMPLETED_V1,
    build_sale_completed_payload,
)

logger = logging.getLogger("pos.ledger")


class TransactionLedger:
    """In-memory sale history. Sales are frozen and never removed."""

    def __init__(self, sales: Iterable[Sale] = ()):
        self._lock = Lock()
        self._sales: List[Sale] = []
        self._by_id: Dict[str, Sale] = {}
        self._events: List[dict] = []
        for sale in sales:
            self._append(sale)

    def _append(self, sale: Sale) -> None:
        if not isinstance(sale, Sale):
            raise TypeError(f"Ledger records Sale, got {type(sale).__name__}.")
        if sale.id in self._by_id:
            raise ValidationError(
                f"Sale '{sale.id}' already recorded.", details={"sale_id": sale.id},
            )
        self._sales.append(sale)
        self._by_id[sale.id] = sale
        self._events.append({
            "event_type": RETAIL_SALE_COMPLETED_V1,
            "payload": build_sale_completed_payload(sale),
        })

    def record(self, sale: Sale) -> Sale:
        with self._lock:
            self._append(sale)
        logger.info(f"Sale recorded: {sale.id} total={sale.total}")
        return sale

    # ── Queries ───────────────────────────────────────────────

    def history(self, chronological: bool = False) -> List[Sale]:
        with self._lock:
            sales = list(self._sales)
        if chronological:
            sales.sort(key=lambda sale: sale.date)
        return sales

    def get(self, sale_id: str) -> Sale:
        with self._lock:
            sale = self._by_id.get(sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)
        return sale

    def earliest_date(self) -> Optional[datetime]:
        with self._lock:
            if not self._sales:
                return None
            return min(sale.date for sale in self._sales)

    @property
    def journal(self) -> List[dict]:
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sales)

    def __iter__(self) -> Iterator[Sale]:
        return iter(self.history())
