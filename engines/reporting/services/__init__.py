"""
POS Reporting Engine — Application Service
============================================
Read-side facade over the catalog and ledger.

Each report is a pure projection function. Results are memoized on
(report name, params) and tagged with the (catalog revision, ledger
length) they were computed at: any catalog mutation or new sale
changes the tag, so a stale result is never returned. Velocity
reports are also tagged with the clock reading, and a newer reading
replaces the older entry instead of adding one.

RULES:
- At most `max_entries` results are kept, least recently used evicted
- List reports are stored as tuples; every caller gets its own list
- Reports are computed while holding the catalog lock
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Callable, List, Optional, Tuple

from core.config import DEFAULT_SETTINGS, StoreSettings
from core.errors import ValidationError
from core.primitives.product import Product
from core.time import Clock, SystemClock
from engines.inventory.services import CatalogStore
from engines.retail.ledger import TransactionLedger
from projections.finance import FinancialStatements, financial_statements
from projections.inventory import InventoryValuation, inventory_valuation, reorder_list
from projections.retail import (
    ConsumptionRate,
    DashboardMetrics,
    ItemPerformance,
    SalesDimension,
    SalesGroup,
    VelocityScope,
    bottom_items,
    consumption_rates,
    dashboard_metrics,
    fast_movers,
    sales_by,
    slow_movers,
    top_items,
)

logger = logging.getLogger("pos.reporting")

_CacheKey = Tuple[Any, ...]

DEFAULT_MAX_ENTRIES = 64


class ReportingService:
    """Derived views over shared stores, recomputed when inputs change."""

    def __init__(
        self,
        *,
        catalog: CatalogStore,
        ledger: TransactionLedger,
        settings: StoreSettings = DEFAULT_SETTINGS,
        clock: Optional[Clock] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValidationError("max_entries must be >= 1.")
        self._catalog = catalog
        self._ledger = ledger
        self._settings = settings
        self._clock = clock or SystemClock()
        self._max_entries = max_entries
        self._cache: OrderedDict[_CacheKey, Tuple[Any, Any]] = OrderedDict()
        self._cache_version: Tuple[int, int] = (-1, -1)
        self._hits = 0

    def _cached(
        self,
        name: str,
        params: tuple,
        compute: Callable[[], Any],
        stamp: Any = None,
    ) -> Any:
        with self._catalog.lock:
            version = (self._catalog.revision, len(self._ledger))
            if version != self._cache_version:
                self._cache.clear()
                self._cache_version = version
            key = (name,) + params
            entry = self._cache.get(key)
            if entry is not None and entry[0] == stamp:
                self._cache.move_to_end(key)
                self._hits += 1
                return _detached(entry[1])

            logger.debug(f"Computing report {name} {params} at version {version}")
            result = compute()
            if isinstance(result, list):
                result = tuple(result)
            if key not in self._cache and len(self._cache) >= self._max_entries:
                self._cache.popitem(last=False)
            self._cache[key] = (stamp, result)
            self._cache.move_to_end(key)
            return _detached(result)

    def _slice_size(self, n: Optional[int]) -> int:
        if n is None:
            return self._settings.top_n
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            raise ValidationError(f"n must be a non-negative integer, got {n!r}.")
        return n

    @property
    def cache_hits(self) -> int:
        return self._hits

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    # ── Inventory ─────────────────────────────────────────────

    def reorder_list(self) -> List[Product]:
        return self._cached(
            "reorder", (), lambda: reorder_list(self._catalog.products()),
        )

    def inventory_valuation(self) -> InventoryValuation:
        return self._cached(
            "valuation", (), lambda: inventory_valuation(self._catalog.products()),
        )

    # ── Sales ─────────────────────────────────────────────────

    def sales_by(self, dimension: SalesDimension = SalesDimension.CATEGORY) -> List[SalesGroup]:
        dimension = SalesDimension(dimension)
        return self._cached(
            "sales_by", (dimension,),
            lambda: sales_by(self._catalog.products(), self._ledger.history(), dimension),
        )

    def top_items(self, n: Optional[int] = None) -> List[ItemPerformance]:
        n = self._slice_size(n)
        return self._cached(
            "top_items", (n,),
            lambda: top_items(self._catalog.products(), self._ledger.history(), n),
        )

    def bottom_items(self, n: Optional[int] = None) -> List[ItemPerformance]:
        n = self._slice_size(n)
        return self._cached(
            "bottom_items", (n,),
            lambda: bottom_items(self._catalog.products(), self._ledger.history(), n),
        )

    def consumption_rates(
        self, scope: VelocityScope = VelocityScope.PRODUCT,
    ) -> List[ConsumptionRate]:
        scope = VelocityScope(scope)
        now = self._clock.now_utc()
        return self._cached(
            "velocity", (scope,),
            lambda: consumption_rates(
                self._catalog.products(), self._ledger.history(), now, scope,
            ),
            stamp=now,
        )

    def fast_movers(
        self, scope: VelocityScope = VelocityScope.PRODUCT, n: Optional[int] = None,
    ) -> List[ConsumptionRate]:
        return fast_movers(self.consumption_rates(scope), self._slice_size(n))

    def slow_movers(
        self, scope: VelocityScope = VelocityScope.PRODUCT, n: Optional[int] = None,
    ) -> List[ConsumptionRate]:
        return slow_movers(self.consumption_rates(scope), self._slice_size(n))

    # ── Finance ───────────────────────────────────────────────

    def financial_statements(self) -> FinancialStatements:
        return self._cached(
            "financials", (),
            lambda: financial_statements(self._catalog.products(), self._ledger.history()),
        )

    def dashboard(self) -> DashboardMetrics:
        return self._cached(
            "dashboard", (),
            lambda: dashboard_metrics(self._catalog.products(), self._ledger.history()),
        )


def _detached(result: Any) -> Any:
    return list(result) if isinstance(result, tuple) else result
