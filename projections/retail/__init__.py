"""
POS Projections — Sales Read Model
====================================
Pure aggregations over (products, sales):

- sales_by():           grouped items sold / revenue per dimension
- item_performance():   per-product totals, top and bottom slices
- consumption_rates():  units sold per week (velocity)
- dashboard_metrics():  headline totals for the reports screen

Sale items carry their own price snapshot; revenue is never
recomputed from the current catalog. Time-based views order by the
sale date, not ledger insertion order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from core.primitives.product import UNCATEGORIZED, Product
from core.primitives.sale import Sale, SaleItem
from core.time.temporal import (
    TimeWindow,
    day_of_week,
    month_label,
    week_label,
    weeks_between,
    year_label,
)

DEFAULT_SLICE = 10


# ══════════════════════════════════════════════════════════════
# FLATTENING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DatedSaleItem:
    """A sale item tagged with its parent sale's id and date."""
    sale_id: str
    date: datetime
    item: SaleItem

    @property
    def revenue(self) -> Decimal:
        return self.item.line_total


def flatten_sales(sales: Iterable[Sale]) -> List[DatedSaleItem]:
    """All items across all sales, ordered by sale date (stable)."""
    ordered = sorted(sales, key=lambda sale: sale.date)
    return [
        DatedSaleItem(sale_id=sale.id, date=sale.date, item=item)
        for sale in ordered
        for item in sale.items
    ]


def filter_sales(sales: Iterable[Sale], window: TimeWindow) -> List[Sale]:
    return [sale for sale in sales if window.contains(sale.date)]


def item_category(item: SaleItem, catalog: Dict[str, Product]) -> str:
    """Snapshot category, else the product's current one, else Uncategorized."""
    if item.category:
        return item.category
    product = catalog.get(item.id)
    if product is not None:
        return str(product.category)
    return str(UNCATEGORIZED)


def _index(products: Iterable[Product]) -> Dict[str, Product]:
    return {p.id: p for p in products}


# ══════════════════════════════════════════════════════════════
# SALES BY DIMENSION
# ══════════════════════════════════════════════════════════════

class SalesDimension(Enum):
    CATEGORY = "CATEGORY"
    DAY_OF_WEEK = "DAY_OF_WEEK"
    WEEK = "WEEK"
    MONTH = "MONTH"
    YEAR = "YEAR"


@dataclass(frozen=True)
class SalesGroup:
    key: str
    items_sold: int
    revenue: Decimal


_TIME_KEYS: Dict[SalesDimension, Callable[[datetime], str]] = {
    SalesDimension.DAY_OF_WEEK: day_of_week,
    SalesDimension.WEEK: week_label,
    SalesDimension.MONTH: month_label,
    SalesDimension.YEAR: year_label,
}


def sales_by(
    products: Iterable[Product],
    sales: Iterable[Sale],
    dimension: SalesDimension = SalesDimension.CATEGORY,
) -> List[SalesGroup]:
    """Items sold and revenue per group, highest revenue first."""
    dimension = SalesDimension(dimension)
    catalog = _index(products)
    units: Dict[str, int] = {}
    revenue: Dict[str, Decimal] = {}

    for row in flatten_sales(sales):
        if dimension is SalesDimension.CATEGORY:
            key = item_category(row.item, catalog)
        else:
            key = _TIME_KEYS[dimension](row.date)
        units[key] = units.get(key, 0) + row.item.quantity
        revenue[key] = revenue.get(key, Decimal(0)) + row.revenue

    groups = [
        SalesGroup(key=key, items_sold=units[key], revenue=revenue[key])
        for key in units
    ]
    groups.sort(key=lambda g: g.revenue, reverse=True)
    return groups


# ══════════════════════════════════════════════════════════════
# ITEM PERFORMANCE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ItemPerformance:
    product_id: str
    name: str
    category: str
    items_sold: int
    revenue: Decimal
    image_url: str = ""


def item_performance(
    products: Iterable[Product], sales: Iterable[Sale],
) -> List[ItemPerformance]:
    """
    Totals per product id, catalog order first.

    Current products with no sales appear with zero totals. Products
    deleted from the catalog but present in history appear after them,
    named from their sale snapshot.
    """
    catalog = _index(products)
    units: Dict[str, int] = {pid: 0 for pid in catalog}
    revenue: Dict[str, Decimal] = {pid: Decimal(0) for pid in catalog}
    snapshots: Dict[str, SaleItem] = {}

    for row in flatten_sales(sales):
        pid = row.item.id
        units[pid] = units.get(pid, 0) + row.item.quantity
        revenue[pid] = revenue.get(pid, Decimal(0)) + row.revenue
        snapshots.setdefault(pid, row.item)

    result = []
    for pid in units:
        product = catalog.get(pid)
        if product is not None:
            name, category, image = product.name, str(product.category), product.image_url
        else:
            snap = snapshots[pid]
            name, category, image = snap.name, item_category(snap, catalog), ""
        result.append(ItemPerformance(
            product_id=pid,
            name=name,
            category=category,
            items_sold=units[pid],
            revenue=revenue[pid],
            image_url=image,
        ))
    return result


def top_items(
    products: Iterable[Product], sales: Iterable[Sale], n: int = DEFAULT_SLICE,
) -> List[ItemPerformance]:
    """Highest items_sold first."""
    ranked = sorted(
        item_performance(products, sales), key=lambda p: p.items_sold, reverse=True,
    )
    return ranked[:n]


def bottom_items(
    products: Iterable[Product], sales: Iterable[Sale], n: int = DEFAULT_SLICE,
) -> List[ItemPerformance]:
    """Lowest items_sold first."""
    ranked = sorted(item_performance(products, sales), key=lambda p: p.items_sold)
    return ranked[:n]


# ══════════════════════════════════════════════════════════════
# CONSUMPTION RATE / VELOCITY
# ══════════════════════════════════════════════════════════════

class VelocityScope(Enum):
    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"


@dataclass(frozen=True)
class ConsumptionRate:
    key: str
    name: str
    units_sold: int
    rate_per_week: float


def sales_duration_weeks(sales: Iterable[Sale], now: datetime) -> float:
    """max(1, weeks since the earliest sale); 1 when there are no sales."""
    dates = [sale.date for sale in sales]
    if not dates:
        return 1.0
    return weeks_between(min(dates), now)


def consumption_rates(
    products: Iterable[Product],
    sales: Iterable[Sale],
    now: datetime,
    scope: VelocityScope = VelocityScope.PRODUCT,
) -> List[ConsumptionRate]:
    """Units sold per week for each product (or category), fastest first."""
    products = list(products)
    sales = list(sales)
    scope = VelocityScope(scope)
    weeks = sales_duration_weeks(sales, now)

    if scope is VelocityScope.PRODUCT:
        rows = [(p.product_id, p.name, p.items_sold)
                for p in item_performance(products, sales)]
    else:
        catalog = _index(products)
        units: Dict[str, int] = {str(p.category): 0 for p in products}
        for row in flatten_sales(sales):
            key = item_category(row.item, catalog)
            units[key] = units.get(key, 0) + row.item.quantity
        rows = [(key, key, total) for key, total in units.items()]

    rates = [
        ConsumptionRate(key=key, name=name, units_sold=total,
                        rate_per_week=total / weeks)
        for key, name, total in rows
    ]
    rates.sort(key=lambda r: r.rate_per_week, reverse=True)
    return rates


def fast_movers(
    rates: Iterable[ConsumptionRate], n: int = DEFAULT_SLICE,
) -> List[ConsumptionRate]:
    """Top n by descending rate."""
    return sorted(rates, key=lambda r: r.rate_per_week, reverse=True)[:n]


def slow_movers(
    rates: Iterable[ConsumptionRate], n: int = DEFAULT_SLICE,
) -> List[ConsumptionRate]:
    """Bottom n by ascending rate, presented highest-first within the slice."""
    slowest = sorted(rates, key=lambda r: r.rate_per_week)[:n]
    return sorted(slowest, key=lambda r: r.rate_per_week, reverse=True)


def weeks_of_cover(product: Product, rate: Optional[ConsumptionRate]) -> Optional[float]:
    """How many weeks current stock lasts at the given rate (None = not selling)."""
    if rate is None or rate.rate_per_week <= 0:
        return None
    return product.stock / rate.rate_per_week


# ══════════════════════════════════════════════════════════════
# DASHBOARD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DashboardMetrics:
    total_sales: Decimal
    total_profit: Decimal
    transactions: int
    low_stock_items: int

    def to_dict(self) -> dict:
        return {
            "total_sales": str(self.total_sales),
            "total_profit": str(self.total_profit),
            "transactions": self.transactions,
            "low_stock_items": self.low_stock_items,
        }


def dashboard_metrics(
    products: Iterable[Product], sales: Iterable[Sale],
) -> DashboardMetrics:
    """
    Headline figures.

    total_sales includes tax. Profit uses the snapshot cost, falling
    back to the product's current cost; lines with no known cost add
    no profit.
    """
    products = list(products)
    sales = list(sales)
    catalog = _index(products)

    total_profit = Decimal(0)
    for sale in sales:
        for item in sale.items:
            cost = item.cost
            if cost is None:
                product = catalog.get(item.id)
                cost = product.cost if product is not None else None
            if cost:
                total_profit += (item.price - cost) * item.quantity

    return DashboardMetrics(
        total_sales=sum((sale.total for sale in sales), Decimal(0)),
        total_profit=total_profit,
        transactions=len(sales),
        low_stock_items=sum(1 for p in products if p.stock <= p.reorder_level),
    )
