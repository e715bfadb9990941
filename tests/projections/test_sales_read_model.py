"""
Tests for projections.retail — grouping, item performance, velocity,
dashboard metrics.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.primitives import Category, Product, Sale, SaleItem
from core.time import TimeWindow
from projections.retail import (
    ConsumptionRate,
    SalesDimension,
    VelocityScope,
    bottom_items,
    consumption_rates,
    dashboard_metrics,
    fast_movers,
    filter_sales,
    flatten_sales,
    item_performance,
    sales_by,
    sales_duration_weeks,
    slow_movers,
    top_items,
    weeks_of_cover,
)

RATE = Decimal("0.16")
# 2025-03-10 is a Monday
MONDAY = datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)


def product(pid, name, category, price, cost, stock=10, reorder_level=0):
    return Product(
        id=pid, name=name, category=Category(category), price=Decimal(price),
        stock=stock, reorder_level=reorder_level,
        cost=Decimal(cost) if cost is not None else None,
    )


REDBULL = product("A", "Redbull", "Drinks", "2.50", "1.50", stock=15, reorder_level=10)
DORITOS = product("B", "Doritos", "Snacks", "1.25", "0.75", stock=50, reorder_level=20)
MILK = product("C", "Powder Milk", "Groceries", "8.75", "5.50", stock=8, reorder_level=10)
CATALOG = [REDBULL, DORITOS, MILK]


def sale(sale_id, date, *lines):
    return Sale.build(
        sale_id=sale_id,
        items=[SaleItem.from_product(p, q) for p, q in lines],
        tax_rate=RATE,
        date=date,
    )


def history():
    return [
        sale("S1", MONDAY, (REDBULL, 3), (DORITOS, 2)),
        sale("S2", MONDAY + timedelta(days=2), (MILK, 1)),
        sale("S3", MONDAY + timedelta(days=14), (REDBULL, 1)),
    ]


class TestFlatten:
    def test_orders_by_sale_date(self):
        late = sale("late", MONDAY + timedelta(days=1), (MILK, 1))
        early = sale("early", MONDAY, (REDBULL, 1))
        rows = flatten_sales([late, early])
        assert [r.sale_id for r in rows] == ["early", "late"]

    def test_filter_window(self):
        window = TimeWindow(MONDAY, MONDAY + timedelta(days=7))
        assert [s.id for s in filter_sales(history(), window)] == ["S1", "S2"]


class TestSalesBy:
    def test_by_category(self):
        groups = sales_by(CATALOG, history(), SalesDimension.CATEGORY)
        assert [(g.key, g.items_sold, g.revenue) for g in groups] == [
            ("Drinks", 4, Decimal("10.00")),
            ("Groceries", 1, Decimal("8.75")),
            ("Snacks", 2, Decimal("2.50")),
        ]

    def test_category_falls_back_to_catalog_then_uncategorized(self):
        bare = SaleItem(id="A", name="Redbull", price=Decimal("1"), quantity=1)
        gone = SaleItem(id="Z", name="Gone", price=Decimal("2"), quantity=1)
        sales = [Sale.build(sale_id="S", items=[bare, gone], tax_rate=RATE, date=MONDAY)]
        keys = {g.key for g in sales_by(CATALOG, sales)}
        assert keys == {"Drinks", "Uncategorized"}

    def test_by_day_of_week(self):
        groups = sales_by(CATALOG, history(), SalesDimension.DAY_OF_WEEK)
        assert {g.key: g.items_sold for g in groups} == {"Monday": 6, "Wednesday": 1}

    def test_by_week(self):
        groups = sales_by(CATALOG, history(), SalesDimension.WEEK)
        assert {g.key: g.revenue for g in groups} == {
            "2025-03-10": Decimal("18.75"),
            "2025-03-24": Decimal("2.50"),
        }

    def test_by_month_and_year(self):
        assert [g.key for g in sales_by(CATALOG, history(), "MONTH")] == ["2025-03"]
        assert sales_by(CATALOG, history(), SalesDimension.YEAR)[0].items_sold == 7

    def test_empty_history(self):
        for dimension in SalesDimension:
            assert sales_by(CATALOG, [], dimension) == []


class TestItemPerformance:
    def test_includes_unsold_catalog_products(self):
        rows = item_performance(CATALOG, [])
        assert [(r.name, r.items_sold) for r in rows] == [
            ("Redbull", 0), ("Doritos", 0), ("Powder Milk", 0),
        ]

    def test_deleted_products_from_history(self):
        rows = item_performance([DORITOS], history())
        names = [r.name for r in rows]
        assert names == ["Doritos", "Redbull", "Powder Milk"]
        redbull = rows[1]
        assert redbull.items_sold == 4
        assert redbull.category == "Drinks"

    def test_top_and_bottom(self):
        top = top_items(CATALOG, history(), n=2)
        assert [r.name for r in top] == ["Redbull", "Doritos"]
        bottom = bottom_items(CATALOG, history(), n=1)
        assert [r.name for r in bottom] == ["Powder Milk"]

    def test_empty_history_top_items(self):
        assert all(r.items_sold == 0 for r in top_items(CATALOG, []))
        assert top_items([], []) == []


class TestVelocity:
    def test_duration_floor(self):
        assert sales_duration_weeks([], MONDAY) == 1.0
        assert sales_duration_weeks(history()[:1], MONDAY + timedelta(days=1)) == 1.0

    def test_rates_per_product(self):
        now = MONDAY + timedelta(days=28)
        rates = consumption_rates(CATALOG, history(), now)
        by_key = {r.key: r for r in rates}
        assert by_key["A"].units_sold == 4
        assert by_key["A"].rate_per_week == pytest.approx(1.0)
        assert by_key["B"].rate_per_week == pytest.approx(0.5)
        assert rates[0].key == "A"

    def test_rates_per_category(self):
        now = MONDAY + timedelta(days=14)
        rates = consumption_rates(CATALOG, history(), now, VelocityScope.CATEGORY)
        by_key = {r.key: r.rate_per_week for r in rates}
        assert by_key == {
            "Drinks": pytest.approx(2.0),
            "Snacks": pytest.approx(1.0),
            "Groceries": pytest.approx(0.5),
        }

    def test_empty_history_rates_are_zero(self):
        rates = consumption_rates(CATALOG, [], MONDAY)
        assert [r.rate_per_week for r in rates] == [0.0, 0.0, 0.0]

    def test_fast_and_slow_movers(self):
        rates = [
            ConsumptionRate(key=k, name=k, units_sold=0, rate_per_week=r)
            for k, r in [("a", 5.0), ("b", 1.0), ("c", 3.0), ("d", 0.5)]
        ]
        assert [r.key for r in fast_movers(rates, 2)] == ["a", "c"]
        assert [r.key for r in slow_movers(rates, 2)] == ["b", "d"]

    def test_weeks_of_cover(self):
        rate = ConsumptionRate(key="A", name="Redbull", units_sold=4, rate_per_week=2.0)
        assert weeks_of_cover(REDBULL, rate) == pytest.approx(7.5)
        assert weeks_of_cover(REDBULL, None) is None


class TestDashboard:
    def test_metrics(self):
        metrics = dashboard_metrics(CATALOG, history())
        assert metrics.transactions == 3
        assert metrics.total_sales == Decimal("21.25") * (1 + RATE)
        # (2.50-1.50)*4 + (1.25-0.75)*2 + (8.75-5.50)*1
        assert metrics.total_profit == Decimal("8.25")
        assert metrics.low_stock_items == 1

    def test_profit_falls_back_to_current_cost(self):
        bare = SaleItem(id="A", name="Redbull", price=Decimal("2.50"), quantity=2)
        sales = [Sale.build(sale_id="S", items=[bare], tax_rate=RATE, date=MONDAY)]
        assert dashboard_metrics(CATALOG, sales).total_profit == Decimal("2.00")

    def test_empty(self):
        metrics = dashboard_metrics([], [])
        assert metrics.total_sales == 0
        assert metrics.total_profit == 0
        assert metrics.transactions == 0
        assert metrics.to_dict()["low_stock_items"] == 0
