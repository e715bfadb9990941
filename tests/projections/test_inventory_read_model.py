"""
Tests for projections.inventory — reorder list, stock status, valuation.
"""

from decimal import Decimal

import pytest

from core.primitives import Category, Product
from projections.inventory import (
    StockStatus,
    inventory_valuation,
    low_stock_count,
    reorder_list,
    stock_fill_ratio,
    stock_status,
)


def product(pid, stock, reorder_level, category="Drinks", cost="1.00", name=None):
    return Product(
        id=pid, name=name or pid, category=Category(category),
        price=Decimal("2.00"), stock=stock, reorder_level=reorder_level,
        cost=Decimal(cost) if cost is not None else None,
    )


class TestReorderList:
    def test_boundary_is_inclusive(self):
        at = product("at", stock=10, reorder_level=10)
        above = product("above", stock=11, reorder_level=10)
        result = reorder_list([at, above])
        assert result == [at]

    def test_sorted_by_ascending_stock(self):
        rows = [product("a", 8, 10), product("b", 0, 5), product("c", 3, 3)]
        assert [p.id for p in reorder_list(rows)] == ["b", "c", "a"]

    def test_empty(self):
        assert reorder_list([]) == []
        assert low_stock_count([]) == 0

    def test_low_stock_count(self):
        rows = [product("a", 8, 10), product("b", 20, 5)]
        assert low_stock_count(rows) == 1


class TestStockStatus:
    @pytest.mark.parametrize("stock, reorder, expected", [
        (0, 0, StockStatus.OUT),
        (0, 5, StockStatus.OUT),
        (5, 5, StockStatus.LOW),
        (6, 5, StockStatus.OK),
    ])
    def test_status(self, stock, reorder, expected):
        assert stock_status(product("p", stock, reorder)) is expected

    def test_fill_ratio_half_at_reorder_level(self):
        assert stock_fill_ratio(product("p", 10, 10)) == pytest.approx(0.5)

    def test_fill_ratio_full_when_overstocked(self):
        assert stock_fill_ratio(product("p", 100, 10)) == pytest.approx(1.0)

    def test_fill_ratio_zero_stock(self):
        assert stock_fill_ratio(product("p", 0, 0)) == 0.0


class TestInventoryValuation:
    def test_per_category_and_total(self):
        rows = [
            product("a", 10, 0, "Drinks", "1.50"),
            product("b", 4, 0, "Drinks", "2.00"),
            product("c", 20, 0, "Snacks", "0.75"),
        ]
        valuation = inventory_valuation(rows)
        assert valuation.for_category("Drinks") == Decimal("23.00")
        assert valuation.for_category("Snacks") == Decimal("15.00")
        assert valuation.total == Decimal("38.00")
        assert [row.category for row in valuation.by_category] == ["Drinks", "Snacks"]
        assert valuation.by_category[0].units == 14
        assert valuation.by_category[0].product_count == 2

    def test_unknown_cost_counts_as_zero(self):
        valuation = inventory_valuation([product("a", 10, 0, cost=None)])
        assert valuation.total == Decimal(0)
        assert valuation.for_category("Drinks") == Decimal(0)

    def test_empty(self):
        valuation = inventory_valuation([])
        assert valuation.by_category == ()
        assert valuation.total == Decimal(0)
        assert valuation.for_category("Drinks") == Decimal(0)

    def test_to_dict(self):
        data = inventory_valuation([product("a", 2, 0, cost="1.25")]).to_dict()
        assert data == {"total": "2.50", "by_category": {"Drinks": "2.50"}}
