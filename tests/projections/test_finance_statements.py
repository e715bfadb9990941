"""
Tests for projections.finance — income statement, balance sheet,
cash flow.
"""

from datetime import datetime, timezone
from decimal import Decimal

from core.primitives import Category, Product, Sale, SaleItem
from projections.finance import (
    balance_sheet,
    cash_flow_statement,
    financial_statements,
    income_statement,
)

NOW = datetime(2025, 7, 1, tzinfo=timezone.utc)
RATE = Decimal("0.16")

REDBULL = Product(
    id="A", name="Redbull", category=Category("Drinks"), price=Decimal("2.50"),
    stock=12, reorder_level=10, cost=Decimal("1.50"),
)
SOAP = Product(
    id="B", name="Soap", category=Category("Personal Care"), price=Decimal("4.00"),
    stock=5, reorder_level=2, cost=None,
)


def sales():
    return [
        Sale.build(
            sale_id="S1",
            items=[SaleItem.from_product(REDBULL, 3), SaleItem.from_product(SOAP, 1)],
            tax_rate=RATE,
            date=NOW,
        ),
    ]


class TestIncomeStatement:
    def test_revenue_excludes_tax(self):
        income = income_statement(sales())
        assert income.revenue == Decimal("11.50")
        assert income.cost_of_goods_sold == Decimal("4.50")
        assert income.gross_profit == Decimal("7.00")
        assert income.net_income == income.gross_profit
        assert income.operating_expenses == 0

    def test_gross_margin(self):
        income = income_statement(sales())
        assert income.gross_margin == Decimal("7.00") / Decimal("11.50")

    def test_empty(self):
        income = income_statement([])
        assert income.revenue == 0
        assert income.net_income == 0
        assert income.gross_margin is None


class TestBalanceSheet:
    def test_assets(self):
        sheet = balance_sheet([REDBULL, SOAP], sales())
        assert sheet.cash == Decimal("7.00")
        assert sheet.inventory == Decimal("18.00")
        assert sheet.total_assets == Decimal("25.00")
        assert sheet.total_liabilities == 0
        assert sheet.total_assets - sheet.total_liabilities == sheet.equity

    def test_empty(self):
        sheet = balance_sheet([], [])
        assert sheet.total_assets == 0
        assert sheet.equity == 0


class TestCashFlow:
    def test_operating_cash(self):
        flow = cash_flow_statement(sales())
        assert flow.cash_from_sales == Decimal("11.50")
        assert flow.cash_paid_for_goods == Decimal("4.50")
        assert flow.tax_collected == Decimal("1.84")
        assert flow.net_cash_from_operations == Decimal("7.00")
        assert flow.ending_cash == Decimal("7.00")


class TestFinancialStatements:
    def test_bundle_to_dict(self):
        data = financial_statements([REDBULL, SOAP], sales()).to_dict()
        assert data["income_statement"]["revenue"] == "11.50"
        assert data["balance_sheet"]["total_assets"] == "25.00"
        assert data["cash_flow"]["tax_collected"] == "1.8400"
