"""
POS Projections — Financial Statements
========================================
Simplified statements derived from sales history and the catalog.

Accounting model:
- revenue      = sum of sale subtotals (tax excluded)
- COGS         = sum of item.cost x quantity; unknown cost counts as 0,
                 which understates COGS for uncosted items
- net income   = gross profit (no operating expense model)
- cash         = net income
- inventory    = inventory valuation at cost
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from core.primitives.product import Product
from core.primitives.sale import Sale
from projections.inventory import inventory_valuation


@dataclass(frozen=True)
class IncomeStatement:
    revenue: Decimal
    cost_of_goods_sold: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    net_income: Decimal

    @property
    def gross_margin(self) -> Optional[Decimal]:
        """Gross profit / revenue; None when there is no revenue."""
        if not self.revenue:
            return None
        return self.gross_profit / self.revenue


@dataclass(frozen=True)
class BalanceSheet:
    cash: Decimal
    inventory: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    equity: Decimal


@dataclass(frozen=True)
class CashFlowStatement:
    cash_from_sales: Decimal
    cash_paid_for_goods: Decimal
    tax_collected: Decimal
    net_cash_from_operations: Decimal
    ending_cash: Decimal


@dataclass(frozen=True)
class FinancialStatements:
    income: IncomeStatement
    balance: BalanceSheet
    cash_flow: CashFlowStatement

    def to_dict(self) -> dict:
        return {
            "income_statement": {
                "revenue": str(self.income.revenue),
                "cost_of_goods_sold": str(self.income.cost_of_goods_sold),
                "gross_profit": str(self.income.gross_profit),
                "net_income": str(self.income.net_income),
            },
            "balance_sheet": {
                "cash": str(self.balance.cash),
                "inventory": str(self.balance.inventory),
                "total_assets": str(self.balance.total_assets),
                "equity": str(self.balance.equity),
            },
            "cash_flow": {
                "cash_from_sales": str(self.cash_flow.cash_from_sales),
                "cash_paid_for_goods": str(self.cash_flow.cash_paid_for_goods),
                "tax_collected": str(self.cash_flow.tax_collected),
                "net_cash_from_operations": str(self.cash_flow.net_cash_from_operations),
            },
        }


def total_revenue(sales: Iterable[Sale]) -> Decimal:
    return sum((sale.subtotal for sale in sales), Decimal(0))


def total_cogs(sales: Iterable[Sale]) -> Decimal:
    return sum(
        (item.line_cost for sale in sales for item in sale.items), Decimal(0),
    )


def income_statement(sales: Iterable[Sale]) -> IncomeStatement:
    sales = list(sales)
    revenue = total_revenue(sales)
    cogs = total_cogs(sales)
    gross = revenue - cogs
    return IncomeStatement(
        revenue=revenue,
        cost_of_goods_sold=cogs,
        gross_profit=gross,
        operating_expenses=Decimal(0),
        net_income=gross,
    )


def balance_sheet(
    products: Iterable[Product], sales: Iterable[Sale],
) -> BalanceSheet:
    cash = income_statement(sales).net_income
    inventory = inventory_valuation(products).total
    assets = cash + inventory
    return BalanceSheet(
        cash=cash,
        inventory=inventory,
        total_assets=assets,
        total_liabilities=Decimal(0),
        equity=assets,
    )


def cash_flow_statement(sales: Iterable[Sale]) -> CashFlowStatement:
    sales = list(sales)
    income = income_statement(sales)
    return CashFlowStatement(
        cash_from_sales=income.revenue,
        cash_paid_for_goods=income.cost_of_goods_sold,
        tax_collected=sum((sale.tax for sale in sales), Decimal(0)),
        net_cash_from_operations=income.net_income,
        ending_cash=income.net_income,
    )


def financial_statements(
    products: Iterable[Product], sales: Iterable[Sale],
) -> FinancialStatements:
    products = list(products)
    sales = list(sales)
    return FinancialStatements(
        income=income_statement(sales),
        balance=balance_sheet(products, sales),
        cash_flow=cash_flow_statement(sales),
    )
