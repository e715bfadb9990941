"""
POS Core Config — Demo Seed Data
==================================
Starter catalog and sales history for demos and manual testing.
Loaded only when a caller asks for it (build_pos(seed=True)).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List

from core.primitives.product import Category, Product
from core.primitives.sale import Sale, SaleItem


_IMG = "https://images.unsplash.com/{}?w=400&h=300&fit=crop"

_PRODUCT_ROWS = (
    # id, name, category, price, cost, stock, reorder_level, image
    ("1", "Redbull", "Drinks", "2.50", "1.50", 15, 10, "photo-1537640538966-79f369143f8f"),
    ("2", "Shampoo", "Personal Care", "5.00", "3.00", 25, 15, "photo-1556228578-0d85b1a4d571"),
    ("3", "Powder Milk", "Groceries", "8.75", "5.50", 8, 10, "photo-1506905925346-21bda4d32df4"),
    ("4", "Doritos", "Snacks", "1.25", "0.75", 50, 20, "photo-1505075106905-fb052892c116"),
    ("5", "Olive Oil", "Groceries", "12.00", "8.00", 12, 10, "photo-1474979266404-7ea07b5c5d5a"),
    ("6", "Water Bottle", "Drinks", "1.00", "0.50", 100, 50, "photo-1523362628745-0c100150b504"),
    ("7", "Green Tea", "Drinks", "3.50", "2.00", 30, 15, "photo-1558618666-fcd25c85cd64"),
    ("8", "Apples", "Produce", "0.75", "0.40", 40, 20, "photo-1560806887-1e4cd0b6cbd6"),
)


def seed_products() -> List[Product]:
    return [
        Product(
            id=pid,
            name=name,
            category=Category(category),
            price=Decimal(price),
            cost=Decimal(cost),
            stock=stock,
            reorder_level=reorder_level,
            image_url=_IMG.format(image),
        )
        for pid, name, category, price, cost, stock, reorder_level, image
        in _PRODUCT_ROWS
    ]


def seed_sales(now: datetime, tax_rate: Decimal) -> List[Sale]:
    """Two sales stamped at `now`, snapshotting the seed catalog."""
    by_id = {p.id: p for p in seed_products()}
    return [
        Sale.build(
            sale_id="SALE-1",
            items=[
                SaleItem.from_product(by_id["1"], 3),
                SaleItem.from_product(by_id["4"], 2),
            ],
            tax_rate=tax_rate,
            date=now,
        ),
        Sale.build(
            sale_id="SALE-2",
            items=[SaleItem.from_product(by_id["3"], 1)],
            tax_rate=tax_rate,
            date=now,
        ),
    ]
