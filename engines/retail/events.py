"""
POS Retail Engine — Event Types and Payload Builders
======================================================
The ledger journals one event per committed sale. Inventory
journals the matching stock issues under reason "SALE" with the
sale id as reference.
"""

from __future__ import annotations

from core.primitives.sale import Sale


RETAIL_SALE_COMPLETED_V1 = "retail.sale.completed.v1"

RETAIL_EVENT_TYPES = (
    RETAIL_SALE_COMPLETED_V1,
)

STOCK_ISSUE_REASON = "SALE"


def build_sale_completed_payload(sale: Sale) -> dict:
    payload = sale.to_dict()
    payload.update({
        "sale_id": sale.id,
        "line_count": len(sale.items),
        "item_count": sale.item_count,
        "completed_at": sale.date.isoformat(),
    })
    return payload
