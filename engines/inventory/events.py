"""
POS Inventory Engine — Event Types and Payload Builders
=========================================================
Every catalog mutation appends one event to the store journal.
The journal is an in-memory audit trail, not a persistence layer.
"""

from __future__ import annotations

from typing import Optional

from core.primitives.product import Product


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

INVENTORY_PRODUCT_ADDED_V1 = "inventory.product.added.v1"
INVENTORY_PRODUCT_UPDATED_V1 = "inventory.product.updated.v1"
INVENTORY_PRODUCT_DELETED_V1 = "inventory.product.deleted.v1"
INVENTORY_STOCK_ADJUSTED_V1 = "inventory.stock.adjusted.v1"
INVENTORY_CATEGORY_ADDED_V1 = "inventory.category.added.v1"
INVENTORY_CATEGORY_RENAMED_V1 = "inventory.category.renamed.v1"
INVENTORY_CATEGORY_REMOVED_V1 = "inventory.category.removed.v1"

INVENTORY_EVENT_TYPES = (
    INVENTORY_PRODUCT_ADDED_V1,
    INVENTORY_PRODUCT_UPDATED_V1,
    INVENTORY_PRODUCT_DELETED_V1,
    INVENTORY_STOCK_ADJUSTED_V1,
    INVENTORY_CATEGORY_ADDED_V1,
    INVENTORY_CATEGORY_RENAMED_V1,
    INVENTORY_CATEGORY_REMOVED_V1,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_product_added_payload(product: Product) -> dict:
    return product.to_dict()


def build_product_updated_payload(before: Product, after: Product) -> dict:
    old, new = before.to_dict(), after.to_dict()
    return {
        "product_id": after.id,
        "changes": {
            key: {"from": old[key], "to": new[key]}
            for key in new
            if old[key] != new[key]
        },
    }


def build_product_deleted_payload(product: Product) -> dict:
    return {"product_id": product.id, "name": product.name}


def build_stock_adjusted_payload(
    product: Product,
    delta: int,
    reason: str,
    reference_id: Optional[str] = None,
) -> dict:
    return {
        "product_id": product.id,
        "delta": delta,
        "stock_after": product.stock,
        "reason": reason,
        "reference_id": reference_id,
    }


def build_category_renamed_payload(old: str, new: str, product_ids: list) -> dict:
    return {"from": old, "to": new, "product_ids": list(product_ids)}


def build_category_removed_payload(name: str, assignments: dict) -> dict:
    return {"category": name, "reassigned": dict(assignments)}
