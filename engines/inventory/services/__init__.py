"""
POS Inventory Engine — Catalog Store
======================================
Owns the mutable product collection.

RULES:
- Insertion order is display order
- Every mutation is validated before any write (no partial updates)
- Every mutation appends one journal event and bumps `revision`
- low_stock() is recomputed on each call, never cached
- Deleting a product never touches sales history
"""

from __future__ import annotations

import logging
import uuid
from operator import attrgetter
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from core.errors import NotFoundError, ValidationError
from core.primitives.money import to_count
from core.primitives.product import (
    ALL_CATEGORIES,
    Category,
    Product,
    matches_category,
)
from engines.inventory.commands import (
    ProductCreateRequest,
    ProductUpdateRequest,
    StockAdjustRequest,
)
from engines.inventory.events import (
    INVENTORY_CATEGORY_ADDED_V1,
    INVENTORY_CATEGORY_REMOVED_V1,
    INVENTORY_CATEGORY_RENAMED_V1,
    INVENTORY_PRODUCT_ADDED_V1,
    INVENTORY_PRODUCT_DELETED_V1,
    INVENTORY_PRODUCT_UPDATED_V1,
    INVENTORY_STOCK_ADJUSTED_V1,
    build_category_removed_payload,
    build_category_renamed_payload,
    build_product_added_payload,
    build_product_deleted_payload,
    build_product_updated_payload,
    build_stock_adjusted_payload,
)

logger = logging.getLogger("pos.catalog")

SORTABLE_FIELDS = frozenset({"name", "category", "price", "stock", "reorder_level"})

ProductInput = Union[ProductCreateRequest, Mapping[str, Any]]


def new_product_id() -> str:
    return f"PROD-{uuid.uuid4().hex[:12].upper()}"


def _as_create_request(fields: ProductInput) -> ProductCreateRequest:
    if isinstance(fields, ProductCreateRequest):
        return fields
    return ProductCreateRequest.from_fields(fields)


class CatalogStore:
    """
    In-memory catalog of sellable products.

    Safe to share between the cart, the commit protocol and the
    reporting layer: callers only ever receive frozen Product snapshots.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        *,
        default_categories: Iterable[str] = (),
        id_factory: Callable[[], str] = new_product_id,
    ):
        self._lock = RLock()
        self._products: Dict[str, Product] = {}
        self._categories: List[Category] = []
        self._events: List[dict] = []
        self._revision = 0
        self._new_id = id_factory

        for name in default_categories:
            category = Category(name)
            if category not in self._categories:
                self._categories.append(category)
        for product in products:
            if product.id in self._products:
                raise ValidationError(f"Duplicate product id '{product.id}'.")
            self._products[product.id] = product

    # ── Internals ─────────────────────────────────────────────

    @property
    def lock(self) -> RLock:
        """
        Held by the sale commit protocol across ledger append + stock issue.
        Hold it around reads of both catalog and ledger to see them agree.
        """
        return self._lock

    def _record(self, event_type: str, payload: dict) -> None:
        self._events.append({"event_type": event_type, "payload": payload})
        self._revision += 1

    def _require(self, product_id: str) -> Product:
        product = self._products.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def _fresh_id(self) -> str:
        product_id = self._new_id()
        while product_id in self._products:
            product_id = self._new_id()
        return product_id

    # ── Commands ──────────────────────────────────────────────

    def add_product(self, fields: ProductInput) -> Product:
        """Validate `fields` and insert a new product with a fresh id."""
        request = _as_create_request(fields)
        with self._lock:
            product = request.to_product(self._fresh_id())
            self._products[product.id] = product
            self._record(INVENTORY_PRODUCT_ADDED_V1, build_product_added_payload(product))
        logger.info(f"Product added: {product.id} ({product.name})")
        return product

    def add_products(self, rows: Iterable[ProductInput]) -> List[Product]:
        """
        Bulk insert. Every row is validated first; if any row fails,
        nothing is inserted.
        """
        requests = []
        for index, row in enumerate(rows):
            try:
                requests.append(_as_create_request(row))
            except ValidationError as exc:
                raise ValidationError(
                    f"Row {index + 1}: {exc.message}",
                    details={"row": index, **exc.details},
                ) from exc
        with self._lock:
            added = []
            for request in requests:
                product = request.to_product(self._fresh_id())
                self._products[product.id] = product
                self._record(
                    INVENTORY_PRODUCT_ADDED_V1, build_product_added_payload(product),
                )
                added.append(product)
        logger.info(f"Bulk import added {len(added)} products")
        return added

    def update_product(self, product_id: str, patch: Mapping[str, Any]) -> Product:
        request = ProductUpdateRequest(product_id=product_id, patch=dict(patch))
        with self._lock:
            before = self._require(product_id)
            after = request.apply_to(before)
            self._products[product_id] = after
            self._record(
                INVENTORY_PRODUCT_UPDATED_V1,
                build_product_updated_payload(before, after),
            )
        logger.info(f"Product updated: {product_id} {sorted(request.patch)}")
        return after

    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        *,
        reason: str = "MANUAL",
        reference_id: Optional[str] = None,
    ) -> Product:
        """Apply a signed delta. The result may never go below zero."""
        request = StockAdjustRequest(
            product_id=product_id, delta=delta,
            reason=reason, reference_id=reference_id,
        )
        with self._lock:
            before = self._require(product_id)
            new_stock = before.stock + request.delta
            if new_stock < 0:
                raise ValidationError(
                    f"Stock for '{before.name}' cannot go below zero "
                    f"(on hand {before.stock}, delta {request.delta}).",
                    details={
                        "product_id": product_id,
                        "on_hand": before.stock,
                        "delta": request.delta,
                    },
                )
            after = ProductUpdateRequest(
                product_id=product_id, patch={"stock": new_stock},
            ).apply_to(before)
            self._products[product_id] = after
            self._record(
                INVENTORY_STOCK_ADJUSTED_V1,
                build_stock_adjusted_payload(
                    after, request.delta, request.reason, request.reference_id,
                ),
            )
        logger.info(
            f"Stock adjusted: {product_id} {request.delta:+d} -> {after.stock} "
            f"({request.reason})"
        )
        return after

    def restock(self, product_id: str, quantity: Any) -> Product:
        """Top-up from a delivery. Only positive whole quantities."""
        units = to_count(quantity, "quantity")
        if units < 1:
            raise ValidationError(
                f"Restock quantity must be positive, got {units}.",
                details={"field": "quantity"},
            )
        return self.adjust_stock(product_id, units, reason="RESTOCK")

    def delete_product(self, product_id: str) -> Product:
        with self._lock:
            product = self._require(product_id)
            del self._products[product_id]
            self._record(
                INVENTORY_PRODUCT_DELETED_V1, build_product_deleted_payload(product),
            )
        logger.info(f"Product deleted: {product_id} ({product.name})")
        return product

    # ── Categories ────────────────────────────────────────────

    def add_category(self, name: str) -> Category:
        category = Category(name)
        with self._lock:
            self._reject_collision(category)
            self._categories.append(category)
            self._record(INVENTORY_CATEGORY_ADDED_V1, {"category": str(category)})
        return category

    def rename_category(self, old: str, new: str) -> Category:
        """Rename a category everywhere it is used."""
        target = Category(new)
        with self._lock:
            if old not in self.categories():
                raise NotFoundError("Category", old)
            if target == old:
                return target
            self._reject_collision(target, ignore=old)

            renamed = []
            for product_id, product in self._products.items():
                if product.category == old:
                    self._products[product_id] = ProductUpdateRequest(
                        product_id=product_id, patch={"category": target},
                    ).apply_to(product)
                    renamed.append(product_id)
            self._categories = [
                target if category == old else category
                for category in self._categories
            ]
            self._record(
                INVENTORY_CATEGORY_RENAMED_V1,
                build_category_renamed_payload(old, target, renamed),
            )
        logger.info(f"Category renamed: {old} -> {target} ({len(renamed)} products)")
        return target

    def remove_category(
        self, name: str, assignments: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Drop a category after moving its products elsewhere.

        `assignments` maps product id → new category and must cover every
        product currently in `name`.
        """
        assignments = dict(assignments or {})
        with self._lock:
            if name not in self.categories():
                raise NotFoundError("Category", name)
            members = [p.id for p in self._products.values() if p.category == name]
            missing = [pid for pid in members if pid not in assignments]
            if missing:
                raise ValidationError(
                    f"Products still assigned to '{name}': {missing}.",
                    details={"product_ids": missing},
                )
            targets = {}
            for product_id, category in assignments.items():
                self._require(product_id)
                target = Category(category)
                if target == name:
                    raise ValidationError(
                        f"Cannot reassign '{product_id}' to the category being removed."
                    )
                targets[product_id] = target

            for product_id, target in targets.items():
                self._products[product_id] = ProductUpdateRequest(
                    product_id=product_id, patch={"category": target},
                ).apply_to(self._products[product_id])
            self._categories = [c for c in self._categories if c != name]
            self._record(
                INVENTORY_CATEGORY_REMOVED_V1,
                build_category_removed_payload(name, {k: str(v) for k, v in targets.items()}),
            )
        logger.info(f"Category removed: {name} ({len(targets)} products reassigned)")

    def _reject_collision(self, category: Category, ignore: Optional[str] = None) -> None:
        lowered = category.lower()
        for existing in self.categories():
            if existing != ignore and existing.lower() == lowered:
                raise ValidationError(
                    f"Category '{category}' already exists.",
                    details={"category": str(category)},
                )

    # ── Queries ───────────────────────────────────────────────

    def get(self, product_id: str) -> Product:
        with self._lock:
            return self._require(product_id)

    def find(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._products.get(product_id)

    def products(self) -> List[Product]:
        with self._lock:
            return list(self._products.values())

    def list_by_category(
        self,
        category: str = ALL_CATEGORIES,
        *,
        sort_by: Optional[str] = None,
        reverse: bool = False,
    ) -> List[Product]:
        """Products in `category` ("All" = every product), insertion order by default."""
        if sort_by is not None and sort_by not in SORTABLE_FIELDS:
            raise ValidationError(f"Cannot sort products by '{sort_by}'.")
        with self._lock:
            selected = [
                p for p in self._products.values()
                if matches_category(p.category, category)
            ]
        if sort_by is not None:
            selected.sort(key=attrgetter(sort_by), reverse=reverse)
        return selected

    def search(self, term: str = "", category: str = ALL_CATEGORIES) -> List[Product]:
        """Category filter plus case-insensitive substring match on name."""
        needle = (term or "").strip().lower()
        return [
            p for p in self.list_by_category(category)
            if needle in p.name.lower()
        ]

    def low_stock(self) -> List[Product]:
        with self._lock:
            return [p for p in self._products.values() if p.stock <= p.reorder_level]

    def categories(self) -> List[Category]:
        """Registered categories plus every category in use, sorted."""
        with self._lock:
            names = set(self._categories)
            names.update(p.category for p in self._products.values())
        return sorted(names)

    def grouped_by_category(self, products: Optional[Iterable[Product]] = None) -> Dict[str, List[Product]]:
        if products is None:
            products = self.products()
        groups: Dict[str, List[Product]] = {}
        for product in products:
            groups.setdefault(str(product.category), []).append(product)
        return dict(sorted(groups.items()))

    # ── Introspection ─────────────────────────────────────────

    @property
    def revision(self) -> int:
        """Monotonic counter, bumped on every mutation."""
        with self._lock:
            return self._revision

    @property
    def journal(self) -> List[dict]:
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        with self._lock:
            return product_id in self._products
