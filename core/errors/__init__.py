"""
POS Core — Error Taxonomy
===========================
Errors raised by stores, the commit protocol, and external adapters.

Every error carries:
- code:    machine-readable (SCREAMING_SNAKE_CASE)
- message: human-readable, suitable for inline display
- details: structured context (ids, quantities)

Stores validate BEFORE writing. An error never leaves a store
partially mutated.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PosError(Exception):
    """Base error for all point-of-sale core failures."""

    code = "POS_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


class ValidationError(PosError):
    """Bad input shape or range (negative price, empty name, empty cart)."""

    code = "VALIDATION_FAILED"


class NotFoundError(PosError):
    """Operation referenced an id absent from a store."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(
            f"{kind} '{entity_id}' not found.",
            details={"kind": kind, "id": entity_id},
        )


class InsufficientStockError(PosError):
    """Committing a sale would drive a product's stock negative."""

    code = "INSUFFICIENT_STOCK"

    def __init__(
        self,
        product_id: str,
        product_name: str,
        requested: int,
        available: int,
    ):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for '{product_name}': "
            f"requested {requested}, available {available}.",
            details={
                "product_id": product_id,
                "requested_quantity": requested,
                "on_hand": available,
            },
        )


class ExternalServiceError(PosError):
    """A collaborator call (image enhancement, extraction) failed."""

    code = "EXTERNAL_SERVICE_FAILED"

    def __init__(
        self,
        message: str,
        service: str = "",
        retryable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.service = service
        self.retryable = retryable


__all__ = [
    "PosError",
    "ValidationError",
    "NotFoundError",
    "InsufficientStockError",
    "ExternalServiceError",
]
