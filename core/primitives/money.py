"""
POS Money Helpers — Decimal Coercion
======================================
Currency amounts are Decimal. Inputs arrive as int, float, str or
Decimal and are coerced through str() so 2.5 becomes Decimal("2.5"),
never the binary float expansion.

Amounts are kept unrounded. quantize_money() is for display and
receipts only.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from core.errors import ValidationError


ZERO = Decimal(0)
CENT = Decimal("0.01")


def to_money(value: Any, field_name: str = "amount") -> Decimal:
    """
    Coerce a numeric input to a finite Decimal.

    Raises ValidationError for bools, blanks, and non-numeric values.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(
            f"{field_name} must be a number.", details={"field": field_name},
        )
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip()
        if not text:
            raise ValidationError(
                f"{field_name} must be a number.", details={"field": field_name},
            )
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise ValidationError(
                f"{field_name} must be a number, got {value!r}.",
                details={"field": field_name},
            ) from None
    if not amount.is_finite():
        raise ValidationError(
            f"{field_name} must be finite.", details={"field": field_name},
        )
    return amount


def to_non_negative_money(value: Any, field_name: str = "amount") -> Decimal:
    amount = to_money(value, field_name)
    if amount < 0:
        raise ValidationError(
            f"{field_name} cannot be negative, got {amount}.",
            details={"field": field_name},
        )
    return amount


def to_count(value: Any, field_name: str = "quantity") -> int:
    """
    Coerce a whole-number input (int, integral float, numeric str) to int.

    Fractional values are rejected rather than truncated.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(
            f"{field_name} must be an integer.", details={"field": field_name},
        )
    if isinstance(value, int):
        return value
    amount = to_money(value, field_name)
    if amount != amount.to_integral_value():
        raise ValidationError(
            f"{field_name} must be a whole number, got {value!r}.",
            details={"field": field_name},
        )
    return int(amount)


def to_non_negative_count(value: Any, field_name: str = "quantity") -> int:
    count = to_count(value, field_name)
    if count < 0:
        raise ValidationError(
            f"{field_name} cannot be negative, got {count}.",
            details={"field": field_name},
        )
    return count


def quantize_money(amount: Decimal) -> Decimal:
    """Round half-up to cents (receipts, display)."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
