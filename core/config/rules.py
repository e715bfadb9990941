"""
POS Core Config — Store Settings
==================================
Tax rate, category list and external-service credentials are data,
not code. Settings are read once at startup (static for the process
lifetime) and are never persisted by the core.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple

from core.errors import ValidationError
from core.primitives.money import to_money


# ══════════════════════════════════════════════════════════════
# TAX RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxRule:
    """
    Flat sales tax (VAT) applied to a cart subtotal.

    rate: 0.16 means 16%.
    """

    rate: Decimal
    label: str = "VAT"

    def __post_init__(self) -> None:
        rate = to_money(self.rate, "tax rate")
        if not Decimal(0) <= rate <= Decimal(1):
            raise ValidationError(f"Tax rate must be between 0 and 1, got {rate}.")
        object.__setattr__(self, "rate", rate)

    def compute_tax(self, amount: Decimal) -> Decimal:
        """Unrounded tax for a base amount."""
        return amount * self.rate

    @property
    def display_label(self) -> str:
        """e.g. "VAT (16%)"."""
        percent = (self.rate * 100).normalize()
        return f"{self.label} ({percent:f}%)"


# ══════════════════════════════════════════════════════════════
# STORE SETTINGS
# ══════════════════════════════════════════════════════════════

DEFAULT_CATEGORIES: Tuple[str, ...] = (
    "Drinks", "Personal Care", "Groceries", "Snacks", "Produce",
)


@dataclass(frozen=True)
class StoreSettings:
    """
    Static configuration the core reads but never writes.

    Fields:
        tax:                   Sales tax rule applied at checkout
        currency:              ISO 4217 code used on receipts
        default_categories:    Categories offered before any product uses them
        import_reorder_level:  Reorder level for rows confirmed from extraction
        top_n:                 Size of top/bottom/fast/slow report slices
        image_endpoint:        Image enhancement endpoint (empty = disabled)
        image_api_key:         Bearer token for the enhancement endpoint
        extraction_api_key:    Credential for the document extraction service
        request_timeout:       Seconds before an external HTTP call is abandoned
    """

    tax: TaxRule = field(default_factory=lambda: TaxRule(rate=Decimal("0.16")))
    currency: str = "USD"
    default_categories: Tuple[str, ...] = DEFAULT_CATEGORIES
    import_reorder_level: int = 5
    top_n: int = 10
    image_endpoint: str = ""
    image_api_key: str = ""
    extraction_api_key: str = ""
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not self.currency or len(self.currency) != 3:
            raise ValidationError(
                f"currency must be 3-letter ISO 4217 code, got '{self.currency}'."
            )
        if self.import_reorder_level < 0:
            raise ValidationError("import_reorder_level cannot be negative.")
        if self.top_n < 1:
            raise ValidationError("top_n must be >= 1.")

    @property
    def tax_rate(self) -> Decimal:
        return self.tax.rate

    @property
    def image_enhancement_enabled(self) -> bool:
        return bool(self.image_endpoint and self.image_api_key)

    def with_tax_rate(self, rate: Any) -> StoreSettings:
        return replace(self, tax=TaxRule(rate=rate, label=self.tax.label))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> StoreSettings:
        """
        Build settings from environment variables.

        POS_TAX_RATE, POS_CURRENCY, NANO_BANANA_ENDPOINT,
        NANO_BANANA_API_KEY, GEMINI_API_KEY (or API_KEY).
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        settings = cls(
            currency=env.get("POS_CURRENCY", "USD").strip() or "USD",
            image_endpoint=env.get("NANO_BANANA_ENDPOINT", "").strip(),
            image_api_key=env.get("NANO_BANANA_API_KEY", "").strip(),
            extraction_api_key=(
                env.get("GEMINI_API_KEY") or env.get("API_KEY") or ""
            ).strip(),
        )
        raw_rate = env.get("POS_TAX_RATE", "").strip()
        if raw_rate:
            settings = settings.with_tax_rate(raw_rate)
        return settings


DEFAULT_SETTINGS = StoreSettings()
