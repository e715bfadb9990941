"""
POS Core Config — Public API
===============================
Static store settings (tax, currency, categories, service credentials)
and demo seed data.
"""

from core.config.rules import (
    DEFAULT_CATEGORIES,
    DEFAULT_SETTINGS,
    StoreSettings,
    TaxRule,
)

__all__ = [
    "TaxRule",
    "StoreSettings",
    "DEFAULT_SETTINGS",
    "DEFAULT_CATEGORIES",
]
