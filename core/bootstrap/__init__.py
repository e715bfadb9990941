"""
POS Bootstrap — Application Wiring
====================================
Builds the shared stores once and hands the same instances to every
service. Nothing here is global: each build_pos() call returns an
independent application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from core.config import StoreSettings
from core.config.seed import seed_products, seed_sales
from core.time import Clock, SystemClock
from engines.inventory.services import CatalogStore
from engines.reporting.services import ReportingService
from engines.retail.ledger import TransactionLedger
from engines.retail.services import RetailService
from integration.audit_log import IntegrationAuditLog
from integration.extraction import GeminiRestExtractor, build_extractor
from integration.imaging import HttpImageEnhancer, build_enhancer

logger = logging.getLogger("pos.bootstrap")


@dataclass
class PosApp:
    settings: StoreSettings
    clock: Clock
    catalog: CatalogStore
    ledger: TransactionLedger
    retail: RetailService
    reporting: ReportingService
    enhancer: Optional[HttpImageEnhancer] = None
    extractor: Optional[GeminiRestExtractor] = None
    audit_log: IntegrationAuditLog = field(default_factory=IntegrationAuditLog)

    def new_checkout(self) -> RetailService:
        """A second till over the same catalog and ledger."""
        return RetailService(
            catalog=self.catalog,
            ledger=self.ledger,
            settings=self.settings,
            clock=self.clock,
        )


def build_pos(
    settings: Optional[StoreSettings] = None,
    clock: Optional[Clock] = None,
    seed: bool = False,
) -> PosApp:
    """
    Wire catalog, ledger, checkout and reporting.

    settings: defaults to StoreSettings.from_env()
    seed:     preload the demo catalog and two demo sales
    """
    settings = settings or StoreSettings.from_env()
    clock = clock or SystemClock()

    products = seed_products() if seed else []
    sales = seed_sales(clock.now_utc(), settings.tax_rate) if seed else []

    catalog = CatalogStore(products, default_categories=settings.default_categories)
    ledger = TransactionLedger(sales)
    app = PosApp(
        settings=settings,
        clock=clock,
        catalog=catalog,
        ledger=ledger,
        retail=RetailService(
            catalog=catalog, ledger=ledger, settings=settings, clock=clock,
        ),
        reporting=ReportingService(
            catalog=catalog, ledger=ledger, settings=settings, clock=clock,
        ),
        enhancer=build_enhancer(settings),
        extractor=build_extractor(settings),
    )
    logger.info(
        f"POS ready: {len(catalog)} products, {len(ledger)} sales, "
        f"tax {settings.tax.display_label}"
    )
    return app


__all__ = ["PosApp", "build_pos"]
