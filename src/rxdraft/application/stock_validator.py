"""Application service: Stock Validator.

Advisory availability checks. A negative answer publishes a
``StockWarning``; it never blocks or reverts the quantity change that
prompted it. A failed check is logged and reported as unknown (``None``).
"""

from __future__ import annotations

import asyncio
import logging

from rxdraft.application.events import Notifier, StockWarning
from rxdraft.domain.exceptions import ServiceError
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.repository.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class StockValidator:

    def __init__(self, catalog: CatalogService, notifier: Notifier) -> None:
        self._catalog = catalog
        self._notifier = notifier

    async def check_availability(
        self,
        medicine_id: int,
        quantity: int,
        medicine_name: str = "",
    ) -> bool | None:
        """True/False from the catalog, or None when the check failed."""
        try:
            available = await self._catalog.check_availability(medicine_id, quantity)
        except (ServiceError, asyncio.TimeoutError) as exc:
            logger.warning(
                "Could not verify stock for medicine %s (qty %s): %s",
                medicine_id, quantity, exc,
            )
            return None

        if not available:
            name = medicine_name or "Selected medicine"
            logger.info("Insufficient stock: %s x%s", name, quantity)
            self._notifier.publish(
                StockWarning(medicine_id=medicine_id, medicine_name=name, quantity=quantity)
            )
        return bool(available)

    async def validate_order(self, order_id: int) -> list[LineItem]:
        """Warn about every persisted item of the order that lacks stock."""
        try:
            unavailable = await self._catalog.list_unavailable_items(order_id)
        except (ServiceError, asyncio.TimeoutError) as exc:
            logger.warning("Availability validation for order #%s failed: %s", order_id, exc)
            return []

        for item in unavailable:
            self._notifier.publish(
                StockWarning(
                    medicine_id=item.medicine_id,
                    medicine_name=item.medicine_name or "Selected medicine",
                    quantity=item.quantity,
                )
            )
        return unavailable
