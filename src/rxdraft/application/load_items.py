"""Application service: Load Draft use case.

Opens a draft pre-seeded with an order's persisted items.
"""

from __future__ import annotations

import logging

from rxdraft.domain.model.draft import DraftState, OrderContext
from rxdraft.domain.repository.line_item_repository import LineItemRepository

logger = logging.getLogger(__name__)


class LoadDraftHandler:

    def __init__(self, item_repo: LineItemRepository) -> None:
        self._item_repo = item_repo

    async def handle(
        self,
        order_id: int,
        order_status: str = "PENDING",
        context: OrderContext = OrderContext.PRESCRIPTION,
    ) -> DraftState:
        """Fetch the order's items and open a draft over them.

        A failed fetch propagates (ServiceError): the operator must not start
        editing on top of an unknown item list.
        """
        items = await self._item_repo.list_items(order_id)
        logger.debug("Loaded %d item(s) for order #%s", len(items), order_id)
        return DraftState.open(
            order_id, items, context=context, order_status=order_status
        )
