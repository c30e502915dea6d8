"""Abstract port for the remote store of persisted line items."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rxdraft.domain.model.line_item import LineItem, LineItemInput


class LineItemRepository(ABC):

    @abstractmethod
    async def list_items(self, order_id: int) -> list[LineItem]:
        """Return the persisted items of an order, in display order."""

    @abstractmethod
    async def delete_item(self, item_id: int) -> None:
        """Delete one persisted item. Raises ServiceError on failure."""

    @abstractmethod
    async def upsert_items(
        self, order_id: int, items: list[LineItemInput]
    ) -> list[LineItem]:
        """Replace the order's items with *items*; return the canonical rows."""
