"""Abstract port for the external medicine catalog.

Defined in the domain layer so the domain never depends on
infrastructure. The HTTP implementation lives in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.model.medicine import Medicine


class CatalogService(ABC):

    @abstractmethod
    async def search(self, query: str) -> list[Medicine]:
        """Return medicines matching a free-text query."""

    @abstractmethod
    async def check_availability(self, medicine_id: int, quantity: int) -> bool:
        """Return True if *quantity* units of the medicine are in stock."""

    @abstractmethod
    async def list_unavailable_items(self, order_id: int) -> list[LineItem]:
        """Return the persisted items of an order that lack stock."""
