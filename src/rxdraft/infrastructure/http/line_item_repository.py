"""HTTP implementation of LineItemRepository (prescription items API)."""

from __future__ import annotations

from rxdraft.domain.model.line_item import LineItem, LineItemInput
from rxdraft.domain.repository.line_item_repository import LineItemRepository
from rxdraft.infrastructure.http.api_client import ApiClient
from rxdraft.infrastructure.http.serialization import (
    line_item_from_raw,
    line_item_input_to_raw,
    parse_rows,
)


class HttpLineItemRepository(LineItemRepository):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_items(self, order_id: int) -> list[LineItem]:
        data = await self._client.get(f"/prescription-items/prescription/{order_id}")
        return parse_rows(data, line_item_from_raw, "prescription items")

    async def delete_item(self, item_id: int) -> None:
        await self._client.delete(f"/prescription-items/{item_id}")

    async def upsert_items(
        self, order_id: int, items: list[LineItemInput]
    ) -> list[LineItem]:
        data = await self._client.put(
            f"/prescription-items/prescription/{order_id}/bulk",
            {"items": [line_item_input_to_raw(item) for item in items]},
        )
        return parse_rows(data, line_item_from_raw, "bulk update")
