"""HTTP implementation of CatalogService."""

from __future__ import annotations

from rxdraft.domain.exceptions import ServiceError
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.repository.catalog_service import CatalogService
from rxdraft.infrastructure.http.api_client import ApiClient
from rxdraft.infrastructure.http.serialization import (
    line_item_from_raw,
    medicine_from_raw,
    parse_rows,
)


class HttpCatalogService(CatalogService):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def search(self, query: str) -> list[Medicine]:
        data = await self._client.get("/medicines/search/suggestions", {"query": query})
        return parse_rows(data, medicine_from_raw, "medicine search")

    async def check_availability(self, medicine_id: int, quantity: int) -> bool:
        data = await self._client.get(
            f"/medicines/{medicine_id}/availability", {"quantity": quantity}
        )
        if isinstance(data, dict):
            data = data.get("available")
        if not isinstance(data, bool):
            raise ServiceError(f"Unexpected availability response: {data!r}")
        return data

    async def list_unavailable_items(self, order_id: int) -> list[LineItem]:
        data = await self._client.get(
            f"/prescription-items/prescription/{order_id}/validate-availability"
        )
        return parse_rows(data, line_item_from_raw, "availability check")
