"""Thin async wrapper around ``httpx.AsyncClient`` for the pharmacy API.

Every transport, timeout or HTTP status failure is re-raised as
``ServiceError`` so callers deal with one exception type and never see
httpx internals.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from rxdraft.domain.exceptions import ServiceError
from rxdraft.infrastructure.config import Settings

logger = logging.getLogger(__name__)


class ApiClient:

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if settings.api_token:
            headers["Authorization"] = f"Bearer {settings.api_token}"
        self._client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            headers=headers,
            timeout=settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, params: dict | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, payload: Any) -> Any:
        return await self._request("POST", path, json=payload)

    async def put(self, path: str, payload: Any) -> Any:
        return await self._request("PUT", path, json=payload)

    async def delete(self, path: str) -> None:
        await self._request("DELETE", path)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ServiceError(f"{method} {path} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise ServiceError(
                f"{method} {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ServiceError(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError(f"{method} {path} returned invalid JSON") from exc
