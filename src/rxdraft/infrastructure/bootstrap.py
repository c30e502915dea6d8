"""Composition root - wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from rxdraft.application.catalog_search import CatalogSearch
from rxdraft.application.commit_items import CommitItemsHandler
from rxdraft.application.draft_store import DraftLineItemStore
from rxdraft.application.events import Notifier
from rxdraft.application.generate_bill import GenerateBillHandler
from rxdraft.application.load_items import LoadDraftHandler
from rxdraft.application.stock_validator import StockValidator
from rxdraft.domain.model.draft import DraftState
from rxdraft.domain.service.pricing import PricingPolicy
from rxdraft.infrastructure.config import Settings
from rxdraft.infrastructure.http.api_client import ApiClient
from rxdraft.infrastructure.http.billing_service import HttpBillingService
from rxdraft.infrastructure.http.catalog_service import HttpCatalogService
from rxdraft.infrastructure.http.line_item_repository import HttpLineItemRepository


@dataclass
class Services:
    """Everything one editing session needs, sharing one HTTP client."""

    settings: Settings
    client: ApiClient
    notifier: Notifier
    catalog: HttpCatalogService
    items: HttpLineItemRepository
    billing: HttpBillingService
    search: CatalogSearch
    stock: StockValidator
    loader: LoadDraftHandler
    committer: CommitItemsHandler
    biller: GenerateBillHandler

    def store_for(self, draft: DraftState) -> DraftLineItemStore:
        return DraftLineItemStore(
            draft,
            notifier=self.notifier,
            policy=PricingPolicy.for_context(draft.context, self.settings.tax_rate),
            stock_validator=self.stock,
        )

    async def aclose(self) -> None:
        await self.client.aclose()


def build_services(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Services:
    settings = settings or Settings.from_env()
    client = ApiClient(settings, transport=transport)
    notifier = Notifier()
    catalog = HttpCatalogService(client)
    items = HttpLineItemRepository(client)
    billing = HttpBillingService(client)
    return Services(
        settings=settings,
        client=client,
        notifier=notifier,
        catalog=catalog,
        items=items,
        billing=billing,
        search=CatalogSearch(catalog, notifier, debounce_seconds=settings.search_debounce),
        stock=StockValidator(catalog, notifier),
        loader=LoadDraftHandler(items),
        committer=CommitItemsHandler(items),
        biller=GenerateBillHandler(billing),
    )
