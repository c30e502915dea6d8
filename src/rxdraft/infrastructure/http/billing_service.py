"""HTTP implementation of BillingService (walk-in billing API)."""

from __future__ import annotations

from rxdraft.domain.model.bill import BillInput, GeneratedBill
from rxdraft.domain.repository.billing_service import BillingService
from rxdraft.infrastructure.http.api_client import ApiClient
from rxdraft.infrastructure.http.serialization import (
    bill_input_to_raw,
    generated_bill_from_raw,
)

BASE_PATH = "/pharmacist/manual-billing"


class HttpBillingService(BillingService):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def generate_bill(self, bill: BillInput) -> GeneratedBill:
        data = await self._client.post(f"{BASE_PATH}/generate-bill", bill_input_to_raw(bill))
        return generated_bill_from_raw(data, bill)
