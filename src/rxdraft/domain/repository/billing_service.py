"""Port for the walk-in billing service (external to this system)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from rxdraft.domain.model.bill import BillInput, GeneratedBill


class BillingService(ABC):

    @abstractmethod
    async def generate_bill(self, bill: BillInput) -> GeneratedBill:
        """Record a settled bill; returns the server's bill number and status."""
