"""Application service: Generate Bill use case.

Settles a point-of-sale draft: checks the bill can be issued, prices it,
refuses an underpaid cash bill, and records it with the billing service.
Once recorded the draft takes the bill's status and is no longer editable.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from rxdraft.domain.exceptions import (
    BillGenerationFailedError,
    CommitInProgressError,
    CommitValidationError,
    EditingNotAllowedError,
    NothingToCommitError,
    ServiceError,
    ValidationError,
)
from rxdraft.domain.model.bill import (
    BillInput,
    BillLine,
    Customer,
    GeneratedBill,
    PaymentMethod,
)
from rxdraft.domain.model.draft import DraftState, DraftStatus, OrderContext
from rxdraft.domain.repository.billing_service import BillingService
from rxdraft.domain.service.pricing import PricingPolicy, calculate_pricing

logger = logging.getLogger(__name__)


class GenerateBillHandler:

    def __init__(self, billing: BillingService) -> None:
        self._billing = billing

    async def handle(
        self,
        draft: DraftState,
        customer: Customer,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        policy: PricingPolicy | None = None,
        discount: Decimal | None = None,
        received: Decimal | None = None,
    ) -> GeneratedBill:
        self._guard(draft)
        policy = policy or PricingPolicy.for_context(draft.context)
        bill = self._build(draft, customer, payment_method, policy, discount, received)

        draft.begin_saving()
        try:
            generated = await self._billing.generate_bill(bill)
        except (ServiceError, asyncio.TimeoutError) as exc:
            logger.error("Bill generation failed: %s", exc)
            raise BillGenerationFailedError(
                f"Failed to generate bill: {exc}. The bill is kept; try again."
            ) from exc
        finally:
            draft.finish_saving()

        draft.order_status = generated.status
        logger.info(
            "Generated bill %s for %s: total %s by %s",
            generated.bill_number, customer.name, bill.total, payment_method.value,
        )
        return generated

    @staticmethod
    def _guard(draft: DraftState) -> None:
        if draft.context is not OrderContext.POINT_OF_SALE:
            raise ValidationError("Only walk-in bills can be generated")
        if draft.status is DraftStatus.SAVING:
            raise CommitInProgressError("The bill is already being generated")
        if not draft.is_editing_allowed:
            raise EditingNotAllowedError(
                f"Bill is already '{draft.order_status}' and cannot be generated again."
            )
        if not draft.valid_items:
            raise NothingToCommitError("Please add items to the bill")

    @staticmethod
    def _build(
        draft: DraftState,
        customer: Customer,
        payment_method: PaymentMethod,
        policy: PricingPolicy,
        discount: Decimal | None,
        received: Decimal | None,
    ) -> BillInput:
        items = draft.valid_items
        errors: list[str] = []
        for position, item in enumerate(items, start=1):
            problems = item.validation_errors(require_directions=False)
            if problems:
                errors.append(f"Item {position}: {', '.join(problems)}")
        if errors:
            raise CommitValidationError(errors)

        if payment_method is PaymentMethod.CASH:
            pricing = calculate_pricing(items, policy, discount, received or Decimal("0"))
            if pricing.is_underpaid:
                raise ValidationError("Received amount is less than total")
            paid, change = pricing.received, pricing.change
        else:
            pricing = calculate_pricing(items, policy, discount)
            paid, change = pricing.total, Decimal("0.00")

        return BillInput(
            customer=customer,
            lines=tuple(BillLine.from_item(item) for item in items),
            subtotal=pricing.subtotal,
            discount=pricing.discount or Decimal("0.00"),
            tax=pricing.tax or Decimal("0.00"),
            total=pricing.total,
            payment_method=payment_method,
            received=paid,  # type: ignore[arg-type]
            change=change,  # type: ignore[arg-type]
        )
