"""Application service: Draft Line-Item Store.

Owns one ``DraftState`` for the lifetime of an editing view and is the only
way the operator's actions reach it. Every mutation is synchronous, keeps
each row's ``total_price`` consistent, and publishes a ``PricingChanged``
event with freshly computed totals.

Rejected input (non-positive quantity or price, an oversized discount, an
unknown text field) is a no-op: the method returns False and the row keeps
its previous value. Stock checks triggered by a selection or quantity change
run in the background on the current event loop and only ever warn.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from decimal import Decimal

from rxdraft.application.commit_items import CommitItemsHandler
from rxdraft.application.dto import CommitResult
from rxdraft.application.events import (
    BillGenerated,
    CommitCompleted,
    Notifier,
    PricingChanged,
)
from rxdraft.application.generate_bill import GenerateBillHandler
from rxdraft.application.stock_validator import StockValidator
from rxdraft.domain.exceptions import CommitFailedError, ValidationError
from rxdraft.domain.model.bill import Customer, GeneratedBill, PaymentMethod
from rxdraft.domain.model.draft import DraftState, OrderContext
from rxdraft.domain.model.line_item import FREE_TEXT_FIELDS, LineItem
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.model.value_objects import Money, Quantity, to_decimal
from rxdraft.domain.service.pricing import (
    PricingBreakdown,
    PricingPolicy,
    calculate_pricing,
)

logger = logging.getLogger(__name__)

Amount = str | int | float | Decimal


class DraftLineItemStore:

    def __init__(
        self,
        draft: DraftState,
        notifier: Notifier | None = None,
        policy: PricingPolicy | None = None,
        stock_validator: StockValidator | None = None,
    ) -> None:
        self.draft = draft
        self.notifier = notifier or Notifier()
        self._policy = policy or PricingPolicy.for_context(draft.context)
        self._stock_validator = stock_validator
        self._discount: Decimal | None = None
        self._received: Decimal | None = None
        self._pending_checks: set[asyncio.Task] = set()

    # --- Read access ----------------------------------------------------------

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self.draft.items)

    @property
    def pricing(self) -> PricingBreakdown:
        return calculate_pricing(
            self.draft.items, self._policy, self._discount, self._received
        )

    def subscribe(self, event_type: type, handler: Callable) -> Callable[[], None]:
        return self.notifier.subscribe(event_type, handler)

    # --- Row mutations --------------------------------------------------------

    def add_blank_item(self) -> LineItem:
        item = self.draft.append(LineItem.blank())
        self._changed()
        return item

    def add_medicine(self, medicine: Medicine, quantity: Amount = 1) -> LineItem:
        """Append a row for *quantity* units of *medicine*.

        On a walk-in bill a medicine already on the bill gets its row
        quantity raised instead of a second row.
        """
        units = Quantity.parse(quantity).value
        existing = self._bill_row_for(medicine.id)
        if existing is not None:
            self.draft.touch()
            return self._grow(existing, units)
        item = self.add_blank_item()
        self.select_medicine(len(self.draft.items) - 1, medicine)
        if units != item.quantity:
            item.change_quantity(units)
            self._changed()
            self._schedule_stock_check(item)
        return item

    def select_medicine(self, index: int, medicine: Medicine) -> LineItem:
        """Bind row *index* to *medicine*, copying its price and labels.

        On a walk-in bill, picking a medicine that another row already holds
        folds this row into that one and returns it.
        """
        item = self.draft.item_at(index)
        self.draft.touch()
        existing = self._bill_row_for(medicine.id, exclude=item)
        if existing is not None:
            self.draft.remove(index)
            return self._grow(existing, item.quantity)
        item.bind(medicine)
        if not item.dosage.strip() and medicine.dosage_form:
            item.dosage = f"Take as directed with {medicine.dosage_form}"
        if not item.frequency.strip():
            item.frequency = "As needed"
        self._changed()
        self._schedule_stock_check(item)
        return item

    def clear_selection(self, index: int) -> LineItem:
        item = self.draft.item_at(index)
        self.draft.touch()
        item.unbind()
        self._changed()
        return item

    def set_quantity(self, index: int, quantity: Amount) -> bool:
        item = self.draft.item_at(index)
        self.draft.touch()
        try:
            item.change_quantity(Quantity.parse(quantity).value)
        except ValidationError as exc:
            logger.debug("Rejected quantity %r for row %d: %s", quantity, index, exc)
            return False
        self._changed()
        self._schedule_stock_check(item)
        return True

    def set_unit_price(self, index: int, price: Amount) -> bool:
        """Override the row's price; the catalog price is only a default."""
        item = self.draft.item_at(index)
        self.draft.touch()
        if not item.is_selected:
            logger.debug("Ignoring price for unselected row %d", index)
            return False
        try:
            amount = to_decimal(price)
            if amount <= 0:
                raise ValidationError("Unit price must be greater than 0")
            item.change_unit_price(Money(amount))
        except ValidationError as exc:
            logger.debug("Rejected unit price %r for row %d: %s", price, index, exc)
            return False
        self._changed()
        return True

    def set_line_discount(self, index: int, discount: Amount) -> bool:
        item = self.draft.item_at(index)
        self.draft.touch()
        if not item.is_selected:
            return False
        try:
            item.change_discount(Money(to_decimal(discount)))
        except ValidationError as exc:
            logger.debug("Rejected discount %r for row %d: %s", discount, index, exc)
            return False
        self._changed()
        return True

    def set_free_text(self, index: int, field_name: str, value: str) -> bool:
        if field_name not in FREE_TEXT_FIELDS:
            logger.debug("Ignoring unknown text field %r", field_name)
            return False
        item = self.draft.item_at(index)
        self.draft.touch()
        item.set_text(field_name, value)
        self._changed()
        return True

    def remove_item(self, index: int) -> LineItem:
        """Remove row *index*; a persisted row is tombstoned for the next commit."""
        item = self.draft.remove(index)
        if item.is_persisted:
            logger.info("Item %s marked for deletion; save to confirm", item.id)
        self._changed()
        return item

    # --- Bill-level inputs (point of sale) ------------------------------------

    def set_discount(self, amount: Amount | None) -> bool:
        if amount is None:
            self._discount = None
        else:
            try:
                value = to_decimal(amount)
            except ValidationError:
                return False
            if value < 0:
                return False
            self._discount = value
        self._changed()
        return True

    def set_received(self, amount: Amount | None) -> bool:
        if amount is None:
            self._received = None
        else:
            try:
                value = to_decimal(amount)
            except ValidationError:
                return False
            if value < 0:
                return False
            self._received = value
        self._changed()
        return True

    # --- Commit ---------------------------------------------------------------

    async def commit(self, handler: CommitItemsHandler) -> CommitResult:
        """Run the commit protocol and publish the reconciled totals.

        If the commit fails after the deletion phase, ids whose deletion failed
        are tombstoned again so the next save retries them.
        """
        try:
            result = await handler.handle(
                self.draft, self._policy, self._discount, self._received
            )
        except CommitFailedError as exc:
            self.requeue_failed_deletions(exc)
            raise
        finally:
            self._changed()
        self.notifier.publish(
            CommitCompleted(
                summary=result.summary(),
                failed_deletion_ids=tuple(result.failed_deletion_ids),
            )
        )
        return result

    async def generate_bill(
        self,
        handler: GenerateBillHandler,
        customer: Customer,
        payment_method: PaymentMethod = PaymentMethod.CASH,
    ) -> GeneratedBill:
        """Settle a walk-in bill with the current discount and cash received."""
        try:
            bill = await handler.handle(
                self.draft, customer, payment_method,
                self._policy, self._discount, self._received,
            )
        finally:
            self._changed()
        self.notifier.publish(BillGenerated(bill))
        return bill

    def requeue_failed_deletions(
        self, outcome: CommitResult | CommitFailedError
    ) -> list[int]:
        """Tombstone again the ids whose deletion failed, for another attempt."""
        active = {item.id for item in self.draft.items if item.is_persisted}
        requeued = []
        for item_id in outcome.failed_deletion_ids:
            if item_id not in active and item_id not in self.draft.tombstones:
                self.draft.tombstones.add(item_id)
                requeued.append(item_id)
        if requeued:
            self.draft.touch()
        return requeued

    # --- Background stock checks ----------------------------------------------

    async def wait_for_checks(self) -> None:
        """Wait for every stock check scheduled so far."""
        while self._pending_checks:
            await asyncio.gather(*list(self._pending_checks), return_exceptions=True)

    def _schedule_stock_check(self, item: LineItem) -> None:
        if self._stock_validator is None or not item.is_selected:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; skipping stock check for %s", item.medicine_id)
            return
        task = loop.create_task(
            self._stock_validator.check_availability(
                item.medicine_id, item.quantity, item.medicine_name
            )
        )
        self._pending_checks.add(task)
        task.add_done_callback(self._check_finished)

    def _check_finished(self, task: asyncio.Task) -> None:
        self._pending_checks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Stock check crashed", exc_info=task.exception())

    def _bill_row_for(
        self, medicine_id: int, exclude: LineItem | None = None
    ) -> LineItem | None:
        if self.draft.context is not OrderContext.POINT_OF_SALE:
            return None
        for item in self.draft.items:
            if item is not exclude and item.is_selected and item.medicine_id == medicine_id:
                return item
        return None

    def _grow(self, item: LineItem, units: int) -> LineItem:
        item.change_quantity(item.quantity + units)
        logger.debug("Raised %s to %d unit(s)", item.medicine_name, item.quantity)
        self._changed()
        self._schedule_stock_check(item)
        return item

    def _changed(self) -> None:
        self.notifier.publish(PricingChanged(self.pricing))
