"""Application service: Commit Items use case.

Synchronizes a draft with the remote item store in strictly ordered phases:

  1. Guard      - refuse if editing is not allowed, a commit is running, or
                  there is nothing to save (checked before any call).
  2. Delete     - delete every tombstoned id; each outcome is collected,
                  a failure never stops the remaining deletions.
  3. Validate   - field checks on every selected row; any failure aborts
                  before the upsert (completed deletions stay done).
  4. Upsert     - one bulk call with all selected rows.
  5. Reconcile  - the server's rows replace the draft's rows and totals are
                  recomputed from them.

The draft goes SAVING for the duration and back to EDITING afterwards,
whether the commit succeeded or not.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from rxdraft.application.dto import CommitResult, DeletionOutcome
from rxdraft.domain.exceptions import (
    CommitInProgressError,
    CommitValidationError,
    EditingNotAllowedError,
    NothingToCommitError,
    ServiceError,
    UpsertFailedError,
    ValidationError,
)
from rxdraft.domain.model.draft import DraftState, DraftStatus
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.repository.line_item_repository import LineItemRepository
from rxdraft.domain.service.pricing import PricingPolicy, calculate_pricing

logger = logging.getLogger(__name__)


class CommitItemsHandler:

    def __init__(self, item_repo: LineItemRepository) -> None:
        self._item_repo = item_repo

    async def handle(
        self,
        draft: DraftState,
        policy: PricingPolicy | None = None,
        discount: Decimal | None = None,
        received: Decimal | None = None,
    ) -> CommitResult:
        self._guard(draft)
        policy = policy or PricingPolicy.for_context(draft.context)

        draft.begin_saving()
        try:
            outcomes = await self._delete_tombstoned(draft)
            failures = [o for o in outcomes if not o.ok]
            deleted = [o.item_id for o in outcomes if o.ok]

            valid_items = draft.valid_items
            self._validate(valid_items, draft.requires_directions, failures, deleted)

            saved: list[LineItem] = []
            if valid_items:
                saved = await self._upsert(draft, valid_items, failures, deleted)

            draft.replace_items(saved)
        finally:
            draft.finish_saving()

        pricing = calculate_pricing(draft.items, policy, discount, received)
        result = CommitResult(
            items=list(draft.items),
            pricing=pricing,
            deleted_ids=deleted,
            failed_deletions=failures,
        )
        logger.info(
            "Committed order #%s: %d item(s) saved, %d deleted, %d deletion failure(s)",
            draft.order_id, len(saved), len(result.deleted_ids), len(failures),
        )
        return result

    # --- Phases ---------------------------------------------------------------

    @staticmethod
    def _guard(draft: DraftState) -> None:
        if draft.order_id is None:
            raise ValidationError("No order id provided")
        if draft.status is DraftStatus.SAVING:
            raise CommitInProgressError(f"Order #{draft.order_id} is already being saved")
        if not draft.is_editing_allowed:
            raise EditingNotAllowedError(
                f"Cannot modify items. Order #{draft.order_id} is "
                f"'{draft.order_status}', not pending."
            )
        if not draft.has_changes_to_commit:
            raise NothingToCommitError("No valid items to save")

    async def _delete_tombstoned(self, draft: DraftState) -> list[DeletionOutcome]:
        outcomes: list[DeletionOutcome] = []
        for item_id in draft.tombstones:
            outcomes.append(await self._delete_one(item_id))
        draft.tombstones.clear()
        return outcomes

    async def _delete_one(self, item_id: int) -> DeletionOutcome:
        try:
            await self._item_repo.delete_item(item_id)
        except (ServiceError, asyncio.TimeoutError) as exc:
            logger.warning("Failed to delete item %s: %s", item_id, exc)
            return DeletionOutcome(item_id, error=str(exc) or "delete failed")
        logger.debug("Deleted item %s", item_id)
        return DeletionOutcome(item_id)

    @staticmethod
    def _validate(
        items: list[LineItem],
        require_directions: bool,
        failures: list[DeletionOutcome],
        deleted: list[int],
    ) -> None:
        errors: list[str] = []
        for position, item in enumerate(items, start=1):
            problems = item.validation_errors(require_directions)
            if problems:
                errors.append(f"Item {position}: {', '.join(problems)}")
        if errors:
            raise CommitValidationError(errors, failures, deleted)

    async def _upsert(
        self,
        draft: DraftState,
        items: list[LineItem],
        failures: list[DeletionOutcome],
        deleted: list[int],
    ) -> list[LineItem]:
        try:
            return await self._item_repo.upsert_items(
                draft.order_id,  # type: ignore[arg-type]
                [item.to_input() for item in items],
            )
        except (ServiceError, asyncio.TimeoutError) as exc:
            logger.error("Bulk save for order #%s failed: %s", draft.order_id, exc)
            raise UpsertFailedError(
                f"Failed to save items: {exc}. Your edits are kept; save again to retry.",
                failures,
                deleted,
            ) from exc
