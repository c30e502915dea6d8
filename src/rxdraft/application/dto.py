"""Data Transfer Objects - plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rxdraft.domain.model.draft import DraftState
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.service.pricing import PricingBreakdown


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of deleting one tombstoned item: ``error`` is None on success."""

    item_id: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CommitResult:
    """Output of a successful commit.

    ``items`` are the server's canonical rows and already replace the
    draft's items. ``failed_deletions`` lists tombstones the server refused;
    those rows stay deleted locally and can be re-queued for another try.
    """

    items: list[LineItem]
    pricing: PricingBreakdown
    deleted_ids: list[int] = field(default_factory=list)
    failed_deletions: list[DeletionOutcome] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_deletions)

    @property
    def failed_deletion_ids(self) -> list[int]:
        return [outcome.item_id for outcome in self.failed_deletions]

    def summary(self) -> str:
        parts = [f"Items saved successfully! Total: Rs.{self.pricing.total:.2f}"]
        if self.deleted_ids:
            parts.append(f"{len(self.deleted_ids)} item(s) deleted.")
        if self.failed_deletions:
            ids = ", ".join(str(i) for i in self.failed_deletion_ids)
            parts.append(
                f"Failed to delete item(s) {ids}; re-queue them and save again to retry."
            )
        return " ".join(parts)


@dataclass(frozen=True)
class LineItemDTO:
    """Output: a single line item as displayed to the user."""

    position: int
    item_id: int | None
    medicine: str
    quantity: int
    unit_price: str  # formatted, e.g. "Rs.15.00"
    total_price: str
    dosage: str
    frequency: str
    dispensed: bool


@dataclass(frozen=True)
class DraftDTO:
    """Output: a draft and its totals as displayed to the user."""

    order_id: int | None
    status: str
    items: list[LineItemDTO]
    pending_deletions: list[int]
    pricing: PricingBreakdown


def to_draft_dto(draft: DraftState, pricing: PricingBreakdown) -> DraftDTO:
    return DraftDTO(
        order_id=draft.order_id,
        status=draft.status.value,
        items=[
            LineItemDTO(
                position=index,
                item_id=item.id,
                medicine=_label(item),
                quantity=item.quantity,
                unit_price=str(item.unit_price),
                total_price=str(item.total_price),
                dosage=item.dosage,
                frequency=item.frequency,
                dispensed=item.dispensed,
            )
            for index, item in enumerate(draft.items)
        ],
        pending_deletions=draft.tombstones.snapshot(),
        pricing=pricing,
    )


def _label(item: LineItem) -> str:
    if not item.is_selected:
        return "(not selected)"
    label = f"{item.medicine_name} {item.strength}".strip()
    return f"{label} ({item.dosage_form})" if item.dosage_form else label
