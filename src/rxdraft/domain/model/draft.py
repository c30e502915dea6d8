"""DraftState aggregate - the line items being edited for one order.

The draft owns an ordered list of line items (insertion order is display
order) and a tombstone set of persisted item ids marked for deletion.
A tombstoned id is never present in the active list; ``remove()`` moves
an item from one to the other in a single step.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from rxdraft.domain.exceptions import (
    EditingNotAllowedError,
    EntityNotFoundError,
    ValidationError,
)
from rxdraft.domain.model.line_item import LineItem


class DraftStatus(Enum):
    EMPTY = "EMPTY"
    EDITING = "EDITING"
    SAVING = "SAVING"


class OrderContext(Enum):
    PRESCRIPTION = "PRESCRIPTION"
    POINT_OF_SALE = "POINT_OF_SALE"


# Order statuses under which a prescription's items may still change.
EDITABLE_STATUSES = frozenset({"PENDING", "Pending Review"})
# Walk-in bills are open until they are generated.
POS_OPEN_STATUS = "OPEN"


class TombstoneSet:
    """Ids of persisted line items to delete on the next commit.

    Iterates in the order ids were added so deletions are issued, and
    their outcomes reported, deterministically.
    """

    def __init__(self, ids: Iterable[int] = ()) -> None:
        self._ids: dict[int, None] = dict.fromkeys(ids)

    def add(self, item_id: int) -> None:
        if not item_id:
            raise ValidationError("Only persisted items can be tombstoned")
        self._ids[item_id] = None

    def discard(self, item_id: int) -> None:
        self._ids.pop(item_id, None)

    def clear(self) -> None:
        self._ids.clear()

    def snapshot(self) -> list[int]:
        return list(self._ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"TombstoneSet({self.snapshot()!r})"


@dataclass
class DraftState:
    """Aggregate root for an in-progress order or bill.

    Use ``DraftState.open()`` when a view opens; it sets the initial status
    from the seed items. The ``__init__`` stays simple so tests and the
    commit handler can build drafts directly.
    """

    order_id: int | None
    context: OrderContext = OrderContext.PRESCRIPTION
    order_status: str = "PENDING"
    items: list[LineItem] = field(default_factory=list)
    tombstones: TombstoneSet = field(default_factory=TombstoneSet)
    status: DraftStatus = DraftStatus.EMPTY

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def open(
        order_id: int | None,
        items: Iterable[LineItem] = (),
        context: OrderContext = OrderContext.PRESCRIPTION,
        order_status: str | None = None,
    ) -> DraftState:
        if order_status is None:
            order_status = (
                POS_OPEN_STATUS if context is OrderContext.POINT_OF_SALE else "PENDING"
            )
        draft = DraftState(
            order_id=order_id,
            context=context,
            order_status=order_status,
            items=list(items),
        )
        if draft.items:
            draft.status = DraftStatus.EDITING
        return draft

    # --- Queries --------------------------------------------------------------

    @property
    def is_editing_allowed(self) -> bool:
        if self.context is OrderContext.POINT_OF_SALE:
            return self.order_status == POS_OPEN_STATUS
        return self.order_status in EDITABLE_STATUSES

    @property
    def requires_directions(self) -> bool:
        """Prescription rows need dosage and frequency before commit."""
        return self.context is OrderContext.PRESCRIPTION

    @property
    def valid_items(self) -> list[LineItem]:
        """Rows bound to a medicine; unselected rows never get committed."""
        return [item for item in self.items if item.is_selected]

    @property
    def has_changes_to_commit(self) -> bool:
        return bool(self.valid_items) or len(self.tombstones) > 0

    def item_at(self, index: int) -> LineItem:
        if not 0 <= index < len(self.items):
            raise EntityNotFoundError(
                f"No line item at position {index} (draft has {len(self.items)})"
            )
        return self.items[index]

    # --- Mutations ------------------------------------------------------------

    def append(self, item: LineItem) -> LineItem:
        self._assert_mutable()
        self.items.append(item)
        self.status = DraftStatus.EDITING
        return item

    def remove(self, index: int) -> LineItem:
        """Drop the row at *index*; tombstone it if it was persisted."""
        self._assert_mutable()
        item = self.item_at(index)
        if item.is_persisted:
            self.tombstones.add(item.id)  # type: ignore[arg-type]
        del self.items[index]
        self.status = DraftStatus.EDITING
        return item

    def touch(self) -> None:
        """Mark the draft as being edited after an in-place row change."""
        self._assert_mutable()
        self.status = DraftStatus.EDITING

    # --- Commit lifecycle -----------------------------------------------------

    def begin_saving(self) -> None:
        self.status = DraftStatus.SAVING

    def finish_saving(self) -> None:
        self.status = DraftStatus.EDITING

    def replace_items(self, items: Iterable[LineItem]) -> None:
        """Swap in the server's canonical items after a commit."""
        self.items = list(items)

    # --- Invariants -----------------------------------------------------------

    def assert_consistent(self) -> None:
        """Raise ValidationError if a tombstoned id is still active."""
        overlap = [
            item.id for item in self.items
            if item.is_persisted and item.id in self.tombstones
        ]
        if overlap:
            raise ValidationError(
                f"Items {overlap} are both active and marked for deletion"
            )

    def _assert_mutable(self) -> None:
        if self.status is DraftStatus.SAVING:
            raise EditingNotAllowedError("Draft is being saved; wait for the commit to finish")
