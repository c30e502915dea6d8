"""Change notifications published by the drafting engine.

Callers (a UI, the CLI) subscribe to an event type and receive each
published event synchronously, in the order it was published. Events are
plain frozen dataclasses so they can be compared in tests.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from rxdraft.domain.model.bill import GeneratedBill
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.service.pricing import PricingBreakdown


@dataclass(frozen=True)
class PricingChanged:
    breakdown: PricingBreakdown


@dataclass(frozen=True)
class SearchResultsChanged:
    query: str
    results: tuple[Medicine, ...]


@dataclass(frozen=True)
class SearchFailed:
    """Advisory: the catalog search could not be completed."""

    query: str
    message: str


@dataclass(frozen=True)
class StockWarning:
    """Advisory: the requested quantity may not be satisfiable."""

    medicine_id: int
    medicine_name: str
    quantity: int

    @property
    def message(self) -> str:
        return f"{self.medicine_name} has insufficient stock for quantity {self.quantity}"


@dataclass(frozen=True)
class CommitCompleted:
    summary: str
    failed_deletion_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class BillGenerated:
    bill: GeneratedBill


Handler = Callable[[Any], None]


class Notifier:
    """Minimal publish/subscribe hub keyed by event class."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        """Register *handler*; returns a callable that unsubscribes it."""
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def publish(self, event: object) -> None:
        for handler in list(self._handlers[type(event)]):
            handler(event)


class EventRecorder:
    """Collects every published event of the given types, in order.

    Handy for the CLI, which prints warnings after an operation finishes.
    """

    def __init__(self, notifier: Notifier, *event_types: type) -> None:
        self.events: list[object] = []
        for event_type in event_types:
            notifier.subscribe(event_type, self.events.append)

    def of_type(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]
