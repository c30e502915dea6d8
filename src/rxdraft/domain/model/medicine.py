"""Medicine - a catalog entry owned by the external inventory system.

A Medicine is an immutable snapshot fetched from the catalog. The draft
never mutates it; line items copy the fields they need at selection time.
"""

from __future__ import annotations

from dataclasses import dataclass

from rxdraft.domain.model.value_objects import Money


@dataclass(frozen=True)
class Medicine:
    id: int
    name: str
    unit_price: Money
    quantity: int = 0  # units in stock when the snapshot was taken
    strength: str = ""
    dosage_form: str = ""
    manufacturer: str = ""
    category: str = ""
    is_active: bool = True
    reorder_level: int = 0

    @property
    def display_name(self) -> str:
        """e.g. ``Paracetamol 500mg (Tablet)``."""
        label = f"{self.name} {self.strength}".strip()
        if self.dosage_form:
            label = f"{label} ({self.dosage_form})"
        return label

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0
