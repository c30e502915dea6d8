"""Walk-in bill settlement: what is sent when a point-of-sale draft is billed.

A ``BillInput`` is a frozen snapshot of the draft's selected rows and the
bill-level totals at the moment the operator settles it. The server answers
with a ``GeneratedBill`` carrying the bill number and its new status.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.line_item import LineItem
from rxdraft.domain.model.value_objects import Money


class PaymentMethod(Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    UPI = "UPI"
    CHECK = "CHECK"


@dataclass(frozen=True)
class Customer:
    name: str
    phone: str = ""
    email: str = ""

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValidationError("Please enter customer name")


@dataclass(frozen=True)
class BillLine:
    medicine_id: int
    medicine_name: str
    strength: str
    dosage_form: str
    unit_price: Money
    quantity: int
    discount: Money
    subtotal: Money

    @staticmethod
    def from_item(item: LineItem) -> BillLine:
        return BillLine(
            medicine_id=item.medicine_id,
            medicine_name=item.medicine_name,
            strength=item.strength,
            dosage_form=item.dosage_form,
            unit_price=item.unit_price,
            quantity=item.quantity,
            discount=item.line_discount,
            subtotal=item.total_price,
        )


@dataclass(frozen=True)
class BillInput:
    """The settled bill. For non-cash payments ``received`` equals ``total``."""

    customer: Customer
    lines: tuple[BillLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_method: PaymentMethod
    received: Decimal
    change: Decimal


@dataclass(frozen=True)
class GeneratedBill:
    bill_number: str
    status: str
    total: Decimal
    id: int | str | None = None
