"""LineItem - one row of a prescription or point-of-sale bill.

A line item references a Medicine by id and carries a copy of the display
fields captured when the medicine was selected. ``total_price`` is derived
and must equal ``round(quantity * unit_price - line_discount, 2)`` after
every mutation; all mutators go through ``recompute_total()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.model.value_objects import Money, Quantity, money2

# Medicine id of a row the operator has added but not bound to the catalog yet.
UNSELECTED = 0

FREE_TEXT_FIELDS = ("dosage", "frequency", "instructions")


@dataclass
class LineItem:
    """A draft or persisted line item.

    ``id`` is None for rows created locally and not yet saved. ``dispensed``
    belongs to the server and is only ever read here.
    """

    medicine_id: int = UNSELECTED
    quantity: int = 1
    unit_price: Money = field(default_factory=Money.zero)
    line_discount: Money = field(default_factory=Money.zero)
    total_price: Money = field(default_factory=Money.zero)
    medicine_name: str = ""
    strength: str = ""
    dosage_form: str = ""
    dosage: str = ""
    frequency: str = ""
    instructions: str = ""
    id: int | None = None
    dispensed: bool = False

    # --- Factories ------------------------------------------------------------

    @staticmethod
    def blank() -> LineItem:
        """An unselected placeholder row: quantity one, zero price."""
        return LineItem()

    @staticmethod
    def for_medicine(
        medicine: Medicine,
        quantity: int = 1,
        instructions: str = "",
    ) -> LineItem:
        item = LineItem(quantity=quantity, instructions=instructions)
        item.bind(medicine)
        return item

    # --- Properties -----------------------------------------------------------

    @property
    def is_selected(self) -> bool:
        return self.medicine_id > UNSELECTED

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)

    @property
    def gross_price(self) -> Money:
        return self.unit_price * self.quantity

    # --- Mutators -------------------------------------------------------------

    def bind(self, medicine: Medicine) -> None:
        """Bind this row to *medicine*, taking its price and display fields."""
        self.medicine_id = medicine.id
        self.medicine_name = medicine.name
        self.strength = medicine.strength
        self.dosage_form = medicine.dosage_form
        self.unit_price = medicine.unit_price
        self.line_discount = Money.zero()
        self.recompute_total()

    def unbind(self) -> None:
        """Revert to the unselected sentinel state."""
        self.medicine_id = UNSELECTED
        self.medicine_name = ""
        self.strength = ""
        self.dosage_form = ""
        self.unit_price = Money.zero()
        self.line_discount = Money.zero()
        self.recompute_total()

    def change_quantity(self, quantity: int) -> None:
        quantity = Quantity(quantity).value
        if self.line_discount > self.unit_price * quantity:
            raise ValidationError(
                f"Discount {self.line_discount} exceeds the line amount"
            )
        self.quantity = quantity
        self.recompute_total()

    def change_unit_price(self, price: Money) -> None:
        if price.is_zero:
            raise ValidationError("Unit price must be greater than 0")
        if self.line_discount > price * self.quantity:
            raise ValidationError(
                f"Discount {self.line_discount} exceeds the line amount"
            )
        self.unit_price = price
        self.recompute_total()

    def change_discount(self, discount: Money) -> None:
        if discount > self.gross_price:
            raise ValidationError(
                f"Discount {discount} exceeds the line amount {self.gross_price}"
            )
        self.line_discount = discount
        self.recompute_total()

    def set_text(self, field_name: str, value: str) -> None:
        if field_name not in FREE_TEXT_FIELDS:
            raise ValidationError(f"Unknown free-text field '{field_name}'")
        setattr(self, field_name, value)

    def recompute_total(self) -> None:
        gross = self.unit_price.amount * self.quantity
        self.total_price = Money(money2(gross - self.line_discount.amount))

    # --- Validation -----------------------------------------------------------

    def validation_errors(self, require_directions: bool = True) -> list[str]:
        """Field checks applied at commit time.

        Prescription rows need dosage and frequency; point-of-sale rows don't.
        """
        errors: list[str] = []
        if not self.is_selected:
            errors.append("Medicine is required")
        if self.quantity < 1:
            errors.append("Quantity must be greater than 0")
        if self.unit_price.is_zero:
            errors.append("Unit price must be greater than 0")
        if require_directions:
            if not self.dosage.strip():
                errors.append("Dosage is required")
            if not self.frequency.strip():
                errors.append("Frequency is required")
        return errors

    def to_input(self) -> LineItemInput:
        return LineItemInput(
            medicine_id=self.medicine_id,
            quantity=self.quantity,
            unit_price=self.unit_price,
            line_discount=self.line_discount,
            dosage=self.dosage,
            frequency=self.frequency,
            instructions=self.instructions,
        )


@dataclass(frozen=True)
class LineItemInput:
    """What the client sends on upsert: server-owned fields are omitted."""

    medicine_id: int
    quantity: int
    unit_price: Money
    line_discount: Money
    dosage: str
    frequency: str
    instructions: str
