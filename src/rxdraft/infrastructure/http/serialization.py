"""Mapping between the API's camelCase JSON and domain objects."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from rxdraft.domain.exceptions import ServiceError, ValidationError
from rxdraft.domain.model.bill import BillInput, GeneratedBill
from rxdraft.domain.model.line_item import LineItem, LineItemInput
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.model.value_objects import Money, money2

T = TypeVar("T")

# What a row of the wrong shape raises while being mapped.
MALFORMED_ROW = (KeyError, TypeError, ValueError, AttributeError, ValidationError)


def parse_rows(data: Any, parse: Callable[[dict], T], what: str) -> list[T]:
    """Map a JSON list with *parse*, reporting any malformed row as ServiceError."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ServiceError(f"Malformed {what} response: expected a list")
    try:
        return [parse(raw) for raw in data]
    except MALFORMED_ROW as exc:
        raise ServiceError(f"Malformed {what} response: {exc!r}") from exc


def medicine_from_raw(raw: dict) -> Medicine:
    return Medicine(
        id=int(raw["id"]),
        name=raw.get("name") or "",
        unit_price=Money(money2(raw.get("unitPrice") or 0)),
        quantity=int(raw.get("quantity") or raw.get("stock") or 0),
        strength=raw.get("strength") or "",
        dosage_form=raw.get("dosageForm") or raw.get("form") or "",
        manufacturer=raw.get("manufacturer") or "",
        category=raw.get("category") or "",
        is_active=bool(raw.get("isActive", True)),
        reorder_level=int(raw.get("reorderLevel") or 0),
    )


def line_item_from_raw(raw: dict) -> LineItem:
    """Build a persisted row; the server's totalPrice is taken as canonical."""
    medicine = raw.get("medicine") or {}
    unit_price = Money(money2(raw.get("unitPrice") or 0))
    quantity = int(raw.get("quantity") or 1)
    item = LineItem(
        id=raw.get("id"),
        medicine_id=int(raw.get("medicineId") or medicine.get("id") or 0),
        quantity=quantity,
        unit_price=unit_price,
        line_discount=Money(money2(raw.get("discount") or 0)),
        medicine_name=raw.get("medicineName") or medicine.get("name") or "",
        strength=raw.get("strength") or medicine.get("strength") or "",
        dosage_form=raw.get("dosageForm") or medicine.get("dosageForm") or "",
        dosage=raw.get("dosage") or "",
        frequency=raw.get("frequency") or "",
        instructions=raw.get("instructions") or "",
        dispensed=bool(raw.get("isDispensed", False)),
    )
    if raw.get("totalPrice") is not None:
        item.total_price = Money(money2(raw["totalPrice"]))
    else:
        item.recompute_total()
    return item


def line_item_input_to_raw(item: LineItemInput) -> dict:
    raw = {
        "medicineId": item.medicine_id,
        "quantity": item.quantity,
        "unitPrice": float(item.unit_price.amount),
        "dosage": item.dosage,
        "frequency": item.frequency,
        "instructions": item.instructions,
    }
    if not item.line_discount.is_zero:
        raw["discount"] = float(item.line_discount.amount)
    return raw


def bill_input_to_raw(bill: BillInput) -> dict:
    customer = {"name": bill.customer.name}
    if bill.customer.phone:
        customer["phone"] = bill.customer.phone
    if bill.customer.email:
        customer["email"] = bill.customer.email
    return {
        "customer": customer,
        "items": [
            {
                "medicineId": line.medicine_id,
                "medicineName": line.medicine_name,
                "strength": line.strength,
                "form": line.dosage_form,
                "unitPrice": float(line.unit_price.amount),
                "quantity": line.quantity,
                "discount": float(line.discount.amount),
                "subtotal": float(line.subtotal.amount),
            }
            for line in bill.lines
        ],
        "subtotal": float(bill.subtotal),
        "discount": float(bill.discount),
        "tax": float(bill.tax),
        "total": float(bill.total),
        "paymentMethod": bill.payment_method.value,
        "receivedAmount": float(bill.received),
        "changeAmount": float(bill.change),
    }


def generated_bill_from_raw(raw: Any, sent: BillInput) -> GeneratedBill:
    """The server echoes the bill; a missing total or status falls back to what was sent."""
    if not isinstance(raw, dict):
        raise ServiceError("Malformed bill response: expected an object")
    try:
        return GeneratedBill(
            bill_number=str(raw["billNumber"]),
            status=raw.get("status") or "PAID",
            total=money2(raw["total"]) if raw.get("total") is not None else sent.total,
            id=raw.get("id"),
        )
    except MALFORMED_ROW as exc:
        raise ServiceError(f"Malformed bill response: {exc!r}") from exc
