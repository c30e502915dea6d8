"""CLI commands for walk-in (point-of-sale) bills."""

from __future__ import annotations

from decimal import Decimal

import click

from rxdraft.application.draft_store import DraftLineItemStore
from rxdraft.application.events import EventRecorder, StockWarning
from rxdraft.domain.exceptions import ValidationError
from rxdraft.domain.model.bill import Customer, PaymentMethod
from rxdraft.domain.model.draft import DraftState, OrderContext
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.model.value_objects import Money
from rxdraft.domain.service.pricing import PricingPolicy
from rxdraft.infrastructure.bootstrap import Services
from rxdraft.infrastructure.cli.common import parse_int, resolve_medicine, run_with_services
from rxdraft.infrastructure.config import Settings


@click.command("total")
@click.option("--item", "items", multiple=True, required=True,
              help="Line as 'UnitPrice:Qty' or 'UnitPrice:Qty:Discount'.")
@click.option("--discount", default="0", show_default=True, help="Bill discount.")
@click.option("--received", default=None, help="Cash received.")
def bill_total(items: tuple[str, ...], discount: str, received: str | None) -> None:
    """Compute a walk-in bill's subtotal, tax, total and change."""
    settings = Settings.from_env()
    store = DraftLineItemStore(
        DraftState.open(None, context=OrderContext.POINT_OF_SALE),
        policy=PricingPolicy.point_of_sale(settings.tax_rate),
    )

    for number, raw in enumerate(items, start=1):
        parts = raw.split(":")
        if len(parts) not in (2, 3):
            raise click.BadParameter(f"Invalid item '{raw}'. Expected 'UnitPrice:Qty[:Discount]'.")
        store.add_blank_item()
        row = number - 1
        try:
            price = Money.of(parts[0])
        except ValidationError:
            raise click.BadParameter(f"Invalid unit price '{parts[0]}'.")
        store.select_medicine(row, Medicine(id=number, name=f"Item {number}", unit_price=price))
        if not store.set_quantity(row, parse_int(parts[1], "quantity")):
            raise click.BadParameter(f"Quantity must be greater than 0 in '{raw}'.")
        if len(parts) == 3 and not store.set_line_discount(row, parts[2]):
            raise click.BadParameter(f"Invalid discount in '{raw}'.")

    if not store.set_discount(discount):
        raise click.BadParameter(f"Invalid discount '{discount}'.")
    if received is not None and not store.set_received(received):
        raise click.BadParameter(f"Invalid received amount '{received}'.")

    p = store.pricing
    click.echo(f"{'Subtotal':<12} {p.subtotal:>12.2f}")
    click.echo(f"{'Discount':<12} {p.discount or Decimal('0'):>12.2f}")
    click.echo(f"{'Tax':<12} {p.tax or Decimal('0'):>12.2f}")
    click.echo(f"{'Total':<12} {p.total:>12.2f}")
    if p.change is not None:
        click.echo(f"{'Received':<12} {p.received:>12.2f}")
        click.echo(f"{'Change':<12} {p.change:>12.2f}")
        if p.is_underpaid:
            click.echo("Received amount is less than total.", err=True)


@click.command("generate")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--phone", default="", help="Customer phone number.")
@click.option("--payment", "payment_method", default=PaymentMethod.CASH.value, show_default=True,
              type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
              help="Payment method.")
@click.option("--item", "items", multiple=True, required=True,
              help="Line as 'Medicine:Qty' or 'Medicine:Qty:Discount'.")
@click.option("--discount", default="0", show_default=True, help="Bill discount.")
@click.option("--received", default=None, help="Cash received (cash payments).")
def bill_generate(
    customer: str,
    phone: str,
    payment_method: str,
    items: tuple[str, ...],
    discount: str,
    received: str | None,
) -> None:
    """Price a walk-in bill against the catalog and record it."""
    try:
        buyer = Customer(name=customer, phone=phone)
    except ValidationError as exc:
        raise click.BadParameter(str(exc))

    lines = []
    for raw in items:
        parts = raw.split(":")
        if len(parts) not in (2, 3) or not parts[0].strip():
            raise click.BadParameter(f"Invalid item '{raw}'. Expected 'Medicine:Qty[:Discount]'.")
        line_discount = parts[2] if len(parts) == 3 else None
        lines.append((parts[0].strip(), parse_int(parts[1], "quantity"), line_discount))

    async def action(services: Services):
        recorder = EventRecorder(services.notifier, StockWarning)
        draft = DraftState.open(None, context=OrderContext.POINT_OF_SALE)
        store = services.store_for(draft)

        for name, qty, line_discount in lines:
            medicine = await resolve_medicine(services, name)
            item = store.add_medicine(medicine, qty)
            row = next(i for i, row_item in enumerate(store.items) if row_item is item)
            if line_discount is not None and not store.set_line_discount(row, line_discount):
                raise click.BadParameter(f"Invalid discount '{line_discount}' for {name}.")
        if not store.set_discount(discount):
            raise click.BadParameter(f"Invalid discount '{discount}'.")
        if received is not None and not store.set_received(received):
            raise click.BadParameter(f"Invalid received amount '{received}'.")

        await store.wait_for_checks()
        generated = await store.generate_bill(
            services.biller,
            buyer,
            PaymentMethod(payment_method.upper()),
        )
        return generated, store.pricing, recorder

    generated, pricing, recorder = run_with_services(action)

    for warning in recorder.of_type(StockWarning):
        click.echo(f"Warning: {warning.message}", err=True)
    click.echo(f"Bill {generated.bill_number} generated ({generated.status}) for {buyer.name}")
    click.echo(f"{'Items':<12} {pricing.unit_count:>12}")
    click.echo(f"{'Total':<12} {generated.total:>12.2f}")
    if pricing.change is not None:
        click.echo(f"{'Change':<12} {pricing.change:>12.2f}")
