"""CLI commands for prescription line items."""

from __future__ import annotations

import click

from rxdraft.application.dto import DraftDTO, to_draft_dto
from rxdraft.application.events import CommitCompleted, EventRecorder, StockWarning
from rxdraft.domain.exceptions import EntityNotFoundError
from rxdraft.infrastructure.bootstrap import Services
from rxdraft.infrastructure.cli.common import (
    parse_int,
    parse_pairs,
    resolve_medicine,
    run_with_services,
)


def _display_draft(dto: DraftDTO) -> None:
    """Shared formatting for displaying a draft and its totals."""
    click.echo(f"Prescription #{dto.order_id}  (draft={dto.status})")
    click.echo()
    click.echo(f"  {'#':<3} {'Item':<6} {'Medicine':<32} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*71}")
    for item in dto.items:
        item_id = str(item.item_id) if item.item_id else "new"
        flag = " (dispensed)" if item.dispensed else ""
        click.echo(
            f"  {item.position:<3} {item_id:<6} {item.medicine:<32} {item.quantity:>5} "
            f"{item.unit_price:>10} {item.total_price:>10}{flag}"
        )
    click.echo(f"  {'-'*71}")
    click.echo(f"  {'Total':<50} {'Rs.' + format(dto.pricing.total, '.2f'):>20}")
    if dto.pending_deletions:
        ids = ", ".join(str(i) for i in dto.pending_deletions)
        click.echo(f"  Pending deletions: {ids}")


@click.command("show")
@click.option("--prescription", "order_id", required=True, type=int, help="Prescription ID.")
def items_show(order_id: int) -> None:
    """Show the saved items of a prescription."""

    async def action(services: Services) -> DraftDTO:
        draft = await services.loader.handle(order_id)
        return to_draft_dto(draft, services.store_for(draft).pricing)

    _display_draft(run_with_services(action))


@click.command("validate")
@click.option("--prescription", "order_id", required=True, type=int, help="Prescription ID.")
def items_validate(order_id: int) -> None:
    """Check stock for every saved item of a prescription."""

    async def action(services: Services):
        return await services.stock.validate_order(order_id)

    unavailable = run_with_services(action)
    if not unavailable:
        click.echo("All items are available.")
        return
    click.echo(f"{len(unavailable)} item(s) have insufficient stock:")
    for item in unavailable:
        click.echo(f"  {item.medicine_name or item.medicine_id} x{item.quantity}")


@click.command("edit")
@click.option("--prescription", "order_id", required=True, type=int, help="Prescription ID.")
@click.option("--status", "order_status", default="PENDING", show_default=True,
              help="Current prescription status.")
@click.option("--add", "adds", multiple=True, help="Add 'Medicine:Qty'.")
@click.option("--remove", "removes", multiple=True, type=int, help="Remove item by ID.")
@click.option("--set-qty", "quantities", multiple=True, help="Set 'Position:Qty'.")
@click.option("--set-price", "prices", multiple=True, help="Set 'Position:UnitPrice'.")
def items_edit(
    order_id: int,
    order_status: str,
    adds: tuple[str, ...],
    removes: tuple[int, ...],
    quantities: tuple[str, ...],
    prices: tuple[str, ...],
) -> None:
    """Edit a prescription's items and save them.

    Positions refer to the rows shown by 'items show', after removals.
    """
    add_edits = [(name, parse_int(qty, "quantity")) for name, qty in parse_pairs(adds, "item")]
    qty_edits = [
        (parse_int(pos, "position"), parse_int(qty, "quantity"))
        for pos, qty in parse_pairs(quantities, "quantity")
    ]
    price_edits = [(parse_int(pos, "position"), price) for pos, price in parse_pairs(prices, "price")]

    async def action(services: Services):
        recorder = EventRecorder(services.notifier, StockWarning, CommitCompleted)
        draft = await services.loader.handle(order_id, order_status=order_status)
        store = services.store_for(draft)

        for item_id in removes:
            positions = [i for i, item in enumerate(store.items) if item.id == item_id]
            if not positions:
                raise EntityNotFoundError(f"Item {item_id} is not on prescription #{order_id}")
            store.remove_item(positions[0])
        for position, qty in qty_edits:
            if not store.set_quantity(position, qty):
                raise click.BadParameter(f"Quantity must be greater than 0, got {qty}")
        for position, price in price_edits:
            if not store.set_unit_price(position, price):
                raise click.BadParameter(f"Invalid unit price '{price}' for row {position}")
        for name, qty in add_edits:
            medicine = await resolve_medicine(services, name)
            store.add_medicine(medicine, qty)

        await store.wait_for_checks()
        result = await store.commit(services.committer)
        return to_draft_dto(draft, result.pricing), result, recorder

    dto, result, recorder = run_with_services(action)

    for warning in recorder.of_type(StockWarning):
        click.echo(f"Warning: {warning.message}", err=True)
    _display_draft(dto)
    click.echo()
    click.echo(result.summary())
    for outcome in result.failed_deletions:
        click.echo(f"  Failed to delete item ID {outcome.item_id}: {outcome.error}", err=True)
