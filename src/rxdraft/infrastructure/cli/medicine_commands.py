"""CLI commands for the medicine catalog."""

from __future__ import annotations

import click

from rxdraft.application.events import EventRecorder, SearchFailed, StockWarning
from rxdraft.infrastructure.bootstrap import Services
from rxdraft.infrastructure.cli.common import run_with_services


@click.command("search")
@click.argument("query")
def medicine_search(query: str) -> None:
    """Search the catalog for medicines matching QUERY."""

    async def action(services: Services):
        recorder = EventRecorder(services.notifier, SearchFailed)
        results = await services.search.search(query)
        return results, recorder.of_type(SearchFailed)

    results, failures = run_with_services(action)

    for failure in failures:
        click.echo(f"Warning: {failure.message}", err=True)
    if not results:
        click.echo("No medicines found.")
        return

    click.echo(f"{'ID':<6} {'Medicine':<36} {'Price':>10} {'Stock':>7}")
    click.echo("-" * 62)
    for m in results:
        click.echo(f"{m.id:<6} {m.display_name:<36} {str(m.unit_price):>10} {m.quantity:>7}")


@click.command("stock")
@click.option("--id", "medicine_id", required=True, type=int, help="Medicine ID.")
@click.option("--quantity", required=True, type=int, help="Requested quantity.")
def medicine_stock(medicine_id: int, quantity: int) -> None:
    """Check whether QUANTITY units of a medicine are in stock."""

    async def action(services: Services):
        recorder = EventRecorder(services.notifier, StockWarning)
        available = await services.stock.check_availability(medicine_id, quantity)
        return available, recorder.of_type(StockWarning)

    available, _ = run_with_services(action)

    if available is None:
        click.echo("Could not verify stock availability.")
    elif available:
        click.echo(f"Medicine #{medicine_id}: {quantity} unit(s) available.")
    else:
        click.echo(f"Medicine #{medicine_id}: insufficient stock for quantity {quantity}.")
