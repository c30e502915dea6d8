import click

from rxdraft.infrastructure.cli.bill_commands import bill_generate, bill_total
from rxdraft.infrastructure.cli.item_commands import items_edit, items_show, items_validate
from rxdraft.infrastructure.cli.medicine_commands import medicine_search, medicine_stock
from rxdraft.infrastructure.logging_setup import configure_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """rxdraft - pharmacy line-item drafting and settlement"""
    configure_logging(verbose)


@cli.group()
def medicine() -> None:
    """Search the medicine catalog."""


@cli.group()
def items() -> None:
    """Edit prescription line items."""


@cli.group()
def bill() -> None:
    """Walk-in point-of-sale bills."""


# Register subcommands
medicine.add_command(medicine_search)
medicine.add_command(medicine_stock)
items.add_command(items_edit)
items.add_command(items_show)
items.add_command(items_validate)
bill.add_command(bill_generate)
bill.add_command(bill_total)
