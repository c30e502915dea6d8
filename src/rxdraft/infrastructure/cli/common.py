"""Helpers shared by the CLI command modules."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from rxdraft.domain.exceptions import CommitFailedError, DomainException, EntityNotFoundError
from rxdraft.domain.model.medicine import Medicine
from rxdraft.infrastructure.bootstrap import Services, build_services

T = TypeVar("T")


def run_with_services(action: Callable[[Services], Awaitable[T]]) -> T:
    """Build the services, run *action* on a fresh event loop, close the client."""

    async def runner() -> T:
        services = build_services()
        try:
            return await action(services)
        finally:
            await services.aclose()

    try:
        return asyncio.run(runner())
    except CommitFailedError as exc:
        echo_deletion_outcomes(exc.deleted_ids, exc.deletion_failures)
        raise click.ClickException(str(exc))
    except DomainException as exc:
        raise click.ClickException(str(exc))


def echo_deletion_outcomes(deleted_ids: list[int], failures: list) -> None:
    if deleted_ids:
        ids = ", ".join(str(i) for i in deleted_ids)
        click.echo(f"Deleted item(s): {ids}", err=True)
    for outcome in failures:
        click.echo(f"  Failed to delete item ID {outcome.item_id}: {outcome.error}", err=True)
    if failures:
        click.echo(
            "Item changes were not saved. "
            "Run the edit again with --remove for the failed ids.",
            err=True,
        )


async def resolve_medicine(services: Services, name: str) -> Medicine:
    """Exact (case-insensitive) name match first, else the best search hit."""
    matches = await services.catalog.search(name)
    for medicine in matches:
        if medicine.name.lower() == name.lower():
            return medicine
    if matches:
        return matches[0]
    raise EntityNotFoundError(f"Medicine not found: '{name}'")


def parse_pairs(raw: tuple[str, ...], label: str) -> list[tuple[str, str]]:
    """Parse repeated 'KEY:VALUE' options, splitting on the last colon."""
    pairs: list[tuple[str, str]] = []
    for pair in raw:
        if ":" not in pair:
            raise click.BadParameter(f"Invalid {label} '{pair}'. Expected 'KEY:VALUE'.")
        key, value = pair.rsplit(":", 1)
        pairs.append((key.strip(), value.strip()))
    return pairs


def parse_int(value: str, what: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise click.BadParameter(f"Invalid {what} '{value}'.")
