#!/usr/bin/env python
"""
Inspect and edit the wishlist from the command line.

Usage:
    python scripts/wishlist_cli.py show
    python scripts/wishlist_cli.py add prod-123 --identity user-42
    python scripts/wishlist_cli.py remove prod-123
    python scripts/wishlist_cli.py login-sync user-42

Every command builds the same store the API uses, so the local cache file
(WISHLIST_CACHE_PATH) and the remote backend come from the environment.
"""

from __future__ import annotations

import asyncio

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

load_dotenv()

from storefront.schemas.wishlist import NotificationLevel, WishlistSnapshot
from storefront.services.wishlist_service import (
    WishlistResources,
    open_wishlist_resources,
)
from storefront.settings import get_settings

console = Console()

identity_option = click.option(
    "--identity",
    default=None,
    help="Sign in as this identity before running the command.",
)


async def _open(identity: str | None) -> WishlistResources:
    resources = await open_wishlist_resources(get_settings())
    if identity:
        await resources.store.login(identity)
    return resources


def _render(snapshot: WishlistSnapshot, resources: WishlistResources) -> None:
    owner = getattr(snapshot.owner, "identity", "anonymous")
    table = Table(title=f"Wishlist ({owner}, {snapshot.session_state.value})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Product")
    for position, product_id in enumerate(snapshot.entries, start=1):
        table.add_row(str(position), product_id)
    console.print(table)

    if snapshot.pending_mutations:
        console.print(
            f"[yellow]{snapshot.pending_mutations} remote write(s) still pending[/yellow]"
        )

    for notification in resources.notifications.drain():
        style = "red" if notification.level is NotificationLevel.ERROR else "green"
        message = notification.title
        if notification.description:
            message = f"{message}: {notification.description}"
        console.print(f"[{style}]{message}[/{style}]")


async def _run(identity: str | None, action: str | None = None, product_id: str | None = None) -> None:
    resources = await _open(identity)
    try:
        if action == "add":
            await resources.store.add_entry(product_id)
        elif action == "remove":
            await resources.store.remove_entry(product_id)
        _render(resources.store.snapshot(), resources)
    finally:
        await resources.aclose()


@click.group()
def cli() -> None:
    """Wishlist maintenance commands."""


@cli.command()
@identity_option
def show(identity: str | None) -> None:
    """Print the current wishlist."""
    asyncio.run(_run(identity))


@cli.command()
@click.argument("product_id")
@identity_option
def add(product_id: str, identity: str | None) -> None:
    """Like PRODUCT_ID."""
    try:
        asyncio.run(_run(identity, "add", product_id))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="PRODUCT_ID") from exc


@cli.command()
@click.argument("product_id")
@identity_option
def remove(product_id: str, identity: str | None) -> None:
    """Unlike PRODUCT_ID."""
    try:
        asyncio.run(_run(identity, "remove", product_id))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="PRODUCT_ID") from exc


@cli.command("login-sync")
@click.argument("identity")
def login_sync(identity: str) -> None:
    """Merge the locally cached wishlist into IDENTITY's remote wishlist."""
    asyncio.run(_run(identity))


if __name__ == "__main__":
    cli()
