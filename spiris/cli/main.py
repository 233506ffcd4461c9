"""Spiris CLI.

Usage:
    spiris auth-url
    spiris exchange CODE --verifier VERIFIER
    spiris refresh
    spiris list customers [--page N] [--page-size N] [--all] [--limit N]
    spiris get invoices INVOICE_ID
    spiris resources

Exit codes: 0=success, 1=error, 2=rate_limit
"""

# Load .env file before any other imports
from dotenv import load_dotenv

load_dotenv()

import asyncio
import json
import logging
from typing import Annotated, Any

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from spiris.auth import OAuth2Handler, TokenHolder, load_token, save_token
from spiris.client import SpirisClient
from spiris.config import get_settings
from spiris.core.errors import RateLimitError, SpirisError
from spiris.endpoints import Capability, ResourceEndpoint
from spiris.observability import setup_logging

# Create CLI app
app = typer.Typer(
    name="spiris",
    help="Spiris (Visma eAccounting) API CLI",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def _setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.WARNING if quiet else (logging.DEBUG if verbose else logging.INFO)
    setup_logging(
        level=level,
        quiet=quiet,
        handler=RichHandler(console=err_console, show_path=False),
        force=True,
    )


def _fail(message: str, code: int = 1) -> typer.Exit:
    err_console.print(f"[red]{message}[/red]")
    return typer.Exit(code=code)


def _exit_for(error: SpirisError) -> typer.Exit:
    if isinstance(error, RateLimitError):
        hint = f" (retry after {error.retry_after:.0f}s)" if error.retry_after else ""
        err_console.print(f"[yellow]Rate limit hit{hint}[/yellow]")
        return typer.Exit(code=2)
    return _fail(f"Error: {error}")


def _oauth_handler() -> OAuth2Handler:
    settings = get_settings()
    try:
        return OAuth2Handler(settings.oauth2_config())
    except SpirisError as e:
        raise _fail(str(e)) from e


def _token_holder() -> TokenHolder:
    settings = get_settings()
    try:
        token = load_token(settings.token_file)
    except SpirisError as e:
        raise _fail(str(e)) from e
    if token is None:
        raise _fail("Not authenticated. Run `spiris auth-url`, then `spiris exchange`.")
    if token.is_expired():
        raise _fail("Access token expired. Run `spiris refresh`.")
    return TokenHolder(token)


def _endpoint(client: SpirisClient, resource: str) -> ResourceEndpoint:
    name = resource.replace("-", "_").lower()
    if name not in SpirisClient.resource_names():
        raise _fail(f"Unknown resource: {resource}. See `spiris resources`.")
    return getattr(client, name)


def _dump(item: Any) -> str:
    if isinstance(item, BaseModel):
        item = item.model_dump(by_alias=True, exclude_none=True, mode="json")
    return json.dumps(item, ensure_ascii=False, default=str)


@app.command("auth-url")
def auth_url() -> None:
    """Print the authorization URL and the PKCE verifier to keep for `exchange`."""
    url, state, verifier = _oauth_handler().authorize_url()

    err_console.print("[bold]Open this URL and approve access:[/bold]")
    typer.echo(url)
    err_console.print(f"State: {state}")
    err_console.print("[bold]PKCE verifier (pass to `spiris exchange --verifier`):[/bold]")
    typer.echo(verifier)


@app.command()
def exchange(
    code: Annotated[str, typer.Argument(help="Authorization code from the redirect")],
    verifier: Annotated[str, typer.Option("--verifier", help="PKCE verifier printed by auth-url")],
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
) -> None:
    """Exchange an authorization code for a token and save it."""
    _setup_logging(quiet=quiet)
    handler = _oauth_handler()

    try:
        token = asyncio.run(handler.exchange_code(code, verifier))
    except SpirisError as e:
        raise _exit_for(e) from e

    settings = get_settings()
    save_token(settings.token_file, token)
    console.print(f"[green]Token saved to {settings.token_file}[/green]")
    console.print(f"Expires: {token.expires_at.isoformat()}")


@app.command()
def refresh(
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
) -> None:
    """Refresh the saved token."""
    _setup_logging(quiet=quiet)
    settings = get_settings()
    handler = _oauth_handler()

    try:
        token = load_token(settings.token_file)
    except SpirisError as e:
        raise _fail(str(e)) from e
    if token is None:
        raise _fail("No saved token. Run `spiris auth-url`, then `spiris exchange`.")

    try:
        token = asyncio.run(TokenHolder(token).refresh(handler))
    except SpirisError as e:
        raise _exit_for(e) from e

    save_token(settings.token_file, token)
    console.print(f"[green]Token refreshed, expires {token.expires_at.isoformat()}[/green]")


@app.command("list")
def list_items(
    resource: Annotated[str, typer.Argument(help="Resource name, e.g. customers")],
    page: Annotated[int, typer.Option("--page", help="Page index (0-based)")] = 0,
    page_size: Annotated[int | None, typer.Option("--page-size", help="Items per page")] = None,
    all_pages: Annotated[bool, typer.Option("--all", "-a", help="Stream every page")] = False,
    limit: Annotated[int | None, typer.Option("--limit", help="Stop after N items")] = None,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
) -> None:
    """List a resource as JSON lines.

    Examples:
        spiris list customers
        spiris list invoices --all --limit 500
        spiris list vat-codes --page-size 100
    """
    _setup_logging(quiet=quiet, verbose=verbose)
    settings = get_settings()
    holder = _token_holder()
    size = page_size or settings.page_size

    async def run() -> tuple[list[Any], int | None]:
        async with SpirisClient(holder, settings.client_config()) as client:
            endpoint = _endpoint(client, resource)
            if all_pages:
                items = await endpoint.stream(page_size=size).collect(limit=limit)
                return items, None
            result = await endpoint.list(page=page, page_size=size)
            items = list(result.items)
            return (items[:limit] if limit is not None else items), result.total_item_count

    try:
        items, total = asyncio.run(run())
    except SpirisError as e:
        raise _exit_for(e) from e

    for item in items:
        typer.echo(_dump(item))

    if not quiet:
        summary = f"{len(items)} {resource}"
        if total is not None:
            summary += f" (page {page}, {total} total)"
        err_console.print(f"[green]{summary}[/green]")


@app.command()
def get(
    resource: Annotated[str, typer.Argument(help="Resource name, e.g. invoices")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
) -> None:
    """Fetch one item as JSON."""
    _setup_logging(quiet=quiet)
    settings = get_settings()
    holder = _token_holder()

    async def run() -> Any:
        async with SpirisClient(holder, settings.client_config()) as client:
            return await _endpoint(client, resource).get(item_id)

    try:
        item = asyncio.run(run())
    except SpirisError as e:
        raise _exit_for(e) from e

    typer.echo(_dump(item))


@app.command()
def resources() -> None:
    """Show every resource and the operations it supports."""
    table = Table(title="Spiris resources")
    table.add_column("Name", style="bold")
    table.add_column("Path")
    table.add_column("Operations")

    for name in SpirisClient.resource_names():
        declared = getattr(SpirisClient, name)
        ops = [cap.value for cap in Capability if cap in declared.capabilities]
        table.add_row(name, f"/{declared.path}", ", ".join(ops))

    console.print(table)


if __name__ == "__main__":
    app()
