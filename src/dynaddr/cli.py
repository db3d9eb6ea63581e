from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import click
from rich.console import Console
from rich.table import Table

from .cache import now_ms
from .cli_errors import ConfigError, RefreshFailedError, handle_cli_errors
from .config import AppSettings
from .constants import MSG_CLEAR_CACHE, MSG_FORCE_REFRESH
from .core import AddressService, create_service
from .logging_config import setup_logging

console = Console()
config = AppSettings()

MESSAGES = {
    "refreshServerAddressSuccess": "Server address refreshed successfully!",
    "refreshServerAddressFailed": "Failed to refresh server address!",
    "serverAddressCacheCleared": "Server address cache cleared.",
    "refreshing": "Refreshing...",
}


def _service(ctx: click.Context) -> AddressService:
    return create_service(ctx.obj["state_path"])


@click.group()
@click.version_option(package_name="dynaddr")
@click.option(
    "--state",
    "state_path",
    default=config.STATE_PATH,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Where the address configuration and cache are persisted.",
)
@click.option("--log-level", default=config.LOG_LEVEL, show_default=True)
@click.pass_context
def cli(ctx: click.Context, state_path: str, log_level: str) -> None:
    """
    dynaddr: resolve and refresh the backend server address.
    """
    setup_logging(log_level, config.MASK_SENSITIVE_DATA)
    ctx.ensure_object(dict)
    ctx.obj["state_path"] = state_path


async def _resolve_logic_async(service: AddressService) -> None:
    try:
        click.echo(service.resolve())
        # a stale hit leaves a refresh running; let it land before the process exits
        await service.controller.drain()
    finally:
        await service.aclose()


@cli.command()
@click.pass_context
@handle_cli_errors(context="Resolve")
def resolve(ctx: click.Context) -> None:
    """Print the server address requests would use right now."""
    service = _service(ctx)
    asyncio.run(_resolve_logic_async(service))


async def _refresh_logic_async(service: AddressService) -> bool:
    try:
        reply = await service.router.handle({"message": MSG_FORCE_REFRESH})
        return bool(reply.get("ok"))
    finally:
        await service.aclose()


@cli.command()
@click.pass_context
@handle_cli_errors(context="Refresh")
def refresh(ctx: click.Context) -> None:
    """Look up the server address now, even if the cached one is still valid."""
    service = _service(ctx)
    with console.status(MESSAGES["refreshing"]):
        ok = asyncio.run(_refresh_logic_async(service))

    if not ok:
        raise RefreshFailedError(MESSAGES["refreshServerAddressFailed"])

    click.echo(MESSAGES["refreshServerAddressSuccess"])
    click.echo(service.store.config.static_default_address)


@cli.command("clear-cache")
@click.pass_context
@handle_cli_errors(context="Clear cache")
def clear_cache(ctx: click.Context) -> None:
    """Forget the cached dynamic address."""
    service = _service(ctx)
    reply = asyncio.run(service.router.handle({"message": MSG_CLEAR_CACHE}))
    if not reply.get("ok"):
        raise ConfigError("Could not clear the server address cache")
    click.echo(MESSAGES["serverAddressCacheCleared"])


def _format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat(timespec="seconds")


@cli.command()
@click.pass_context
@handle_cli_errors(context="Status")
def status(ctx: click.Context) -> None:
    """Show the resolution settings and the cached address."""
    service = _service(ctx)
    cfg = service.store.config
    cache = service.store.cache
    entry = cache.get()

    table = Table(title="Server address")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Testing override", str(cfg.testing_override_active))
    table.add_row("Testing address", cfg.testing_address)
    table.add_row("Dynamic address", str(cfg.use_dynamic_address))
    table.add_row("Static default", cfg.static_default_address)
    table.add_row("Lookup URL", cfg.lookup_url)
    table.add_row("TTL (ms)", str(cfg.ttl_ms))
    if entry is None:
        table.add_row("Cached address", "-")
    else:
        age_s = entry.age_ms(now_ms()) / 1000
        state = "expired" if cache.is_expired() else "fresh"
        table.add_row("Cached address", entry.address)
        table.add_row(
            "Fetched at", f"{_format_timestamp(entry.fetched_at)} ({age_s:.0f}s ago, {state})"
        )
    console.print(table)


@cli.command("set")
@click.option("--dynamic/--no-dynamic", default=None, help="Use the remote lookup.")
@click.option("--testing/--no-testing", default=None, help="Force the testing address.")
@click.option("--server-address", type=str, help="Static default server address.")
@click.option("--ttl-ms", type=int, help="How long a looked-up address stays fresh.")
@click.option("--lookup-url", type=str, help="Endpoint returning {\"address\": ...}.")
@click.pass_context
@handle_cli_errors(context="Update settings")
def set_settings(
    ctx: click.Context,
    dynamic: bool | None,
    testing: bool | None,
    server_address: str | None,
    ttl_ms: int | None,
    lookup_url: str | None,
) -> None:
    """Change persisted resolution settings."""
    if ttl_ms is not None and ttl_ms < 0:
        raise ConfigError("--ttl-ms must not be negative")
    for name, value in (("--server-address", server_address), ("--lookup-url", lookup_url)):
        if value is not None and not value.strip():
            raise ConfigError(f"{name} must not be empty")

    service = _service(ctx)
    cfg = service.store.config
    if dynamic is not None:
        cfg.use_dynamic_address = dynamic
    if testing is not None:
        cfg.testing_override_active = testing
    if server_address is not None:
        cfg.static_default_address = server_address.strip()
    if ttl_ms is not None:
        cfg.ttl_ms = ttl_ms
    if lookup_url is not None:
        cfg.lookup_url = lookup_url.strip()
    service.store.save()
    click.echo("Settings saved.")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":  # pragma: no cover - module execution convenience
    main()
