"""
Command-line interface for Version Service.

Running without a subcommand publishes the OS release and hardware
identity record to Redis, which is what the boot-time unit does.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from version_service import __version__
from version_service.config import Config, ConfigError
from version_service.core import ProvisioningReport, VersionService
from version_service.os_release import ReadError, format_os_release
from version_service.publisher import Publisher, StoreUnreachable, StoreWriteError

console = Console()

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _fatal(message: str) -> NoReturn:
    console.print(f"[red]Error: {escape(message)}[/]")
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="version-service")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--redis",
    "redis_addr",
    metavar="ADDR",
    help="Redis server address (host:port) [default: 192.168.7.1:6379]",
)
@click.option(
    "--hash",
    "hash_name",
    metavar="NAME",
    help="Redis hash name to store the values [default: os-release]",
)
@click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(
    ctx: click.Context,
    config: Path | None,
    redis_addr: str | None,
    hash_name: str | None,
    verbose: bool,
) -> None:
    """
    Version Service - OS release and hardware identity publisher.

    Reads /etc/os-release and the OCOTP unique-ID fuses and stores them
    in a Redis hash. Without a subcommand, runs 'publish'.
    """
    ctx.ensure_object(dict)

    try:
        cfg = Config.load(config)
    except ConfigError as e:
        _fatal(f"Invalid configuration: {e}")
    if redis_addr is not None:
        cfg.redis_addr = redis_addr
    if hash_name is not None:
        cfg.redis_hash = hash_name

    log_level = "DEBUG" if verbose else cfg.log_level
    setup_logging(log_level)

    ctx.obj["config"] = cfg
    ctx.obj["verbose"] = verbose

    if ctx.invoked_subcommand is None:
        ctx.invoke(publish)


@main.command()
@click.pass_context
def publish(ctx: click.Context) -> None:
    """
    Collect and publish the record to Redis.

    Exits non-zero if the release file is unreadable, the store is
    unreachable or a field write fails. Missing serial numbers only
    produce warnings.
    """
    config: Config = ctx.obj["config"]
    logger.info(f"version-service {__version__} starting")

    service = VersionService(config)
    try:
        report, result = service.run()
    except ReadError as e:
        _fatal(f"Failed to read OS release information: {e}")
    except (StoreUnreachable, StoreWriteError) as e:
        _fatal(str(e))

    if report.serials is not None:
        logger.info(f"Stored serial numbers in Redis hash '{config.redis_hash}'")
    console.print(
        f"[green]✓[/] Stored {result.fields_written} fields in Redis hash "
        f"'[cyan]{config.redis_hash}[/]'"
    )


@main.command()
@click.option(
    "--format",
    "-f",
    type=click.Choice(["pretty", "json", "env"]),
    default="pretty",
    help="Output format",
)
@click.pass_context
def show(ctx: click.Context, format: str) -> None:
    """
    Collect the record and display it without writing to Redis.
    """
    config: Config = ctx.obj["config"]
    service = VersionService(config)

    try:
        report = service.collect()
    except ReadError as e:
        _fatal(f"Failed to read OS release information: {e}")

    if format == "json":
        console.print_json(report.to_json())
    elif format == "env":
        click.echo(format_os_release(report.fields()), nl=False)
    else:
        _display_report(report)


def _display_report(report: ProvisioningReport) -> None:
    """Display the collected record and identifier provenance."""
    table = Table(title=f"Redis hash '{report.hash_name}'", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, value in report.fields().items():
        table.add_row(key, escape(value))

    console.print(table)

    ids = Table(title="Hardware identifiers", show_header=True)
    ids.add_column("Word", style="cyan")
    ids.add_column("Value")
    ids.add_column("Source", justify="center")

    for field, resolved in report.identifiers.items():
        if resolved.ok:
            ids.add_row(field.name, resolved.value, resolved.source)
        else:
            ids.add_row(field.name, "[red]✗[/]", "-")

    console.print(ids)

    if report.warnings:
        console.print()
        console.print("[yellow]Warnings:[/]")
        for warning in report.warnings:
            console.print(f"  • {escape(warning)}")


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show current configuration and store connection status."""
    config: Config = ctx.obj["config"]

    console.print()
    console.print(Panel.fit("[bold]Version Service Status[/]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Redis Address", config.redis_addr)
    table.add_row("Redis Hash", config.redis_hash)
    table.add_row("Release File", config.release_path)
    table.add_row("OTP CFG0", config.otp_cfg0_path)
    table.add_row("OTP CFG1", config.otp_cfg1_path)
    table.add_row("NVMEM Device", config.nvmem_path)
    table.add_row("Log Level", config.log_level)

    console.print(table)
    console.print()

    try:
        publisher = Publisher(config)
    except StoreUnreachable as e:
        _fatal(str(e))

    try:
        connected = publisher.test_connection()
    finally:
        publisher.close()

    if connected:
        console.print("[green]✓ Redis is reachable[/]")
    else:
        console.print("[red]✗ Redis is not reachable[/]")
        sys.exit(1)


@main.command("sources")
def list_sources() -> None:
    """List hardware identifier sources in priority order."""
    from version_service.sources import SOURCES

    table = Table(title="Identifier Sources", show_header=True)
    table.add_column("Priority", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for priority, (name, cls) in enumerate(SOURCES.items(), start=1):
        table.add_row(str(priority), name, cls.description)

    console.print()
    console.print(table)


@main.command("version", short_help="Display version information")
def version() -> None:
    """Display version information for Version Service."""
    console.print()
    console.print(
        Panel.fit(
            f"[bold blue]Version Service[/]\nVersion: [cyan]{__version__}[/]",
            border_style="blue",
            title="Version Information",
        )
    )
    console.print()

    table = Table(show_header=False, box=None)
    table.add_column("Component", style="dim", width=20)
    table.add_column("Version", style="cyan")

    table.add_row("Version Service", __version__)
    table.add_row("Python", sys.version.split()[0])

    console.print(table)
    console.print()


if __name__ == "__main__":
    main()
