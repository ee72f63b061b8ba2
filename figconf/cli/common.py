"""Shared CLI plumbing: common options, data directory wiring, error mapping."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from figconf.config import settings
from figconf.core.client import ConfigClient, ConfigVersion
from figconf.core.data_directory import DataDirectory
from figconf.core.errors import FigError

T = TypeVar("T")

EXIT_CANCELLED = 130

console = Console()
err_console = Console(stderr=True)

ConfigPathOption = typer.Option(
    None,
    "--config-path",
    help="The path to the configuration directory used by Fig (default: $FIG_CONFIG_DIR).",
)
PollingIntervalOption = typer.Option(
    None,
    "--polling-interval",
    help="Seconds between attempts to read from the filesystem when deconflicting with other apps.",
)


def data_directory(config_path: Path | None, polling_interval: float | None) -> DataDirectory:
    return DataDirectory(config_path or settings.config_dir, _interval(polling_interval))


def config_client(config_path: Path | None, polling_interval: float | None) -> ConfigClient:
    return ConfigClient(config_path or settings.config_dir, _interval(polling_interval))


def _interval(polling_interval: float | None) -> float:
    return settings.polling_interval if polling_interval is None else polling_interval


async def resolve_version(client: ConfigClient, version: str | None) -> ConfigVersion:
    """The named version, or the active one when *version* is None."""
    if version is None:
        return await client.get_current_version()
    return await client.get_version(version)


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, mapping failures onto exit codes.

    Domain errors exit 1 with a short message, cancellation exits 130, and
    anything else prints a full traceback and exits 1.
    """
    try:
        return asyncio.run(coro)
    except FigError as exc:
        err_console.print(f"[bold red]ERROR[/bold red]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except (KeyboardInterrupt, asyncio.CancelledError) as exc:
        err_console.print("[dim]Cancelled.[/dim]")
        raise typer.Exit(code=EXIT_CANCELLED) from exc
    except typer.Exit:
        raise
    except Exception as exc:
        err_console.print_exception()
        raise typer.Exit(code=1) from exc
