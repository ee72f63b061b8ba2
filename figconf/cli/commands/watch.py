"""``fig watch`` and ``fig healthchecks watch``: long-running monitors.

Both run until interrupted with Ctrl+C.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.live import Live
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from figconf.cli.common import (
    ConfigPathOption,
    PollingIntervalOption,
    config_client,
    console,
    resolve_version,
    run,
)
from figconf.config import settings
from figconf.healthchecks import HealthcheckRunner, default_registry
from figconf.models.healthchecks import HEALTHCHECK_FILENAME, Healthcheck, HealthcheckResult

logger = logging.getLogger(__name__)

healthchecks_app = typer.Typer(help="Run the healthchecks shipped with a version.", no_args_is_help=True)


class LiveTableReporter:
    """Keeps a rich ``Live`` table of the latest result per healthcheck."""

    def __init__(self, live: Live) -> None:
        self._live = live
        self._results: dict[str, HealthcheckResult] = {}

    async def report(self, healthcheck: Healthcheck, result: HealthcheckResult) -> None:
        self._results[str(healthcheck.id)] = result
        self._live.update(self.render())

    def render(self) -> Table:
        table = Table(title="Healthchecks")
        table.add_column("Healthcheck", style="cyan")
        table.add_column("Status")
        for name, result in self._results.items():
            message = result.message or ("Healthy" if result.is_healthy else "Unhealthy")
            table.add_row(name, Text(message, style="green" if result.is_healthy else "red"))
        return table


def watch_cmd(
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Print each new configuration version as it is selected."""

    async def _watch() -> None:
        client = config_client(config_path, polling_interval)
        with console.status("Watching the version log..."):
            async for entry in client.get_version_stream():
                console.print(
                    f"Most recent version is [bold]{escape(entry.version)}[/bold] "
                    f"(applied at {entry.timestamp.isoformat()} with checksum {entry.manifest_checksum})"
                )

    run(_watch())


@healthchecks_app.command(name="watch")
def healthchecks_watch_cmd(
    version: str = typer.Option(None, "--version", "-v", help="The version whose healthchecks to run."),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Run a version's healthchecks and show their status live."""

    async def _watch() -> None:
        client = config_client(config_path, polling_interval)
        selected = await resolve_version(client, version)
        logger.info("Loaded configuration version %s.", selected.version)

        try:
            manifest = await selected.get_healthcheck_manifest()
        except FileNotFoundError:
            console.print(
                f"[red]No {HEALTHCHECK_FILENAME} file was found in config version "
                f"{escape(str(selected.version))}.[/red]"
            )
            raise typer.Exit(code=1)
        if not manifest.healthchecks:
            console.print(f"[red]No healthchecks were defined in the {HEALTHCHECK_FILENAME} file.[/red]")
            raise typer.Exit(code=1)

        registry = default_registry(http_timeout=settings.http_timeout)
        try:
            with Live(Table(title="Healthchecks"), console=console) as live:
                runner = HealthcheckRunner(registry, LiveTableReporter(live))
                await runner.run(manifest)
        finally:
            await registry.aclose()

    run(_watch())
