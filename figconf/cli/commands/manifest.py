"""``fig manifest ...``: author and check manifest files."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.table import Table

from figconf.cli.common import PollingIntervalOption, console, run
from figconf.config import settings
from figconf.core.checksums import DEFAULT_ALGORITHM
from figconf.core.importer import ConfigurationImporter
from figconf.models.manifest import MANIFEST_FILENAME, Manifest

logger = logging.getLogger(__name__)

manifest_app = typer.Typer(help="Manage your Fig manifest files.", no_args_is_help=True)


def render_mismatches(mismatches: list[tuple[str | None, str | None, str]]) -> None:
    """Print a table of files whose true checksum differs from the manifest."""
    table = Table(title="Checksum Mismatches")
    table.add_column("File", style="bold blue")
    table.add_column("Expected Hash", style="blue")
    table.add_column("True Hash", style="bold red")
    for file_name, expected, actual in mismatches:
        table.add_row(str(file_name), str(expected), actual)
    console.print("[red]The following files had checksums which did not match the manifest[/red]")
    console.print(table)


@manifest_app.command(name="build")
def build_cmd(
    path: Path = typer.Argument(Path("."), help="The directory containing the configuration files."),
    version: str = typer.Argument(
        None, help="The human readable version for the manifest (default: a UTC timestamp)."
    ),
    algorithm: str = typer.Option(DEFAULT_ALGORITHM, "--hash", help="The hash algorithm used for file checksums."),
    pattern: str = typer.Option("*", "--filter", help="The pattern used to select the files included."),
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Build a manifest file for a configuration directory."""

    async def _build() -> None:
        interval = settings.polling_interval if polling_interval is None else polling_interval
        name = version or datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        with console.status("Calculating checksums for files..."):
            manifest = await ConfigurationImporter().build_manifest(path, name, algorithm, pattern, interval)
            await manifest.write(path / MANIFEST_FILENAME, interval)
        console.print(
            f"Wrote {MANIFEST_FILENAME} for version [bold]{name}[/bold] "
            f"with {len(manifest.files)} file(s), checksum [yellow]{manifest.get_checksum()}[/yellow]."
        )

    run(_build())


@manifest_app.command(name="verify")
def verify_cmd(
    path: Path = typer.Argument(Path("."), help="The directory containing the manifest."),
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Check the files in a directory against its manifest."""

    async def _verify() -> None:
        interval = settings.polling_interval if polling_interval is None else polling_interval
        manifest = await Manifest.read_from_directory(path, interval)
        manifest.validate_manifest()
        logger.info("Manifest file passed validation.")

        hashes = await ConfigurationImporter().get_true_file_hashes(manifest, path, interval)
        mismatches = [
            (file.file_name, file.checksum, true_checksum)
            for file, true_checksum in hashes
            if file.checksum != true_checksum
        ]
        if not mismatches:
            console.print("[green]All files matched their expected hashes.[/green]")
            return
        render_mismatches(mismatches)
        raise typer.Exit(code=1)

    run(_verify())
