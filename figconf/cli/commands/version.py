"""``fig version ...``: manage the configuration versions on this machine."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.markup import escape
from rich.table import Table

from figconf.cli.common import (
    ConfigPathOption,
    PollingIntervalOption,
    config_client,
    console,
    data_directory,
    resolve_version,
    run,
)
from figconf.cli.commands.manifest import render_mismatches
from figconf.core.errors import MissingFieldError, NoVersionSelectedError
from figconf.core.importer import ConfigurationImporter
from figconf.models.manifest import Manifest

logger = logging.getLogger(__name__)

version_app = typer.Typer(
    help="Manage the current configuration version on this machine.",
    no_args_is_help=True,
)


@version_app.command(name="set")
def set_cmd(
    version: str = typer.Argument(..., help="The version which should become active."),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Set the configuration version used by the local machine."""

    async def _set() -> None:
        client = config_client(config_path, polling_interval)
        with console.status(f"Validating version {escape(version)}..."):
            entry = await client.set_version(version)
        console.print(f"Configuration version updated to [bold green]{escape(entry.version)}[/bold green].")

    run(_set())


@version_app.command(name="list")
def list_cmd(
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """List the configuration versions available on the local machine."""

    async def _list() -> None:
        directory = data_directory(config_path, polling_interval)
        manifests = {m.version: m async for m in directory.list_manifests()}

        table = Table(title="Configuration Versions")
        table.add_column("Version", style="cyan")
        table.add_column("Applied On")
        table.add_column("In Cache", justify="center")

        deployed: set[str] = set()
        for entry in await directory.version_log.get_versions():
            deployed.add(entry.version)
            in_cache = "[green]Yes[/green]" if entry.version in manifests else "[red]No[/red]"
            table.add_row(escape(entry.version), entry.timestamp.strftime("%Y-%m-%dT%H:%M:%S"), in_cache)

        for name in sorted(v for v in manifests if v is not None and v not in deployed):
            table.add_row(escape(name), "[red bold]never[/red bold]", "[green]Yes[/green]")

        console.print(table)

    run(_list())


@version_app.command(name="import")
def import_cmd(
    path: Path = typer.Argument(Path("."), help="The directory containing the manifest to import."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing version with the same name."),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Import a configuration version for use on the local machine."""

    async def _import() -> None:
        directory = data_directory(config_path, polling_interval)
        importer = ConfigurationImporter()

        with console.status("Validating manifest...") as status:
            manifest = await Manifest.read_from_directory(path, directory.polling_interval)
            if manifest.version is None:
                raise MissingFieldError("version")
            manifest.validate_manifest()
            logger.info("Manifest is valid.")

            status.update("Validating files in manifest...")
            await importer.validate(manifest, path, directory.polling_interval)
            logger.info("Configuration files are valid.")

            status.update("Preparing data directory...")
            await directory.initialize()
            if not force and await directory.try_get_manifest(manifest.version) is not None:
                console.print(
                    "[red]This configuration version already exists.[/red] "
                    "Specify the '--force' flag to overwrite it."
                )
                raise typer.Exit(code=1)

            status.update("Importing configuration...")
            await importer.import_version(manifest, path, directory)

            status.update("Validating imported configuration...")
            client = config_client(directory.root, directory.polling_interval)
            imported = await client.get_version(manifest.version)
            await imported.verify()

        console.print(
            "Import completed successfully, use "
            f"[bold]fig version set {escape(manifest.version)}[/bold] to switch to this configuration."
        )

    run(_import())


@version_app.command(name="export")
def export_cmd(
    version: str = typer.Argument(None, help="The version to export (default: the active version)."),
    path: Path = typer.Argument(Path("."), help="The directory which should receive the configuration."),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Export a configuration version to a directory for viewing or editing."""

    async def _export() -> None:
        client = config_client(config_path, polling_interval)
        with console.status("Checking current version...") as status:
            selected = await resolve_version(client, version)
            logger.info("Loaded configuration version %s.", selected.version)
            status.update("Exporting configuration...")
            await ConfigurationImporter().export_version(selected.manifest, path, client.data_directory)
        console.print(f"Exported {len(selected.manifest.files)} configuration file(s) to {escape(str(path))}.")

    run(_export())


@version_app.command(name="remove")
def remove_cmd(
    version: str = typer.Argument(..., help="The version to remove."),
    force: bool = typer.Option(
        False, "--force", "-f",
        help="Remove the version even if it is active or its name does not match exactly.",
    ),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Remove a configuration version from the local machine."""

    async def _remove() -> None:
        directory = data_directory(config_path, polling_interval)
        if not force:
            current = await directory.version_log.get_current()
            manifest = await directory.get_manifest(version)
            if current is not None and current.version == manifest.version:
                console.print(
                    "[red]You have tried to remove the active configuration.[/red] "
                    "Run this command with the '--force' flag if you really wish to proceed."
                )
                raise typer.Exit(code=1)
            if manifest.version != version:
                console.print(
                    "[yellow]The configuration version you specified did not match its manifest "
                    f"version exactly[/yellow], use 'fig version remove \"{escape(str(manifest.version))}\"' to remove it."
                )
                raise typer.Exit(code=1)

        await directory.remove_manifest(version)
        console.print(
            f"Configuration version {escape(version)} has been removed, "
            "run 'fig prune' to clean up unused configuration files."
        )

    run(_remove())


@version_app.command(name="verify")
def verify_cmd(
    version: str = typer.Argument(None, help="The version to verify (default: the active version)."),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Check the cached files of a version against its manifest."""

    async def _verify() -> None:
        directory = data_directory(config_path, polling_interval)
        name = version
        if name is None:
            current = await directory.version_log.get_current()
            if current is None:
                raise NoVersionSelectedError()
            name = current.version

        selected = await config_client(directory.root, directory.polling_interval).get_version(name)
        selected.manifest.validate_manifest()
        logger.info("Manifest file loaded for version %s.", selected.version)

        mismatches = await selected.find_mismatches()
        if not mismatches:
            console.print("[green]All files matched their expected hashes.[/green]")
            return
        render_mismatches(mismatches)
        raise typer.Exit(code=1)

    run(_verify())
