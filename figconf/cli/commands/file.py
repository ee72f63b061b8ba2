"""``fig file ...``: tools for working with individual files."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from figconf.cli.common import (
    ConfigPathOption,
    PollingIntervalOption,
    config_client,
    console,
    resolve_version,
    run,
)
from figconf.core.checksums import DEFAULT_ALGORITHM, get_checksum, hash_stream

file_app = typer.Typer(help="Tools for working with files.", no_args_is_help=True)


@file_app.command(name="hash")
def hash_cmd(
    file: Path = typer.Argument(..., help="The file which should be hashed."),
    algorithm: str = typer.Option(DEFAULT_ALGORITHM, "--hash", help="The hash function to use."),
) -> None:
    """Hash a file and print its checksum."""
    if not file.is_file():
        console.print(f"[red]The file {file} does not exist.[/red]")
        raise typer.Exit(code=1)

    async def _hash() -> str:
        with open(file, "rb") as fh:
            return await hash_stream(get_checksum(algorithm), fh)

    checksum = run(_hash())
    console.print(f"Checksum: [bold yellow]{checksum}[/bold yellow]")


@file_app.command(name="cat")
def cat_cmd(
    file_name: str = typer.Argument(..., help="The name of the file in the configuration version."),
    version: str = typer.Option(None, "--version", "-v", help="The version to read from (default: active)."),
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Print a configuration file to stdout."""

    async def _cat() -> bytes:
        client = config_client(config_path, polling_interval)
        selected = await resolve_version(client, version)
        try:
            return await selected.read_file(file_name)
        except FileNotFoundError:
            console.print(f"[red]The file {file_name} is not part of version {selected.version}.[/red]")
            raise typer.Exit(code=1)

    content = run(_cat())
    sys.stdout.buffer.write(content)
    sys.stdout.flush()
