"""Main Typer application: imports and registers all CLI commands.

Entry point: ``fig`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import typer

from figconf.cli.commands.data_dir import init_cmd, prune_cmd
from figconf.cli.commands.file import file_app
from figconf.cli.commands.manifest import manifest_app
from figconf.cli.commands.version import version_app
from figconf.cli.commands.watch import healthchecks_app, watch_cmd
from figconf.config import settings
from figconf.logging_config import setup_logging

app = typer.Typer(
    name="fig",
    help="Fig: versioned, checksum-verified configuration for this machine.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging verbosity."),
) -> None:
    setup_logging(log_level)


# Register subcommands
app.command(name="init", help="Initialize your Fig data directory.")(init_cmd)
app.command(name="prune", help="Remove cached files no longer referenced by any manifest.")(prune_cmd)
app.command(name="watch", help="Watch the version log for changes.")(watch_cmd)
app.add_typer(version_app, name="version")
app.add_typer(manifest_app, name="manifest")
app.add_typer(file_app, name="file")
app.add_typer(healthchecks_app, name="healthchecks")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
