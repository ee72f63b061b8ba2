"""``fig init`` and ``fig prune``: data directory housekeeping."""

from __future__ import annotations

import logging
from pathlib import Path

from figconf.cli.common import ConfigPathOption, PollingIntervalOption, console, data_directory, run

logger = logging.getLogger(__name__)


def init_cmd(
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Initialize the data directory so it is ready for use."""

    async def _init() -> None:
        directory = data_directory(config_path, polling_interval)
        with console.status("Initializing directory..."):
            await directory.initialize()
        logger.info("Initialized data directory %s.", directory.root)

    run(_init())


def prune_cmd(
    config_path: Path = ConfigPathOption,
    polling_interval: float = PollingIntervalOption,
) -> None:
    """Remove cached files which are no longer referenced by stored manifests."""

    async def _prune() -> None:
        directory = data_directory(config_path, polling_interval)
        with console.status("Cleaning data directory..."):
            removed = await directory.prune_cache()
        console.print(f"Removed [bold]{len(removed)}[/bold] unused file(s) from the cache.")

    run(_prune())
