"""Append-only version ledger backed by a JSON Lines file.

The ledger is the source of truth for which configuration version is
active:
- Append-only: ``add_version()`` is the only write; nothing is rewritten.
- The current version is the last entry in file order.
- Readers take a shared lock and are never held up by an append;
  appenders queue on the ``versions.jsonl.lock`` sidecar (see
  ``figconf.core.filesystem``).

Appenders take turns on the sidecar lock, so whole lines never interleave.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from datetime import datetime, timezone
from pathlib import Path

from figconf.core.filesystem import DEFAULT_POLLING_INTERVAL, open_for_append, open_for_read
from figconf.models.ledger import VersionLogEntry

logger = logging.getLogger(__name__)

VERSION_LOG_FILENAME = "versions.jsonl"


class VersionLog:
    """Reads and appends ``versions.jsonl``.

    Parameters
    ----------
    path:
        Path to the ledger file. Its parent directory is created on the
        first append.
    polling_interval:
        Seconds between attempts to open the file while it is busy.
    """

    def __init__(self, path: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL) -> None:
        self.path = Path(path)
        self._polling_interval = polling_interval

    @classmethod
    def in_directory(
        cls, directory: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL
    ) -> VersionLog:
        return cls(Path(directory) / VERSION_LOG_FILENAME, polling_interval)

    @property
    def exists(self) -> bool:
        return self.path.exists()

    @property
    def last_modified(self) -> datetime | None:
        """UTC modification time of the ledger file, or None if absent."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def iter_versions(self) -> AsyncIterator[VersionLogEntry]:
        """Yield every entry, first to last. Yields nothing if absent."""
        if not self.path.exists():
            return
        fh = await open_for_read(self.path, self._polling_interval)
        with fh:
            lines = fh.read().decode("utf-8").splitlines()
        for line in lines:
            if not line.strip():
                continue
            yield VersionLogEntry.model_validate_json(line)

    async def get_versions(self) -> list[VersionLogEntry]:
        return [entry async for entry in self.iter_versions()]

    async def get_current(self) -> VersionLogEntry | None:
        """Return the last entry in file order, or None if there is none."""
        current = None
        async for entry in self.iter_versions():
            current = entry
        return current

    # ------------------------------------------------------------------
    # Append
    # ------------------------------------------------------------------

    async def add_version(self, entry: VersionLogEntry) -> VersionLogEntry:
        """Append *entry* as a single line. This is the ONLY write method."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fh = await open_for_append(self.path, self._polling_interval)
        with fh:
            fh.write(entry.to_json_line().encode("utf-8"))
        logger.debug("Appended version %s (%s) to %s", entry.version, entry.manifest_checksum, self.path)
        return entry
