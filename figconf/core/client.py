"""Configuration client: resolves, verifies and watches versions.

The client never mutates the store except through ``set_version``, which
appends one ledger entry after the target version has been verified.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from figconf.core.checksums import get_checksum, hash_stream
from figconf.core.data_directory import DataDirectory
from figconf.core.errors import NoVersionSelectedError, WrongChecksumError
from figconf.core.filesystem import DEFAULT_POLLING_INTERVAL, pause
from figconf.core.tasks import gather_all
from figconf.models.healthchecks import HEALTHCHECK_FILENAME, HealthcheckManifest
from figconf.models.ledger import VersionLogEntry
from figconf.models.manifest import MANIFEST_FILENAME, Manifest, ManifestFile

logger = logging.getLogger(__name__)

# Reported in place of a checksum when a cached file is gone
MISSING = "missing"


class ConfigVersion:
    """One configuration version, bound to the store that holds its files."""

    def __init__(self, data_directory: DataDirectory, manifest: Manifest) -> None:
        self._data_directory = data_directory
        self.manifest = manifest

    @property
    def version(self) -> str | None:
        return self.manifest.version

    def __repr__(self) -> str:
        return f"ConfigVersion({self.version!r})"

    async def open_file(self, file_name: str) -> BinaryIO:
        """Open a configuration file of this version by name.

        Raises ``FileNotFoundError`` if *file_name* is not in the manifest.
        """
        entry = self.manifest.find_file(file_name)
        if entry is None or entry.checksum is None:
            raise FileNotFoundError(
                f"The file '{file_name}' was not present in the configuration manifest "
                "and could not be loaded."
            )
        return await self._data_directory.open_file_read(entry.checksum)

    async def read_file(self, file_name: str) -> bytes:
        fh = await self.open_file(file_name)
        with fh:
            return fh.read()

    async def get_healthcheck_manifest(self) -> HealthcheckManifest:
        """Parse the ``fig.healthchecks.json`` shipped with this version."""
        return HealthcheckManifest.model_validate_json(await self.read_file(HEALTHCHECK_FILENAME))

    async def verify(self) -> None:
        """Check that every cached file hashes to its manifest checksum.

        Raises ``WrongChecksumError`` naming a mismatching file.
        """

        async def _verify(file: ManifestFile) -> None:
            file.validate_entry()
            fh = await self.open_file(file.file_name)
            with fh:
                true_checksum = await hash_stream(get_checksum(file.checksum), fh)
            if true_checksum != file.checksum:
                raise WrongChecksumError(file.file_name, file.checksum, true_checksum)

        await gather_all(_verify(f) for f in self.manifest.files)

    async def find_mismatches(self) -> list[tuple[str, str, str]]:
        """Hash every cached file and list the ones that disagree.

        Returns ``(file_name, expected, actual)`` triples. A file missing
        from the cache is reported with ``actual`` set to ``MISSING``.
        """

        async def _check(file: ManifestFile) -> tuple[str, str, str]:
            file.validate_entry()
            try:
                fh = await self._data_directory.open_file_read(file.checksum)
            except FileNotFoundError:
                return file.file_name, file.checksum, MISSING
            with fh:
                true_checksum = await hash_stream(get_checksum(file.checksum), fh)
            return file.file_name, file.checksum, true_checksum

        results = await gather_all(_check(f) for f in self.manifest.files)
        return [r for r in results if r[1] != r[2]]


class ConfigClient:
    """Entry point for reading configuration from a data directory.

    Parameters
    ----------
    data_dir:
        The configuration data directory.
    polling_interval:
        Seconds between busy-file retries and between version log polls.
    """

    def __init__(self, data_dir: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL) -> None:
        self.data_directory = DataDirectory(data_dir, polling_interval)
        self._polling_interval = polling_interval

    async def get_current_version(self) -> ConfigVersion:
        """Resolve the active version from the last ledger entry.

        Raises
        ------
        NoVersionSelectedError
            If the ledger has no entries.
        WrongChecksumError
            If the stored manifest no longer matches the digest recorded
            when the version was selected.
        """
        entry = await self.data_directory.version_log.get_current()
        if entry is None:
            raise NoVersionSelectedError()

        current = await self.get_version(entry.version)
        true_checksum = current.manifest.get_checksum(entry.manifest_checksum)
        if true_checksum.lower() != entry.manifest_checksum.lower():
            raise WrongChecksumError(MANIFEST_FILENAME, entry.manifest_checksum, true_checksum)
        return current

    async def get_version(self, version: str) -> ConfigVersion:
        """Load a named version without consulting the ledger."""
        manifest = await self.data_directory.get_manifest(version)
        return ConfigVersion(self.data_directory, manifest)

    async def set_version(self, version: str) -> VersionLogEntry:
        """Verify *version* and make it the active version."""
        target = await self.get_version(version)
        await target.verify()
        entry = await self.data_directory.version_log.add_version(
            VersionLogEntry(version=version, manifest_checksum=target.manifest.get_checksum())
        )
        logger.info("Configuration version updated to %s", version)
        return entry

    async def get_version_stream(
        self, stop: asyncio.Event | None = None
    ) -> AsyncIterator[VersionLogEntry]:
        """Yield the latest ledger entry each time the ledger file changes.

        Polls the ledger's modification time every polling interval and
        emits the last entry whenever it advances. Several appends within
        one interval are reported once, as the latest entry. Runs until
        *stop* is set (ends quietly) or the consuming task is cancelled.
        """
        version_log = self.data_directory.version_log
        last_emitted: datetime | None = None

        while stop is None or not stop.is_set():
            modified = version_log.last_modified
            if modified is not None and (last_emitted is None or modified > last_emitted):
                last_emitted = modified
                latest = await version_log.get_current()
                if latest is not None and (stop is None or not stop.is_set()):
                    yield latest

            if await pause(self._polling_interval, stop):
                return
