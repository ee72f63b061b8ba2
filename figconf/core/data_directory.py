"""Content-addressed data directory (manifests, file cache, version ledger).

Storage layout::

    {root}/manifests/{safe_version}.json   one manifest per version
    {root}/cache/{checksum}                 one file per unique checksum
    {root}/versions.jsonl                   append-only version ledger

Cached files are keyed by their checksum string, so versions which share
byte-identical files share a single cached copy. Cache entries are only
ever created, atomically replaced, or pruned.
"""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import AsyncIterator
from pathlib import Path
from typing import BinaryIO

from figconf.core.errors import ManifestInvalidError, NotInitializedError, VersionNotFoundError
from figconf.core.filesystem import DEFAULT_POLLING_INTERVAL, copy_stream, open_for_read, open_for_write
from figconf.core.version_log import VersionLog
from figconf.models.ledger import VersionLogEntry
from figconf.models.manifest import Manifest

logger = logging.getLogger(__name__)

INITIAL_VERSION = "initial"

_SAFE_PUNCTUATION = frozenset("._-")


def safe_name(version: str) -> str:
    """Map a version string onto a filesystem-safe token.

    Letters, digits, ``.``, ``_`` and ``-`` are kept; everything else
    becomes ``_``.
    """
    return "".join(c if c.isalnum() or c in _SAFE_PUNCTUATION else "_" for c in version)


class DataDirectory:
    """Owner of the on-disk layout under a configuration root.

    Parameters
    ----------
    root:
        The data directory. Nothing is created until ``initialize()``.
    polling_interval:
        Seconds between attempts to open busy files.
    """

    def __init__(self, root: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL) -> None:
        self.root = Path(root)
        self.polling_interval = polling_interval
        self.version_log = VersionLog.in_directory(self.root, polling_interval)

    @property
    def manifests_dir(self) -> Path:
        return self.root / "manifests"

    @property
    def cache_dir(self) -> Path:
        return self.root / "cache"

    def _manifest_path(self, version: str) -> Path:
        return self.manifests_dir / f"{safe_name(version)}.json"

    def _cache_path(self, checksum: str) -> Path:
        if not checksum or "/" in checksum or "\\" in checksum or ".." in checksum:
            raise ManifestInvalidError(f"The checksum '{checksum}' cannot be used as a cache key.")
        return self.cache_dir / checksum

    def _require_initialized(self) -> None:
        if not self.manifests_dir.is_dir():
            raise NotInitializedError()

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the directory layout and seed an empty ``initial`` version.

        Safe to call repeatedly; the seed is only written while the
        ledger file does not exist.
        """
        self.manifests_dir.mkdir(parents=True, exist_ok=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        if not self.version_log.exists:
            initial = Manifest(version=INITIAL_VERSION)
            await self.store_manifest(initial)
            await self.version_log.add_version(
                VersionLogEntry(version=INITIAL_VERSION, manifest_checksum=initial.get_checksum())
            )
            logger.info("Initialized data directory at %s", self.root)

    # ------------------------------------------------------------------
    # Manifests
    # ------------------------------------------------------------------

    async def get_manifest(self, version: str) -> Manifest:
        """Load the stored manifest for *version*.

        Raises
        ------
        NotInitializedError
            If the manifest directory does not exist.
        VersionNotFoundError
            If no manifest is stored for *version*.
        """
        manifest = await self.try_get_manifest(version)
        if manifest is None:
            raise VersionNotFoundError(version)
        return manifest

    async def try_get_manifest(self, version: str) -> Manifest | None:
        """Like ``get_manifest`` but returns None for an unknown version."""
        self._require_initialized()
        try:
            return await Manifest.read(self._manifest_path(version), self.polling_interval)
        except FileNotFoundError:
            return None

    async def list_manifests(self) -> AsyncIterator[Manifest]:
        """Yield every stored manifest. Each call enumerates afresh."""
        self._require_initialized()
        for path in sorted(self.manifests_dir.glob("*.json")):
            yield await Manifest.read(path, self.polling_interval)

    async def store_manifest(self, manifest: Manifest) -> None:
        """Persist *manifest* under its version, replacing any older copy."""
        if manifest.version is None:
            raise ManifestInvalidError("A manifest must have a version before it can be stored.")
        self._require_initialized()
        await manifest.write(self._manifest_path(manifest.version), self.polling_interval)
        logger.debug("Stored manifest for version %s", manifest.version)

    async def remove_manifest(self, version: str) -> bool:
        """Delete the manifest for *version*. Returns False if it was absent."""
        path = self._manifest_path(version)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Removed manifest for version %s", version)
        return True

    # ------------------------------------------------------------------
    # File cache
    # ------------------------------------------------------------------

    def has_file(self, checksum: str) -> bool:
        return self._cache_path(checksum).is_file()

    async def open_file_read(self, checksum: str) -> BinaryIO:
        """Open the cached content for *checksum* for reading."""
        return await open_for_read(self._cache_path(checksum), self.polling_interval)

    async def open_file_write(self, checksum: str) -> BinaryIO:
        """Open (or create) the cache slot for *checksum* for writing."""
        return await open_for_write(self._cache_path(checksum), self.polling_interval)

    async def store_file(self, checksum: str, source: BinaryIO) -> int:
        """Copy *source* into the cache under *checksum*.

        The content is staged in a temporary file inside ``cache/`` and moved
        onto the checksum key with one ``os.replace``, so an entry other
        versions rely on is never seen half written. Returns the bytes copied.
        """
        target = self._cache_path(checksum)
        staging = target.with_name(f".{target.name}.{uuid.uuid4().hex}.partial")
        try:
            fh = await open_for_write(staging, self.polling_interval)
            with fh:
                copied = await copy_stream(source, fh)
            os.replace(staging, target)
        except BaseException:
            staging.unlink(missing_ok=True)
            raise
        return copied

    async def prune_cache(self) -> list[str]:
        """Delete cached files not referenced by any stored manifest.

        Every stored manifest counts, not just the active one. Returns the
        checksums that were removed.
        """
        referenced: set[str] = set()
        async for manifest in self.list_manifests():
            referenced.update(f.checksum for f in manifest.files if f.checksum)

        removed: list[str] = []
        if not self.cache_dir.is_dir():
            return removed
        for path in sorted(self.cache_dir.iterdir()):
            if path.is_file() and path.name not in referenced:
                path.unlink()
                removed.append(path.name)
        logger.info("Pruned %d unreferenced file(s) from the cache", len(removed))
        return removed
