"""Moves configuration versions between loose directories and the store.

A source directory holds the configuration files plus the
``fig.manifest.json`` describing them. Importing copies each file into the
cache slot named by its checksum and only then stores the manifest, so a
version never appears in the store unless all of its files were copied.
Each file is staged beside its cache slot and moved into place whole, so a
failed or cancelled import never damages content other versions share.
Files copied before a failure stay in the cache until ``prune_cache``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from figconf.core.checksums import DEFAULT_ALGORITHM, get_checksum, hash_stream
from figconf.core.data_directory import DataDirectory
from figconf.core.errors import ChecksumMismatchError
from figconf.core.filesystem import DEFAULT_POLLING_INTERVAL, copy_stream, open_for_read
from figconf.core.tasks import gather_all
from figconf.models.manifest import MANIFEST_FILENAME, Manifest, ManifestFile

logger = logging.getLogger(__name__)


class ConfigurationImporter:
    """Validate, import and export configuration versions."""

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    async def get_true_file_hashes(
        self,
        manifest: Manifest,
        source_dir: Path,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> list[tuple[ManifestFile, str]]:
        """Hash every listed file under *source_dir*.

        Each file is hashed with the algorithm named by its own manifest
        checksum. Returns ``(entry, true_checksum)`` pairs.
        """
        source_dir = Path(source_dir)

        async def _hash(file: ManifestFile) -> tuple[ManifestFile, str]:
            logger.debug("Opening file %s for checksum validation", file.file_name)
            fh = await open_for_read(source_dir / file.file_name, polling_interval)
            with fh:
                true_checksum = await hash_stream(get_checksum(file.checksum), fh)
            logger.debug("Checksum for file %s is %s", file.file_name, true_checksum)
            return file, true_checksum

        return await gather_all(_hash(f) for f in manifest.files if f.file_name is not None)

    async def validate(
        self,
        manifest: Manifest,
        source_dir: Path,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        """Raise ``ChecksumMismatchError`` if any file disagrees with *manifest*."""
        hashes = await self.get_true_file_hashes(manifest, source_dir, polling_interval)
        mismatches = [
            (file.file_name, file.checksum, true_checksum)
            for file, true_checksum in hashes
            if file.checksum != true_checksum
        ]
        if mismatches:
            raise ChecksumMismatchError(mismatches)

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    async def import_version(
        self,
        manifest: Manifest,
        source_dir: Path,
        data_directory: DataDirectory,
    ) -> None:
        """Copy every listed file into the cache, then store *manifest*."""
        source_dir = Path(source_dir)

        async def _import(file: ManifestFile) -> None:
            file.validate_entry()
            with open(source_dir / file.file_name, "rb") as source:
                copied = await data_directory.store_file(file.checksum, source)
            logger.debug("Cached %s (%d bytes) as %s", file.file_name, copied, file.checksum)

        await gather_all(_import(f) for f in manifest.files)
        await data_directory.store_manifest(manifest)
        logger.info("Imported version %s (%d files)", manifest.version, len(manifest.files))

    async def export_version(
        self,
        manifest: Manifest,
        target_dir: Path,
        data_directory: DataDirectory,
    ) -> None:
        """Write every listed file from the cache into *target_dir*."""
        target_dir = Path(target_dir)

        async def _export(file: ManifestFile) -> None:
            file.validate_entry()
            destination = target_dir / file.file_name
            destination.parent.mkdir(parents=True, exist_ok=True)
            source = await data_directory.open_file_read(file.checksum)
            with source, open(destination, "wb") as target:
                await copy_stream(source, target)

        await gather_all(_export(f) for f in manifest.files)
        logger.info("Exported version %s to %s", manifest.version, target_dir)

    # ------------------------------------------------------------------
    # Manifest authoring
    # ------------------------------------------------------------------

    async def build_manifest(
        self,
        directory: Path,
        version: str,
        algorithm: str = DEFAULT_ALGORITHM,
        pattern: str = "*",
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> Manifest:
        """Describe every file under *directory* matching *pattern*.

        The search is recursive and never includes ``fig.manifest.json``.
        File names are relative to *directory* with ``/`` separators.
        """
        directory = Path(directory)
        checksum = get_checksum(algorithm)
        paths = [
            p for p in directory.rglob(pattern)
            if p.is_file() and p.name != MANIFEST_FILENAME
        ]
        logger.info("Found %d files which matched %r", len(paths), pattern)

        async def _describe(path: Path) -> ManifestFile:
            fh = await open_for_read(path, polling_interval)
            with fh:
                digest = await hash_stream(checksum, fh)
            return ManifestFile(file_name=path.relative_to(directory).as_posix(), checksum=digest)

        files = await gather_all(_describe(p) for p in paths)
        unique = {(f.file_name, f.checksum): f for f in files}
        manifest = Manifest(
            version=version,
            files=sorted(unique.values(), key=lambda f: f.file_name or ""),
        )
        logger.info("New manifest generated with checksum %s", manifest.get_checksum())
        return manifest
