"""Shared test fixtures for figconf."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from figconf.core.checksums import get_checksum, hash_bytes
from figconf.core.client import ConfigClient
from figconf.core.data_directory import DataDirectory
from figconf.core.importer import ConfigurationImporter
from figconf.models.manifest import MANIFEST_FILENAME, Manifest, ManifestFile

# Short enough to keep busy-retry and polling tests fast
POLL = 0.01


def checksum_of(data: bytes, algorithm: str = "sha256") -> str:
    """The checksum string figconf records for *data*."""
    return hash_bytes(get_checksum(algorithm), data)


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def data_dir(tmp_dir: Path) -> DataDirectory:
    """Provide an uninitialized DataDirectory in a temp directory."""
    return DataDirectory(tmp_dir / "data", polling_interval=POLL)


@pytest.fixture
def initialized_dir(data_dir: DataDirectory) -> DataDirectory:
    """Provide a DataDirectory after ``initialize()``."""
    asyncio.run(data_dir.initialize())
    return data_dir


@pytest.fixture
def client(initialized_dir: DataDirectory) -> ConfigClient:
    """Provide a ConfigClient over the initialized test data directory."""
    return ConfigClient(initialized_dir.root, polling_interval=POLL)


@pytest.fixture
def importer() -> ConfigurationImporter:
    return ConfigurationImporter()


# ---------------------------------------------------------------------------
# Source directory factory: a staged version ready to import
# ---------------------------------------------------------------------------


@pytest.fixture
def make_source_dir(tmp_dir: Path) -> Callable[..., tuple[Path, Manifest]]:
    """Factory fixture: write files plus a matching fig.manifest.json."""
    counter = iter(range(1_000_000))

    def _factory(
        files: dict[str, bytes] | None = None,
        version: str = "1.0.0",
        write_manifest: bool = True,
    ) -> tuple[Path, Manifest]:
        files = files if files is not None else {
            "app.cfg": b"[app]\nname = demo\n",
            "nested/db.json": b'{"host": "localhost"}',
        }
        source = tmp_dir / f"source-{next(counter)}"
        source.mkdir()
        entries = []
        for name, content in files.items():
            path = source / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
            entries.append(ManifestFile(file_name=name, checksum=checksum_of(content)))
        manifest = Manifest(version=version, files=entries)
        if write_manifest:
            (source / MANIFEST_FILENAME).write_text(manifest.to_json(), encoding="utf-8")
        return source, manifest

    return _factory


@pytest.fixture
def imported_version(
    initialized_dir: DataDirectory,
    importer: ConfigurationImporter,
    make_source_dir: Callable[..., tuple[Path, Manifest]],
) -> Manifest:
    """Import a default two-file version ``1.0.0`` into the test directory."""
    source, manifest = make_source_dir()
    asyncio.run(importer.import_version(manifest, source, initialized_dir))
    return manifest
