"""Manifest model: the files (and checksums) that make up one version.

The manifest digest is computed over the file list only, sorted by file
name and rendered one ``"<fileName> [<checksum>]"`` line per file. It does
not depend on ``version`` or on the order files are listed in.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path, PurePosixPath, PureWindowsPath

from pydantic import BaseModel, ConfigDict, Field

from figconf.core.checksums import get_checksum, hash_string
from figconf.core.errors import ManifestInvalidError, MissingFieldError
from figconf.core.filesystem import DEFAULT_POLLING_INTERVAL, open_for_read, open_for_write

MANIFEST_FILENAME = "fig.manifest.json"


def _is_absolute(file_name: str) -> bool:
    windows = PureWindowsPath(file_name)
    return PurePosixPath(file_name).is_absolute() or bool(windows.drive or windows.root)


class ManifestFile(BaseModel):
    """A single file entry: where it lives and what it must hash to."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    checksum: str | None = None  # "<algorithm>@<hex>"
    file_name: str | None = Field(default=None, alias="fileName")

    def validate_entry(self) -> None:
        """Raise if the entry is incomplete or escapes its directory."""
        if self.file_name is None:
            raise MissingFieldError("fileName")
        if self.checksum is None:
            raise MissingFieldError("checksum")
        if ".." in self.file_name:
            raise ManifestInvalidError(
                "The manifest contains one or more file entries which use '..' "
                "to access relative file paths in an unsafe manner."
            )
        if _is_absolute(self.file_name):
            raise ManifestInvalidError(
                f"The manifest entry '{self.file_name}' uses an absolute path; "
                "file names must be relative to the configuration directory."
            )


class Manifest(BaseModel):
    """The declared contents of one configuration version."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str | None = None
    files: list[ManifestFile] = Field(default_factory=list)

    def render_file_list(self) -> str:
        """The canonical text the digest is computed over."""
        ordered = sorted(self.files, key=lambda f: f.file_name or "")
        return "\n".join(f"{f.file_name} [{f.checksum}]" for f in ordered)

    def get_checksum(self, algorithm_hint: str | None = None) -> str:
        """Digest of the sorted file list under *algorithm_hint* (or sha256).

        The hint may be a bare identifier or a full checksum string, in
        which case its algorithm prefix is used.
        """
        return hash_string(get_checksum(algorithm_hint), self.render_file_list())

    def validate_manifest(self) -> None:
        """Raise if any file name repeats or any entry is invalid."""
        counts = Counter(f.file_name for f in self.files)
        conflicting = [name for name, count in counts.items() if count > 1]
        if conflicting:
            raise ManifestInvalidError(
                f"The manifest contains multiple files: {','.join(str(n) for n in conflicting)}"
            )
        for file in self.files:
            file.validate_entry()

    def find_file(self, file_name: str) -> ManifestFile | None:
        """Return the entry with exactly *file_name*, if present."""
        return next((f for f in self.files if f.file_name == file_name), None)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    def __str__(self) -> str:
        return self.render_file_list()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    async def read(
        cls,
        path: Path,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> Manifest:
        """Read and parse a manifest file, waiting while it is busy."""
        fh = await open_for_read(path, polling_interval)
        with fh:
            return cls.model_validate_json(fh.read())

    @classmethod
    async def read_from_directory(
        cls,
        directory: Path,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> Manifest:
        """Read the ``fig.manifest.json`` staged in *directory*."""
        return await cls.read(Path(directory) / MANIFEST_FILENAME, polling_interval)

    async def write(
        self,
        path: Path,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        """Write the manifest to *path*, replacing any previous content."""
        fh = await open_for_write(path, polling_interval)
        with fh:
            fh.truncate(0)
            fh.write(self.to_json().encode("utf-8"))
