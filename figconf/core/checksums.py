"""Pluggable checksum algorithms and the checksum string format.

A checksum string is ``"<algorithm>@<hex digest>"``, e.g.
``"sha256@e3b0c442..."``. The algorithm prefix selects which registered
algorithm verifies it; unknown prefixes fall back to ``sha256``.

The registry is filled by explicit ``register_checksum()`` calls at import
time and is treated as read-only afterwards.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import BinaryIO, Protocol

DEFAULT_ALGORITHM = "sha256"

# Bytes read per chunk when hashing streams; the event loop gets a turn
# between chunks so concurrent hashing interleaves.
_CHUNK_SIZE = 64 * 1024


class ChecksumAlgorithm(Protocol):
    """A hash function addressable by a short identifier."""

    identifier: str

    def hash(self, data: bytes) -> bytes: ...

    async def hash_stream(self, stream: BinaryIO) -> bytes: ...


class HashlibChecksum:
    """A ``ChecksumAlgorithm`` backed by a ``hashlib`` constructor."""

    def __init__(self, identifier: str, hashlib_name: str | None = None) -> None:
        self.identifier = identifier
        self._hashlib_name = hashlib_name or identifier

    def hash(self, data: bytes) -> bytes:
        return hashlib.new(self._hashlib_name, data).digest()

    async def hash_stream(self, stream: BinaryIO) -> bytes:
        hasher = hashlib.new(self._hashlib_name)
        while chunk := stream.read(_CHUNK_SIZE):
            hasher.update(chunk)
            await asyncio.sleep(0)
        return hasher.digest()

    def __repr__(self) -> str:
        return f"HashlibChecksum({self.identifier!r})"


_ALGORITHMS: dict[str, ChecksumAlgorithm] = {}


def register_checksum(algorithm: ChecksumAlgorithm) -> None:
    """Make *algorithm* available under its identifier."""
    if algorithm.identifier in _ALGORITHMS:
        raise ValueError(f"Checksum algorithm '{algorithm.identifier}' is already registered")
    _ALGORITHMS[algorithm.identifier] = algorithm


def known_algorithms() -> list[str]:
    """Return the identifiers of every registered algorithm, sorted."""
    return sorted(_ALGORITHMS)


def algorithm_id(checksum: str | None) -> str:
    """Extract the algorithm identifier from a checksum string or hint.

    Everything from the first ``@`` onwards is discarded, so both
    ``"sha256"`` and ``"sha256@abc..."`` resolve to ``"sha256"``.
    """
    if not checksum:
        return DEFAULT_ALGORITHM
    return checksum.split("@", 1)[0]


def get_checksum(preference: str | None = DEFAULT_ALGORITHM) -> ChecksumAlgorithm:
    """Return the algorithm named by *preference*, or the default one."""
    return _ALGORITHMS.get(algorithm_id(preference), _ALGORITHMS[DEFAULT_ALGORITHM])


def format_checksum(algorithm: ChecksumAlgorithm, digest: bytes) -> str:
    """Render a raw digest as ``"<algorithm>@<hex>"``."""
    return f"{algorithm.identifier}@{digest.hex()}"


def hash_string(algorithm: ChecksumAlgorithm, text: str) -> str:
    """Checksum of the UTF-8 encoding of *text*."""
    return format_checksum(algorithm, algorithm.hash(text.encode("utf-8")))


def hash_bytes(algorithm: ChecksumAlgorithm, data: bytes) -> str:
    """Checksum of raw bytes."""
    return format_checksum(algorithm, algorithm.hash(data))


async def hash_stream(algorithm: ChecksumAlgorithm, stream: BinaryIO) -> str:
    """Checksum of everything remaining in a binary stream."""
    return format_checksum(algorithm, await algorithm.hash_stream(stream))


def validate_checksum(checksum: str, data: bytes) -> bool:
    """Return True if *data* hashes to *checksum* under its own algorithm."""
    return hash_bytes(get_checksum(checksum), data) == checksum


register_checksum(HashlibChecksum("sha256"))
register_checksum(HashlibChecksum("sha1"))
register_checksum(HashlibChecksum("sha512"))
register_checksum(HashlibChecksum("blake2b"))
