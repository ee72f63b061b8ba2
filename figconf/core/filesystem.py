"""Cooperative file access for a data directory shared between processes.

There is no cross-process mutex. Each open takes an advisory lock without
blocking; when another process holds a conflicting lock the open is
reported as "busy" and retried after ``polling_interval`` until it
succeeds, the awaiting task is cancelled, or a non-busy error occurs.

Lock modes:
  - read: shared lock, concurrent readers allowed
  - write: exclusive lock, file opened read/write and created if missing
    (never truncated on open)
  - append: exclusive lock on a ``<name>.lock`` sidecar plus a shared
    lock on the file itself; readers keep going while appenders and
    writers are held off. All writes go to the end of the file.

Which ``OSError`` counts as "busy" is platform specific and decided by
``is_file_busy`` alone; the retry loop itself is platform neutral.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_POLLING_INTERVAL = 0.5

T = TypeVar("T")

if sys.platform == "win32":
    fcntl = None

    # ERROR_SHARING_VIOLATION, ERROR_LOCK_VIOLATION
    _BUSY_WINERRORS = frozenset({32, 33})

    def is_file_busy(exc: OSError) -> bool:
        """True if *exc* is a sharing or lock violation."""
        return getattr(exc, "winerror", None) in _BUSY_WINERRORS

else:
    import fcntl

    _BUSY_ERRNOS = frozenset({errno.EWOULDBLOCK, errno.EAGAIN})

    def is_file_busy(exc: OSError) -> bool:
        """True if *exc* reports a conflicting advisory lock."""
        return isinstance(exc, BlockingIOError) or exc.errno in _BUSY_ERRNOS


def _lock(handle: BinaryIO, exclusive: bool) -> BinaryIO:
    """Take a non-blocking advisory lock, closing the handle on failure."""
    if fcntl is None:
        return handle
    try:
        fcntl.flock(handle.fileno(), (fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH) | fcntl.LOCK_NB)
    except BaseException:
        handle.close()
        raise
    return handle


def _open_read(path: Path) -> BinaryIO:
    return _lock(open(path, "rb"), exclusive=False)


def _open_write(path: Path) -> BinaryIO:
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    return _lock(os.fdopen(fd, "r+b"), exclusive=True)


class AppendHandle:
    """A file opened for appending that also holds its sidecar writer lock.

    Closing the handle releases both locks.
    """

    def __init__(self, handle: BinaryIO, guard: BinaryIO) -> None:
        self._handle = handle
        self._guard = guard

    @property
    def name(self) -> str:
        return self._handle.name

    def write(self, data: bytes) -> int:
        return self._handle.write(data)

    def flush(self) -> None:
        self._handle.flush()

    def close(self) -> None:
        try:
            self._handle.close()
        finally:
            self._guard.close()

    def __enter__(self) -> AppendHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


_COPY_CHUNK_SIZE = 64 * 1024


async def copy_stream(source: BinaryIO, target: BinaryIO) -> int:
    """Copy *source* to *target* in chunks, yielding to the loop between them."""
    copied = 0
    while chunk := source.read(_COPY_CHUNK_SIZE):
        target.write(chunk)
        copied += len(chunk)
        await asyncio.sleep(0)
    return copied


def lock_path(path: Path) -> Path:
    """The sidecar file appenders lock exclusively."""
    return path.with_name(path.name + ".lock")


def _open_append(path: Path) -> AppendHandle:
    guard = _lock(open(lock_path(path), "ab"), exclusive=True)
    try:
        handle = _lock(open(path, "ab"), exclusive=False)
    except BaseException:
        guard.close()
        raise
    return AppendHandle(handle, guard)


async def _open_with_retry(
    opener: Callable[[Path], T],
    path: Path,
    polling_interval: float,
) -> T:
    while True:
        try:
            return opener(path)
        except OSError as exc:
            if not is_file_busy(exc):
                raise
            logger.debug("File %s is busy, retrying in %.3fs", path, polling_interval)
        await asyncio.sleep(polling_interval)


async def open_for_read(path: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL) -> BinaryIO:
    """Open *path* for shared reading, waiting while it is busy."""
    return await _open_with_retry(_open_read, Path(path), polling_interval)


async def open_for_write(path: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL) -> BinaryIO:
    """Open (creating if needed) *path* for exclusive read/write access."""
    return await _open_with_retry(_open_write, Path(path), polling_interval)


async def open_for_append(path: Path, polling_interval: float = DEFAULT_POLLING_INTERVAL) -> AppendHandle:
    """Open (creating if needed) *path* for appending, one appender at a time."""
    return await _open_with_retry(_open_append, Path(path), polling_interval)


async def pause(delay: float, stop: asyncio.Event | None = None) -> bool:
    """Sleep for *delay* seconds, waking early if *stop* is set.

    Returns True if the wait ended because *stop* was set.
    """
    if stop is None:
        await asyncio.sleep(max(delay, 0))
        return False
    if stop.is_set():
        return True
    try:
        await asyncio.wait_for(stop.wait(), timeout=max(delay, 0))
    except asyncio.TimeoutError:
        return False
    return True
