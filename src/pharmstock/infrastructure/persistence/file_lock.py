"""Locks for JSON data files, shared across threads and processes.

Every CLI command is its own process working on the same data directory,
so a read-compare-write sequence on a file has to exclude other processes
as well as other threads. Each data file gets a sidecar ``<file>.lock``
held through ``filelock``; an in-process re-entrant lock sits in front of
it so nested ``with`` blocks on one file only take the OS lock once.
"""

from __future__ import annotations

import threading
from pathlib import Path

from filelock import FileLock

DEFAULT_LOCK_TIMEOUT = 30.0


class DataFileLock:
    """Re-entrant within a process, exclusive across processes."""

    def __init__(self, path: Path, timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self._thread_lock = threading.RLock()
        self._file_lock = FileLock(str(path) + ".lock", timeout=timeout)
        self._depth = 0

    def __enter__(self) -> DataFileLock:
        self._thread_lock.acquire()
        if self._depth == 0:
            try:
                self._file_lock.acquire()
            except BaseException:
                self._thread_lock.release()
                raise
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._depth -= 1
        try:
            if self._depth == 0:
                self._file_lock.release()
        finally:
            self._thread_lock.release()


_registry_lock = threading.Lock()
_locks: dict[Path, DataFileLock] = {}


def lock_for(path: Path) -> DataFileLock:
    key = path.resolve()
    with _registry_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = DataFileLock(key)
        return lock
