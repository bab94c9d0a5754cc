"""Read-write lock guarding one stripe of the session table.

History reads (GET, and the snapshot half of a POST) are far more
common than appends, and two readers of the same stripe never need to
exclude each other. Appends take the lock exclusively.

Writers are preferred: once an append is waiting, new readers queue
behind it. A client that polls its history in a tight loop therefore
cannot hold off appends to its neighbours on the same stripe.

Usage:
    lock = ReadWriteLock()

    with lock.read():
        snapshot = tuple(history)

    with lock.write():
        history.append(result)
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Shared/exclusive lock built on a single Condition."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._active_readers = 0
        self._pending_writers = 0
        self._writing = False

    def acquire_read(self) -> None:
        with self._cond:
            self._cond.wait_for(
                lambda: not self._writing and self._pending_writers == 0
            )
            self._active_readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._active_readers -= 1
            if self._active_readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._pending_writers += 1
            try:
                self._cond.wait_for(
                    lambda: not self._writing and self._active_readers == 0
                )
            finally:
                self._pending_writers -= 1
            self._writing = True

    def release_write(self) -> None:
        with self._cond:
            self._writing = False
            self._cond.notify_all()

    @contextmanager
    def read(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
