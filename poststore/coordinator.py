"""
Access Coordinator
==================

Readers-writer lock guarding the single post collection.

GUARANTEES:
- shared(): any number of concurrent holders
- exclusive(): one holder, no readers and no other writers
- Writer preference: once a writer waits, new readers queue behind it

Lock acquisition is the only point where a request thread blocks. There are
no timeouts; a held exclusive section cannot be aborted.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator
import threading


class AccessCoordinator:
    """Shared/exclusive access built on a single Condition."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._active_readers = 0
        self._writer_active = False
        self._writers_waiting = 0

    # =========================================================================
    # SHARED ACCESS
    # =========================================================================

    def acquire_shared(self) -> None:
        with self._cond:
            while self._writer_active or self._writers_waiting:
                self._cond.wait()
            self._active_readers += 1

    def release_shared(self) -> None:
        with self._cond:
            if self._active_readers <= 0:
                raise RuntimeError("release_shared() without matching acquire")
            self._active_readers -= 1
            if self._active_readers == 0:
                self._cond.notify_all()

    @contextmanager
    def shared(self) -> Iterator[None]:
        self.acquire_shared()
        try:
            yield
        finally:
            self.release_shared()

    # =========================================================================
    # EXCLUSIVE ACCESS
    # =========================================================================

    def acquire_exclusive(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._active_readers:
                    self._cond.wait()
            except BaseException:
                # Readers may be parked behind this writer
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer_active = True

    def release_exclusive(self) -> None:
        with self._cond:
            if not self._writer_active:
                raise RuntimeError("release_exclusive() without matching acquire")
            self._writer_active = False
            self._cond.notify_all()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        self.acquire_exclusive()
        try:
            yield
        finally:
            self.release_exclusive()

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    @property
    def active_readers(self) -> int:
        with self._cond:
            return self._active_readers

    @property
    def writer_active(self) -> bool:
        with self._cond:
            return self._writer_active
