"""Reference-counted open/close bracket around backing-store access.

Every operation that needs a data source to be open runs inside
:func:`loaded`.  The outermost entry opens the data source, the matching
exit closes it; nested entries on the same instance only move the
counter.  Cleanup runs on every exit path and errors propagate
unchanged.

The counter is not thread-safe: a build is a single logical thread of
control.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Openable(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...


class LoadingGuard:
    """Tracks how many callers currently hold each data source open."""

    def __init__(self) -> None:
        self._references: dict[int, int] = {}

    def references(self, data_source: Openable) -> int:
        return self._references.get(id(data_source), 0)

    @contextmanager
    def loaded(self, data_source: Openable) -> Iterator[Any]:
        key = id(data_source)
        if self._references.get(key, 0) == 0:
            logger.debug("Opening data source %r", data_source)
            data_source.open()
        self._references[key] = self._references.get(key, 0) + 1
        try:
            yield data_source
        finally:
            remaining = self._references[key] - 1
            if remaining == 0:
                del self._references[key]
                logger.debug("Closing data source %r", data_source)
                data_source.close()
            else:
                self._references[key] = remaining

    def with_loaded(self, data_source: Openable, body: Callable[[], T]) -> T:
        with self.loaded(data_source):
            return body()


GUARD = LoadingGuard()


def loaded(data_source: Openable):
    """Open ``data_source`` for the duration of a ``with`` block."""
    return GUARD.loaded(data_source)


def with_loaded(data_source: Openable, body: Callable[[], T]) -> T:
    """Run ``body`` with ``data_source`` open and return its result."""
    return GUARD.with_loaded(data_source, body)
