"""
Restartable lazy streams.

A ``Stream`` wraps a function ``open_at(position) -> Iterator`` that can start
the underlying sequence at any offset. That single capability is enough for
``restart()`` (reopen at the start) and ``branch()`` (reopen at the current
cursor), so cursors never share iterator state.

Derived streams (``map``, ``filter``, ``take``, ``skip``) begin where the
source cursor is now and are themselves restartable to that point.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar

from ..core.errors import InvalidArgumentError


T = TypeVar("T")
U = TypeVar("U")

_UNSET = object()


class Stream(Generic[T]):
    def __init__(self, open_at: Callable[[int], Iterator[T]], start: int = 0) -> None:
        if start < 0:
            raise InvalidArgumentError(f"start must be non-negative: {start}")
        self._open_at = open_at
        self._start = start
        self._position = start
        self._it: Optional[Iterator[T]] = None

    @classmethod
    def from_iterable(cls, items: Iterable[T]) -> "Stream[T]":
        """Stream over a materialized copy of ``items``."""
        data = list(items)
        return cls(lambda pos: iter(data[pos:]))

    @property
    def start(self) -> int:
        return self._start

    @property
    def position(self) -> int:
        """Absolute offset of the next element."""
        return self._position

    def __iter__(self) -> "Stream[T]":
        return self

    def __next__(self) -> T:
        if self._it is None:
            self._it = iter(self._open_at(self._position))
        value = next(self._it)
        self._position += 1
        return value

    def restart(self) -> "Stream[T]":
        self._position = self._start
        self._it = None
        return self

    def branch(self) -> "Stream[T]":
        """Independent cursor that starts at this stream's current position."""
        return Stream(self._open_at, start=self._position)

    # ------------------------------------------------------------------
    # Derived streams
    # ------------------------------------------------------------------

    def _source_at(self) -> Callable[[], Iterator[T]]:
        open_at, pos = self._open_at, self._position
        return lambda: iter(open_at(pos))

    def map(self, fn: Callable[[T], U]) -> "Stream[U]":
        source = self._source_at()
        return Stream(lambda pos: itertools.islice(map(fn, source()), pos, None))

    def filter(self, pred: Callable[[T], bool]) -> "Stream[T]":
        source = self._source_at()
        return Stream(lambda pos: itertools.islice(filter(pred, source()), pos, None))

    def take(self, n: int) -> "Stream[T]":
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            raise InvalidArgumentError(f"take count must be a non-negative int: {n!r}")
        open_at, base = self._open_at, self._position
        return Stream(lambda pos: itertools.islice(open_at(base + min(pos, n)), max(n - pos, 0)))

    def skip(self, n: int) -> "Stream[T]":
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            raise InvalidArgumentError(f"skip count must be a non-negative int: {n!r}")
        open_at, base = self._open_at, self._position
        return Stream(lambda pos: open_at(base + n + pos))

    def concat(self, other: "Stream[T]") -> "Stream[T]":
        first = self._source_at()
        second = other._source_at()
        return Stream(lambda pos: itertools.islice(itertools.chain(first(), second()), pos, None))

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def to_list(self, limit: Optional[int] = None) -> List[T]:
        """Drain the stream (or at most ``limit`` elements) into a list."""
        if limit is None:
            return list(self)
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 0:
            raise InvalidArgumentError(f"limit must be a non-negative int: {limit!r}")
        return list(itertools.islice(self, limit))

    def reduce(self, fn: Callable[[Any, T], Any], initial: Any = _UNSET) -> Any:
        acc = initial
        for item in self:
            acc = item if acc is _UNSET else fn(acc, item)
        if acc is _UNSET:
            raise InvalidArgumentError("reduce of an empty stream with no initial value")
        return acc

    def for_each(self, fn: Callable[[T], Any]) -> None:
        for item in self:
            fn(item)
