"""Bounded in-memory caches with pluggable eviction.

Four policies share one interface (``get``/``set``/``contains``/``clear`` and
hit/miss/eviction counters):

- ``LRUCache``: evicts the least recently read or written key.
- ``LFUCache``: evicts the least frequently read key, oldest first on ties.
- ``FIFOCache``: evicts in insertion order; reads do not reorder.
- ``TTLCache``: LRU plus a per-entry lifetime measured by an injectable clock.

Caches are per-instance and not thread safe. They are an overlay: dropping an
entry never changes a result, only the cost of recomputing it.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

from .errors import InvalidArgumentError


logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class _BoundedCache(Generic[K, V]):
    policy = "base"

    def __init__(self, max_size: int) -> None:
        if not isinstance(max_size, int) or isinstance(max_size, bool) or max_size < 1:
            raise InvalidArgumentError(f"max_size must be a positive int: {max_size!r}")
        self.max_size = max_size
        self._values: OrderedDict[K, V] = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return self.contains(key)  # type: ignore[arg-type]

    def contains(self, key: K) -> bool:
        return key in self._values

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        value = self._lookup(key)
        if value is _MISSING:
            self.misses += 1
            return default
        self.hits += 1
        return value  # type: ignore[return-value]

    def set(self, key: K, value: V) -> None:
        if key in self._values:
            self._values[key] = value
            self._touch(key)
            return
        while len(self._values) >= self.max_size:
            self._evict_one()
        self._values[key] = value
        self._inserted(key)

    def delete(self, key: K) -> bool:
        if key not in self._values:
            return False
        del self._values[key]
        self._forget(key)
        return True

    def clear(self) -> None:
        self._values.clear()
        self._forget_all()

    def keys(self) -> list[K]:
        return list(self._values)

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._values),
            max_size=self.max_size,
            hits=self.hits,
            misses=self.misses,
            evictions=self.evictions,
        )

    # Policy hooks.

    def _lookup(self, key: K) -> Any:
        return self._values.get(key, _MISSING)

    def _touch(self, key: K) -> None:
        pass

    def _inserted(self, key: K) -> None:
        pass

    def _victim(self) -> K:
        return next(iter(self._values))

    def _forget(self, key: K) -> None:
        pass

    def _forget_all(self) -> None:
        pass

    def _evict_one(self) -> None:
        victim = self._victim()
        del self._values[victim]
        self._forget(victim)
        self.evictions += 1
        logger.debug("%s cache evicted %r", self.policy, victim)


class LRUCache(_BoundedCache[K, V]):
    policy = "lru"

    def _lookup(self, key: K) -> Any:
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            self._values.move_to_end(key)
        return value

    def _touch(self, key: K) -> None:
        self._values.move_to_end(key)


class FIFOCache(_BoundedCache[K, V]):
    policy = "fifo"


class LFUCache(_BoundedCache[K, V]):
    """Least-frequently-used eviction; ties go to the oldest insertion."""

    policy = "lfu"

    def __init__(self, max_size: int) -> None:
        super().__init__(max_size)
        self._counts: dict[K, int] = {}

    def _lookup(self, key: K) -> Any:
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            self._counts[key] += 1
        return value

    def _touch(self, key: K) -> None:
        self._counts[key] += 1

    def _inserted(self, key: K) -> None:
        self._counts[key] = 1

    def _victim(self) -> K:
        # min() keeps the first minimum, and _values iterates in insertion order.
        return min(self._values, key=lambda k: self._counts[k])

    def _forget(self, key: K) -> None:
        self._counts.pop(key, None)

    def _forget_all(self) -> None:
        self._counts.clear()


class TTLCache(LRUCache[K, V]):
    """LRU cache whose entries expire ``ttl`` seconds after being written."""

    policy = "ttl"

    def __init__(
        self,
        max_size: int,
        ttl: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(max_size)
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
            raise InvalidArgumentError(f"ttl must be a positive number: {ttl!r}")
        self.ttl = float(ttl)
        self._clock = clock
        self._expires: dict[K, float] = {}

    def _expired(self, key: K) -> bool:
        deadline = self._expires.get(key)
        return deadline is not None and self._clock() >= deadline

    def _lookup(self, key: K) -> Any:
        if key in self._values and self._expired(key):
            del self._values[key]
            self._forget(key)
            return _MISSING
        return super()._lookup(key)

    def contains(self, key: K) -> bool:
        return key in self._values and not self._expired(key)

    def _touch(self, key: K) -> None:
        super()._touch(key)
        self._expires[key] = self._clock() + self.ttl

    def _inserted(self, key: K) -> None:
        self._expires[key] = self._clock() + self.ttl

    def _forget(self, key: K) -> None:
        self._expires.pop(key, None)

    def _forget_all(self) -> None:
        self._expires.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        stale = [k for k in self._values if self._expired(k)]
        for k in stale:
            del self._values[k]
            self._forget(k)
        return len(stale)


Cache = _BoundedCache

_POLICIES: dict[str, type] = {
    "lru": LRUCache,
    "lfu": LFUCache,
    "fifo": FIFOCache,
}


def create_cache(
    policy: str = "lru",
    max_size: int = 100,
    *,
    ttl: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
) -> _BoundedCache:
    """Build a cache by policy name (``lru``, ``lfu``, ``fifo`` or ``ttl``)."""
    name = policy.lower()
    if name == "ttl":
        if ttl is None:
            raise InvalidArgumentError("ttl policy requires a ttl")
        return TTLCache(max_size, ttl, clock=clock)
    try:
        cls = _POLICIES[name]
    except KeyError:
        raise InvalidArgumentError(f"unknown cache policy: {policy!r}") from None
    return cls(max_size)


def memoize(
    fn: Callable[..., V],
    cache: Optional[_BoundedCache] = None,
    *,
    key: Optional[Callable[..., Hashable]] = None,
) -> Callable[..., V]:
    """Wrap ``fn`` so results are served from ``cache``.

    ``key`` maps the call arguments to a cache key; the default is the tuple of
    positional arguments. The wrapper exposes ``.cache`` and ``.cache_clear()``.
    """
    store = cache if cache is not None else LRUCache(100)
    make_key = key if key is not None else (lambda *args: args)

    def wrapper(*args: Any) -> V:
        k = make_key(*args)
        hit = store.get(k, _MISSING)  # type: ignore[arg-type]
        if hit is not _MISSING:
            return hit  # type: ignore[return-value]
        result = fn(*args)
        store.set(k, result)
        return result

    wrapper.__name__ = getattr(fn, "__name__", "memoized")
    wrapper.__doc__ = getattr(fn, "__doc__", None)
    wrapper.__wrapped__ = fn  # type: ignore[attr-defined]
    wrapper.cache = store  # type: ignore[attr-defined]
    wrapper.cache_clear = store.clear  # type: ignore[attr-defined]
    return wrapper
