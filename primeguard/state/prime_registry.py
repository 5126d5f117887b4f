"""
Growable registry of the primes in ascending order.

Index 0 is 2, index 1 is 3, and so on. The indexed sequence is always a
gap-free prefix of all primes: it only grows, and every index a caller has
observed keeps pointing at the same prime for the registry's lifetime.

Growth works in segments of a sieve of Eratosthenes seeded by the primes
already known, so a segment ending below ``scanned ** 2`` needs no further
primality tests. Growth is unbounded by default; a registry built with
``max_prime`` refuses to grow past it (``RegistryLimitError``), which keeps a
single large prime from forcing a long sieve.

Primes found by ``factor`` beyond the indexed prefix are remembered as known
primes; their index is assigned the first time ``get_index`` is asked for it.

Writers hold a re-entrant lock. Readers of already-written entries do not.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Dict, Iterable, List, Optional, Set

from ..core.bigint import is_probable_prime
from ..core.errors import InvalidArgumentError, NotPrimeError, RegistryLimitError
from ..core.types import Factor, Factorization
from .streams import Stream


logger = logging.getLogger(__name__)

DEFAULT_PRELOAD_COUNT = 5
DEFAULT_CHUNK_SIZE = 100
MAX_SEGMENT = 1 << 15

_GROWTH_LOG_STEP = 10_000


def _require_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
    return v


def _require_index(idx: Any) -> int:
    _require_int("index", idx)
    if idx < 0:
        raise InvalidArgumentError(f"index must be non-negative: {idx}")
    return idx


class PrimeRegistry:
    """
    Shared, monotonically growing table of primes.

    ``initial_primes`` must itself be the first primes in order (2, 3, 5, ...);
    anything else would break the index contract and is rejected.
    """

    def __init__(
        self,
        initial_primes: Optional[Iterable[int]] = None,
        preload_count: int = DEFAULT_PRELOAD_COUNT,
        max_prime: Optional[int] = None,
    ) -> None:
        _require_int("preload_count", preload_count)
        if preload_count < 0:
            raise InvalidArgumentError(f"preload_count must be non-negative: {preload_count}")
        if max_prime is not None:
            _require_int("max_prime", max_prime)
            if max_prime < 2:
                raise InvalidArgumentError(f"max_prime must be >= 2: {max_prime}")
        self.max_prime = max_prime
        self._lock = threading.RLock()
        self._primes: List[int] = [2]
        self._index: Dict[int, int] = {2: 0}
        # Every prime <= _scanned is in _primes.
        self._scanned = 2
        # Primes above _scanned seen by factor(), not yet indexed.
        self._sparse: Set[int] = set()
        self._next_log = _GROWTH_LOG_STEP

        if initial_primes is not None:
            self._seed(list(initial_primes))
        self.extend_to(preload_count)

    def _seed(self, primes: List[int]) -> None:
        if not primes:
            return
        for i, p in enumerate(primes):
            _require_int(f"initial_primes[{i}]", p)
        if primes[0] != 2:
            raise InvalidArgumentError("initial_primes must start at 2")
        for prev, p in zip(primes, primes[1:]):
            if p <= prev:
                raise InvalidArgumentError("initial_primes must be strictly increasing")
        # Validate by regrowing to the same length and comparing.
        self.extend_to(len(primes) - 1)
        if self._primes[: len(primes)] != primes:
            raise InvalidArgumentError("initial_primes must be a gap-free prefix of the primes")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._primes)

    def __contains__(self, n: object) -> bool:
        return n in self._index or n in self._sparse

    @property
    def largest_known(self) -> int:
        return self._primes[-1]

    def known_primes(self) -> tuple[int, ...]:
        """The indexed prefix, in index order."""
        return tuple(self._primes)

    # ------------------------------------------------------------------
    # Growth
    # ------------------------------------------------------------------

    def _sieve_segment(self, lo: int, hi: int) -> List[int]:
        """Primes in ``[lo, hi)``; requires ``_scanned ** 2 >= hi - 1``."""
        flags = bytearray(b"\x01") * (hi - lo)
        limit = math.isqrt(hi - 1)
        for p in self._primes:
            if p > limit:
                break
            start = max(p * p, -(-lo // p) * p)
            if start >= hi:
                continue
            count = len(range(start - lo, hi - lo, p))
            flags[start - lo :: p] = bytes(count)
        return [lo + i for i, flag in enumerate(flags) if flag]

    def _append(self, p: int) -> None:
        self._index[p] = len(self._primes)
        self._primes.append(p)
        self._sparse.discard(p)
        if len(self._primes) >= self._next_log:
            logger.debug("prime registry grew to %d primes (largest %d)", len(self._primes), p)
            self._next_log += _GROWTH_LOG_STEP

    def _grow(self, *, index: Optional[int] = None, through: Optional[int] = None) -> None:
        """
        Sieve forward until ``len > index`` or every prime ``<= through`` is indexed.

        Every prime of a sieved segment is kept, so growth may overshoot
        ``index``; each integer is sieved once for the registry's lifetime.
        """
        with self._lock:
            while True:
                if index is not None and len(self._primes) > index:
                    return
                if through is not None and self._scanned >= through:
                    return
                if self.max_prime is not None and self._scanned >= self.max_prime:
                    wanted = f"index {index}" if index is not None else f"prime {through}"
                    raise RegistryLimitError(self.max_prime, wanted)

                scanned = self._scanned
                lo = scanned + 1
                hi = lo + min(scanned * scanned - scanned, MAX_SEGMENT)
                if through is not None:
                    hi = min(hi, through + 1)
                if self.max_prime is not None:
                    hi = min(hi, self.max_prime + 1)

                for p in self._sieve_segment(lo, hi):
                    self._append(p)
                # Published last: unlocked readers trust everything <= _scanned.
                self._scanned = hi - 1

    def extend_to(self, idx: int) -> None:
        """Make sure the prime at index ``idx`` is known."""
        _require_index(idx)
        if len(self._primes) > idx:
            return
        self._grow(index=idx)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_prime(self, n: int) -> bool:
        """
        Trial division by the known primes up to ``sqrt(n)``.

        If the known primes stop short of ``sqrt(n)`` the answer comes from
        Miller-Rabin instead, which is exact below 2**64.
        """
        _require_int("n", n)
        if n < 2:
            return False
        if n in self._index or n in self._sparse:
            return True
        if n <= self._scanned:
            return False
        for p in self._primes:
            if p * p > n:
                return True
            if n % p == 0:
                return False
        return is_probable_prime(n)

    def get_prime(self, idx: int) -> int:
        _require_index(idx)
        if idx >= len(self._primes):
            self.extend_to(idx)
        return self._primes[idx]

    def get_index(self, prime: int) -> int:
        """
        Index of ``prime`` in the sequence of all primes.

        An unknown prime is indexed by growing the sequence through it, so its
        index is the same in every registry. Raises ``NotPrimeError`` for
        anything that is not prime and ``RegistryLimitError`` for primes above
        ``max_prime``.
        """
        _require_int("prime", prime)
        known = self._index.get(prime)
        if known is not None:
            return known
        if not self.is_prime(prime):
            raise NotPrimeError(prime)
        if self.max_prime is not None and prime > self.max_prime:
            raise RegistryLimitError(self.max_prime, f"prime {prime}")
        self._grow(through=prime)
        return self._index[prime]

    def factor(self, x: int) -> Factorization:
        """
        Prime factorization of ``x > 0`` in ascending prime order.

        Trial division by registry primes while ``p * p <= remaining``; stops
        early once the remaining cofactor is itself prime. A prime cofactor
        beyond the indexed prefix is remembered as a known prime.
        """
        _require_int("x", x)
        if x <= 0:
            raise InvalidArgumentError(f"cannot factor non-positive value: {x}")
        if x == 1:
            return ()

        out: List[Factor] = []
        primes = self._primes
        remaining = x
        i = 0
        cofactor_is_prime = is_probable_prime(remaining)
        while remaining > 1 and not cofactor_is_prime:
            if i >= len(primes):
                self.extend_to(i)
            p = primes[i]
            if p * p > remaining:
                break
            if remaining % p == 0:
                exponent = 0
                while remaining % p == 0:
                    remaining //= p
                    exponent += 1
                out.append(Factor(prime=p, exponent=exponent))
                cofactor_is_prime = is_probable_prime(remaining)
            i += 1

        if remaining > 1:
            if remaining not in self._index and remaining > self._scanned:
                with self._lock:
                    self._sparse.add(remaining)
            out.append(Factor(prime=remaining, exponent=1))
        return tuple(out)

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    def create_prime_stream(self, start_index: int = 0, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Stream[int]:
        return create_prime_stream(self, start_index, chunk_size)

    def create_factor_stream(self, x: int) -> Stream[Factor]:
        return create_factor_stream(self, x)


def create_prime_registry(
    initial_primes: Optional[Iterable[int]] = None,
    preload_count: int = DEFAULT_PRELOAD_COUNT,
    max_prime: Optional[int] = None,
) -> PrimeRegistry:
    return PrimeRegistry(initial_primes=initial_primes, preload_count=preload_count, max_prime=max_prime)


def create_prime_stream(
    registry: PrimeRegistry,
    start_index: int = 0,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Stream[int]:
    """
    Infinite stream of primes from ``start_index`` onward.

    The registry is grown ``chunk_size`` primes ahead of the cursor, so one
    lock acquisition covers a whole chunk of pulls.
    """
    _require_index(start_index)
    _require_int("chunk_size", chunk_size)
    if chunk_size < 1:
        raise InvalidArgumentError(f"chunk_size must be positive: {chunk_size}")

    def open_at(position: int):
        idx = position
        while True:
            registry.extend_to(idx + chunk_size - 1)
            end = idx + chunk_size
            while idx < end:
                yield registry.get_prime(idx)
                idx += 1

    return Stream(open_at, start=start_index)


def create_factor_stream(registry: PrimeRegistry, x: int) -> Stream[Factor]:
    """Finite stream over ``registry.factor(x)``, factored on first pull."""
    _require_int("x", x)
    if x <= 0:
        raise InvalidArgumentError(f"cannot factor non-positive value: {x}")
    factors: List[Factorization] = []

    def open_at(position: int):
        if not factors:
            factors.append(registry.factor(x))
        return iter(factors[0][position:])

    return Stream(open_at)
