"""
Prime checksums over factorizations.

A value's checksum prime is ``registry.get_prime(h)`` where ``h`` is the XOR of
``index(prime) * exponent`` over the value's factorization. Attaching the
checksum multiplies the value by ``checksum_prime ** checksum_power``;
extraction factors the result, picks out the checksum term, and recomputes the
checksum from what is left.

Checksum identification:
- Candidates are factors with exponent >= ``checksum_power``; none means the
  value is not checksummed (``ChecksumExtractionError``)
- Preference: exponent exactly ``checksum_power``, then higher exponents, then
  smaller primes
- The first candidate that recomputes to itself wins; if none does, the most
  preferred one is reported with ``valid=False``

Exact-power-first matters when a core factor has a higher exponent than the
checksum term, e.g. ``2**7 * 5**2 * 11**6``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence

from .cache import CacheStats, LRUCache
from .config import ChecksumOptions
from .errors import (
    ChecksumExtractionError,
    ChecksumMismatchError,
    InvalidArgumentError,
    RegistryLimitError,
)
from .types import (
    ChecksumExtraction,
    Factor,
    Factorization,
    PrimeRegistryLike,
    XorHashState,
    as_factorization,
    canonical_key,
    reconstruct,
)
from ..state.prime_registry import PrimeRegistry


logger = logging.getLogger(__name__)


def _require_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
    return v


def calculate_xor_sum(
    factors: Iterable[Factor | tuple[int, int]],
    registry: Optional[PrimeRegistryLike] = None,
) -> int:
    """
    XOR of ``index(prime) * exponent`` over ``factors``.

    Without a registry each factor's position in the list stands in for its
    prime index.
    """
    acc = 0
    for position, f in enumerate(as_factorization(factors)):
        idx = registry.get_index(f.prime) if registry is not None else position
        acc ^= idx * f.exponent
    return acc


def calculate_checksum(
    factors: Iterable[Factor | tuple[int, int]],
    registry: PrimeRegistryLike,
) -> int:
    """Checksum prime of ``factors``; the empty factorization maps to ``get_prime(0)``."""
    return registry.get_prime(calculate_xor_sum(factors, registry))


def _strip(factors: Factorization, checksum: Factor, power: int) -> Factorization:
    core: List[Factor] = []
    for f in factors:
        if f.prime != checksum.prime:
            core.append(f)
        elif f.exponent > power:
            core.append(Factor(prime=f.prime, exponent=f.exponent - power))
    return tuple(core)


class ChecksumEngine:
    """
    Attaches, extracts and batches checksum primes.

    Every method accepts an explicit ``registry``; when omitted the engine's own
    registry is used. Checksum results are memoized per registry and
    canonical factor string when ``enable_cache`` is set.
    """

    def __init__(
        self,
        options: Optional[ChecksumOptions] = None,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> None:
        self.options = options if options is not None else ChecksumOptions()
        self.registry: PrimeRegistryLike = registry if registry is not None else PrimeRegistry()
        self._cache: LRUCache[tuple[Any, str], int] = LRUCache(self.options.cache_size)

    @property
    def checksum_power(self) -> int:
        return self.options.checksum_power

    def _registry(self, registry: Optional[PrimeRegistryLike]) -> PrimeRegistryLike:
        return registry if registry is not None else self.registry

    def calculate_xor_sum(
        self,
        factors: Iterable[Factor | tuple[int, int]],
        registry: Optional[PrimeRegistryLike] = None,
    ) -> int:
        return calculate_xor_sum(factors, registry)

    def calculate_checksum(
        self,
        factors: Iterable[Factor | tuple[int, int]],
        registry: Optional[PrimeRegistryLike] = None,
    ) -> int:
        reg = self._registry(registry)
        fs = as_factorization(factors)
        if not self.options.enable_cache:
            return calculate_checksum(fs, reg)
        key = (reg, canonical_key(fs))
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        result = calculate_checksum(fs, reg)
        self._cache.set(key, result)
        return result

    def attach_checksum(
        self,
        value: int,
        factors: Optional[Iterable[Factor | tuple[int, int]]] = None,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> int:
        """
        Return ``value * checksum_prime ** checksum_power``.

        ``factors`` defaults to ``registry.factor(value)``; when given it must
        reconstruct to ``value``.
        """
        _require_int("value", value)
        if value <= 0:
            raise InvalidArgumentError(f"can only checksum positive values: {value}")
        reg = self._registry(registry)
        if factors is None:
            fs = reg.factor(value)
        else:
            fs = as_factorization(factors)
            if reconstruct(fs) != value:
                raise InvalidArgumentError(f"factors do not reconstruct to {value}")

        checksum_prime = self.calculate_checksum(fs, reg)
        result = value * checksum_prime ** self.checksum_power

        if self.options.verify_on_operation:
            extraction = self.extract_factors_and_checksum(result, reg)
            if not extraction.valid or reconstruct(extraction.core_factors) != value:
                raise ChecksumMismatchError(extraction.expected, extraction.checksum_prime)
        return result

    def extract_factors_and_checksum(
        self,
        value: int,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> ChecksumExtraction:
        _require_int("value", value)
        if value <= 0:
            raise ChecksumExtractionError(f"cannot extract a checksum from non-positive value {value}")
        reg = self._registry(registry)
        try:
            return self._extract(value, reg)
        except RegistryLimitError as exc:
            raise ChecksumExtractionError(f"cannot extract a checksum from {value}: {exc}") from exc

    def _extract(self, value: int, reg: PrimeRegistryLike) -> ChecksumExtraction:
        power = self.checksum_power
        factors = reg.factor(value)

        candidates = [f for f in factors if f.exponent >= power]
        if not candidates:
            raise ChecksumExtractionError(
                f"no factor of {value} has exponent >= checksum power {power}"
            )
        candidates.sort(key=lambda f: (f.exponent != power, -f.exponent, f.prime))

        rejected: List[ChecksumExtraction] = []
        for cand in candidates:
            core = _strip(factors, cand, power)
            expected = self.calculate_checksum(core, reg)
            extraction = ChecksumExtraction(
                core_factors=core,
                checksum_prime=cand.prime,
                checksum_power=power,
                valid=expected == cand.prime,
                expected=expected,
            )
            if extraction.valid:
                return extraction
            rejected.append(extraction)
        return rejected[0]

    def _included_index(self, value: int, reg: PrimeRegistryLike) -> Optional[int]:
        try:
            extraction = self.extract_factors_and_checksum(value, reg)
        except ChecksumExtractionError as exc:
            logger.debug("batch checksum skipped %s: %s", value, exc)
            return None
        if not extraction.valid:
            logger.debug(
                "batch checksum skipped %s: expected checksum %d, found %d",
                value,
                extraction.expected,
                extraction.checksum_prime,
            )
            return None
        return reg.get_index(extraction.checksum_prime)

    def calculate_batch_checksum(
        self,
        values: Sequence[int] | Iterable[int],
        registry: Optional[PrimeRegistryLike] = None,
    ) -> int:
        """
        Single prime summarizing a batch of checksummed values.

        XORs the registry indices of every valid value's checksum prime;
        values that fail extraction or validation are skipped.
        """
        reg = self._registry(registry)
        acc = 0
        for v in values:
            idx = self._included_index(v, reg)
            if idx is not None:
                acc ^= idx
        return reg.get_prime(acc)

    def create_xor_hash_state(self) -> XorHashState:
        return XorHashState()

    def update_xor_hash(
        self,
        state: XorHashState,
        value: int,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> XorHashState:
        """Fold one value into ``state``; invalid values leave it unchanged."""
        idx = self._included_index(value, self._registry(registry))
        if idx is None:
            return state
        return XorHashState(xor_sum=state.xor_sum ^ idx, count=state.count + 1)

    def get_checksum_from_xor_hash(
        self,
        state: XorHashState,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> int:
        return self._registry(registry).get_prime(state.xor_sum)

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()


def create_checksums(
    options: Optional[ChecksumOptions] = None,
    registry: Optional[PrimeRegistryLike] = None,
) -> ChecksumEngine:
    return ChecksumEngine(options, registry)
