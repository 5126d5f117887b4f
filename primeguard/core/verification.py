"""
Stateful verification sessions over the checksum engine.

A ``VerificationContext`` keeps an ordered log of results and an overall
status: ``UNKNOWN`` before the first check, ``VALID`` while every check has
passed, and ``INVALID`` from the first failure until ``reset()``.

Failures are data. An extraction error or checksum mismatch becomes an invalid
``VerificationResult`` carrying the message; only argument errors (and
transient errors, which the retry wrapper handles) propagate.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Optional

from .cache import LRUCache
from .checksums import ChecksumEngine
from .config import ChecksumOptions, VerificationOptions
from .errors import ChecksumExtractionError, InvalidArgumentError
from .retry import with_retry
from .types import (
    PrimeRegistryLike,
    VerificationFailure,
    VerificationResult,
    VerificationStatus,
)


logger = logging.getLogger(__name__)


class VerificationContext:
    def __init__(
        self,
        options: Optional[VerificationOptions] = None,
        registry: Optional[PrimeRegistryLike] = None,
        *,
        engine: Optional[ChecksumEngine] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.options = options if options is not None else VerificationOptions()
        if engine is None:
            engine = ChecksumEngine(
                ChecksumOptions(
                    checksum_power=self.options.checksum_power,
                    enable_cache=self.options.enable_cache,
                    cache_size=self.options.cache_size,
                ),
                registry,
            )
        self.engine = engine
        self._sleep = sleep
        self._results: List[VerificationResult] = []
        self._status = VerificationStatus.UNKNOWN
        # Results of values already verified valid. Unbounded until reset() trims it.
        self._valid_cache: dict[int, VerificationResult] = {}

    @property
    def registry(self) -> PrimeRegistryLike:
        return self.engine.registry

    @property
    def status(self) -> VerificationStatus:
        return self._status

    @property
    def results(self) -> List[VerificationResult]:
        return list(self._results)

    @property
    def cached_count(self) -> int:
        return len(self._valid_cache)

    def _check(self, value: int, registry: Optional[PrimeRegistryLike]) -> VerificationResult:
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidArgumentError(f"value must be an int, got {type(value).__name__}")
        try:
            extraction = self.engine.extract_factors_and_checksum(value, registry)
        except ChecksumExtractionError as exc:
            return VerificationResult(
                core_factors=(),
                checksum_prime=0,
                checksum_power=self.engine.checksum_power,
                valid=False,
                error=VerificationFailure(expected=0, actual=0, message=str(exc)),
            )
        error = None
        if not extraction.valid:
            error = VerificationFailure(
                expected=extraction.expected,
                actual=extraction.checksum_prime,
                message=(
                    f"checksum mismatch: expected {extraction.expected}, "
                    f"found {extraction.checksum_prime}"
                ),
            )
        return VerificationResult(
            core_factors=extraction.core_factors,
            checksum_prime=extraction.checksum_prime,
            checksum_power=extraction.checksum_power,
            valid=extraction.valid,
            error=error,
        )

    def _record(self, result: VerificationResult) -> None:
        self._results.append(result)
        if not result.valid:
            self._status = VerificationStatus.INVALID
        elif self._status is VerificationStatus.UNKNOWN:
            self._status = VerificationStatus.VALID

    def verify_value(
        self,
        value: int,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> VerificationResult:
        """Verify one checksummed value and log the result."""
        cached = self._valid_cache.get(value) if self.options.enable_cache else None
        if cached is not None:
            self._record(cached)
            return cached
        result = self._check(value, registry)
        if result.valid:
            if self.options.enable_cache:
                self._valid_cache[value] = result
        else:
            logger.debug("verification failed for %d: %s", value, result.error)
        self._record(result)
        return result

    def verify_values(
        self,
        values: Iterable[int],
        registry: Optional[PrimeRegistryLike] = None,
    ) -> List[VerificationResult]:
        """Verify in order; with ``fail_fast`` stop after the first invalid result."""
        out: List[VerificationResult] = []
        for value in values:
            result = self.verify_value(value, registry)
            out.append(result)
            if self.options.fail_fast and not result.valid:
                break
        return out

    def verify_value_with_retry(
        self,
        value: int,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> VerificationResult:
        if not self.options.enable_retry:
            return self.verify_value(value, registry)
        return with_retry(
            lambda: self.verify_value(value, registry),
            self.options.retry_options,
            sleep=self._sleep,
        )

    def create_optimized_verifier(
        self,
        registry: Optional[PrimeRegistryLike] = None,
    ) -> Callable[[int], bool]:
        """
        Validity-only checker with its own LRU of ``cache_size`` entries.

        Does not touch this context's result log or status. Any extraction or
        argument error counts as invalid.
        """
        cache: LRUCache[int, bool] = LRUCache(self.options.cache_size)
        engine = self.engine

        def verify(value: int) -> bool:
            cached = cache.get(value)
            if cached is not None:
                return cached
            try:
                valid = engine.extract_factors_and_checksum(value, registry).valid
            except (ChecksumExtractionError, InvalidArgumentError) as exc:
                logger.debug("optimized verifier rejected %r: %s", value, exc)
                valid = False
            cache.set(value, valid)
            return valid

        verify.cache = cache  # type: ignore[attr-defined]
        return verify

    def reset(self) -> None:
        """Clear the log and status; drop the cache only once it exceeds twice its bound."""
        self._results.clear()
        self._status = VerificationStatus.UNKNOWN
        if len(self._valid_cache) > 2 * self.options.cache_size:
            self._valid_cache.clear()

    def clear_cache(self) -> None:
        self._valid_cache.clear()
        self.engine.clear_cache()


def create_verification(
    options: Optional[VerificationOptions] = None,
    registry: Optional[PrimeRegistryLike] = None,
) -> VerificationContext:
    return VerificationContext(options, registry)
