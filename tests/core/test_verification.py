"""Tests for primeguard/core/verification.py."""

from __future__ import annotations

import pytest

from primeguard.core.config import RetryOptions, VerificationOptions
from primeguard.core.errors import InvalidArgumentError, TransientVerificationError
from primeguard.core.types import VerificationStatus, reconstruct
from primeguard.core.verification import VerificationContext, create_verification
from primeguard.state.prime_registry import PrimeRegistry


VALID_42 = 656250  # 42 * 5**6
TAMPERED = VALID_42 * 3
NOT_CHECKSUMMED = 65


class FlakyRegistry:
    """Registry double whose factor() fails transiently a set number of times."""

    def __init__(self, failures: int) -> None:
        self._real = PrimeRegistry()
        self.failures = failures
        self.calls = 0

    def get_prime(self, index: int) -> int:
        return self._real.get_prime(index)

    def get_index(self, prime: int) -> int:
        return self._real.get_index(prime)

    def factor(self, x: int):
        self.calls += 1
        if self.calls <= self.failures:
            raise TransientVerificationError("registry temporarily unavailable")
        return self._real.factor(x)


@pytest.fixture
def ctx() -> VerificationContext:
    return create_verification(registry=PrimeRegistry())


# ---------------------------------------------------------------------------
# verify_value / status
# ---------------------------------------------------------------------------

class TestVerifyValue:
    def test_status_starts_unknown(self, ctx):
        assert ctx.status is VerificationStatus.UNKNOWN
        assert ctx.results == []

    def test_valid_value(self, ctx):
        result = ctx.verify_value(VALID_42)
        assert result.valid is True
        assert result.error is None
        assert result.checksum_prime == 5
        assert result.checksum_power == 6
        assert reconstruct(result.core_factors) == 42
        assert ctx.status is VerificationStatus.VALID

    def test_mismatch_is_an_invalid_result(self, ctx):
        result = ctx.verify_value(TAMPERED)
        assert result.valid is False
        assert result.error is not None
        assert (result.error.expected, result.error.actual) == (3, 5)
        assert "expected 3" in result.error.message
        assert ctx.status is VerificationStatus.INVALID

    def test_extraction_error_is_an_invalid_result(self, ctx):
        result = ctx.verify_value(NOT_CHECKSUMMED)
        assert result.valid is False
        assert result.core_factors == ()
        assert result.error is not None
        assert (result.error.expected, result.error.actual) == (0, 0)
        assert "exponent" in result.error.message

    def test_invalid_status_is_sticky(self, ctx):
        ctx.verify_value(TAMPERED)
        ctx.verify_value(VALID_42)
        assert ctx.status is VerificationStatus.INVALID

    def test_argument_errors_propagate(self, ctx):
        with pytest.raises(InvalidArgumentError):
            ctx.verify_value("656250")
        assert ctx.results == []

    def test_results_is_a_copy(self, ctx):
        ctx.verify_value(VALID_42)
        ctx.results.clear()
        assert len(ctx.results) == 1

    def test_cache_short_circuits_valid_values(self):
        registry = FlakyRegistry(failures=0)
        ctx = VerificationContext(registry=registry)
        first = ctx.verify_value(VALID_42)
        second = ctx.verify_value(VALID_42)
        assert second == first
        assert registry.calls == 1
        assert len(ctx.results) == 2
        assert ctx.cached_count == 1

    def test_invalid_values_are_not_cached(self, ctx):
        ctx.verify_value(TAMPERED)
        assert ctx.cached_count == 0

    def test_cache_disabled(self):
        registry = FlakyRegistry(failures=0)
        ctx = VerificationContext(VerificationOptions(enable_cache=False), registry)
        ctx.verify_value(VALID_42)
        ctx.verify_value(VALID_42)
        assert registry.calls == 2


# ---------------------------------------------------------------------------
# verify_values
# ---------------------------------------------------------------------------

class TestVerifyValues:
    def test_verifies_everything_by_default(self, ctx):
        results = ctx.verify_values([VALID_42, TAMPERED, 2**6])
        assert [r.valid for r in results] == [True, False, True]
        assert len(ctx.results) == 3

    def test_fail_fast_stops_at_first_invalid(self):
        ctx = VerificationContext(VerificationOptions(fail_fast=True), PrimeRegistry())
        results = ctx.verify_values([VALID_42, TAMPERED, 2**6])
        assert [r.valid for r in results] == [True, False]
        assert len(ctx.results) == 2


# ---------------------------------------------------------------------------
# Optimized verifier
# ---------------------------------------------------------------------------

class TestOptimizedVerifier:
    def test_validity_only(self, ctx):
        verify = ctx.create_optimized_verifier()
        assert verify(VALID_42) is True
        assert verify(TAMPERED) is False
        assert verify(NOT_CHECKSUMMED) is False
        assert verify(-1) is False
        assert ctx.results == []
        assert ctx.status is VerificationStatus.UNKNOWN

    def test_has_its_own_bounded_cache(self):
        registry = FlakyRegistry(failures=0)
        ctx = VerificationContext(VerificationOptions(cache_size=2), registry)
        verify = ctx.create_optimized_verifier()
        verify(VALID_42)
        verify(VALID_42)
        assert registry.calls == 1
        verify(2**6)
        verify(6 * 3**6)
        assert len(verify.cache) == 2
        assert VALID_42 not in verify.cache


# ---------------------------------------------------------------------------
# reset / clear_cache
# ---------------------------------------------------------------------------

class TestReset:
    def test_reset_clears_log_and_status(self, ctx):
        ctx.verify_value(TAMPERED)
        ctx.reset()
        assert ctx.results == []
        assert ctx.status is VerificationStatus.UNKNOWN

    def test_reset_keeps_small_cache(self, ctx):
        ctx.verify_value(VALID_42)
        ctx.reset()
        assert ctx.cached_count == 1

    def test_reset_drops_oversized_cache(self):
        ctx = VerificationContext(VerificationOptions(cache_size=1), PrimeRegistry())
        ctx.verify_values([VALID_42, 2**6, 6 * 3**6])
        assert ctx.cached_count == 3
        ctx.reset()
        assert ctx.cached_count == 0

    def test_clear_cache(self, ctx):
        ctx.verify_value(VALID_42)
        ctx.clear_cache()
        assert ctx.cached_count == 0


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------

class TestRetry:
    def test_retries_transient_failures(self):
        sleeps: list[float] = []
        registry = FlakyRegistry(failures=2)
        ctx = VerificationContext(
            VerificationOptions(enable_retry=True, retry_options=RetryOptions(initial_delay=0.01)),
            registry,
            sleep=sleeps.append,
        )
        result = ctx.verify_value_with_retry(VALID_42)
        assert result.valid is True
        assert registry.calls == 3
        assert sleeps == pytest.approx([0.01, 0.02])
        assert len(ctx.results) == 1

    def test_gives_up_after_max_retries(self):
        registry = FlakyRegistry(failures=10)
        ctx = VerificationContext(
            VerificationOptions(enable_retry=True, retry_options=RetryOptions(max_retries=2)),
            registry,
            sleep=lambda _: None,
        )
        with pytest.raises(TransientVerificationError):
            ctx.verify_value_with_retry(VALID_42)
        assert registry.calls == 3

    def test_retry_disabled_calls_once(self):
        registry = FlakyRegistry(failures=1)
        ctx = VerificationContext(registry=registry, sleep=lambda _: None)
        with pytest.raises(TransientVerificationError):
            ctx.verify_value_with_retry(VALID_42)
        assert registry.calls == 1

    def test_structural_failures_are_not_retried(self):
        sleeps: list[float] = []
        ctx = VerificationContext(
            VerificationOptions(enable_retry=True),
            PrimeRegistry(),
            sleep=sleeps.append,
        )
        assert ctx.verify_value_with_retry(NOT_CHECKSUMMED).valid is False
        assert sleeps == []
