"""Data types shared by the checksum engine and the verification context.

All value types are frozen dataclasses. A factorization is a tuple of
``Factor`` with pairwise distinct primes; the product of ``prime ** exponent``
over the tuple reconstructs the factored value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterable, Protocol, Sequence, Tuple, runtime_checkable

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class Factor:
    """One ``prime ** exponent`` term of a factorization."""

    prime: int
    exponent: int

    def __post_init__(self) -> None:
        for name, v in (("prime", self.prime), ("exponent", self.exponent)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
        if self.prime < 2:
            raise InvalidArgumentError(f"prime must be > 1: {self.prime}")
        if self.exponent <= 0:
            raise InvalidArgumentError(f"exponent must be positive: {self.exponent}")

    def value(self) -> int:
        return self.prime ** self.exponent


Factorization = Tuple[Factor, ...]


def as_factorization(factors: Iterable[Factor | tuple[int, int]]) -> Factorization:
    """Normalize ``(prime, exponent)`` pairs into a tuple of ``Factor``.

    Raises InvalidArgumentError if a prime repeats or a pair is malformed.
    """
    out: list[Factor] = []
    seen: set[int] = set()
    for f in factors:
        if isinstance(f, Factor):
            factor = f
        else:
            try:
                prime, exponent = f
            except (TypeError, ValueError):
                raise InvalidArgumentError(f"expected a Factor or (prime, exponent) pair, got {f!r}") from None
            factor = Factor(prime=prime, exponent=exponent)
        if factor.prime in seen:
            raise InvalidArgumentError(f"prime {factor.prime} repeats in factorization")
        seen.add(factor.prime)
        out.append(factor)
    return tuple(out)


def reconstruct(factors: Iterable[Factor]) -> int:
    """Product of ``prime ** exponent`` over ``factors`` (1 for an empty list)."""
    result = 1
    for f in factors:
        result *= f.prime ** f.exponent
    return result


def canonical_key(factors: Sequence[Factor]) -> str:
    """String form ``"p^e,p^e,..."`` used as a cache key."""
    return ",".join(f"{f.prime}^{f.exponent}" for f in factors)


@runtime_checkable
class PrimeRegistryLike(Protocol):
    """The three operations the checksum layer needs from a registry."""

    def get_prime(self, index: int) -> int: ...

    def get_index(self, prime: int) -> int: ...

    def factor(self, x: int) -> Factorization: ...


@dataclass(frozen=True)
class XorHashState:
    """Running accumulator for incremental batch checksums."""

    xor_sum: int = 0
    count: int = 0


@dataclass(frozen=True)
class ChecksumExtraction:
    """Split of a checksummed value into core factors and its checksum term.

    ``expected`` is the checksum prime recomputed from ``core_factors``; it
    equals ``checksum_prime`` exactly when ``valid`` is true.
    """

    core_factors: Factorization
    checksum_prime: int
    checksum_power: int
    valid: bool
    expected: int


@unique
class VerificationStatus(Enum):
    VALID = "valid"
    INVALID = "invalid"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class VerificationFailure:
    """Detail attached to an invalid ``VerificationResult``."""

    expected: int
    actual: int
    message: str


@dataclass(frozen=True)
class VerificationResult:
    core_factors: Factorization
    checksum_prime: int
    checksum_power: int
    valid: bool
    error: VerificationFailure | None = None
