"""Exception types for the precision core.

Every error raised by `primeguard` derives from ``PrecisionError``. Argument
errors also derive from ``ValueError`` so callers that only know the builtin
taxonomy still catch them.

Checksum mismatches are *not* exceptions: extraction returns ``valid=False`` so
batch callers can keep going. ``ChecksumExtractionError`` means the value does
not look checksummed at all.
"""

from __future__ import annotations


class PrecisionError(Exception):
    """Base class for all errors raised by the precision core."""


class InvalidArgumentError(PrecisionError, ValueError):
    """Raised when a primitive receives a malformed argument."""


class NotPrimeError(InvalidArgumentError):
    """Raised when a prime was required but a composite (or unit) was given."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(f"{value} is not a prime number")


class BitSizeExceededError(PrecisionError):
    """Raised by strict-mode guards when an operand is wider than allowed."""

    def __init__(self, operation: str, max_bits: int, actual_bits: int) -> None:
        self.operation = operation
        self.max_bits = max_bits
        self.actual_bits = actual_bits
        super().__init__(
            f"operation exceeds maximum supported bit size ({max_bits}): "
            f"{operation} has {actual_bits} bits"
        )


class ArithmeticOverflowError(PrecisionError, OverflowError):
    """Raised when a result would exceed the configured width."""


class NoInverseError(PrecisionError, ArithmeticError):
    """Raised when a modular inverse is requested for non-coprime operands."""

    def __init__(self, a: int, m: int, gcd: int) -> None:
        self.a = a
        self.m = m
        self.gcd = gcd
        super().__init__(
            f"modular inverse does not exist: {a} and {m} are not coprime (gcd = {gcd})"
        )


class ChecksumExtractionError(PrecisionError):
    """Raised when a value cannot be split into core factors and a checksum."""


class ChecksumMismatchError(ChecksumExtractionError):
    """Raised when an attach-time self check finds an inconsistent checksum."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"checksum mismatch: expected {expected}, found {actual}")


class TransientVerificationError(PrecisionError):
    """A verification failure that may succeed when retried."""


class RegistryLimitError(PrecisionError):
    """Raised when answering would grow the prime registry past its bound."""

    def __init__(self, max_prime: int, requested: str) -> None:
        self.max_prime = max_prime
        self.requested = requested
        super().__init__(f"prime registry is bounded at {max_prime}: cannot reach {requested}")
