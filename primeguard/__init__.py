"""
primeguard: exact integer arithmetic and prime-factorization checksums
"""

# core must load before state: the checksum engine builds a default registry.
from .core import (
    PrecisionError,
    InvalidArgumentError,
    ChecksumExtractionError,
    TransientVerificationError,
    RegistryLimitError,
    Factor,
    VerificationResult,
    VerificationStatus,
    ChecksumOptions,
    VerificationOptions,
    ChecksumEngine,
    create_checksums,
    VerificationContext,
    create_verification,
)
from .state import PrimeRegistry, create_prime_registry

__version__ = "0.1.0"

__all__ = [
    "PrecisionError",
    "InvalidArgumentError",
    "ChecksumExtractionError",
    "TransientVerificationError",
    "RegistryLimitError",
    "Factor",
    "VerificationResult",
    "VerificationStatus",
    "ChecksumOptions",
    "VerificationOptions",
    "ChecksumEngine",
    "create_checksums",
    "VerificationContext",
    "create_verification",
    "PrimeRegistry",
    "create_prime_registry",
]
