"""
Core arithmetic, checksum and verification algorithms
"""

from .errors import (
    PrecisionError,
    InvalidArgumentError,
    NotPrimeError,
    BitSizeExceededError,
    ArithmeticOverflowError,
    NoInverseError,
    ChecksumExtractionError,
    ChecksumMismatchError,
    TransientVerificationError,
    RegistryLimitError,
)
from .types import (
    Factor,
    Factorization,
    PrimeRegistryLike,
    XorHashState,
    ChecksumExtraction,
    VerificationFailure,
    VerificationResult,
    VerificationStatus,
    reconstruct,
    canonical_key,
)
from .config import (
    BigIntOptions,
    ModularOptions,
    ChecksumOptions,
    VerificationOptions,
    RetryOptions,
    MAX_SUPPORTED_BITS,
)
from .cache import LRUCache, LFUCache, FIFOCache, TTLCache, create_cache, memoize
from .bigint import (
    bit_length,
    exactly_equals,
    to_byte_array,
    from_byte_array,
    get_random_bigint,
    is_probable_prime,
    count_leading_zeros,
    count_trailing_zeros,
    get_bit,
    set_bit,
    BigIntOperations,
    create_bigint_operations,
)
from .gcd import gcd, extended_gcd, lcm, binary_gcd
from .modular import (
    mod,
    mod_add,
    mod_sub,
    mod_mul,
    mod_pow,
    mod_inverse,
    integer_sqrt,
    is_perfect_square,
    primitive_root,
    ModularOperations,
    create_modular_operations,
)
from .advanced import karatsuba_multiply, karatsuba_mod_mul
from .checksums import ChecksumEngine, create_checksums, calculate_xor_sum, calculate_checksum
from .verification import VerificationContext, create_verification
from .retry import with_retry

__all__ = [
    "PrecisionError",
    "InvalidArgumentError",
    "NotPrimeError",
    "BitSizeExceededError",
    "ArithmeticOverflowError",
    "NoInverseError",
    "ChecksumExtractionError",
    "ChecksumMismatchError",
    "TransientVerificationError",
    "RegistryLimitError",
    "Factor",
    "Factorization",
    "PrimeRegistryLike",
    "XorHashState",
    "ChecksumExtraction",
    "VerificationFailure",
    "VerificationResult",
    "VerificationStatus",
    "reconstruct",
    "canonical_key",
    "BigIntOptions",
    "ModularOptions",
    "ChecksumOptions",
    "VerificationOptions",
    "RetryOptions",
    "MAX_SUPPORTED_BITS",
    "LRUCache",
    "LFUCache",
    "FIFOCache",
    "TTLCache",
    "create_cache",
    "memoize",
    "bit_length",
    "exactly_equals",
    "to_byte_array",
    "from_byte_array",
    "get_random_bigint",
    "is_probable_prime",
    "count_leading_zeros",
    "count_trailing_zeros",
    "get_bit",
    "set_bit",
    "BigIntOperations",
    "create_bigint_operations",
    "gcd",
    "extended_gcd",
    "lcm",
    "binary_gcd",
    "mod",
    "mod_add",
    "mod_sub",
    "mod_mul",
    "mod_pow",
    "mod_inverse",
    "integer_sqrt",
    "is_perfect_square",
    "primitive_root",
    "ModularOperations",
    "create_modular_operations",
    "karatsuba_multiply",
    "karatsuba_mod_mul",
    "ChecksumEngine",
    "create_checksums",
    "calculate_xor_sum",
    "calculate_checksum",
    "VerificationContext",
    "create_verification",
    "with_retry",
]
