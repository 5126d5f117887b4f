"""
Karatsuba multiplication.

Python's builtin product already switches to Karatsuba internally for large
operands; this module exposes the split explicitly so the recursion can be
tested and reasoned about on its own.

Algorithm Design:
- Split both operands at ``m = max_bits // 2``: ``x = xh * 2**m + xl``
- ``z0 = xl*yl``, ``z2 = xh*yh``, ``z1 = (xl+xh)(yl+yh) - z0 - z2``
- ``x*y = z2 * 2**(2m) + z1 * 2**m + z0``
- Time Complexity: O(n ** log2(3))
"""

from __future__ import annotations

from typing import Any

from .config import MAX_SUPPORTED_BITS
from .errors import InvalidArgumentError
from .gcd import check_bits
from .modular import mod


KARATSUBA_THRESHOLD_BITS = 64


def _require_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
    return v


def _karatsuba(x: int, y: int, threshold: int) -> int:
    if x.bit_length() <= threshold or y.bit_length() <= threshold:
        return x * y
    m = max(x.bit_length(), y.bit_length()) // 2
    mask = (1 << m) - 1
    xh, xl = x >> m, x & mask
    yh, yl = y >> m, y & mask
    z0 = _karatsuba(xl, yl, threshold)
    z2 = _karatsuba(xh, yh, threshold)
    z1 = _karatsuba(xl + xh, yl + yh, threshold) - z0 - z2
    return (z2 << (2 * m)) + (z1 << m) + z0


def karatsuba_multiply(
    a: int,
    b: int,
    *,
    threshold: int = KARATSUBA_THRESHOLD_BITS,
    strict: bool = False,
) -> int:
    """Exact product ``a * b``; operands at or below ``threshold`` bits multiply natively."""
    _require_int("a", a)
    _require_int("b", b)
    _require_int("threshold", threshold)
    if threshold < 1:
        raise InvalidArgumentError(f"threshold must be positive: {threshold}")
    if strict:
        check_bits("karatsuba_multiply", a, b, max_bits=MAX_SUPPORTED_BITS)
    negative = (a < 0) != (b < 0)
    product = _karatsuba(abs(a), abs(b), threshold)
    return -product if negative else product


def karatsuba_mod_mul(a: int, b: int, m: int, *, strict: bool = False) -> int:
    """``a * b mod |m|`` with the operands reduced before multiplying."""
    _require_int("a", a)
    _require_int("b", b)
    _require_int("m", m)
    if m == 0:
        raise InvalidArgumentError("modulus must be non-zero")
    if strict:
        check_bits("karatsuba_mod_mul", a, b, m)
    return mod(karatsuba_multiply(mod(a, m), mod(b, m)), m)
