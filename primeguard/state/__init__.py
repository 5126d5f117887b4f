"""
Prime registry state and lazy streams
"""

from .streams import Stream
from .prime_registry import (
    PrimeRegistry,
    create_prime_registry,
    create_prime_stream,
    create_factor_stream,
)

__all__ = [
    "Stream",
    "PrimeRegistry",
    "create_prime_registry",
    "create_prime_stream",
    "create_factor_stream",
]
