"""Configuration objects for the precision core.

Each component takes one frozen options dataclass. Defaults are the documented
defaults, so ``ChecksumOptions()`` is the standard configuration.

``from_mapping()`` builds an options object from a plain dict (for example a
parsed config file). Both snake_case and camelCase keys are accepted; unknown
keys are rejected so typos fail loudly.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from .errors import InvalidArgumentError


MAX_SUPPORTED_BITS = 4096
DEFAULT_CACHE_SIZE = 100
DEFAULT_VERIFICATION_CACHE_SIZE = 1000
DEFAULT_CHECKSUM_POWER = 6

_ALIASES: dict[str, str] = {
    "checksumPower": "checksum_power",
    "enableCache": "enable_cache",
    "useCache": "enable_cache",
    "use_cache": "enable_cache",
    "cacheSize": "cache_size",
    "maxBits": "max_bits",
    "failFast": "fail_fast",
    "enableRetry": "enable_retry",
    "retryOptions": "retry_options",
    "verifyOnOperation": "verify_on_operation",
    "maxRetries": "max_retries",
    "initialDelay": "initial_delay",
    "maxDelay": "max_delay",
    "backoffFactor": "backoff_factor",
}


def _require_int(name: str, value: Any, *, minimum: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(value).__name__}")
    if value < minimum:
        raise InvalidArgumentError(f"{name} must be >= {minimum}: {value}")


def _require_number(name: str, value: Any, *, minimum: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"{name} must be a number, got {type(value).__name__}")
    if value < minimum:
        raise InvalidArgumentError(f"{name} must be >= {minimum}: {value}")


def _require_bool(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be a bool, got {type(value).__name__}")


def _normalize_keys(cls: type, raw: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(cls)}
    out: dict[str, Any] = {}
    for key, value in raw.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise InvalidArgumentError(f"unknown option for {cls.__name__}: {key!r}")
        out[name] = value
    return out


@dataclass(frozen=True)
class RetryOptions:
    """Exponential backoff for transient verification failures."""

    max_retries: int = 3
    initial_delay: float = 0.1
    max_delay: float = 2.0
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        _require_int("max_retries", self.max_retries, minimum=0)
        _require_number("initial_delay", self.initial_delay, minimum=0)
        _require_number("max_delay", self.max_delay, minimum=0)
        _require_number("backoff_factor", self.backoff_factor, minimum=1)

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based), capped at ``max_delay``."""
        return min(self.max_delay, self.initial_delay * (self.backoff_factor ** attempt))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "RetryOptions":
        return cls(**_normalize_keys(cls, raw))


@dataclass(frozen=True)
class BigIntOptions:
    enable_cache: bool = True
    cache_size: int = DEFAULT_CACHE_SIZE
    strict: bool = False
    max_bits: int = MAX_SUPPORTED_BITS

    def __post_init__(self) -> None:
        _require_bool("enable_cache", self.enable_cache)
        _require_bool("strict", self.strict)
        _require_int("cache_size", self.cache_size, minimum=1)
        _require_int("max_bits", self.max_bits, minimum=1)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "BigIntOptions":
        return cls(**_normalize_keys(cls, raw))


@dataclass(frozen=True)
class ModularOptions:
    enable_cache: bool = True
    cache_size: int = DEFAULT_CACHE_SIZE
    strict: bool = False

    def __post_init__(self) -> None:
        _require_bool("enable_cache", self.enable_cache)
        _require_bool("strict", self.strict)
        _require_int("cache_size", self.cache_size, minimum=1)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ModularOptions":
        return cls(**_normalize_keys(cls, raw))


@dataclass(frozen=True)
class ChecksumOptions:
    """Options for ``ChecksumEngine``.

    ``checksum_power`` is the exponent at which the checksum prime is
    multiplied into a value. ``verify_on_operation`` re-extracts every attached
    value and raises if it does not validate.
    """

    checksum_power: int = DEFAULT_CHECKSUM_POWER
    enable_cache: bool = True
    cache_size: int = DEFAULT_VERIFICATION_CACHE_SIZE
    verify_on_operation: bool = False

    def __post_init__(self) -> None:
        _require_int("checksum_power", self.checksum_power, minimum=1)
        _require_bool("enable_cache", self.enable_cache)
        _require_int("cache_size", self.cache_size, minimum=1)
        _require_bool("verify_on_operation", self.verify_on_operation)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ChecksumOptions":
        return cls(**_normalize_keys(cls, raw))


@dataclass(frozen=True)
class VerificationOptions:
    enable_cache: bool = True
    cache_size: int = DEFAULT_VERIFICATION_CACHE_SIZE
    fail_fast: bool = False
    enable_retry: bool = False
    retry_options: RetryOptions = field(default_factory=RetryOptions)
    checksum_power: int = DEFAULT_CHECKSUM_POWER

    def __post_init__(self) -> None:
        _require_bool("enable_cache", self.enable_cache)
        _require_int("cache_size", self.cache_size, minimum=1)
        _require_bool("fail_fast", self.fail_fast)
        _require_bool("enable_retry", self.enable_retry)
        _require_int("checksum_power", self.checksum_power, minimum=1)
        if not isinstance(self.retry_options, RetryOptions):
            raise InvalidArgumentError("retry_options must be a RetryOptions")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "VerificationOptions":
        kwargs = _normalize_keys(cls, raw)
        retry = kwargs.get("retry_options")
        if isinstance(retry, Mapping):
            kwargs["retry_options"] = RetryOptions.from_mapping(retry)
        return cls(**kwargs)
