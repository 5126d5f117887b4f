"""Exponential backoff for transient verification failures."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from .config import RetryOptions
from .errors import TransientVerificationError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    fn: Callable[[], T],
    options: Optional[RetryOptions] = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call ``fn`` until it returns, retrying only on ``TransientVerificationError``.

    At most ``max_retries`` retries follow the first attempt. The delay before
    retry ``n`` (0-based) is ``initial_delay * backoff_factor ** n``, capped at
    ``max_delay``. The last transient error is re-raised; any other exception
    propagates immediately.
    """
    opts = options if options is not None else RetryOptions()
    attempt = 0
    while True:
        try:
            return fn()
        except TransientVerificationError as exc:
            if attempt >= opts.max_retries:
                raise
            delay = opts.delay_for(attempt)
            attempt += 1
            logger.warning(
                "transient verification failure (retry %d/%d in %.3fs): %s",
                attempt,
                opts.max_retries,
                delay,
                exc,
            )
            sleep(delay)
