"""Retry/backoff for transient request failures."""

from __future__ import annotations

import logging as py_logging
import math
import random
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol, TypeVar

from powopy.errors import TRANSIENT_ERRORS, ConfigurationError, RateLimitedError, RequestError

T = TypeVar("T")

JITTER_SPAN = 0.25


class WarningLogger(Protocol):
    def warning(self, msg: str) -> object: ...


@dataclass(frozen=True)
class RetryPolicy:
    enabled: bool = True
    max_retries: int = 3
    backoff_base: float = 0.5
    backoff_max: float = 8.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be zero or greater")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_seconds(self, attempt: int, *, jitter: Callable[[], float] = random.random) -> float:
        exponential = self.backoff_base * (2 ** (attempt - 1))
        return min(exponential + jitter() * JITTER_SPAN, self.backoff_max)

    def sleep_seconds(
        self,
        error: RequestError,
        attempt: int,
        *,
        jitter: Callable[[], float] = random.random,
    ) -> float:
        header_seconds = retry_after_seconds(error)
        if header_seconds is not None:
            return header_seconds
        return self.backoff_seconds(attempt, jitter=jitter)


def _header(headers: Mapping[str, str] | None, name: str) -> str | None:
    for key, value in (headers or {}).items():
        if key.lower() == name:
            return value
    return None


def retry_after_seconds(error: RequestError) -> float | None:
    """Seconds requested by a 429's ``Retry-After`` header, if usable."""
    if not isinstance(error, RateLimitedError):
        return None
    raw = _header(error.headers, "retry-after")
    if raw is None or not str(raw).strip():
        return None
    try:
        seconds = float(raw)
    except ValueError:
        # HTTP-date form is not supported; fall back to computed backoff.
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


def run_with_retry(
    operation: Callable[[], T],
    *,
    policy: RetryPolicy,
    method: str = "GET",
    url: str = "",
    sleep: Callable[[float], None] = time.sleep,
    logger: WarningLogger | None = None,
    jitter: Callable[[], float] = random.random,
) -> T:
    log = logger if logger is not None else py_logging.getLogger(__name__)
    attempt = 0

    while True:
        attempt += 1
        try:
            return operation()
        except TRANSIENT_ERRORS as exc:
            if not policy.enabled or attempt >= policy.max_attempts:
                raise
            delay = policy.sleep_seconds(exc, attempt, jitter=jitter)
            log.warning(
                f"Retrying {method.upper()} {url} in {delay:.2f}s "
                f"(attempt {attempt}/{policy.max_attempts})"
            )
            sleep(delay)
