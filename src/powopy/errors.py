"""Typed error model and exit code contract."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    REQUEST_ERROR = 4
    VALIDATION_ERROR = 7


@dataclass
class PowoError(Exception):
    message: str
    hint: str = ""

    exit_code: ClassVar[ExitCode] = ExitCode.REQUEST_ERROR

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


class ConfigurationError(PowoError):
    """Client setup is invalid or incomplete."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(PowoError):
    """Caller input was rejected before any request was sent."""

    exit_code = ExitCode.VALIDATION_ERROR


@dataclass
class RequestError(PowoError):
    """An HTTP request failed or its response could not be used.

    Carries the request context so callers can log the failure without
    re-deriving it. ``status`` is ``None`` for failures below the HTTP layer.
    """

    status: int | None = None
    method: str | None = None
    url: str | None = None
    body: object = None
    headers: Mapping[str, str] = field(default_factory=dict)


class ClientError(RequestError):
    """HTTP 4xx other than 429."""


class RateLimitedError(RequestError):
    """HTTP 429."""


class ServerError(RequestError):
    """HTTP 5xx."""


class RequestTimeoutError(RequestError):
    """The transport timed out before a response arrived."""


class ConnectionFailedError(RequestError):
    """No connection to the server could be established."""


class ParseError(RequestError):
    """A successful response carried a body that is not valid JSON."""


TRANSIENT_ERRORS: tuple[type[RequestError], ...] = (RateLimitedError, ServerError)


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
