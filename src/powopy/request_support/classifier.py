"""Map raw HTTP responses to parsed JSON or a typed failure."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from powopy.errors import (
    ClientError,
    ConnectionFailedError,
    ParseError,
    RateLimitedError,
    RequestError,
    RequestTimeoutError,
    ServerError,
)
from powopy.transport import HttpResponse


class FailureKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    PARSE_ERROR = "parse_error"
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"


_ERROR_TYPES: dict[FailureKind, type[RequestError]] = {
    FailureKind.RATE_LIMITED: RateLimitedError,
    FailureKind.SERVER_ERROR: ServerError,
    FailureKind.CLIENT_ERROR: ClientError,
    FailureKind.PARSE_ERROR: ParseError,
    FailureKind.TIMEOUT: RequestTimeoutError,
    FailureKind.CONNECTION_FAILED: ConnectionFailedError,
}


@dataclass(frozen=True)
class Success:
    payload: object


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    method: str
    url: str
    status: int | None = None
    body: object = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def to_error(self) -> RequestError:
        return _ERROR_TYPES[self.kind](
            self.message,
            status=self.status,
            method=self.method,
            url=self.url,
            body=self.body,
            headers=dict(self.headers),
        )


ClassifiedResult = Success | Failure


class ResponseClassifier:
    def classify(
        self,
        status: int,
        body: object,
        headers: Mapping[str, str] | None,
        *,
        method: str,
        url: str,
    ) -> ClassifiedResult:
        headers = dict(headers or {})

        def failure(kind: FailureKind, message: str) -> Failure:
            return Failure(kind, message, method, url, status=status, body=body, headers=headers)

        if status == 429:
            return failure(FailureKind.RATE_LIMITED, "Rate limited by POWO (HTTP 429)")
        if status >= 500:
            return failure(FailureKind.SERVER_ERROR, f"POWO server error (HTTP {status})")
        if status >= 400:
            return failure(FailureKind.CLIENT_ERROR, f"POWO request failed (HTTP {status})")

        if isinstance(body, (dict, list)):
            return Success(body)

        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else str(body or "")
        if not text.strip():
            return Success({})
        try:
            return Success(json.loads(text))
        except json.JSONDecodeError as exc:
            return failure(FailureKind.PARSE_ERROR, f"Failed to parse JSON response: {exc}")

    def handle(self, response: HttpResponse, *, method: str, url: str) -> object:
        """Return the parsed payload or raise the typed error for ``response``."""
        result = self.classify(response.status, response.body, response.headers, method=method, url=url)
        if isinstance(result, Failure):
            raise result.to_error()
        return result.payload
