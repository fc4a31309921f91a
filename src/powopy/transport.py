"""HTTP transport boundary and the default keep-alive implementation."""

from __future__ import annotations

import http.client
import logging as py_logging
import socket
import ssl
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import urlencode, urlsplit

logger = py_logging.getLogger(__name__)

QueryPairs = Sequence[tuple[str, str]]
Origin = tuple[str, str, int | None]


class TransportTimeout(Exception):
    """The server did not answer within the configured timeout."""


class TransportConnectionError(Exception):
    """A connection to the server could not be established or was lost."""


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: object
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        params: QueryPairs,
    ) -> HttpResponse: ...


ConnectionFactory = Callable[[str, str, int | None, float], http.client.HTTPConnection]

# A keep-alive connection the server already closed fails with one of these on reuse.
_STALE_CONNECTION_ERRORS = (http.client.RemoteDisconnected, ConnectionResetError, BrokenPipeError)


def _default_connection_factory(
    scheme: str,
    host: str,
    port: int | None,
    timeout: float,
) -> http.client.HTTPConnection:
    if scheme == "https":
        return http.client.HTTPSConnection(
            host,
            port,
            timeout=timeout,
            context=ssl.create_default_context(),
        )
    return http.client.HTTPConnection(host, port, timeout=timeout)


def build_target(url: str, params: QueryPairs) -> tuple[Origin, str]:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise TransportConnectionError(f"Unsupported URL: {url}")
    query = "&".join(item for item in (parts.query, urlencode(list(params))) if item)
    target = parts.path or "/"
    if query:
        target = f"{target}?{query}"
    return (parts.scheme, parts.hostname, parts.port), target


def _decode_body(raw: bytes, content_type: str) -> str:
    charset = "utf-8"
    for chunk in content_type.split(";")[1:]:
        name, _, value = chunk.strip().partition("=")
        if name.lower() == "charset" and value:
            charset = value.strip('"')
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class HttpClientTransport:
    """Sends requests over one lazily opened, reused ``http.client`` connection.

    ``open_timeout`` bounds the TCP/TLS handshake and ``timeout`` bounds each
    socket read afterwards. Calls are serialized with a lock so one instance
    can be shared between threads.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        open_timeout: float = 5.0,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        self.timeout = timeout
        self.open_timeout = open_timeout
        self._connection_factory = connection_factory or _default_connection_factory
        self._connection: http.client.HTTPConnection | None = None
        self._origin: Origin | None = None
        self._lock = threading.Lock()

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        params: QueryPairs,
    ) -> HttpResponse:
        origin, target = build_target(url, params)
        with self._lock:
            reused = self._connection is not None and self._origin == origin
            try:
                return self._exchange(origin, method.upper(), target, dict(headers))
            except _STALE_CONNECTION_ERRORS as exc:
                if not reused:
                    raise TransportConnectionError(str(exc) or type(exc).__name__) from exc
                logger.debug("Reopening stale connection host=%s", origin[1])
            try:
                return self._exchange(origin, method.upper(), target, dict(headers))
            except _STALE_CONNECTION_ERRORS as exc:
                raise TransportConnectionError(str(exc) or type(exc).__name__) from exc

    def close(self) -> None:
        with self._lock:
            self._close()

    def _close(self) -> None:
        if self._connection is not None:
            self._connection.close()
        self._connection = None
        self._origin = None

    def _connect(self, origin: Origin) -> http.client.HTTPConnection:
        if self._connection is not None and self._origin == origin:
            return self._connection
        self._close()
        scheme, host, port = origin
        connection = self._connection_factory(scheme, host, port, self.open_timeout)
        try:
            connection.connect()
        except socket.timeout as exc:
            connection.close()
            raise TransportTimeout(f"Timed out connecting to {host}") from exc
        except OSError as exc:
            connection.close()
            raise TransportConnectionError(f"Failed to connect to {host}: {exc}") from exc
        if connection.sock is not None:
            connection.sock.settimeout(self.timeout)
        self._connection = connection
        self._origin = origin
        return connection

    def _exchange(
        self,
        origin: Origin,
        method: str,
        target: str,
        headers: dict[str, str],
    ) -> HttpResponse:
        connection = self._connect(origin)
        try:
            connection.request(method, target, headers=headers)
            response = connection.getresponse()
            raw = response.read()
        except socket.timeout as exc:
            self._close()
            raise TransportTimeout(f"Timed out waiting for {origin[1]}") from exc
        except _STALE_CONNECTION_ERRORS:
            self._close()
            raise
        except (OSError, http.client.HTTPException) as exc:
            self._close()
            raise TransportConnectionError(str(exc) or type(exc).__name__) from exc

        response_headers = {key.lower(): value for key, value in response.getheaders()}
        if response.will_close:
            self._close()
        body = _decode_body(raw, response_headers.get("content-type", ""))
        return HttpResponse(status=int(response.status), body=body, headers=response_headers)
