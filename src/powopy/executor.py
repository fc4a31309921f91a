"""Request execution: URL building, caching, retries and error translation."""

from __future__ import annotations

import logging as py_logging
import threading
import time
from collections.abc import Callable, Mapping
from urllib.parse import urljoin

from powopy.config import ClientConfig
from powopy.errors import ConfigurationError, ConnectionFailedError, RequestTimeoutError
from powopy.request_support.cache_key import CacheKeyBuilder, flatten_params
from powopy.request_support.cache_store import CacheAdapter, CacheStore
from powopy.request_support.classifier import ResponseClassifier
from powopy.request_support.retry import RetryPolicy, WarningLogger, run_with_retry
from powopy.transport import (
    HttpClientTransport,
    QueryPairs,
    Transport,
    TransportConnectionError,
    TransportTimeout,
)
from powopy.version import VERSION

logger = py_logging.getLogger(__name__)

Params = Mapping[object, object]


def join_url(base_url: str, path: str) -> str:
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return urljoin(base, path.lstrip("/"))


class RequestExecutor:
    """Sends requests to the POWO API.

    Each call derives a cache key, consults the cache and, on a miss, sends
    the request through the retry policy. Retries and backoff sleeps block
    the calling thread.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: Transport | None = None,
        cache: CacheAdapter | None = None,
        logger: WarningLogger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or ClientConfig()
        if not self.config.base_url.strip():
            raise ConfigurationError("base_url must be provided", hint="Set base_url in the client config.")
        if not self.config.user_agent.strip():
            raise ConfigurationError("user_agent must be provided", hint="Set user_agent in the client config.")

        self.retry_policy = RetryPolicy(
            enabled=self.config.retries,
            max_retries=self.config.max_retries,
            backoff_base=self.config.backoff_base,
            backoff_max=self.config.backoff_max,
        )
        self._cache_store = CacheStore(cache)
        self._key_builder = CacheKeyBuilder()
        self._classifier = ResponseClassifier()
        self._transport = transport
        self._transport_lock = threading.Lock()
        self._logger = logger
        self._sleep = sleep

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            with self._transport_lock:
                if self._transport is None:
                    self._transport = HttpClientTransport(
                        timeout=self.config.timeout,
                        open_timeout=self.config.open_timeout,
                    )
        return self._transport

    def build_url(self, path: str) -> str:
        return join_url(self.config.base_url, path)

    def get(self, path: str, params: Params | None = None) -> object:
        return self.request("GET", path, params)

    def request(self, method: str, path: str, params: Params | None = None) -> object:
        verb = method.upper()
        url = self.build_url(path)
        cache_key = self._key_builder.build(
            verb,
            url,
            params,
            namespace=self.config.cache_namespace,
            version=VERSION,
        )
        pairs = flatten_params(params)

        def compute() -> object:
            return run_with_retry(
                lambda: self._send(verb, url, pairs),
                policy=self.retry_policy,
                method=verb,
                url=url,
                sleep=self._sleep,
                logger=self._logger,
            )

        return self._cache_store.fetch(cache_key, compute, self.config.cache_options)

    def _send(self, method: str, url: str, pairs: QueryPairs) -> object:
        headers = {"Accept": "application/json", "User-Agent": self.config.user_agent}
        logger.debug("Sending request method=%s url=%s params=%s", method, url, len(pairs))
        try:
            response = self.transport.send(method, url, headers, pairs)
        except TransportTimeout as exc:
            raise RequestTimeoutError(str(exc) or "Request timed out", method=method, url=url) from exc
        except TransportConnectionError as exc:
            raise ConnectionFailedError(str(exc) or "Connection failed", method=method, url=url) from exc
        return self._classifier.handle(response, method=method, url=url)
