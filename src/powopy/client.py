"""Mode-aware POWO client and the process-wide default clients."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from powopy.config import ClientConfig, merge_config
from powopy.executor import RequestExecutor
from powopy.request_support.cache_store import CacheAdapter
from powopy.request_support.retry import WarningLogger
from powopy.resources.search import Search
from powopy.resources.taxa import Taxa
from powopy.terms import Mode, Terms
from powopy.transport import Transport


class PowoClient:
    """Entry point for the POWO API.

    ``mode`` selects the parameter allow-list: ``"powo"`` for plant search
    terms, ``"ipni"`` for nomenclature terms. Both modes call the same
    endpoints, e.g. ``client.search.iter_query("Acacia")``.
    """

    def __init__(
        self,
        mode: Mode = "powo",
        *,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
        cache: CacheAdapter | None = None,
        logger: WarningLogger | None = None,
        sleep: Callable[[float], None] | None = None,
        **overrides: object,
    ) -> None:
        self.config = merge_config(config, overrides) if overrides else (config or ClientConfig())
        self.terms = Terms.load(self.config.terms_path)
        allowed = self.terms.allowed_params(mode)
        self.mode: Mode = mode

        executor_kwargs: dict[str, object] = {}
        if sleep is not None:
            executor_kwargs["sleep"] = sleep
        self.executor = RequestExecutor(
            self.config,
            transport=transport,
            cache=cache,
            logger=logger,
            **executor_kwargs,
        )
        self.search = Search(self.executor, allowed_params=allowed, group_keys=self.terms.group_keys(mode))
        self.taxa = Taxa(self.executor)


class _Keep:
    def __repr__(self) -> str:
        return "KEEP"


# Marks a collaborator argument that was not passed to configure().
KEEP: Any = _Keep()


class _DefaultClients:
    """Explicitly configured, explicitly reset process-wide clients.

    Besides the config, the holder keeps the cache adapter and retry logger
    that every client it builds receives.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._config = ClientConfig()
        self._cache: CacheAdapter | None = None
        self._logger: WarningLogger | None = None
        self._clients: dict[Mode, PowoClient] = {}

    @property
    def config(self) -> ClientConfig:
        with self._lock:
            return self._config

    def configure(
        self,
        config: ClientConfig | None = None,
        *,
        cache: CacheAdapter | None = KEEP,
        logger: WarningLogger | None = KEEP,
        **overrides: object,
    ) -> ClientConfig:
        with self._lock:
            self._config = merge_config(config or self._config, overrides)
            if cache is not KEEP:
                self._cache = cache
            if logger is not KEEP:
                self._logger = logger
            self._clients.clear()
            return self._config

    def reset(self) -> None:
        with self._lock:
            self._clients.clear()

    def resolve(self, mode: Mode, source: object = None) -> PowoClient:
        if isinstance(source, PowoClient):
            return source
        with self._lock:
            config, cache, logger = self._config, self._cache, self._logger
        if isinstance(source, ClientConfig):
            return PowoClient(mode, config=source, cache=cache, logger=logger)
        if isinstance(source, Mapping):
            return PowoClient(mode, config=merge_config(config, source), cache=cache, logger=logger)
        if source is not None:
            raise TypeError("config must be None, a mapping, a ClientConfig or a PowoClient")
        with self._lock:
            client = self._clients.get(mode)
            if client is None:
                client = PowoClient(mode, config=self._config, cache=self._cache, logger=self._logger)
                self._clients[mode] = client
            return client


_defaults = _DefaultClients()


def configure(
    config: ClientConfig | None = None,
    *,
    cache: CacheAdapter | None = KEEP,
    logger: WarningLogger | None = KEEP,
    **overrides: object,
) -> ClientConfig:
    """Replace the process-wide config and drop the cached default clients.

    ``cache`` and ``logger`` are handed to every default client built
    afterwards; pass ``None`` to remove a previously configured one.
    """
    return _defaults.configure(config, cache=cache, logger=logger, **overrides)


def reset_clients() -> None:
    _defaults.reset()


def default_config() -> ClientConfig:
    return _defaults.config


def powo(config: PowoClient | ClientConfig | Mapping[object, object] | None = None) -> PowoClient:
    """Return the shared POWO-mode client, or a one-off client for ``config``."""
    return _defaults.resolve("powo", config)


def ipni(config: PowoClient | ClientConfig | Mapping[object, object] | None = None) -> PowoClient:
    """Return the shared IPNI-mode client, or a one-off client for ``config``."""
    return _defaults.resolve("ipni", config)
