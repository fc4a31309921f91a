"""Defensive client for the Plants of the World Online (POWO) API."""

from .client import PowoClient, configure, default_config, ipni, powo, reset_clients
from .config import ClientConfig, load_config, merge_config
from .errors import (
    ClientError,
    ConfigurationError,
    ConnectionFailedError,
    ParseError,
    PowoError,
    RateLimitedError,
    RequestError,
    RequestTimeoutError,
    ServerError,
    ValidationError,
)
from .executor import RequestExecutor
from .paginator import CursorPaginator, PagePaginator
from .request_support.cache_store import MemoryCache
from .response import SearchResponse
from .version import VERSION

__version__ = VERSION

__all__ = [
    "ClientConfig",
    "ClientError",
    "ConfigurationError",
    "ConnectionFailedError",
    "CursorPaginator",
    "MemoryCache",
    "PagePaginator",
    "ParseError",
    "PowoClient",
    "PowoError",
    "RateLimitedError",
    "RequestError",
    "RequestExecutor",
    "RequestTimeoutError",
    "SearchResponse",
    "ServerError",
    "ValidationError",
    "__version__",
    "configure",
    "default_config",
    "ipni",
    "load_config",
    "merge_config",
    "powo",
    "reset_clients",
]
