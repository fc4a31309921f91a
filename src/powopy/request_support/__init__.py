"""Building blocks used by :class:`powopy.executor.RequestExecutor`."""

from .cache_key import CacheKeyBuilder, flatten_params
from .cache_store import CacheAdapter, CacheStore, MemoryCache, NullCache
from .classifier import ClassifiedResult, Failure, FailureKind, ResponseClassifier, Success
from .retry import RetryPolicy, retry_after_seconds, run_with_retry

__all__ = [
    "CacheAdapter",
    "CacheKeyBuilder",
    "CacheStore",
    "ClassifiedResult",
    "Failure",
    "FailureKind",
    "MemoryCache",
    "NullCache",
    "ResponseClassifier",
    "RetryPolicy",
    "Success",
    "flatten_params",
    "retry_after_seconds",
    "run_with_retry",
]
