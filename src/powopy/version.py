"""Package version, also used as the cache key version tag."""

VERSION = "0.1.0"
