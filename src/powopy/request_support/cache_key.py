"""Deterministic cache keys for requests."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import urlencode

CACHE_KEY_TAG = "powopy"


def _scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_params(value: object, prefix: str | None = None) -> list[tuple[str, str]]:
    """Flatten nested params into ordered ``(key, value)`` pairs.

    Mapping keys are stringified and sorted, nested mappings use bracket
    notation (``a[b]=1``) and sequences repeat their key in element order.
    ``None`` and values without an enclosing key contribute nothing.
    """
    if value is None:
        return []

    if isinstance(value, Mapping):
        pairs: list[tuple[str, str]] = []
        for key, item in sorted(((str(k), v) for k, v in value.items()), key=lambda entry: entry[0]):
            pairs.extend(flatten_params(item, f"{prefix}[{key}]" if prefix is not None else key))
        return pairs

    if prefix is None:
        return []

    if isinstance(value, (list, tuple)):
        return [pair for item in value for pair in flatten_params(item, prefix)]
    if isinstance(value, (set, frozenset)):
        return [pair for item in sorted(value, key=_scalar) for pair in flatten_params(item, prefix)]

    return [(prefix, _scalar(value))]


class CacheKeyBuilder:
    tag = CACHE_KEY_TAG

    def build(
        self,
        method: str,
        url: str,
        params: Mapping[object, object] | None,
        *,
        namespace: str | None = None,
        version: str | None = None,
    ) -> str:
        pairs = flatten_params(params)
        query = f"?{urlencode(pairs)}" if pairs else ""

        segments = [self.tag]
        if namespace is not None and str(namespace).strip():
            segments.append(f"ns={namespace}")
        if version is not None and str(version).strip():
            segments.append(f"v={version}")

        return f"{' '.join(segments)} {method.upper()} {url}{query}"
