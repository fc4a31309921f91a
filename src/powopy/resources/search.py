"""Wrapper around the ``/search`` endpoint.

Validates filters against the active allow-list, maps friendly names onto
POWO's query keys and exposes cursor iterators over result rows.
"""

from __future__ import annotations

import logging as py_logging
from collections.abc import Collection, Mapping
from typing import Any, Protocol

from powopy.errors import ValidationError
from powopy.paginator import CursorPaginator
from powopy.response import SearchResponse
from powopy.validation import (
    reject_unknown,
    require_boolean,
    require_int,
    require_mapping,
    require_present,
)

logger = py_logging.getLogger(__name__)

DEFAULT_CURSOR = "*"
DEFAULT_PER_PAGE = 24


class Getter(Protocol):
    def get(self, path: str, params: Mapping[object, object] | None = None) -> object: ...


def _normalize_cursor(cursor: object) -> str:
    if cursor is None or not str(cursor).strip():
        return DEFAULT_CURSOR
    return str(cursor)


def _reject_page(params: Mapping[str, object]) -> None:
    if "page" in params:
        raise ValidationError(
            "POWO search no longer supports page-based pagination.",
            hint="Remove 'page' and use 'cursor' instead.",
        )


class Search:
    def __init__(
        self,
        executor: Getter,
        *,
        allowed_params: Collection[str],
        group_keys: Collection[str],
    ) -> None:
        self._executor = executor
        self.allowed_params = frozenset(allowed_params)
        self.group_keys = tuple(group_keys)

    def query(
        self,
        query: str,
        *,
        filters: Mapping[object, object] | None = None,
        cursor: str | None = DEFAULT_CURSOR,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> SearchResponse:
        """Run a free-text search (``q``) with optional allow-listed filters."""
        require_present(query, name="query")
        flat = self._string_keys(filters or {}, name="filters")
        _reject_page(flat)

        params = self._normalize_filters(flat)
        params["q"] = str(query)
        params["cursor"] = _normalize_cursor(cursor)
        params["perPage"] = require_int(per_page, name="per_page")
        return SearchResponse(self._executor.get("search", params))

    def advanced(self, params: Mapping[object, object]) -> SearchResponse:
        """Run a structured search from flat or grouped terms.

        ``{"name": {"genus": "Acacia"}, "accepted": True}`` and
        ``{"genus": "Acacia", "accepted": True}`` are equivalent in POWO mode.
        """
        flat = self._flatten_groups(params)
        _reject_page(flat)
        return SearchResponse(self._executor.get("search", self._normalize_filters(flat)))

    def iter_query(
        self,
        query: str,
        *,
        filters: Mapping[object, object] | None = None,
        cursor: str | None = DEFAULT_CURSOR,
        per_page: int = DEFAULT_PER_PAGE,
    ) -> CursorPaginator[Any]:
        # Validate eagerly so bad input fails here rather than on first next().
        require_present(query, name="query")
        _reject_page(self._string_keys(filters or {}, name="filters"))

        def fetch(page_cursor: str) -> SearchResponse:
            return self.query(query, filters=filters, cursor=page_cursor, per_page=per_page)

        return CursorPaginator(fetch, cursor=_normalize_cursor(cursor))

    def iter_advanced(self, params: Mapping[object, object]) -> CursorPaginator[Any]:
        """Iterate rows of an advanced search across cursor pages.

        ``cursor`` and ``perPage``/``limit`` in ``params`` are pagination
        controls: the first sets the starting cursor, the others the page size.
        """
        flat = self._flatten_groups(params)
        _reject_page(flat)

        initial_cursor = _normalize_cursor(flat.pop("cursor", None))
        per_page_raw = flat.pop("perPage", None)
        limit_raw = flat.pop("limit", None)
        if per_page_raw is not None:
            per_page = require_int(per_page_raw, name="perPage")
        elif limit_raw is not None:
            per_page = require_int(limit_raw, name="limit")
        else:
            per_page = DEFAULT_PER_PAGE

        base_params = self._normalize_filters(flat)

        def fetch(page_cursor: str) -> SearchResponse:
            page_params = {**base_params, "cursor": page_cursor, "perPage": per_page}
            return SearchResponse(self._executor.get("search", page_params))

        return CursorPaginator(fetch, cursor=initial_cursor)

    def _string_keys(self, params: object, *, name: str) -> dict[str, object]:
        mapping = require_mapping(params, name=name)
        return {str(key): value for key, value in mapping.items()}

    def _flatten_groups(self, params: object) -> dict[str, object]:
        flat: dict[str, object] = {}
        for key, value in self._string_keys(params, name="params").items():
            if key in self.group_keys:
                flat.update(self._string_keys(value, name=key))
            else:
                flat[key] = value
        return flat

    def _normalize_filters(self, params: Mapping[str, object]) -> dict[str, object]:
        reject_unknown(params.keys(), allowed=self.allowed_params)

        normalized: dict[str, object] = {}
        for key, value in params.items():
            if value is None:
                continue
            if key == "limit":
                normalized["perPage"] = require_int(value, name="limit")
            elif key == "images":
                if require_boolean(value, name="images"):
                    normalized["f"] = "has_images"
            elif key == "accepted":
                normalized["accepted"] = require_boolean(value, name="accepted")
            else:
                normalized[key] = value
        logger.debug("Normalized search params keys=%s", sorted(normalized))
        return normalized
