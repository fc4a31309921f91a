"""Schema-flexible wrapper for POWO JSON responses.

POWO's schema is undocumented and drifts, so every accessor is a
best-effort lookup that degrades to an empty or ``None`` value.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from powopy.paginator import is_terminal_cursor


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _to_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    # Integral floats such as 2.0 count; 1.5 or inf do not.
    if not number.is_integer():
        return None
    return int(number)


@dataclass(frozen=True)
class SearchResponse:
    raw: Any

    @property
    def results(self) -> list[Any]:
        if not isinstance(self.raw, Mapping):
            return []
        value = self.raw.get("results")
        return value if isinstance(value, list) else []

    @property
    def rows(self) -> list[Any]:
        return self.results

    @property
    def total_count(self) -> int | None:
        if not isinstance(self.raw, Mapping):
            return None
        return _first(self.raw, "totalResults", "total")

    @property
    def next_cursor(self) -> str | None:
        if not isinstance(self.raw, Mapping):
            return None
        cursor = self.raw.get("cursor")
        return None if cursor is None else str(cursor)

    @property
    def has_next(self) -> bool:
        """Whether another page is available.

        Page/totalPages metadata takes precedence over a cursor when both are
        present. This is a detection heuristic, not an upstream guarantee.
        """
        if not isinstance(self.raw, Mapping):
            return False

        page = _to_int(self.raw.get("page"))
        total_pages = _to_int(_first(self.raw, "totalPages", "pages"))
        if page is not None and total_pages is not None:
            return page < total_pages

        return not is_terminal_cursor(self.raw.get("cursor"))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.results)
