"""Lazy, pull-based iteration over paged and cursor-based result streams.

Both iterators fetch the next page only when the rows already pulled are
exhausted. They stop when a page reports no further pages; a fetch function
that never signals the end yields an endless stream, and bounding it (for
example with ``itertools.islice``) is up to the caller.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator, Sequence
from typing import Generic, Protocol, TypeVar

Row = TypeVar("Row")
Row_co = TypeVar("Row_co", covariant=True)

TERMINAL_CURSOR = "*"


class Page(Protocol[Row_co]):
    @property
    def rows(self) -> Sequence[Row_co]: ...

    @property
    def has_next(self) -> bool: ...


class CursorPage(Page[Row_co], Protocol[Row_co]):
    @property
    def next_cursor(self) -> str | None: ...


def is_terminal_cursor(cursor: object) -> bool:
    if cursor is None:
        return True
    text = str(cursor)
    return not text.strip() or text == TERMINAL_CURSOR


class PagePaginator(Generic[Row]):
    def __init__(self, fetch_page: Callable[[int], Page[Row]], *, start_page: int = 1) -> None:
        self._fetch_page = fetch_page
        self._next_page: int | None = int(start_page)
        self._buffer: deque[Row] = deque()

    def __iter__(self) -> Iterator[Row]:
        return self

    def __next__(self) -> Row:
        while not self._buffer:
            if self._next_page is None:
                raise StopIteration
            page = self._fetch_page(self._next_page)
            self._buffer.extend(page.rows)
            self._next_page = self._next_page + 1 if page.has_next else None
        return self._buffer.popleft()


class CursorPaginator(Generic[Row]):
    """Follows ``next_cursor`` tokens until the stream ends.

    The stream also ends when a page claims more results but hands back a
    blank or ``"*"`` cursor, which would otherwise refetch the first page
    forever.
    """

    def __init__(
        self,
        fetch_page: Callable[[str], CursorPage[Row]],
        *,
        cursor: str | None = TERMINAL_CURSOR,
    ) -> None:
        self._fetch_page = fetch_page
        self._cursor: str | None = TERMINAL_CURSOR if cursor is None or not str(cursor).strip() else str(cursor)
        self._buffer: deque[Row] = deque()

    @property
    def cursor(self) -> str | None:
        """Cursor for the next fetch, ``None`` once the stream has ended."""
        return self._cursor

    def __iter__(self) -> Iterator[Row]:
        return self

    def __next__(self) -> Row:
        while not self._buffer:
            if self._cursor is None:
                raise StopIteration
            page = self._fetch_page(self._cursor)
            self._buffer.extend(page.rows)
            next_cursor = page.next_cursor
            if not page.has_next or is_terminal_cursor(next_cursor):
                self._cursor = None
            else:
                self._cursor = str(next_cursor)
        return self._buffer.popleft()
