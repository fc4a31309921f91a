"""URL helpers."""

from __future__ import annotations

from urllib.parse import quote


def escape_path_segment(value: str) -> str:
    """Percent-encode everything outside the RFC 3986 unreserved set.

    Taxon identifiers are LSIDs such as ``urn:lsid:ipni.org:names:30000618-2``
    and must survive as a single path segment.
    """
    return quote(value, safe="")
