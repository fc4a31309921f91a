"""Wrapper around the ``/taxon/<id>`` endpoint."""

from __future__ import annotations

from powopy.resources.search import Getter
from powopy.response import SearchResponse
from powopy.uri_utils import escape_path_segment
from powopy.validation import require_present


class Taxa:
    def __init__(self, executor: Getter) -> None:
        self._executor = executor

    def lookup(self, taxon_id: str) -> SearchResponse:
        """Fetch a taxon (or IPNI name record) by its LSID."""
        require_present(taxon_id, name="id")
        segment = escape_path_segment(str(taxon_id).strip())
        return SearchResponse(self._executor.get(f"taxon/{segment}", {}))
