from __future__ import annotations

import pytest

from powopy.errors import ValidationError
from powopy.resources.taxa import Taxa


class FakeGetter:
    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def get(self, path: str, params=None) -> object:
        self.calls.append((path, params))
        return {"fqId": "urn:lsid:ipni.org:names:30000959-2", "name": "Poa annua"}


def test_lookup_escapes_lsid_into_single_segment() -> None:
    getter = FakeGetter()

    response = Taxa(getter).lookup("urn:lsid:ipni.org:names:30000959-2")

    assert getter.calls == [("taxon/urn%3Alsid%3Aipni.org%3Anames%3A30000959-2", {})]
    assert response.raw["name"] == "Poa annua"


def test_lookup_escapes_slashes_and_spaces() -> None:
    getter = FakeGetter()

    Taxa(getter).lookup(" a/b c ")

    assert getter.calls[0][0] == "taxon/a%2Fb%20c"


@pytest.mark.parametrize("taxon_id", ["", "  ", None])
def test_lookup_requires_an_id(taxon_id: object) -> None:
    getter = FakeGetter()

    with pytest.raises(ValidationError, match="id must be provided"):
        Taxa(getter).lookup(taxon_id)  # type: ignore[arg-type]
    assert getter.calls == []
