"""Allow-lists of query parameters accepted by POWO and IPNI searches.

Terms are read from a markdown document when one is configured, for example::

    # POWO Search Terms
    ## Name terms
    - genus
    - family  (family name, e.g. Fabaceae)

    # IPNI Search Terms
    ## Author terms
    - author

Only the first word of each bullet counts. A missing, unreadable or empty
file falls back to the built-in tables, and so does a mode with no terms
in the file.
"""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from powopy.errors import ConfigurationError

logger = py_logging.getLogger(__name__)

Mode = Literal["powo", "ipni"]
MODES: tuple[Mode, ...] = ("powo", "ipni")

POWO_GROUPS: dict[str, tuple[str, ...]] = {
    "name": (
        "full_name",
        "scientific_name",
        "genus",
        "species",
        "infraspecific",
        "family",
        "common_name",
        "author",
        "rank",
        "status",
    ),
    "characteristic": (
        "summary",
        "appearance",
        "flower",
        "fruit",
        "leaf",
        "habit",
        "habitat",
        "use",
        "conservation",
    ),
    "geography": (
        "distribution",
        "native_distribution",
        "introduced_distribution",
        "region",
        "continent",
        "country",
    ),
    "additional": ("accepted", "images", "page", "limit", "sort"),
}

IPNI_GROUPS: dict[str, tuple[str, ...]] = {
    "name": (
        "genus",
        "species",
        "infraspecific_rank",
        "infraspecific_name",
        "family",
        "publication_year",
        "full_name",
    ),
    "author": ("author", "standard_form", "collaboration"),
    "publication": ("publication_title", "publication_year", "publication_place", "publisher"),
}

# Grouped search arguments that are flattened into top-level params.
GROUP_KEYS: dict[Mode, tuple[str, ...]] = {
    "powo": ("name", "characteristic", "geography"),
    "ipni": ("name", "author", "publication"),
}

_POWO_HEADERS = {
    "name terms": "name",
    "characteristic terms": "characteristic",
    "geography terms": "geography",
    "additional filters": "additional",
}
_IPNI_HEADERS = {
    "name terms": "name",
    "author terms": "author",
    "publication terms": "publication",
}
_IPNI_SECTION = "# ipni search terms"


def _validate_mode(mode: str) -> Mode:
    if mode not in MODES:
        raise ConfigurationError(f"Unknown client mode: {mode!r}", hint="Use 'powo' or 'ipni'.")
    return mode  # type: ignore[return-value]


@dataclass(frozen=True)
class Terms:
    powo: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(POWO_GROUPS))
    ipni: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(IPNI_GROUPS))
    source_path: Path | None = None

    @classmethod
    def load(cls, path: str | Path | None = None) -> Terms:
        if path is None:
            return cls()
        parsed = parse_markdown(path)
        if parsed is None:
            logger.debug("Using built-in search terms path=%s", path)
            return cls(source_path=Path(path))
        return parsed

    def allowed_params(self, mode: str) -> frozenset[str]:
        groups = self.powo if _validate_mode(mode) == "powo" else self.ipni
        return frozenset(term for terms in groups.values() for term in terms)

    def group_keys(self, mode: str) -> tuple[str, ...]:
        return GROUP_KEYS[_validate_mode(mode)]


def parse_markdown(path: str | Path) -> Terms | None:
    source = Path(path)
    try:
        content = source.read_text(encoding="utf-8")
    except OSError:
        return None
    if not content.strip():
        return None

    powo: dict[str, list[str]] = {}
    ipni: dict[str, list[str]] = {}
    section = powo
    headers = _POWO_HEADERS
    group: str | None = None

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.lower() == _IPNI_SECTION:
            section, headers, group = ipni, _IPNI_HEADERS, None
            continue
        if line.startswith("## "):
            group = headers.get(line[3:].strip().lower())
            continue
        if not line.startswith("- ") or group is None:
            continue

        words = line[2:].split()
        if not words:
            continue
        term = words[0].lower()
        bucket = section.setdefault(group, [])
        if term not in bucket:
            bucket.append(term)

    return Terms(
        powo={name: tuple(items) for name, items in powo.items()} or dict(POWO_GROUPS),
        ipni={name: tuple(items) for name, items in ipni.items()} or dict(IPNI_GROUPS),
        source_path=source,
    )
