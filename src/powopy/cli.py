"""Command-line entry point: search POWO and look up taxa."""

from __future__ import annotations

import argparse
import itertools
import json
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO, cast

from .client import PowoClient
from .config import ClientConfig, load_config
from .errors import ExitCode, PowoError, user_facing_error
from .logging import configure_logging
from .terms import MODES, Mode

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

ClientFactory = Callable[[str, ClientConfig], PowoClient]


def _positive_int(flag: str) -> Callable[[str], int]:
    def parse(value: str) -> int:
        try:
            number = int(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"{flag} must be an integer") from exc
        if number < 1:
            raise argparse.ArgumentTypeError(f"{flag} must be at least 1")
        return number

    return parse


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="powopy")
    parser.add_argument("--config", type=Path, default=None, help="Path to a TOML config file")
    parser.add_argument("--mode", choices=MODES, default="powo")
    parser.add_argument("--log-level", type=_log_level_type, default="WARN")
    parser.add_argument("--log-file", type=Path, default=None)
    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search names and print one JSON row per line")
    search.add_argument("query")
    search.add_argument("--limit", type=_positive_int("--limit"), default=None, help="Stop after N rows")
    search.add_argument("--per-page", type=_positive_int("--per-page"), default=24)
    search.add_argument("--accepted", action="store_true", help="Only accepted names")
    search.add_argument("--images", action="store_true", help="Only taxa with images")

    taxon = commands.add_parser("taxon", help="Print the record for a taxon id")
    taxon.add_argument("taxon_id")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _default_factory(mode: str, config: ClientConfig) -> PowoClient:
    return PowoClient(cast(Mode, mode), config=config, logger=py_logging.getLogger("powopy"))


def run_command(namespace: argparse.Namespace, client: PowoClient, out: TextIO) -> int:
    if namespace.command == "search":
        filters: dict[str, object] = {}
        if namespace.accepted:
            filters["accepted"] = True
        if namespace.images:
            filters["images"] = True
        rows = client.search.iter_query(namespace.query, filters=filters, per_page=namespace.per_page)
        for row in itertools.islice(rows, namespace.limit):
            out.write(json.dumps(row, ensure_ascii=False) + "\n")
        return int(ExitCode.SUCCESS)

    response = client.taxa.lookup(namespace.taxon_id)
    out.write(json.dumps(response.raw, ensure_ascii=False, indent=2) + "\n")
    return int(ExitCode.SUCCESS)


def main(
    argv: Sequence[str] | None = None,
    *,
    client_factory: ClientFactory | None = None,
    out: TextIO | None = None,
) -> int:
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code or 0)

    logger = configure_logging(level=namespace.log_level, log_file=namespace.log_file)
    factory = client_factory or _default_factory
    try:
        client = factory(namespace.mode, load_config(namespace.config))
        return run_command(namespace, client, out or sys.stdout)
    except PowoError as exc:
        logger.error("Command failed command=%s error=%s", namespace.command, exc)
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.exit_code)


def run() -> int:
    return main()
