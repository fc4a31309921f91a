from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from powopy import cli
from powopy.client import PowoClient
from powopy.config import ClientConfig
from powopy.errors import ExitCode
from powopy.transport import HttpResponse


def _factory(transport, seen: list[tuple[str, ClientConfig]] | None = None):
    def build(mode: str, config: ClientConfig) -> PowoClient:
        if seen is not None:
            seen.append((mode, config))
        return PowoClient(mode, config=config, transport=transport, sleep=lambda _: None)  # type: ignore[arg-type]

    return build


def _json(body: object, status: int = 200) -> HttpResponse:
    return HttpResponse(status=status, body=json.dumps(body))


def test_search_prints_one_row_per_line(tmp_path: Path, fake_transport_factory) -> None:
    transport = fake_transport_factory(
        _json({"results": [{"name": "Acacia a"}, {"name": "Acacia b"}], "cursor": "next"}),
        _json({"results": [{"name": "Acacia c"}], "cursor": "*"}),
    )
    out = io.StringIO()

    code = cli.main(
        ["--config", str(tmp_path / "none.toml"), "search", "Acacia", "--accepted", "--per-page", "2"],
        client_factory=_factory(transport),
        out=out,
    )

    assert code == ExitCode.SUCCESS
    assert [json.loads(line)["name"] for line in out.getvalue().splitlines()] == ["Acacia a", "Acacia b", "Acacia c"]
    params = transport.calls[0][3]
    assert ("accepted", "true") in params
    assert ("perPage", "2") in params


def test_search_limit_stops_fetching(tmp_path: Path, fake_transport_factory) -> None:
    transport = fake_transport_factory(
        _json({"results": [{"name": "a"}, {"name": "b"}], "cursor": "next"}),
    )
    out = io.StringIO()

    code = cli.main(
        ["--config", str(tmp_path / "none.toml"), "search", "Acacia", "--limit", "1", "--images"],
        client_factory=_factory(transport),
        out=out,
    )

    assert code == 0
    assert out.getvalue().splitlines() == ['{"name": "a"}']
    assert len(transport.calls) == 1
    assert ("f", "has_images") in transport.calls[0][3]


def test_taxon_prints_record(tmp_path: Path, fake_transport_factory) -> None:
    transport = fake_transport_factory(_json({"name": "Poa annua", "rank": "Species"}))
    out = io.StringIO()

    code = cli.main(
        ["--config", str(tmp_path / "none.toml"), "taxon", "urn:lsid:ipni.org:names:30000959-2"],
        client_factory=_factory(transport),
        out=out,
    )

    assert code == 0
    assert json.loads(out.getvalue()) == {"name": "Poa annua", "rank": "Species"}
    assert transport.calls[0][1].endswith("/taxon/urn%3Alsid%3Aipni.org%3Anames%3A30000959-2")


def test_mode_and_config_file_reach_the_factory(tmp_path: Path, fake_transport_factory) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('user_agent = "cli-tests/1"\n', encoding="utf-8")
    seen: list[tuple[str, ClientConfig]] = []

    cli.main(
        ["--config", str(config_path), "--mode", "ipni", "taxon", "x"],
        client_factory=_factory(fake_transport_factory(_json({})), seen),
        out=io.StringIO(),
    )

    assert seen[0][0] == "ipni"
    assert seen[0][1].user_agent == "cli-tests/1"


def test_request_errors_map_to_exit_code(tmp_path: Path, fake_transport_factory, capsys: pytest.CaptureFixture[str]) -> None:
    transport = fake_transport_factory(_json({}, status=404))

    code = cli.main(
        ["--config", str(tmp_path / "none.toml"), "taxon", "missing"],
        client_factory=_factory(transport),
        out=io.StringIO(),
    )

    assert code == ExitCode.REQUEST_ERROR
    assert "Error: POWO request failed (HTTP 404)." in capsys.readouterr().err


def test_validation_errors_map_to_exit_code(tmp_path: Path, fake_transport_factory, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(
        ["--config", str(tmp_path / "none.toml"), "search", "   "],
        client_factory=_factory(fake_transport_factory()),
        out=io.StringIO(),
    )

    assert code == ExitCode.VALIDATION_ERROR
    assert "query must be provided" in capsys.readouterr().err


def test_config_errors_map_to_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("timeout = -1\n", encoding="utf-8")

    code = cli.main(["--config", str(config_path), "taxon", "x"], out=io.StringIO())

    assert code == ExitCode.CONFIG_ERROR
    assert "Invalid client option(s): timeout" in capsys.readouterr().err


def test_invalid_log_level_returns_error() -> None:
    assert cli.main(["--log-level", "LOUD", "taxon", "x"]) == 2


def test_missing_command_returns_error() -> None:
    assert cli.main([]) == 2


@pytest.mark.parametrize("flag", ["--limit", "--per-page"])
def test_non_positive_counts_return_error(flag: str) -> None:
    assert cli.main(["search", "Acacia", flag, "0"]) == 2


def test_log_level_accepts_warning_alias() -> None:
    assert cli.parse_args(["--log-level", "warning", "taxon", "x"]).log_level == "WARN"


def test_log_file_receives_debug_records(tmp_path: Path, fake_transport_factory) -> None:
    log_file = tmp_path / "powopy.log"
    transport = fake_transport_factory(_json({"name": "Poa"}))

    cli.main(
        ["--config", str(tmp_path / "none.toml"), "--log-file", str(log_file), "taxon", "x"],
        client_factory=_factory(transport),
        out=io.StringIO(),
    )

    assert "Sending request method=GET" in log_file.read_text(encoding="utf-8")
