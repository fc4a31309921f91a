from __future__ import annotations

import logging as py_logging
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path

import pytest

from powopy.client import configure
from powopy.config import ClientConfig
from powopy.transport import HttpResponse, QueryPairs


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if "integration" in path.parts:
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def _isolate_default_clients(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("POWOPY_BASE_URL", raising=False)
    monkeypatch.delenv("POWOPY_USER_AGENT", raising=False)
    configure(ClientConfig(), cache=None, logger=None)
    yield
    configure(ClientConfig(), cache=None, logger=None)


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    yield
    logger = py_logging.getLogger("powopy")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(py_logging.NOTSET)
    logger.propagate = True


Responder = Callable[[str, str, Mapping[str, str], QueryPairs], HttpResponse]


class FakeTransport:
    """Records every send and answers from a responder or a fixed queue."""

    def __init__(self, *responses: HttpResponse | Exception, responder: Responder | None = None) -> None:
        self._responses = list(responses)
        self._responder = responder
        self.calls: list[tuple[str, str, dict[str, str], list[tuple[str, str]]]] = []

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        params: QueryPairs,
    ) -> HttpResponse:
        self.calls.append((method, url, dict(headers), list(params)))
        if self._responder is not None:
            return self._responder(method, url, headers, params)
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def fake_transport_factory() -> type[FakeTransport]:
    return FakeTransport
