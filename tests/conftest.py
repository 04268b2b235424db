"""Shared fixtures: isolated cache paths, a controllable clock and a mocked PyPI."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import respx
import structlog

from pypisearch.config import Settings
from pypisearch.fetcher import Fetcher

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

INDEX_URL = "https://pypi.org/simple/"

SIMPLE_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <meta name="pypi:repository-version" content="1.1">
    <title>Simple index</title>
  </head>
  <body>
    <a href="/simple/requests/">requests</a>
    <a href="/simple/requests-oauthlib/">requests-oauthlib</a>
    <a href="/simple/flask/">flask</a>
  </body>
</html>
"""


def metadata_url(name: str) -> str:
    return f"https://pypi.org/pypi/{name}/json"


def pypi_document(
    name: str, version: str = "1.0.0", summary: str = "", releases: bool = True
) -> dict[str, Any]:
    return {
        "info": {
            "name": name,
            "version": version,
            "summary": summary,
            "description": f"# {name}",
        },
        "releases": {version: []} if releases else {},
    }


class FakeClock:
    """Wall clock shifted by a controllable offset."""

    def __init__(self) -> None:
        self.offset = 0.0

    def __call__(self) -> float:
        return time.time() + self.offset

    def advance(self, seconds: float) -> None:
        self.offset += seconds


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo any structlog configuration a test performed."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        index={"path": str(tmp_path / "index.txt")},
        metadata={"dir": str(tmp_path / "metadata"), "workers": 4},
    )


@pytest.fixture()
def pypi() -> Iterator[respx.MockRouter]:
    """Every outbound request must hit a route registered on this router."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture()
async def client(pypi: respx.MockRouter) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture()
def fetcher(client: httpx.AsyncClient) -> Fetcher:
    return Fetcher(client)
