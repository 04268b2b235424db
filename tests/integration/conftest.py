"""Integration fixtures: a fully wired AppState against a mocked PyPI."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from pypisearch.state import AppState
from tests.conftest import INDEX_URL, SIMPLE_PAGE, metadata_url, pypi_document

if TYPE_CHECKING:
    import respx

    from pypisearch.config import Settings
    from tests.conftest import FakeClock


@pytest.fixture()
def pypi_routes(pypi: respx.MockRouter) -> dict[str, respx.Route]:
    """Index listing plus metadata for two of its three packages."""
    routes = {
        "index": pypi.get(INDEX_URL).mock(return_value=httpx.Response(200, text=SIMPLE_PAGE)),
        "requests": pypi.get(metadata_url("requests")).mock(
            return_value=httpx.Response(
                200,
                json=pypi_document(
                    "requests", version="2.32.3", summary="Python HTTP for Humans."
                ),
            )
        ),
        "flask": pypi.get(metadata_url("flask")).mock(
            return_value=httpx.Response(
                200, json=pypi_document("Flask", version="3.0.3", summary="Web framework")
            )
        ),
        "requests-oauthlib": pypi.get(metadata_url("requests-oauthlib")).mock(
            return_value=httpx.Response(404)
        ),
    }
    return routes


@pytest.fixture()
def app_state(settings: Settings, client: httpx.AsyncClient, clock: FakeClock) -> AppState:
    return AppState.create(settings, client, clock=clock)
