"""End-to-end search: index refresh, matching, metadata population, rendering."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

import httpx
import pytest
import structlog

from pypisearch.errors import FetchError
from pypisearch.models import SearchRequest
from pypisearch.search import run, search
from tests.conftest import INDEX_URL

if TYPE_CHECKING:
    import respx

    from pypisearch.config import Settings
    from pypisearch.state import AppState


async def _search(state: AppState, **kwargs: object) -> tuple[int, str]:
    out = io.StringIO()
    count = await search(state, SearchRequest(**kwargs), out)
    return count, out.getvalue()


class TestSearch:
    async def test_substring_match_with_metadata(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        count, text = await _search(app_state, query="REQUESTS", output_mode="pretty")
        assert count == 2
        assert text.splitlines() == [
            "requests\t2.32.3\tPython HTTP for Humans.",
            "requests-oauthlib\t?.?.?\t** requests-oauthlib has no released files",
        ]
        assert pypi_routes["flask"].call_count == 0

    async def test_nearest_match(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        count, text = await _search(
            app_state, query="requests", nearest_match_only=True, output_mode="raw"
        )
        assert count == 1
        assert text == "requests 2.32.3 Python HTTP for Humans.\n"
        assert pypi_routes["requests-oauthlib"].call_count == 0

    async def test_json_output(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        count, text = await _search(
            app_state, query="fla", fields=["name", "version"], output_mode="json"
        )
        assert count == 1
        assert json.loads(text) == [{"name": "Flask", "version": "3.0.3"}]

    async def test_no_query_lists_everything_sorted(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        count, text = await _search(
            app_state, fields=["name"], metadata_required=False, output_mode="raw"
        )
        assert count == 3
        assert text.splitlines() == ["flask", "requests", "requests-oauthlib"]
        assert all(pypi_routes[name].call_count == 0 for name in ("requests", "flask"))

    async def test_zero_matches_prints_nothing(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        count, text = await _search(app_state, query="django", nearest_match_only=True)
        assert count == 0
        assert text == ""

    async def test_index_fetched_once_across_searches(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        await _search(app_state, query="flask")
        await _search(app_state, query="flask")
        assert pypi_routes["index"].call_count == 1
        assert pypi_routes["flask"].call_count == 1

    async def test_refresh_flags(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        await _search(app_state, query="flask")
        await _search(app_state, query="flask", refresh_index=True, force_metadata_refresh=True)
        assert pypi_routes["index"].call_count == 2
        assert pypi_routes["flask"].call_count == 2

    async def test_index_unreachable_without_cache(
        self, app_state: AppState, pypi: respx.MockRouter
    ) -> None:
        pypi.get(INDEX_URL).mock(side_effect=httpx.ConnectError("offline"))
        with pytest.raises(FetchError):
            await _search(app_state, query="flask")


class TestForcedRefreshOffline:
    async def test_cached_listing_still_served(
        self, app_state: AppState, pypi_routes: dict[str, respx.Route]
    ) -> None:
        count, _ = await _search(app_state, query="flask")
        assert count == 1

        pypi_routes["index"].mock(side_effect=httpx.ConnectError("offline"))
        count, text = await _search(
            app_state, query="flask", refresh_index=True, output_mode="raw"
        )
        assert count == 1
        assert text == "Flask 3.0.3 Web framework\n"
        assert pypi_routes["index"].call_count == 2

    async def test_no_cache_raises(self, app_state: AppState, pypi: respx.MockRouter) -> None:
        pypi.get(INDEX_URL).mock(side_effect=httpx.ConnectError("offline"))
        with pytest.raises(FetchError):
            await _search(app_state, query="flask", refresh_index=True)


class TestLoggingDefaults:
    async def test_log_lines_stay_off_stdout(
        self,
        app_state: AppState,
        pypi_routes: dict[str, respx.Route],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        await _search(app_state, query="flask")
        pypi_routes["index"].mock(side_effect=httpx.ConnectError("offline"))
        count, _ = await _search(app_state, query="flask", refresh_index=True)

        captured = capsys.readouterr()
        assert count == 1
        assert structlog.is_configured()
        assert captured.out == ""
        assert "index_refresh_failed_using_stale" in captured.err


class TestRun:
    async def test_builds_components_from_settings(
        self, settings: Settings, pypi_routes: dict[str, respx.Route]
    ) -> None:
        out = io.StringIO()
        count = await run(SearchRequest(query="flask", output_mode="raw"), settings, out)
        assert count == 1
        assert out.getvalue() == "Flask 3.0.3 Web framework\n"
