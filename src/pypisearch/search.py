"""Top-level search: index -> matcher -> metadata -> tabulator."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO

import structlog

from pypisearch.config import Settings
from pypisearch.errors import CacheCorruptionError, FetchError
from pypisearch.fetcher import build_http_client
from pypisearch.logging_config import configure_logging
from pypisearch.matcher import nearest_match
from pypisearch.state import AppState
from pypisearch.tabulate import project, render

if TYPE_CHECKING:
    from pypisearch.models.search import SearchRequest
    from pypisearch.tabulate import Row

log = structlog.get_logger()


async def search(state: AppState, request: SearchRequest, out: TextIO | None = None) -> int:
    """Run one search, write the rendered table to ``out`` and return the match count.

    Zero matches is a normal outcome: nothing is written and 0 is returned.
    ``FetchError`` escapes only when the index cannot be refreshed and no
    previous listing exists. Logging is configured from the state's settings
    unless the caller already did so; log lines go to stderr, never to stdout.
    """
    if out is None:
        out = sys.stdout
    if not structlog.is_configured():
        configure_logging(state.settings.logging)

    if request.refresh_index:
        try:
            await state.index.refresh()
        except FetchError as exc:
            try:
                state.index.entries()
            except CacheCorruptionError:
                raise exc from None
            log.warning("index_refresh_failed_using_stale", error=exc.message)
    else:
        await state.index.ensure_fresh()

    if request.query is None:
        names = state.index.entries()
    else:
        names = state.matcher.match(request.query, state.index.entries())

    if request.nearest_match_only and names:
        names = [nearest_match(names, request.query or "")]

    log.info("search_matched", query=request.query, matches=len(names))
    if not names:
        return 0

    rows: list[Row]
    if request.metadata_required:
        records = await state.metadata.populate(
            names, force_refresh=request.force_metadata_refresh
        )
        rows = [project(records[name], request.fields) for name in names]
    else:
        rows = [(name,) for name in names]

    out.write(render(rows, request.fields, request.output_mode))
    return len(names)


async def run(
    request: SearchRequest, settings: Settings | None = None, out: TextIO | None = None
) -> int:
    """Build the components from ``settings`` and run a single search."""
    if settings is None:
        settings = Settings()
    configure_logging(settings.logging)
    async with build_http_client(settings) as client:
        state = AppState.create(settings, client)
        return await search(state, request, out)
