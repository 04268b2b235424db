"""HTTP fetcher for the index listing and per-package JSON documents.

Transport and status failures are translated into ``FetchError`` (or
``NotFoundError`` for 404) so that callers never need to know about httpx.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from pypisearch.config import FetcherSettings
from pypisearch.errors import FetchError, NotFoundError

if TYPE_CHECKING:
    from pypisearch.config import Settings

log = structlog.get_logger()


def build_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Create the shared client. One instance serves the whole search."""
    fetcher = settings.fetcher if settings is not None else FetcherSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(fetcher.timeout_seconds),
        headers={"User-Agent": fetcher.user_agent},
        follow_redirects=True,
    )


class Fetcher:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return the body as text."""
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            log.warning("fetch_transport_error", url=url, error=str(exc))
            raise FetchError(url, str(exc) or type(exc).__name__) from exc

        if response.status_code == 404:
            raise NotFoundError(url)
        if not response.is_success:
            log.warning("fetch_bad_status", url=url, status=response.status_code)
            raise FetchError(url, f"HTTP {response.status_code}")

        log.debug("fetch_complete", url=url, bytes=len(response.content))
        return response.text

    async def fetch_json(self, url: str) -> dict[str, Any]:
        text = await self.fetch(url)
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise FetchError(url, f"invalid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise FetchError(url, "expected a JSON object")
        return document
