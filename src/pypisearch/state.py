"""Wiring of the long-lived components used by a search."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pypisearch.fetcher import Fetcher
from pypisearch.index import IndexCache
from pypisearch.matcher import build_matcher
from pypisearch.metadata import MetadataCache

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from pypisearch.config import Settings
    from pypisearch.matcher import MatchStrategy


@dataclass
class AppState:
    settings: Settings
    index: IndexCache
    metadata: MetadataCache
    matcher: MatchStrategy

    @classmethod
    def create(
        cls,
        settings: Settings,
        client: httpx.AsyncClient,
        clock: Callable[[], float] = time.time,
    ) -> AppState:
        fetcher = Fetcher(client)
        return cls(
            settings=settings,
            index=IndexCache(settings.index, fetcher, clock=clock),
            metadata=MetadataCache(settings.metadata, fetcher, clock=clock),
            matcher=build_matcher(settings.matcher),
        )
