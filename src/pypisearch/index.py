"""Index cache: the full PyPI package listing, one name per line.

The listing is refreshed from the simple index when the cache file is missing,
unreadable or older than ``index.ttl_seconds``. The file is only ever replaced
after a successful fetch that produced at least one name, so a failed refresh
leaves the previous listing in place.
"""

from __future__ import annotations

import re
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from pypisearch.errors import CacheCorruptionError, FetchError
from pypisearch.storage import atomic_write_text, file_age

if TYPE_CHECKING:
    from collections.abc import Callable

    from pypisearch.config import IndexSettings
    from pypisearch.fetcher import Fetcher

log = structlog.get_logger()

_TAG = re.compile(r"<[^>]*>")


def parse_listing(text: str, header_lines: int = 0) -> list[str]:
    """Turn the simple-index page into an ordered list of unique names."""
    names: list[str] = []
    seen: set[str] = set()
    for line in text.splitlines()[header_lines:]:
        name = "".join(_TAG.sub("", line).split())
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


class IndexCache:
    def __init__(
        self,
        settings: IndexSettings,
        fetcher: Fetcher,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._clock = clock
        self._path = Path(settings.path).expanduser()
        self._entries: list[str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def age(self) -> float | None:
        return file_age(self._path, self._clock)

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age <= self._settings.ttl_seconds

    async def ensure_fresh(self) -> None:
        """Refresh the listing unless a fresh, readable copy is on disk.

        When the refresh fails but an older listing can still be read, that
        listing keeps being served and the failure is only logged.
        """
        age = self.age()
        usable = False
        if age is not None:
            try:
                self.entries()
                usable = True
            except CacheCorruptionError:
                log.warning("index_cache_corrupt", path=str(self._path), exc_info=True)

        if usable and age is not None and age <= self._settings.ttl_seconds:
            return

        try:
            await self.refresh()
        except FetchError as exc:
            if not usable:
                raise
            log.warning("index_refresh_failed_using_stale", age_seconds=age, error=exc.message)

    async def refresh(self) -> list[str]:
        """Fetch the listing and replace the cache file. Raises ``FetchError``."""
        text = await self._fetcher.fetch(self._settings.url)
        names = parse_listing(text, self._settings.header_lines)
        if not names:
            raise FetchError(self._settings.url, "listing contained no package names")

        try:
            atomic_write_text(self._path, "\n".join(names) + "\n")
        except OSError:
            # The fetched listing is still served for this run
            log.warning("index_write_error", path=str(self._path), exc_info=True)

        self._entries = names
        log.info("index_refresh_complete", entries=len(names), path=str(self._path))
        return names

    def entries(self) -> list[str]:
        """Names in listing order. Raises ``CacheCorruptionError`` if unreadable."""
        if self._entries is None:
            try:
                text = self._path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise CacheCorruptionError(str(self._path), str(exc)) from exc
            names = [line.strip() for line in text.splitlines() if line.strip()]
            if not names:
                raise CacheCorruptionError(str(self._path), "empty listing")
            self._entries = names
        return self._entries

    def query(self, predicate: Callable[[str], bool]) -> list[str]:
        return [name for name in self.entries() if predicate(name)]
