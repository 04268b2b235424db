"""Per-package metadata cache backed by one JSON file per package.

``get`` never fails the caller for a single package: a missing project or a
network error is recorded as a placeholder, which is then served like any other
record until it expires. Write failures are logged and ignored, the record is
still returned.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from pypisearch.errors import CacheCorruptionError, FetchError, NotFoundError
from pypisearch.models.metadata import MetadataRecord
from pypisearch.storage import atomic_write_text, file_age

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pypisearch.config import MetadataSettings
    from pypisearch.fetcher import Fetcher

log = structlog.get_logger()


class MetadataCache:
    def __init__(
        self,
        settings: MetadataSettings,
        fetcher: Fetcher,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._clock = clock
        self._dir = Path(settings.dir).expanduser()

    def path_for(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Invalid package name: {name!r}")
        return self._dir / f"{name}.json"

    def read(self, name: str) -> MetadataRecord | None:
        """Read the stored record. ``None`` on miss; raises on unparsable content."""
        path = self.path_for(name)
        age = file_age(path, self._clock)
        if age is None:
            return None
        try:
            record = MetadataRecord.model_validate_json(path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, ValidationError) as exc:
            raise CacheCorruptionError(str(path), str(exc)) from exc
        record.stale = age > self._settings.ttl_seconds
        return record

    def write(self, name: str, record: MetadataRecord) -> None:
        """Persist a record under ``name``. Non-fatal on failure."""
        path = self.path_for(name)
        try:
            atomic_write_text(path, record.model_dump_json())
        except OSError:
            log.warning("metadata_write_error", package=name, exc_info=True)

    async def get(self, name: str, force_refresh: bool = False) -> MetadataRecord:
        if not force_refresh:
            try:
                cached = await asyncio.to_thread(self.read, name)
            except CacheCorruptionError:
                log.warning("metadata_cache_corrupt", package=name, exc_info=True)
                cached = None
            if cached is not None and not cached.stale:
                return cached

        record = await self._fetch(name)
        # Keyed by the requested name, which may differ from the canonical one
        await asyncio.to_thread(self.write, name, record)
        return record

    async def _fetch(self, name: str) -> MetadataRecord:
        url = self._settings.url_template.format(name=name)
        try:
            document = await self._fetcher.fetch_json(url)
        except NotFoundError:
            log.info("metadata_not_found", package=name)
            return MetadataRecord.placeholder(name)
        except FetchError as exc:
            log.warning("metadata_fetch_failed", package=name, error=exc.message)
            return MetadataRecord.placeholder(name)

        try:
            record = MetadataRecord.from_pypi(name, document)
        except (ValidationError, AttributeError, TypeError) as exc:
            log.warning("metadata_document_invalid", package=name, error=str(exc))
            return MetadataRecord.placeholder(name)
        if record.provenance == "placeholder":
            log.info("metadata_no_releases", package=name)
        return record

    async def populate(
        self, names: Iterable[str], force_refresh: bool = False
    ) -> dict[str, MetadataRecord]:
        """Fetch records for all ``names`` concurrently and wait for every one."""
        names = list(names)
        semaphore = asyncio.Semaphore(self._settings.workers)

        async def worker(name: str) -> MetadataRecord:
            async with semaphore:
                return await self.get(name, force_refresh=force_refresh)

        records = await asyncio.gather(*(worker(name) for name in names))
        log.debug("metadata_populate_complete", packages=len(names))
        return dict(zip(names, records, strict=True))

    def cleanup_expired(self, max_age_seconds: float | None = None) -> int:
        """Delete record files older than ``max_age_seconds``. Non-fatal on failure."""
        if max_age_seconds is None:
            max_age_seconds = self._settings.ttl_seconds
        removed = 0
        try:
            paths = list(self._dir.glob("*.json"))
        except OSError:
            log.warning("metadata_cleanup_error", exc_info=True)
            return 0
        for path in paths:
            age = file_age(path, self._clock)
            if age is None or age <= max_age_seconds:
                continue
            try:
                path.unlink()
                removed += 1
            except OSError:
                log.warning("metadata_cleanup_error", path=str(path), exc_info=True)
        log.info("metadata_cleanup_complete", removed=removed)
        return removed
