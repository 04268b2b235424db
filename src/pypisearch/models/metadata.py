from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

Provenance = Literal["fetched", "placeholder"]

PLACEHOLDER_VERSION = "?.?.?"


class MetadataRecord(BaseModel):
    """Cached metadata for a single package."""

    name: str
    version: str
    summary: str
    description: str | None = None
    provenance: Provenance = "fetched"
    # Computed on read from the file age, never persisted
    stale: bool = Field(default=False, exclude=True)

    @classmethod
    def placeholder(cls, name: str) -> MetadataRecord:
        return cls(
            name=name,
            version=PLACEHOLDER_VERSION,
            summary=f"** {name} has no released files",
            provenance="placeholder",
        )

    @classmethod
    def from_pypi(cls, name: str, document: dict[str, Any]) -> MetadataRecord:
        """Build a record from a ``/pypi/<name>/json`` document.

        A document without an ``info`` object, or whose ``releases`` mapping is
        present but empty, carries no release data and is reported as a
        placeholder.
        """
        if "releases" in document and not document["releases"]:
            return cls.placeholder(name)
        info = document.get("info")
        if not info:
            return cls.placeholder(name)
        return cls(
            name=info.get("name") or name,
            version=info.get("version") or PLACEHOLDER_VERSION,
            summary=info.get("summary") or "",
            description=info.get("description"),
        )

    def field(self, key: str) -> str:
        value = getattr(self, key)
        return "" if value is None else str(value)
