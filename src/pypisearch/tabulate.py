"""Row projection, sorting and rendering of search results."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pypisearch.models.metadata import MetadataRecord
    from pypisearch.models.search import OutputMode

Row = tuple[str, ...]

# Extra spaces after each aligned column
COLUMN_GAP = 5
ALIGNED_COLUMNS = 2

_RAW_SEPARATORS = re.compile(r"[\t\r\n]+")
_LINE_BREAKS = re.compile(r"[\r\n]+")


def project(record: MetadataRecord, fields: Sequence[str]) -> Row:
    return tuple(record.field(f) for f in fields)


def compute_column_widths(rows: Sequence[Sequence[str]]) -> list[int]:
    widths: list[int] = []
    for row in rows:
        for i, cell in enumerate(row):
            if i == len(widths):
                widths.append(0)
            widths[i] = max(widths[i], len(cell))
    return widths


def sort_rows(rows: Sequence[Row]) -> list[Row]:
    """Stable ascending sort on the first field."""
    return sorted(rows, key=lambda row: row[0] if row else "")


def render(rows: Sequence[Row], fields: Sequence[str], mode: OutputMode) -> str:
    """Render ``rows`` (one value per entry of ``fields``) as text."""
    rows = sort_rows(rows)
    if not rows:
        return ""

    if mode == "json":
        documents = [dict(zip(fields, row, strict=False)) for row in rows]
        return json.dumps(documents, indent=2, ensure_ascii=False) + "\n"

    if mode == "raw":
        lines = [" ".join(_RAW_SEPARATORS.sub(" ", cell) for cell in row) for row in rows]
    else:
        rows = [tuple(_LINE_BREAKS.sub(" ", cell) for cell in row) for row in rows]
        if mode == "pretty":
            lines = ["\t".join(row) for row in rows]
        elif mode == "pretty-aligned":
            lines = _align(rows)
        else:
            raise ValueError(f"Unknown output mode: {mode!r}")
    return "\n".join(lines) + "\n"


def _align(rows: Sequence[Row]) -> list[str]:
    widths = compute_column_widths([row[:ALIGNED_COLUMNS] for row in rows])
    lines = []
    for row in rows:
        head = "".join(
            cell.ljust(width + COLUMN_GAP)
            for cell, width in zip(row[:ALIGNED_COLUMNS], widths, strict=False)
        )
        tail = " ".join(row[ALIGNED_COLUMNS:])
        lines.append((head + tail).rstrip())
    return lines
