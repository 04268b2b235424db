from __future__ import annotations

from pypisearch.models.metadata import PLACEHOLDER_VERSION, MetadataRecord, Provenance
from pypisearch.models.search import FIELD_ORDER, FieldName, OutputMode, SearchRequest

__all__ = [
    # metadata
    "MetadataRecord",
    "Provenance",
    "PLACEHOLDER_VERSION",
    # search
    "SearchRequest",
    "OutputMode",
    "FIELD_ORDER",
    "FieldName",
]
