from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

OutputMode = Literal["raw", "pretty", "pretty-aligned", "json"]
FieldName = Literal["name", "version", "summary"]

FIELD_ORDER: tuple[str, ...] = ("name", "version", "summary")


class SearchRequest(BaseModel):
    """Parameters of a single search, as handed over by the command line."""

    refresh_index: bool = False
    query: str | None = None
    fields: list[FieldName] = ["name", "version", "summary"]
    nearest_match_only: bool = False
    output_mode: OutputMode = "pretty-aligned"
    metadata_required: bool = True
    force_metadata_refresh: bool = False

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("at least one field must be selected")
        return [f for f in FIELD_ORDER if f in v]

    @model_validator(mode="after")
    def check_consistency(self) -> SearchRequest:
        if self.nearest_match_only and self.query is None:
            raise ValueError("nearest match requires a query")
        if any(f != "name" for f in self.fields):
            self.metadata_required = True
        return self
