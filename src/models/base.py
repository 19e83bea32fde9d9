"""Shared Pydantic base model for serializable outputs."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class ReporterBase(BaseModel):
    """Base model with shared config for all payload schemas.

    Models are frozen once built and serialize with their camelCase wire
    aliases; Python code addresses fields by their snake_case names.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
