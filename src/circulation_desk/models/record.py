"""
Base model shared by every record read from a document.

Cells arrive from the table as loosely typed scalars. Records keep them as
text: ``None`` becomes an empty string, dates become ``yyyy-MM-dd`` and enum
members collapse to their values. Status fields are deliberately plain
strings so that a row holding an unknown status still loads; enum membership
is checked by :mod:`circulation_desk.validation` before writes.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """A row materialised as a field-name-to-value mapping."""

    id: str = Field(
        ...,
        description="Unique identifier, always stored in column 0",
        min_length=1,
    )

    @field_validator("*", mode="before")
    @classmethod
    def normalize_cell(cls, v: Any) -> Any:
        """Coerce a raw cell value into its text form."""
        if v is None:
            return ""
        if isinstance(v, Enum):
            return str(v.value)
        if isinstance(v, datetime):
            return v.date().isoformat()
        if isinstance(v, date):
            return v.isoformat()
        if isinstance(v, bool):
            return str(v).lower()
        if not isinstance(v, str):
            return str(v)
        return v

    def to_columns(self) -> dict[str, str]:
        """Return the record keyed by column name (camelCase)."""
        return self.model_dump(by_alias=True)

    model_config = ConfigDict(
        # Column names are the camelCase aliases of the snake_case fields
        alias_generator=to_camel,
        populate_by_name=True,
        # Rows may carry extra trailing cells
        extra="ignore",
        validate_assignment=True,
    )
