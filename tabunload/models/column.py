"""Column metadata and value models.

This module defines how a result-set column is described once per query
(ColumnDescriptor) and how each fetched value travels to the codec
(NullableValue). Dialect type mappers decide the mapping; nothing here
inspects value types at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field as PydanticField, model_validator


class TargetKind(str, Enum):
    """Canonical value kinds a source column can map to."""

    TEXT = "text"
    NUMERIC = "numeric"
    TEMPORAL = "temporal"


class TemporalFormat(str, Enum):
    """Rendering rule for temporal columns, chosen from the source type name.

    DATE:          2024-01-31
    DATETIME:      2024-01-31 13:45:00
    TIMESTAMP:     2024-01-31 13:45:00.123456000
    TIMESTAMP_TZ:  2024-01-31 13:45:00.123456000 +0200
    TIMESTAMP_UTC: timestamp converted to UTC, rendered like TIMESTAMP
    """

    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    TIMESTAMP_TZ = "timestamp_tz"
    TIMESTAMP_UTC = "timestamp_utc"


@dataclass(frozen=True)
class ColumnMetadata:
    """Raw result-set column metadata as reported by a connector."""

    name: str
    type_name: str


class ColumnDescriptor(BaseModel):
    """Per-column static metadata, built once per query.

    Examples:
        >>> ColumnDescriptor(name="id", source_type="NUMBER", kind=TargetKind.NUMERIC)
        >>> ColumnDescriptor(
        ...     name="created_at",
        ...     source_type="TIMESTAMP",
        ...     kind=TargetKind.TEMPORAL,
        ...     temporal_format=TemporalFormat.TIMESTAMP,
        ... )
    """

    name: str = PydanticField(
        ...,
        description="Column name from the result-set metadata",
    )
    source_type: str = PydanticField(
        ...,
        description="Source database type name (e.g., 'VARCHAR2', 'TIMESTAMP_TZ')",
    )
    kind: TargetKind = PydanticField(
        ...,
        description="Canonical kind the column decodes to",
    )
    temporal_format: Optional[TemporalFormat] = PydanticField(
        None,
        description="Rendering rule, required for temporal columns",
    )
    trim_fraction: bool = PydanticField(
        False,
        description="Drop trailing zeros from fractional seconds instead of padding to nine digits",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @model_validator(mode="after")
    def validate_temporal_format(self) -> "ColumnDescriptor":
        """Temporal columns must carry a format tag, other kinds must not."""
        if self.kind == TargetKind.TEMPORAL and self.temporal_format is None:
            raise ValueError(f"Temporal column '{self.name}' requires a temporal_format")
        if self.kind != TargetKind.TEMPORAL and self.temporal_format is not None:
            raise ValueError(f"Column '{self.name}' of kind {self.kind.value} cannot have a temporal_format")
        return self


@dataclass(frozen=True)
class NullableValue:
    """A single fetched value tagged with its kind.

    ``present=False`` stands for SQL NULL; ``raw`` is then ignored.
    """

    kind: TargetKind
    present: bool
    raw: Any = None

    @classmethod
    def of(cls, kind: TargetKind, raw: Any) -> "NullableValue":
        """Wrap a driver value, treating None as absent."""
        if raw is None:
            return cls(kind=kind, present=False)
        return cls(kind=kind, present=True, raw=raw)


DecodedRow = list[NullableValue]
