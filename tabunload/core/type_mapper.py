"""Base TypeMapper abstract class.

This module defines the TypeMapper interface that turns a dialect's
result-set type names into ColumnDescriptors, and driver values into
NullableValues. Each dialect supplies a formatting table; the mapping is
resolved once per query, never per value.
"""

from __future__ import annotations

from abc import ABC
from typing import Any, Optional

from tabunload.exceptions import TypeMappingError
from tabunload.models.column import (
    ColumnDescriptor,
    ColumnMetadata,
    NullableValue,
    TargetKind,
    TemporalFormat,
)


class TypeMapper(ABC):
    """Base class for a dialect's column type catalog.

    Subclasses declare ``SOURCE_TYPES``, a mapping of normalized source type
    names to ``(TargetKind, TemporalFormat or None)``, and may set
    ``TRIM_FRACTION`` to render fractional seconds without trailing zeros.

    Examples:
        Using a type mapper:
        >>> mapper = OracleTypeMapper()
        >>> mapper.from_source("id", "NUMBER").kind
        <TargetKind.NUMERIC: 'numeric'>
        >>> mapper.from_source("created", "TIMESTAMP WITH TIME ZONE").temporal_format
        <TemporalFormat.TIMESTAMP_TZ: 'timestamp_tz'>
    """

    SOURCE_TYPES: dict[str, tuple[TargetKind, Optional[TemporalFormat]]] = {}

    TRIM_FRACTION: bool = False

    def from_source(self, name: str, source_type: str) -> ColumnDescriptor:
        """Build the descriptor for one column.

        Args:
            name: Column name
            source_type: Source system's type name (e.g., "VARCHAR2", "TIMESTAMP_NTZ")

        Returns:
            ColumnDescriptor for the column

        Raises:
            TypeMappingError: If the type has no mapping
        """
        normalized = self.normalize_source_type(source_type)
        if normalized not in self.SOURCE_TYPES:
            raise TypeMappingError(f"Unexpected type: {source_type} (column '{name}')")

        kind, temporal_format = self.SOURCE_TYPES[normalized]
        return ColumnDescriptor(
            name=name,
            source_type=normalized,
            kind=kind,
            temporal_format=temporal_format,
            trim_fraction=self.TRIM_FRACTION,
        )

    def describe(self, columns: list[ColumnMetadata]) -> list[ColumnDescriptor]:
        """Build descriptors for a whole result set.

        Every column is checked before any row is read, so an unmapped
        type fails the query up front.

        Raises:
            TypeMappingError: If any column type has no mapping
        """
        return [self.from_source(column.name, column.type_name) for column in columns]

    def to_value(self, raw: Any, descriptor: ColumnDescriptor) -> NullableValue:
        """Wrap a driver value for the codec.

        Dialects whose drivers hand back strings for temporal columns
        override ``coerce`` rather than this method.

        Raises:
            ValueError: If the value cannot be coerced to the column's kind
        """
        if raw is None:
            return NullableValue(kind=descriptor.kind, present=False)
        return NullableValue(kind=descriptor.kind, present=True, raw=self.coerce(raw, descriptor))

    def coerce(self, raw: Any, descriptor: ColumnDescriptor) -> Any:
        """Convert a non-null driver value into the codec's expected type.

        Default implementation passes values through unchanged.
        """
        return raw

    def normalize_source_type(self, source_type: str) -> str:
        """Normalize source type string for consistent mapping.

        Removes parameters, converts to uppercase and collapses whitespace.

        Examples:
            "varchar2(255)" -> "VARCHAR2"
            "NUMBER(10,2)" -> "NUMBER"
            "timestamp(6)  with time zone" -> "TIMESTAMP WITH TIME ZONE"
        """
        normalized = source_type.upper().strip()

        # Remove parameters like (255) or (10,2), wherever they appear
        while True:
            start = normalized.find("(")
            end = normalized.find(")", start)
            if start < 0 or end < 0:
                break
            normalized = normalized[:start] + " " + normalized[end + 1 :]

        return " ".join(normalized.split())
