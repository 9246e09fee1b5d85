"""SQLite formatting table.

SQLite stores temporals as ISO-8601 text, so this mapper parses strings
for temporal columns before they reach the codec.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from tabunload.core.type_mapper import TypeMapper
from tabunload.models.column import ColumnDescriptor, TargetKind, TemporalFormat


class SQLiteTypeMapper(TypeMapper):
    """Type mapper for SQLite declared types.

    Examples:
        >>> mapper = SQLiteTypeMapper()
        >>> mapper.from_source("price", "NUMERIC(10,2)").kind
        <TargetKind.NUMERIC: 'numeric'>
        >>> mapper.coerce("2024-01-31 13:45:00", mapper.from_source("at", "DATETIME"))
        datetime.datetime(2024, 1, 31, 13, 45)
    """

    SOURCE_TYPES = {
        # Numeric
        "INTEGER": (TargetKind.NUMERIC, None),
        "INT": (TargetKind.NUMERIC, None),
        "BIGINT": (TargetKind.NUMERIC, None),
        "REAL": (TargetKind.NUMERIC, None),
        "DOUBLE": (TargetKind.NUMERIC, None),
        "FLOAT": (TargetKind.NUMERIC, None),
        "NUMERIC": (TargetKind.NUMERIC, None),
        "DECIMAL": (TargetKind.NUMERIC, None),
        # Text
        "TEXT": (TargetKind.TEXT, None),
        "VARCHAR": (TargetKind.TEXT, None),
        "CHAR": (TargetKind.TEXT, None),
        "CLOB": (TargetKind.TEXT, None),
        # Temporal
        "DATE": (TargetKind.TEMPORAL, TemporalFormat.DATE),
        "DATETIME": (TargetKind.TEMPORAL, TemporalFormat.DATETIME),
        "TIMESTAMP": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP),
    }

    TRIM_FRACTION = False

    def coerce(self, raw: Any, descriptor: ColumnDescriptor) -> Any:
        """Parse ISO-8601 text in temporal columns.

        Raises:
            ValueError: If a temporal column holds text that is not ISO-8601
        """
        if descriptor.kind != TargetKind.TEMPORAL or not isinstance(raw, str):
            return raw

        value = datetime.fromisoformat(raw.strip())
        if descriptor.temporal_format == TemporalFormat.DATE:
            return date(value.year, value.month, value.day)
        return value
