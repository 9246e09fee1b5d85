"""Oracle formatting table."""

from __future__ import annotations

from tabunload.core.type_mapper import TypeMapper
from tabunload.models.column import TargetKind, TemporalFormat


class OracleTypeMapper(TypeMapper):
    """Maps Oracle column types to target kinds.

    Oracle DATE carries a time of day and renders as DATETIME. Timestamps
    keep all nine fractional digits.

    Examples:
        >>> mapper = OracleTypeMapper()
        >>> mapper.from_source("created", "TIMESTAMP(6) WITH TIME ZONE").temporal_format
        <TemporalFormat.TIMESTAMP_TZ: 'timestamp_tz'>
    """

    SOURCE_TYPES = {
        # Numeric
        "NUMBER": (TargetKind.NUMERIC, None),
        # Text
        "VARCHAR2": (TargetKind.TEXT, None),
        "NVARCHAR2": (TargetKind.TEXT, None),
        "CHAR": (TargetKind.TEXT, None),
        "NCHAR": (TargetKind.TEXT, None),
        # Temporal
        "DATE": (TargetKind.TEMPORAL, TemporalFormat.DATETIME),
        "TIMESTAMP": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP),
        "TIMESTAMP WITH TIME ZONE": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP_TZ),
        "TIMESTAMP WITH LOCAL TIME ZONE": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP),
    }

    TRIM_FRACTION = False
