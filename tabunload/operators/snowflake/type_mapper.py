"""Snowflake formatting table."""

from __future__ import annotations

from tabunload.core.type_mapper import TypeMapper
from tabunload.models.column import TargetKind, TemporalFormat


class SnowflakeTypeMapper(TypeMapper):
    """Maps Snowflake result types to target kinds.

    Fractional seconds drop trailing zeros, and local-time-zone timestamps
    are normalized to UTC.
    """

    SOURCE_TYPES = {
        # Numeric
        "FIXED": (TargetKind.NUMERIC, None),
        "REAL": (TargetKind.NUMERIC, None),
        # Text
        "TEXT": (TargetKind.TEXT, None),
        # Temporal
        "DATE": (TargetKind.TEMPORAL, TemporalFormat.DATE),
        "TIMESTAMP_NTZ": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP),
        "TIMESTAMP_TZ": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP_TZ),
        "TIMESTAMP_LTZ": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP_UTC),
    }

    TRIM_FRACTION = True
