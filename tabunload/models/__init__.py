"""tabunload models package.

This package contains the value types passed between pipeline stages,
the run parameter model and the result models.
"""

from tabunload.models.column import (
    ColumnDescriptor,
    ColumnMetadata,
    DecodedRow,
    NullableValue,
    TargetKind,
    TemporalFormat,
)
from tabunload.models.params import UnloadParams, trim_extension
from tabunload.models.partition import Range, count_ranges, generate_ranges
from tabunload.models.results import SinkResult, UnloadResult, WorkerResult

__all__ = [
    # Column models
    "ColumnDescriptor",
    "ColumnMetadata",
    "DecodedRow",
    "NullableValue",
    "TargetKind",
    "TemporalFormat",
    # Params
    "UnloadParams",
    "trim_extension",
    # Partitioning
    "Range",
    "count_ranges",
    "generate_ranges",
    # Result models
    "SinkResult",
    "WorkerResult",
    "UnloadResult",
]
