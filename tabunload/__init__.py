"""tabunload - Parallel, range-partitioned table unloads."""

__version__ = "0.1.0"

# Re-export key models for convenience
from tabunload.models import (
    ColumnDescriptor,
    NullableValue,
    Range,
    SinkResult,
    TargetKind,
    TemporalFormat,
    UnloadParams,
    UnloadResult,
    WorkerResult,
)

# Re-export core classes for custom connectors and sinks
from tabunload.core.channel import Channel
from tabunload.core.codec import RowCodec
from tabunload.core.connector import Connector, QueryResult
from tabunload.core.scheduler import PartitionScheduler
from tabunload.core.sink import Sink
from tabunload.core.type_mapper import TypeMapper
from tabunload.core.unloader import Unloader
from tabunload.core.worker import Worker

# Re-export sink implementations
from tabunload.sinks import DigestSink, RotatingFileSink

__all__ = [
    # Version
    "__version__",
    # Models
    "ColumnDescriptor",
    "NullableValue",
    "Range",
    "TargetKind",
    "TemporalFormat",
    "UnloadParams",
    "SinkResult",
    "WorkerResult",
    "UnloadResult",
    # Core
    "Channel",
    "Connector",
    "PartitionScheduler",
    "QueryResult",
    "RowCodec",
    "Sink",
    "TypeMapper",
    "Unloader",
    "Worker",
    # Sinks
    "DigestSink",
    "RotatingFileSink",
]
