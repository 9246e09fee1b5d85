"""Result models for sinks, workers and whole unload runs.

This module defines result classes that capture outcomes and metrics
from each stage of an unload.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field as PydanticField


class SinkResult(BaseModel):
    """Result of draining one row stream into a sink."""

    rows_written: int = PydanticField(
        0,
        description="Number of rows the sink recorded",
        ge=0,
    )

    files: list[str] = PydanticField(
        default_factory=list,
        description="Output files produced, in sequence order",
    )

    digest: Optional[str] = PydanticField(
        None,
        description="Hex digest (checksum destination only)",
    )

    error_message: Optional[str] = PydanticField(
        None,
        description="Error message if the sink stopped early",
    )

    model_config = {"extra": "forbid"}

    @property
    def success(self) -> bool:
        """Whether the sink drained its stream without a fatal error."""
        return self.error_message is None


class WorkerResult(BaseModel):
    """Result of one worker's lifetime.

    Contains the ranges it processed, row counts and the result of its sink.
    """

    worker_id: int = PydanticField(
        ...,
        description="Worker identifier (0 for whole-table runs)",
        ge=0,
    )

    connected: bool = PydanticField(
        False,
        description="Whether the worker's connection was established",
    )

    ranges_processed: list[str] = PydanticField(
        default_factory=list,
        description="Ranges fully produced by this worker, in processing order",
    )

    rows_produced: int = PydanticField(
        0,
        description="Rows pushed onto the worker's row channel",
        ge=0,
    )

    rows_substituted: int = PydanticField(
        0,
        description="Rows that failed to decode and were replaced by empty rows",
        ge=0,
    )

    sink: Optional[SinkResult] = PydanticField(
        None,
        description="Sink result, absent when the sink never started",
    )

    error_message: Optional[str] = PydanticField(
        None,
        description="Error message if the worker stopped early",
    )

    model_config = {"extra": "forbid"}

    @property
    def success(self) -> bool:
        """Whether the worker and its sink finished without errors."""
        sink_ok = self.sink is None or self.sink.success
        return self.connected and self.error_message is None and sink_ok

    @property
    def rows_written(self) -> int:
        """Rows recorded by the worker's sink."""
        return self.sink.rows_written if self.sink is not None else 0


class UnloadResult(BaseModel):
    """Result of a complete unload run.

    Aggregates worker results together with the connect-time errors the
    scheduler collected before dispatching.
    """

    success: bool = PydanticField(
        ...,
        description="Whether every worker connected and finished cleanly",
    )

    ranged: bool = PydanticField(
        False,
        description="Whether the run was range-partitioned",
    )

    ranges_generated: int = PydanticField(
        0,
        description="Number of ranges generated by the scheduler",
        ge=0,
    )

    ranges_dispatched: int = PydanticField(
        0,
        description="Number of ranges handed to workers",
        ge=0,
    )

    workers: list[WorkerResult] = PydanticField(
        default_factory=list,
        description="Per-worker results ordered by worker id",
    )

    errors: list[str] = PydanticField(
        default_factory=list,
        description="Setup errors that aborted the run before dispatch",
    )

    started_at: datetime = PydanticField(
        ...,
        description="Run start time",
    )

    completed_at: Optional[datetime] = PydanticField(
        None,
        description="Run completion time",
    )

    duration_seconds: float = PydanticField(
        0.0,
        description="Duration of the run in seconds",
        ge=0.0,
    )

    model_config = {"extra": "forbid"}

    @property
    def total_rows(self) -> int:
        """Rows recorded across all sinks."""
        return sum(w.rows_written for w in self.workers)

    @property
    def files(self) -> list[str]:
        """All output files, grouped by worker."""
        return [f for w in self.workers if w.sink is not None for f in w.sink.files]

    @property
    def digests(self) -> dict[int, str]:
        """Checksums by worker id (checksum destination only)."""
        return {
            w.worker_id: w.sink.digest
            for w in self.workers
            if w.sink is not None and w.sink.digest is not None
        }
