"""Base Sink abstract class.

This module defines the Sink interface for durably consuming a stream of
encoded rows.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable

from tabunload.models.params import UnloadParams
from tabunload.models.results import SinkResult

logger = logging.getLogger(__name__)


class Sink(ABC):
    """Abstract base class for all sink implementations.

    A sink is owned by exactly one worker and consumes that worker's row
    channel to completion. Its state is never shared across threads.

    The sink lifecycle:
    1. write_row() - Record one row, in delivery order
    2. close() - Flush and release resources, produce final output

    ``consume`` drives the lifecycle over a whole stream and returns only
    after the stream is exhausted.

    Examples:
        >>> sink = RotatingFileSink(params, worker_id=1)
        >>> result = sink.consume(rows)
        >>> print(result.files)
    """

    def __init__(self, params: UnloadParams, worker_id: int = 0):
        """Initialize sink.

        Args:
            params: Run parameters
            worker_id: Owning worker's identifier
        """
        self.params = params
        self.worker_id = worker_id
        self.rows_written = 0

    @abstractmethod
    def write_row(self, row: list[str]) -> None:
        """Record one encoded row.

        Raises:
            SinkError: If the sink cannot continue
        """
        pass

    @abstractmethod
    def close(self) -> SinkResult:
        """Finalize output exactly once.

        Returns:
            SinkResult describing everything recorded
        """
        pass

    def consume(self, rows: Iterable[list[str]]) -> SinkResult:
        """Drain a row stream into the sink.

        The sink is closed even when writing fails, so output recorded so
        far is kept.

        Args:
            rows: Row stream (usually a Channel)

        Returns:
            SinkResult, with error_message set if writing stopped early
        """
        try:
            for row in rows:
                self.write_row(row)
        except Exception as e:
            logger.error("[worker %s] sink failed after %s rows: %s", self.worker_id, self.rows_written, e)
            result = self.close()
            return result.model_copy(update={"error_message": str(e)})
        return self.close()
