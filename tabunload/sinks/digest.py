"""Streaming checksum sink.

Folds every row, delimiter-joined and newline-terminated, into one
incremental hash. The digest depends on row order, so it is only
comparable between runs that deliver rows in the same order.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Optional

from tabunload.core.sink import Sink
from tabunload.models.params import UnloadParams
from tabunload.models.results import SinkResult

logger = logging.getLogger(__name__)


class DigestSink(Sink):
    """Running cryptographic digest over the row stream.

    Examples:
        >>> sink = DigestSink(params)
        >>> result = sink.consume([["1", '"a"'], ["2", '"b"']])
        >>> result.digest
        '4d6c...'
    """

    def __init__(self, params: UnloadParams, worker_id: int = 0):
        super().__init__(params, worker_id)
        self.hasher = hashlib.new(params.digest_algorithm)
        self.digest: Optional[str] = None

    def write_row(self, row: list[str]) -> None:
        """Fold one row into the hash."""
        line = self.params.delimiter.join(row) + "\n"
        self.hasher.update(line.encode("utf-8"))
        self.rows_written += 1

        if self.rows_written % self.params.progress_interval == 0:
            logger.info("[worker %s] %s rows", self.worker_id, self.rows_written)

    def close(self) -> SinkResult:
        """Finalize the digest; later calls return the same value."""
        if self.digest is None:
            self.digest = self.hasher.hexdigest()
            logger.info(
                "[worker %s] Checksum: %s (%s rows)", self.worker_id, self.digest, self.rows_written
            )
        return SinkResult(rows_written=self.rows_written, digest=self.digest)
