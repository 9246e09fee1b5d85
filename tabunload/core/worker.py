"""Worker: one connection, one producer, one sink.

A worker binds a RowProducer on its own connection to a dedicated Sink
running in a second thread. The two stages hand rows over a capacity-one
channel, so memory stays bounded by the number of workers.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from tabunload.core.channel import Channel
from tabunload.core.connector import Connector
from tabunload.core.producer import RowProducer
from tabunload.core.sink import Sink
from tabunload.models.params import UnloadParams
from tabunload.models.partition import Range
from tabunload.models.results import SinkResult, WorkerResult

logger = logging.getLogger(__name__)

SinkFactory = Callable[[UnloadParams, int], Sink]


class Worker:
    """Unit of concurrency owning one connection and one sink.

    Examples:
        Whole-table mode:
        >>> worker = Worker(0, params, connector, RotatingFileSink)
        >>> if worker.connect() is None:
        ...     result = worker.run_whole()

        Ranged mode, pulling from a shared partition channel:
        >>> result = worker.run_ranges(partitions)
    """

    def __init__(
        self,
        worker_id: int,
        params: UnloadParams,
        connector: Connector,
        sink_factory: SinkFactory,
    ):
        """Initialize worker.

        Args:
            worker_id: Identifier (0 for whole-table, 1..N for ranged runs)
            params: Run parameters
            connector: Connector exclusively owned by this worker
            sink_factory: Builds the worker's sink from (params, worker_id)
        """
        self.worker_id = worker_id
        self.params = params
        self.connector = connector
        self.sink_factory = sink_factory
        self.producer = RowProducer(connector, params, worker_id)

        self.connected = False
        self.ranges_processed: list[str] = []
        self.rows_produced = 0
        self.rows_substituted = 0
        self.error_message: Optional[str] = None

        self._rows: Optional[Channel[list[str]]] = None
        self._sink_thread: Optional[threading.Thread] = None
        self._sink_result: Optional[SinkResult] = None

    def connect(self) -> Optional[Exception]:
        """Open the worker's connection.

        Returns:
            None on success, the failure otherwise (reported, not raised)
        """
        logger.info("[worker %s] setting up database connection", self.worker_id)
        try:
            self.connector.connect()
        except Exception as e:
            logger.error("[worker %s] database setup failed: %s", self.worker_id, e)
            self.error_message = str(e)
            return e
        self.connected = True
        return None

    def run_whole(self) -> WorkerResult:
        """Run the query once, unpartitioned, into the sink."""
        try:
            self._start_sink()
            stats = self.producer.produce(self._rows)
            self.rows_produced += stats.rows
            self.rows_substituted += stats.substituted
        except Exception as e:
            logger.error("[worker %s] unload failed: %s", self.worker_id, e)
            self.error_message = str(e)
        finally:
            self._shutdown()
        return self.result()

    def run_ranges(self, partitions: Channel[Range]) -> WorkerResult:
        """Pull ranges until the partition channel is closed and drained.

        A failing range stops this worker; ranges it has not pulled yet are
        left to the other workers.
        """
        try:
            for partition in partitions:
                logger.info("[worker %s] range %s", self.worker_id, partition)
                if self._sink_thread is None:
                    self._start_sink()
                stats = self.producer.produce(self._rows, partition.bind_params())
                self.rows_produced += stats.rows
                self.rows_substituted += stats.substituted
                self.ranges_processed.append(str(partition))
        except Exception as e:
            logger.error("[worker %s] stopping, remaining ranges skipped: %s", self.worker_id, e)
            self.error_message = str(e)
        finally:
            partitions.detach()
            self._shutdown()
        return self.result()

    def result(self) -> WorkerResult:
        """Snapshot of the worker's outcome."""
        return WorkerResult(
            worker_id=self.worker_id,
            connected=self.connected,
            ranges_processed=list(self.ranges_processed),
            rows_produced=self.rows_produced,
            rows_substituted=self.rows_substituted,
            sink=self._sink_result,
            error_message=self.error_message,
        )

    def _start_sink(self) -> None:
        self._rows = Channel(capacity=1)
        sink = self.sink_factory(self.params, self.worker_id)
        self._sink_thread = threading.Thread(
            target=self._consume,
            args=(sink, self._rows),
            name=f"sink-{self.worker_id}",
            daemon=True,
        )
        self._sink_thread.start()

    def _consume(self, sink: Sink, rows: Channel[list[str]]) -> None:
        try:
            self._sink_result = sink.consume(rows)
        except Exception as e:
            logger.exception("[worker %s] sink crashed", self.worker_id)
            self._sink_result = SinkResult(rows_written=sink.rows_written, error_message=str(e))
        finally:
            # lets a blocked producer fail instead of waiting forever
            rows.detach()

    def _shutdown(self) -> None:
        if self._sink_thread is not None:
            self._rows.close()
            self._sink_thread.join()

        if self.connected:
            logger.info("[worker %s] closing connection", self.worker_id)
            try:
                self.connector.disconnect()
            except Exception as e:
                logger.error("[worker %s] closing connection failed: %s", self.worker_id, e)
