"""Partition scheduler for ranged unloads.

The scheduler starts one worker per parallel slot, waits until every
worker has reported on its connection, and only then walks the key range,
handing partitions to whichever worker is free.

State machine: IDLE -> CONNECTING_WORKERS -> DISPATCHING -> DRAINING -> DONE
"""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from tabunload.core.channel import Channel
from tabunload.core.worker import Worker
from tabunload.exceptions import ChannelClosedError, ConfigurationError
from tabunload.models.params import UnloadParams
from tabunload.models.partition import Range, count_ranges, generate_ranges
from tabunload.models.results import UnloadResult, WorkerResult

logger = logging.getLogger(__name__)

WorkerFactory = Callable[[int], Worker]

SetupReport = tuple[int, Optional[Exception]]


class SchedulerState(str, Enum):
    """Lifecycle states of a PartitionScheduler."""

    IDLE = "idle"
    CONNECTING_WORKERS = "connecting_workers"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    DONE = "done"


class PartitionScheduler:
    """Dispatches key ranges to a pool of workers.

    Connecting is all-or-nothing: if any worker fails to connect, no range
    is dispatched and the collected errors are returned. Once dispatching
    starts, errors stay with the worker that hit them.

    Examples:
        >>> scheduler = PartitionScheduler(params, unloader.create_worker)
        >>> result = scheduler.run()
        >>> print(result.ranges_dispatched, result.total_rows)
    """

    def __init__(self, params: UnloadParams, worker_factory: WorkerFactory):
        """Initialize scheduler.

        Args:
            params: Run parameters (must be ranged)
            worker_factory: Builds worker ``n`` (1-based) with its own connector and
                sink. Called on the worker's thread; a failure counts as a setup error

        Raises:
            ConfigurationError: If params carry no range bounds
        """
        if not params.is_ranged:
            raise ConfigurationError("PartitionScheduler requires range_start and range_end")

        self.params = params
        self.worker_factory = worker_factory
        self.state = SchedulerState.IDLE

    def run(self) -> UnloadResult:
        """Connect workers, dispatch every range, wait for all workers.

        Returns:
            UnloadResult with per-worker results
        """
        started_at = datetime.now()
        parallel = self.params.parallel
        total = count_ranges(self.params.range_start, self.params.range_end, self.params.batch_size)

        reports: queue.Queue[SetupReport] = queue.Queue()
        partitions: Channel[Range] = Channel(capacity=1, receivers=parallel)

        self.state = SchedulerState.CONNECTING_WORKERS
        with ThreadPoolExecutor(max_workers=parallel, thread_name_prefix="worker") as executor:
            futures: list[Future[WorkerResult]] = [
                executor.submit(self._run_worker, worker_id, partitions, reports)
                for worker_id in range(1, parallel + 1)
            ]

            errors = self._collect_setup_errors(reports, parallel)
            dispatched = 0
            if errors:
                for error in errors:
                    logger.error(error)
                logger.error("Aborting: %s of %s workers failed to connect", len(errors), parallel)
            else:
                self.state = SchedulerState.DISPATCHING
                dispatched = self._dispatch(partitions, total)

            self.state = SchedulerState.DRAINING
            partitions.close()
            workers = [future.result() for future in futures]

            # every worker has returned; anything still queued was never picked up
            undelivered = partitions.drain()
            if undelivered:
                logger.error("%s dispatched ranges were left unprocessed", undelivered)
                dispatched -= undelivered

        self.state = SchedulerState.DONE
        completed_at = datetime.now()

        return UnloadResult(
            success=not errors and dispatched == total and all(w.success for w in workers),
            ranged=True,
            ranges_generated=total,
            ranges_dispatched=dispatched,
            workers=workers,
            errors=errors,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

    def _run_worker(
        self,
        worker_id: int,
        partitions: Channel[Range],
        reports: queue.Queue[SetupReport],
    ) -> WorkerResult:
        try:
            worker = self.worker_factory(worker_id)
        except Exception as e:
            logger.error("[worker %s] setup failed: %s", worker_id, e)
            reports.put((worker_id, e))
            partitions.detach()
            return WorkerResult(worker_id=worker_id, error_message=str(e))

        error = worker.connect()
        reports.put((worker.worker_id, error))
        if error is not None:
            partitions.detach()
            return worker.result()
        return worker.run_ranges(partitions)

    def _collect_setup_errors(self, reports: queue.Queue[SetupReport], parallel: int) -> list[str]:
        errors = []
        for _ in range(parallel):
            worker_id, error = reports.get()
            if error is not None:
                errors.append(f"worker {worker_id}: {error}")
        return sorted(errors)

    def _dispatch(self, partitions: Channel[Range], total: int) -> int:
        dispatched = 0
        for partition in generate_ranges(
            self.params.range_start, self.params.range_end, self.params.batch_size
        ):
            try:
                partitions.send(partition)
            except ChannelClosedError:
                logger.error(
                    "All workers stopped; %s of %s ranges not dispatched, starting at %s",
                    total - dispatched,
                    total,
                    partition,
                )
                break
            dispatched += 1
        return dispatched
