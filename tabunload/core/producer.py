"""Row stream producer.

This module runs one query against one connection and pushes encoded rows
onto a channel, in cursor order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from tabunload.core.channel import Channel
from tabunload.core.codec import RowCodec
from tabunload.core.connector import Connector
from tabunload.exceptions import ChannelClosedError, ConnectorError, ExtractorError
from tabunload.models.params import UnloadParams

logger = logging.getLogger(__name__)


@dataclass
class ProduceStats:
    """Counters for one query execution."""

    rows: int = 0
    substituted: int = 0


class RowProducer:
    """Executes queries on a worker's connector and feeds its row channel.

    The producer is the only writer of the channel while it runs. It does
    not close the channel: a worker reuses one channel across all ranges it
    pulls and closes it once done.

    Examples:
        >>> producer = RowProducer(connector, params, worker_id=1)
        >>> stats = producer.produce(rows, bind_params={"first_value": 1, "last_value": 10})
    """

    def __init__(self, connector: Connector, params: UnloadParams, worker_id: int = 0):
        """Initialize producer.

        Args:
            connector: Connected connector owned by the calling worker
            params: Run parameters
            worker_id: Worker identifier used in log messages
        """
        self.connector = connector
        self.params = params
        self.worker_id = worker_id

    def produce(
        self,
        channel: Channel[list[str]],
        bind_params: Optional[dict[str, Any]] = None,
    ) -> ProduceStats:
        """Run the query once and push every row onto the channel.

        A row whose values cannot be decoded is logged and replaced by an
        empty row so the row count is preserved.

        Args:
            channel: Row channel consumed by the worker's sink
            bind_params: Range bounds for ranged queries

        Returns:
            Row counters for this execution

        Raises:
            TypeMappingError: If a result column has an unmapped type
            ExtractorError: If the query or cursor fails, or the sink went away
        """
        stats = ProduceStats()

        try:
            result = self.connector.stream_query(self.params.query, bind_params)
        except ConnectorError as e:
            raise ExtractorError(f"[worker {self.worker_id}] query failed: {e}") from e

        with result:
            type_mapper = self.connector.type_mapper
            descriptors = type_mapper.describe(result.columns)
            codec = RowCodec(
                descriptors,
                quoting=self.params.double_quotes,
                quote_all=self.params.quote_all,
            )

            rows = iter(result)
            while True:
                try:
                    raw_row = next(rows)
                except StopIteration:
                    break
                except Exception as e:
                    raise ExtractorError(
                        f"[worker {self.worker_id}] fetch failed after {stats.rows} rows: {e}"
                    ) from e

                try:
                    values = [
                        type_mapper.to_value(raw, descriptor)
                        for raw, descriptor in zip(raw_row, descriptors)
                    ]
                    fields = codec.encode(values)
                except (TypeError, ValueError, ArithmeticError) as e:
                    logger.warning(
                        "[worker %s] row %s could not be decoded, writing empty row: %s",
                        self.worker_id,
                        stats.rows + 1,
                        e,
                    )
                    fields = codec.empty_row()
                    stats.substituted += 1

                try:
                    channel.send(fields)
                except ChannelClosedError as e:
                    raise ExtractorError(
                        f"[worker {self.worker_id}] sink stopped after {stats.rows} rows"
                    ) from e
                stats.rows += 1

        return stats
