"""Unload entry point.

The Unloader resolves the dialect's connector and the destination's sink,
then runs the query either once on a single worker or through the
partition scheduler when range bounds are given.
"""

from __future__ import annotations

import importlib
import logging
from datetime import datetime
from typing import Callable, Optional

from tabunload.core.connector import Connector
from tabunload.core.scheduler import PartitionScheduler
from tabunload.core.sink import Sink
from tabunload.core.worker import Worker
from tabunload.exceptions import ConfigurationError
from tabunload.models.params import UnloadParams
from tabunload.models.results import UnloadResult
from tabunload.sinks import DigestSink, RotatingFileSink

logger = logging.getLogger(__name__)

# Default connectors by dialect (full module path)
DEFAULT_CONNECTORS = {
    "oracle": "tabunload.operators.oracle.connector.OracleConnector",
    "snowflake": "tabunload.operators.snowflake.connector.SnowflakeConnector",
    "sqlite": "tabunload.operators.sqlite.connector.SQLiteConnector",
}

SINKS: dict[str, type[Sink]] = {
    "file": RotatingFileSink,
    "checksum": DigestSink,
}

ConnectorFactory = Callable[[int], Connector]


class Unloader:
    """Runs one unload described by UnloadParams.

    Examples:
        >>> params = UnloadParams.load_from_yaml("jobs/orders.yaml")
        >>> result = Unloader(params).run()
        >>> print(f"Wrote {result.total_rows} rows to {len(result.files)} files")
    """

    def __init__(self, params: UnloadParams, connector_factory: Optional[ConnectorFactory] = None):
        """Initialize unloader.

        Args:
            params: Run parameters
            connector_factory: Builds the connector for worker ``n``; defaults
                to the dialect's connector (or ``params.connector``)

        Raises:
            ConfigurationError: If the dialect or connector class is unknown
        """
        self.params = params
        self.sink_class = SINKS[params.destination]
        if connector_factory is None:
            connector_class = self._resolve_connector_class()

            def connector_factory(worker_id: int) -> Connector:
                return self.create_connector(connector_class)

        self.connector_factory = connector_factory

    def run(self) -> UnloadResult:
        """Execute the unload.

        Returns:
            UnloadResult; ``success`` is False when any worker failed
        """
        logger.info(
            "Starting %s unload (%s) to %s",
            "ranged" if self.params.is_ranged else "whole-table",
            self.params.dialect,
            self.params.file_name if self.params.destination == "file" else "checksum",
        )

        if self.params.is_ranged:
            result = PartitionScheduler(self.params, self.create_worker).run()
        else:
            result = self._run_whole()

        logger.info(
            "Finished in %.2fs: %s rows, success=%s",
            result.duration_seconds,
            result.total_rows,
            result.success,
        )
        return result

    def create_worker(self, worker_id: int) -> Worker:
        """Build worker ``worker_id`` with its own connector and sink factory."""
        return Worker(worker_id, self.params, self.connector_factory(worker_id), self.sink_class)

    def create_connector(self, connector_class: type[Connector]) -> Connector:
        """Instantiate a connector from the run's connection settings."""
        connector_config = {"connection": self.params.connection, **self.params.connection_options}
        return connector_class(connector_config)

    def _run_whole(self) -> UnloadResult:
        started_at = datetime.now()
        worker = self.create_worker(0)

        errors = []
        error = worker.connect()
        if error is None:
            worker_result = worker.run_whole()
        else:
            errors.append(f"worker 0: {error}")
            worker_result = worker.result()

        completed_at = datetime.now()
        return UnloadResult(
            success=worker_result.success,
            ranged=False,
            workers=[worker_result],
            errors=errors,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

    def _resolve_connector_class(self) -> type[Connector]:
        class_path = self.params.connector
        if class_path is None:
            if self.params.dialect not in DEFAULT_CONNECTORS:
                raise ConfigurationError(
                    f"No connector registered for dialect '{self.params.dialect}'.\n"
                    f"Available dialects: {', '.join(DEFAULT_CONNECTORS.keys())}\n"
                    f"Or give a connector class: connector: your_package.module.ClassName"
                )
            class_path = DEFAULT_CONNECTORS[self.params.dialect]

        if "." not in class_path:
            raise ConfigurationError(
                f"Invalid connector '{class_path}'. Expected a full module path "
                f"(e.g., 'tabunload.operators.sqlite.connector.SQLiteConnector')"
            )
        module_path, class_name = class_path.rsplit(".", 1)
        return self._load_operator_class(module_path, class_name)

    def _load_operator_class(self, module_path: str, class_name: str) -> type:
        """Dynamically import and return a connector class.

        Raises:
            ConfigurationError: If module/class not found
        """
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            raise ConfigurationError(
                f"Failed to import connector module '{module_path}'.\n"
                f"Error: {e}\n"
                f"Make sure the module exists and is importable."
            ) from e

        try:
            return getattr(module, class_name)
        except AttributeError as e:
            available_classes = [name for name in dir(module) if not name.startswith("_")]
            raise ConfigurationError(
                f"Class '{class_name}' not found in module '{module_path}'.\n"
                f"Available classes: {available_classes}"
            ) from e
