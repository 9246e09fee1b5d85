"""Shared fixtures: an in-memory connector and parameter builders."""

import threading
from typing import Any, Optional

import pytest

from tabunload.core.connector import Connector, QueryResult
from tabunload.core.type_mapper import TypeMapper
from tabunload.exceptions import ConnectionError, ConnectorError
from tabunload.models.column import ColumnMetadata, TargetKind, TemporalFormat
from tabunload.models.params import UnloadParams


class FakeTypeMapper(TypeMapper):
    """Formatting table for the in-memory connector."""

    SOURCE_TYPES = {
        "NUMBER": (TargetKind.NUMERIC, None),
        "TEXT": (TargetKind.TEXT, None),
        "TIMESTAMP": (TargetKind.TEMPORAL, TemporalFormat.TIMESTAMP),
    }


class FakeConnector(Connector):
    """Connector over a list of rows whose first column is the partition key.

    Config keys:
        - rows: list of row tuples
        - columns: list of (name, type_name); defaults to id NUMBER, name TEXT
        - fail_connect: raise ConnectionError on connect
        - fail_query: raise ConnectorError on stream_query
        - fail_on_key: key value whose range fails to execute
    """

    def __init__(self, config: dict[str, Any]):
        super().__init__(config)
        self.queries: list[Optional[dict[str, Any]]] = []
        self.disconnected = False

    def _get_type_mapper(self) -> TypeMapper:
        return FakeTypeMapper()

    def connect(self) -> None:
        if self.config.get("fail_connect"):
            raise ConnectionError(f"cannot reach {self.config.get('connection')}")
        self.connection = object()

    def disconnect(self) -> None:
        self.connection = None
        self.disconnected = True

    def stream_query(self, query: str, params: Optional[dict[str, Any]] = None) -> QueryResult:
        self.queries.append(params)
        if self.config.get("fail_query"):
            raise ConnectorError("ORA-00942: table or view does not exist")

        rows = self.config.get("rows", [])
        if params is not None:
            first, last = params["first_value"], params["last_value"]
            fail_key = self.config.get("fail_on_key")
            if fail_key is not None and first <= fail_key <= last:
                raise ConnectorError(f"range {first}..{last} failed")
            rows = [row for row in rows if first <= row[0] <= last]

        columns = [
            ColumnMetadata(name, type_name)
            for name, type_name in self.config.get("columns", [("id", "NUMBER"), ("name", "TEXT")])
        ]
        return QueryResult(columns=columns, rows=list(rows))


class ConnectorPool:
    """Builds one FakeConnector per worker and remembers them."""

    def __init__(self, rows=None, failing_workers=(), **config):
        self.rows = rows or []
        self.failing_workers = set(failing_workers)
        self.config = config
        self.connectors: dict[int, FakeConnector] = {}
        self._lock = threading.Lock()

    def __call__(self, worker_id: int) -> FakeConnector:
        connector = FakeConnector(
            {
                "connection": f"fake-{worker_id}",
                "rows": self.rows,
                "fail_connect": worker_id in self.failing_workers,
                **self.config,
            }
        )
        with self._lock:
            self.connectors[worker_id] = connector
        return connector


@pytest.fixture
def make_params(tmp_path):
    """Build UnloadParams writing under a temporary directory."""

    def _make(**overrides) -> UnloadParams:
        values = {
            "connection": "fake",
            "dialect": "sqlite",
            "query": "SELECT id, name FROM t WHERE id BETWEEN :first_value AND :last_value",
            "file_name": str(tmp_path / "out" / "orders"),
        }
        values.update(overrides)
        return UnloadParams.build(**values)

    return _make
