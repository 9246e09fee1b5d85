"""Source database connectors.

This module defines the Connector interface: one connection to a source
database, owned by exactly one worker, that executes queries and hands back
a typed row source.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from tabunload.core.type_mapper import TypeMapper
from tabunload.models.column import ColumnMetadata


class QueryResult:
    """An executing query: column metadata plus a forward-only row iterator.

    Rows are sequences of driver values aligned with ``columns``.
    """

    def __init__(
        self,
        columns: list[ColumnMetadata],
        rows: Iterable[Sequence[Any]],
        on_close: Optional[Callable[[], None]] = None,
    ):
        self.columns = columns
        self._rows = rows
        self._on_close = on_close

    def __iter__(self) -> Iterator[Sequence[Any]]:
        return iter(self._rows)

    def close(self) -> None:
        """Release the underlying cursor. Safe to call more than once."""
        if self._on_close is not None:
            on_close, self._on_close = self._on_close, None
            on_close()

    def __enter__(self) -> QueryResult:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class Connector(ABC):
    """Base class for a single connection to a source database.

    Connectors handle connection lifecycle and query execution. Each worker
    owns its own connector for its whole lifetime; connectors are never
    shared between threads.

    Examples:
        Connect for the duration of a block:
        >>> with OracleConnector({"connection": "scott/tiger@dbhost/ORCL"}) as conn:
        ...     with conn.stream_query("SELECT * FROM orders") as result:
        ...         for row in result:
        ...             print(row)
    """

    def __init__(self, config: dict[str, Any]):
        """Initialize with dialect settings.

        Args:
            config: Dialect settings; every dialect reads ``connection``
        """
        self.config = config
        self.connection: Optional[Any] = None
        self.type_mapper: TypeMapper = self._get_type_mapper()

    @abstractmethod
    def _get_type_mapper(self) -> TypeMapper:
        """Type mapper for this dialect's column types."""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Open the session and apply dialect session settings.

        Raises:
            ConnectionError: If the database cannot be reached
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Release the session. Calling it on a closed connector is a no-op."""
        pass

    @abstractmethod
    def stream_query(self, query: str, params: Optional[dict[str, Any]] = None) -> QueryResult:
        """Execute a query and return its rows as a stream.

        Args:
            query: SQL text
            params: Bind parameters (ranged queries only)

        Returns:
            QueryResult positioned before the first row

        Raises:
            ConnectorError: If the query cannot be executed
        """
        pass

    def test_connection(self) -> bool:
        """Whether the session is usable. SQL connectors run a probe query."""
        return self.is_connected

    def __enter__(self) -> Connector:
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.disconnect()

    @property
    def is_connected(self) -> bool:
        """Whether connect() succeeded and disconnect() has not run since."""
        return self.connection is not None
