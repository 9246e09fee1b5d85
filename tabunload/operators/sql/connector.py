"""SQL-based connector base class using SQLAlchemy.

This module provides a base class for source connectors that use
SQLAlchemy for connection management and cursor streaming.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Optional

try:
    from sqlalchemy import create_engine, text
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.pool import NullPool

    SQLALCHEMY_AVAILABLE = True
except ImportError:
    SQLALCHEMY_AVAILABLE = False

from tabunload.core.connector import Connector, QueryResult
from tabunload.exceptions import ConnectionError, ConnectorError
from tabunload.models.column import ColumnMetadata


class SQLConnector(Connector):
    """Base class for SQL source connectors using SQLAlchemy.

    Each connector holds exactly one DBAPI connection for its lifetime
    (the engine uses NullPool), so one worker maps to one database session.

    Subclasses must implement:
    - _build_connection_string(): Database-specific SQLAlchemy URL
    - _describe_column(): Column name and type name from a cursor description entry
    - _get_type_mapper(): Return the dialect's type mapper
    - _get_database_name(): Name used in log and error messages

    Subclasses may set SESSION_STATEMENTS, executed once right after
    connecting.

    Examples:
        Adding another dialect:
        >>> class DuckDBConnector(SQLConnector):
        ...     SESSION_STATEMENTS = ("SET TimeZone = 'UTC'",)
        ...
        ...     def _build_connection_string(self) -> str:
        ...         return f"duckdb:///{self.config['connection']}"
        ...
        ...     def _describe_column(self, entry) -> ColumnMetadata:
        ...         return ColumnMetadata(entry[0], str(entry[1]).upper())
        ...
        ...     def _get_type_mapper(self) -> TypeMapper:
        ...         return DuckDBTypeMapper()
        ...
        ...     def _get_database_name(self) -> str:
        ...         return "DuckDB"
    """

    SESSION_STATEMENTS: tuple[str, ...] = ()

    def __init__(self, config: dict[str, Any]):
        """Initialize SQL connector.

        Args:
            config: Connection configuration dictionary; ``connection`` holds
                the descriptor, ``echo`` enables SQL logging

        Raises:
            ConnectorError: If SQLAlchemy is not installed
        """
        if not SQLALCHEMY_AVAILABLE:
            db_name = self._get_database_name()
            raise ConnectorError(
                f"{db_name}Connector requires SQLAlchemy. Install with: pip install sqlalchemy"
            )

        super().__init__(config)
        self.engine: Optional[Engine] = None
        self.connection: Optional[Connection] = None

    @abstractmethod
    def _build_connection_string(self) -> str:
        """Build the SQLAlchemy URL from config.

        Raises:
            ConnectorError: If the descriptor is missing or malformed
        """
        pass

    @abstractmethod
    def _describe_column(self, entry: tuple) -> ColumnMetadata:
        """Turn one DBAPI ``cursor.description`` entry into column metadata.

        Args:
            entry: The 7-item description sequence (name, type_code, ...)
        """
        pass

    @abstractmethod
    def _get_database_name(self) -> str:
        """Get database name for error messages (e.g., "Oracle")."""
        pass

    def connect(self) -> None:
        """Open the connection and apply session settings.

        Raises:
            ConnectionError: If connection or session setup fails
        """
        try:
            self.engine = create_engine(
                self._build_connection_string(),
                poolclass=NullPool,
                echo=self.config.get("echo", False),
            )
            self.connection = self.engine.connect()
            for statement in self.SESSION_STATEMENTS:
                self.connection.execute(text(statement))
        except Exception as e:
            self.disconnect()
            db_name = self._get_database_name()
            raise ConnectionError(f"Failed to connect to {db_name}: {e}") from e

    def disconnect(self) -> None:
        """Close the connection and dispose the engine.

        Safe to call even if already disconnected.
        """
        if self.connection is not None:
            try:
                self.connection.close()
            finally:
                self.connection = None
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    def test_connection(self) -> bool:
        """Run a trivial query on the open connection.

        Returns:
            True if the query succeeds, False otherwise
        """
        if not self.is_connected:
            return False
        try:
            self.connection.execute(text(self._probe_query())).close()
            return True
        except Exception:
            return False

    def stream_query(self, query: str, params: Optional[dict[str, Any]] = None) -> QueryResult:
        """Execute a query with a streaming cursor where the dialect has one.

        Args:
            query: SQL text
            params: Bind parameters (``first_value``/``last_value`` for ranges)

        Returns:
            QueryResult over the open cursor

        Raises:
            ConnectorError: If not connected or query execution fails
        """
        if not self.is_connected:
            raise ConnectorError("Not connected to database")

        try:
            connection = self.connection
            if connection.dialect.supports_server_side_cursors:
                connection = connection.execution_options(stream_results=True)
            result = connection.execute(text(query), params or {})
            columns = [self._describe_column(entry) for entry in result.cursor.description]
        except Exception as e:
            raise ConnectorError(f"Failed to execute query: {e}") from e

        return QueryResult(columns=columns, rows=result, on_close=result.close)

    def _probe_query(self) -> str:
        return "SELECT 1"
