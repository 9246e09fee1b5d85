"""SQLite connector implementation using SQLAlchemy.

The sqlite3 driver reports no column types in the cursor description, so
queries declare them in the column alias: ``SELECT id AS "id [INTEGER]"``.
Columns without a declaration are treated as TEXT.
"""

from __future__ import annotations

import re

from tabunload.core.type_mapper import TypeMapper
from tabunload.exceptions import ConnectorError
from tabunload.models.column import ColumnMetadata
from tabunload.operators.sql.connector import SQLConnector
from tabunload.operators.sqlite.type_mapper import SQLiteTypeMapper

DECLARED_TYPE = re.compile(r"^(?P<name>.*?)\s*\[(?P<type>[^\]]+)\]$")


class SQLiteConnector(SQLConnector):
    """SQLite connector using SQLAlchemy.

    Configuration keys:
        - connection: Database file path or ``sqlite:///`` URL (required)
        - echo: Enable SQL logging (default: False)

    Examples:
        >>> config = {"connection": "/path/to/database.db"}
        >>> with SQLiteConnector(config) as conn:
        ...     with conn.stream_query('SELECT id AS "id [INTEGER]" FROM orders') as result:
        ...         rows = list(result)
    """

    def _build_connection_string(self) -> str:
        if "connection" not in self.config:
            raise ConnectorError("Missing required config key: connection")

        connection = self.config["connection"]
        if connection.startswith("sqlite:"):
            return connection
        return f"sqlite:///{connection}"

    def _describe_column(self, entry: tuple) -> ColumnMetadata:
        match = DECLARED_TYPE.match(entry[0])
        if match is None:
            return ColumnMetadata(name=entry[0], type_name="TEXT")
        return ColumnMetadata(name=match.group("name"), type_name=match.group("type"))

    def _get_type_mapper(self) -> TypeMapper:
        return SQLiteTypeMapper()

    def _get_database_name(self) -> str:
        return "SQLite"
