"""SQLite operators for tabunload."""

from tabunload.operators.sqlite.connector import SQLiteConnector
from tabunload.operators.sqlite.type_mapper import SQLiteTypeMapper

__all__ = ["SQLiteConnector", "SQLiteTypeMapper"]
