"""SQLAlchemy-based connector base for tabunload."""

from tabunload.operators.sql.connector import SQLConnector

__all__ = ["SQLConnector"]
