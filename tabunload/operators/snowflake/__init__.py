"""Snowflake operators for tabunload."""

from tabunload.operators.snowflake.connector import SnowflakeConnector
from tabunload.operators.snowflake.type_mapper import SnowflakeTypeMapper

__all__ = ["SnowflakeConnector", "SnowflakeTypeMapper"]
