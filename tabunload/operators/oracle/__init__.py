"""Oracle operators for tabunload."""

from tabunload.operators.oracle.connector import OracleConnector, parse_easy_connect
from tabunload.operators.oracle.type_mapper import OracleTypeMapper

__all__ = ["OracleConnector", "OracleTypeMapper", "parse_easy_connect"]
