"""tabunload utilities package.

This package contains logging setup and YAML job file parsing.
"""

from tabunload.utils.logging import JSONFormatter, setup_logging
from tabunload.utils.yaml_parser import load_yaml, read_query_file, substitute_env_vars

__all__ = [
    "JSONFormatter",
    "load_yaml",
    "read_query_file",
    "setup_logging",
    "substitute_env_vars",
]
