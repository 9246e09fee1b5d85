"""YAML parsing utilities for tabunload.

This module provides functions for loading unload job files and the
query files they reference.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml

from tabunload.exceptions import ValidationError

# ${NAME} or ${NAME:-fallback}
ENV_VAR = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _expand(text: str) -> str:
    def lookup(match: re.Match) -> str:
        name, fallback = match.groups()
        if name in os.environ:
            return os.environ[name]
        if fallback is not None:
            return fallback
        raise ValidationError(f"Environment variable '{name}' is not set and has no fallback")

    return ENV_VAR.sub(lookup, text)


def substitute_env_vars(data: Any) -> Any:
    """Expand ``${NAME}`` and ``${NAME:-fallback}`` in every string of a job.

    Mappings and lists are walked; other scalars are returned untouched.
    Passwords are usually kept out of job files this way.

    Examples:
        >>> os.environ["ORA_PASSWORD"] = "tiger"
        >>> substitute_env_vars("scott/${ORA_PASSWORD}@dbhost/ORCL")
        'scott/tiger@dbhost/ORCL'
        >>> substitute_env_vars("${MISSING:-out/orders}")
        'out/orders'

    Raises:
        ValidationError: If a variable is unset and has no fallback
    """
    if isinstance(data, str):
        return _expand(data)
    if isinstance(data, dict):
        return {key: substitute_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute_env_vars(value) for value in data]
    return data


def load_yaml(path: Path) -> dict[str, Any]:
    """Read a job file into a mapping with environment variables expanded.

    Raises:
        ValidationError: If the file is missing, unreadable, empty, not a
            mapping, or references an unset variable
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ValidationError(f"File not found: {path}")
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in job file {path}: {e}") from e
    except OSError as e:
        raise ValidationError(f"Cannot read job file {path}: {e}") from e

    if data is None:
        raise ValidationError(f"Empty YAML file: {path}")
    if not isinstance(data, dict):
        raise ValidationError(f"Expected a mapping at the top of {path}")
    return substitute_env_vars(data)


def read_query_file(path: Path) -> str:
    """Read SQL text from a query file.

    Raises:
        ValidationError: If the file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ValidationError(f"Query file not found: {path}")
    except OSError as e:
        raise ValidationError(f"Failed to read query file {path}: {e}") from e
