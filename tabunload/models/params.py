"""Run parameter model.

UnloadParams is the immutable configuration snapshot handed to every
component of an unload run: connectors, producers, sinks and the scheduler
all read from it and none of them mutate it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field as PydanticField, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from tabunload.core.config import config
from tabunload.exceptions import ConfigurationError


def trim_extension(file_name: Union[str, Path]) -> str:
    """Strip the last extension from a path, keeping its directory.

    Examples:
        >>> trim_extension("queries/orders.sql")
        'queries/orders'
    """
    path = Path(file_name)
    return str(path.with_suffix("")) if path.suffix else str(path)


class UnloadParams(BaseModel):
    """Parameters of a single unload run.

    Examples:
        Whole-table unload to tab-separated files:
        >>> UnloadParams(
        ...     connection="scott/tiger@dbhost:1521/ORCL",
        ...     query="SELECT * FROM orders",
        ...     file_name="out/orders",
        ... )

        Ranged unload with four workers:
        >>> UnloadParams(
        ...     connection="scott/tiger@dbhost:1521/ORCL",
        ...     query="SELECT * FROM orders WHERE id BETWEEN :first_value AND :last_value",
        ...     file_name="out/orders",
        ...     parallel=4,
        ...     range_start=1,
        ...     range_end=1_000_000,
        ... )
    """

    # Source
    connection: str = PydanticField(
        ...,
        description="Connection descriptor (SQLAlchemy URL or dialect-specific form)",
    )
    dialect: str = PydanticField(
        "oracle",
        description="Source dialect: 'oracle', 'snowflake', 'sqlite'",
    )
    connector: Optional[str] = PydanticField(
        None,
        description="Custom connector class (full module path), overrides the dialect default",
    )
    connection_options: dict[str, Any] = PydanticField(
        default_factory=dict,
        description="Extra connector configuration (e.g., echo)",
    )
    query: str = PydanticField(
        ...,
        description="SQL text; ranged queries reference :first_value and :last_value",
    )

    # Destination
    destination: Literal["file", "checksum"] = PydanticField(
        "file",
        description="Where rows go: delimited files or a running checksum",
    )
    file_name: Optional[str] = PydanticField(
        None,
        description="Output base name, without extension",
    )
    max_size_mb: int = PydanticField(
        default_factory=lambda: config.max_size_mb,
        description="Target size of each output file (after compression) in MB",
        gt=0,
    )
    compress: bool = PydanticField(
        False,
        description="Gzip closed output files",
    )
    double_quotes: bool = PydanticField(
        True,
        description="Quote text and temporal fields",
    )
    quote_all: bool = PydanticField(
        False,
        description="Quote every field, numerics included (requires double_quotes)",
    )
    tab_separated: bool = PydanticField(
        True,
        description="Tab-separated (.tsv) instead of comma-separated (.csv)",
    )

    # Partitioning
    parallel: int = PydanticField(
        1,
        description="Number of workers for ranged unloads",
        ge=1,
    )
    range_start: Optional[int] = PydanticField(
        None,
        description="First partition key value (inclusive)",
    )
    range_end: Optional[int] = PydanticField(
        None,
        description="Last partition key value (inclusive)",
    )
    batch_size: int = PydanticField(
        default_factory=lambda: config.batch_size,
        description="Width of each partition range",
        gt=0,
    )

    # Tuned heuristics
    size_check_interval: int = PydanticField(
        default_factory=lambda: config.size_check_interval,
        description="Rows written between two size checks",
        gt=0,
    )
    rotate_factor: float = PydanticField(
        default_factory=lambda: config.rotate_factor,
        description="Fraction of max_size_mb that triggers rotation",
        gt=0.0,
        le=1.0,
    )
    compression_ratio: float = PydanticField(
        default_factory=lambda: config.compression_ratio,
        description="Expected compressed/uncompressed ratio when compress is on",
        gt=0.0,
        le=1.0,
    )
    progress_interval: int = PydanticField(
        default_factory=lambda: config.progress_interval,
        description="Rows between two checksum progress messages",
        gt=0,
    )
    digest_algorithm: str = PydanticField(
        default_factory=lambda: config.digest_algorithm,
        description="hashlib algorithm for the checksum destination",
    )

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("dialect")
    @classmethod
    def normalize_dialect(cls, v: str) -> str:
        """Dialect names are case-insensitive."""
        return v.strip().lower()

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Reject empty queries and drop a trailing statement terminator."""
        query = v.strip()
        if query.endswith(";"):
            query = query[:-1].rstrip()
        if not query:
            raise ValueError("query must not be empty")
        return query

    @field_validator("digest_algorithm")
    @classmethod
    def validate_digest_algorithm(cls, v: str) -> str:
        """Validate the digest algorithm against hashlib."""
        import hashlib

        name = v.lower()
        if name not in hashlib.algorithms_available:
            raise ValueError(f"Unknown digest algorithm: {v}")
        return name

    @model_validator(mode="after")
    def validate_range(self) -> "UnloadParams":
        """Range bounds come in pairs; file output needs a base name."""
        if (self.range_start is None) != (self.range_end is None):
            raise ValueError("range_start and range_end must be given together")
        if self.destination == "file" and not self.file_name:
            raise ValueError("file_name is required for file output")
        return self

    @classmethod
    def build(cls, **kwargs: Any) -> "UnloadParams":
        """Construct params, converting validation failures to ConfigurationError.

        Raises:
            ConfigurationError: If any parameter is invalid
        """
        try:
            return cls(**kwargs)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid unload parameters: {e}") from e

    @classmethod
    def load_from_yaml(cls, path: Union[str, Path]) -> "UnloadParams":
        """Load params from a YAML job file.

        A ``query_file`` key may replace ``query``; its path is resolved
        relative to the job file, and ``file_name`` defaults to it with the
        extension trimmed.

        Raises:
            ValidationError: If the file cannot be read
            ConfigurationError: If the parameters are invalid
        """
        from tabunload.utils.yaml_parser import load_yaml, read_query_file

        path = Path(path)
        data = load_yaml(path)

        query_file = data.pop("query_file", None)
        if query_file is not None:
            query_path = Path(query_file)
            if not query_path.is_absolute():
                query_path = path.parent / query_path
            data.setdefault("query", read_query_file(query_path))
            data.setdefault("file_name", trim_extension(query_path))

        return cls.build(**data)

    @property
    def is_ranged(self) -> bool:
        """Whether the run partitions the key space."""
        return self.range_start is not None and self.range_end is not None

    @property
    def delimiter(self) -> str:
        """Field delimiter."""
        return "\t" if self.tab_separated else ","

    @property
    def extension(self) -> str:
        """Output file extension, coupled to the delimiter."""
        return "tsv" if self.tab_separated else "csv"

    @property
    def max_size_bytes(self) -> int:
        """Size threshold in bytes."""
        return self.max_size_mb * 1024 * 1024
