"""tabunload configuration management.

This module centralizes all configuration loading from environment variables
and provides sensible defaults. Run parameters take their defaults from here,
so modules should import configuration values from this module rather than
reading environment variables directly.

Environment Variables:
    TABUNLOAD_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
                         Default: INFO

    TABUNLOAD_LOG_FORMAT: Log output format (text, json)
                          Default: text

    TABUNLOAD_LOG_FILE: Also write logs to this file
                        Default: unset (stderr only)

    TABUNLOAD_MAX_SIZE_MB: Default output file size threshold in megabytes
                           Default: 250

    TABUNLOAD_BATCH_SIZE: Default partition width for ranged unloads
                          Default: 10000

    TABUNLOAD_SIZE_CHECK_INTERVAL: Rows written between two file size checks
                                   Default: 1000

    TABUNLOAD_ROTATE_FACTOR: Fraction of the size threshold that triggers rotation
                             Default: 0.95

    TABUNLOAD_COMPRESSION_RATIO: Expected gzip ratio used to discount the
                                 uncompressed size when compression is on
                                 Default: 0.11

    TABUNLOAD_PROGRESS_INTERVAL: Rows between two digest progress messages
                                 Default: 10000

    TABUNLOAD_DIGEST_ALGORITHM: hashlib algorithm used by the checksum sink
                                Default: md5

    TABUNLOAD_POLL_INTERVAL: Seconds a blocked channel operation waits before
                             re-checking whether the channel was closed
                             Default: 0.05
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key, "")
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class TabUnloadConfig:
    """tabunload configuration container.

    All configuration values are loaded from environment variables
    with sensible defaults.

    Usage:
        from tabunload.core.config import config

        interval = config.size_check_interval
    """

    # Logging Configuration
    log_level: str = field(default_factory=lambda: _get_str("TABUNLOAD_LOG_LEVEL", "INFO").upper())
    log_format: str = field(default_factory=lambda: _get_str("TABUNLOAD_LOG_FORMAT", "text"))
    log_file: str = field(default_factory=lambda: _get_str("TABUNLOAD_LOG_FILE", ""))

    # Output Configuration
    max_size_mb: int = field(default_factory=lambda: _get_int("TABUNLOAD_MAX_SIZE_MB", 250))
    size_check_interval: int = field(
        default_factory=lambda: _get_int("TABUNLOAD_SIZE_CHECK_INTERVAL", 1000)
    )
    rotate_factor: float = field(default_factory=lambda: _get_float("TABUNLOAD_ROTATE_FACTOR", 0.95))
    compression_ratio: float = field(
        default_factory=lambda: _get_float("TABUNLOAD_COMPRESSION_RATIO", 0.11)
    )

    # Checksum Configuration
    progress_interval: int = field(
        default_factory=lambda: _get_int("TABUNLOAD_PROGRESS_INTERVAL", 10000)
    )
    digest_algorithm: str = field(
        default_factory=lambda: _get_str("TABUNLOAD_DIGEST_ALGORITHM", "md5").lower()
    )

    # Execution Configuration
    batch_size: int = field(default_factory=lambda: _get_int("TABUNLOAD_BATCH_SIZE", 10000))
    poll_interval: float = field(default_factory=lambda: _get_float("TABUNLOAD_POLL_INTERVAL", 0.05))

    def __post_init__(self):
        """Validate configuration after initialization."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_levels:
            raise ValueError(
                f"Invalid TABUNLOAD_LOG_LEVEL: {self.log_level}. "
                f"Must be one of: {valid_levels}"
            )

        valid_formats = {"text", "json"}
        if self.log_format not in valid_formats:
            raise ValueError(
                f"Invalid TABUNLOAD_LOG_FORMAT: {self.log_format}. "
                f"Must be one of: {valid_formats}"
            )

        if self.digest_algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unknown TABUNLOAD_DIGEST_ALGORITHM: {self.digest_algorithm}")

        if self.max_size_mb < 1:
            raise ValueError(f"TABUNLOAD_MAX_SIZE_MB must be >= 1, got {self.max_size_mb}")

        if self.batch_size < 1:
            raise ValueError(f"TABUNLOAD_BATCH_SIZE must be >= 1, got {self.batch_size}")

        if self.size_check_interval < 1:
            raise ValueError(
                f"TABUNLOAD_SIZE_CHECK_INTERVAL must be >= 1, got {self.size_check_interval}"
            )

        if self.progress_interval < 1:
            raise ValueError(
                f"TABUNLOAD_PROGRESS_INTERVAL must be >= 1, got {self.progress_interval}"
            )

        if not 0.0 < self.rotate_factor <= 1.0:
            raise ValueError(f"TABUNLOAD_ROTATE_FACTOR must be in (0, 1], got {self.rotate_factor}")

        if not 0.0 < self.compression_ratio <= 1.0:
            raise ValueError(
                f"TABUNLOAD_COMPRESSION_RATIO must be in (0, 1], got {self.compression_ratio}"
            )

        if self.poll_interval <= 0:
            raise ValueError(f"TABUNLOAD_POLL_INTERVAL must be > 0, got {self.poll_interval}")

    def as_dict(self) -> dict:
        """Export configuration as dictionary.

        Returns:
            Dictionary of all configuration values
        """
        return {
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_file": self.log_file,
            "max_size_mb": self.max_size_mb,
            "size_check_interval": self.size_check_interval,
            "rotate_factor": self.rotate_factor,
            "compression_ratio": self.compression_ratio,
            "progress_interval": self.progress_interval,
            "digest_algorithm": self.digest_algorithm,
            "batch_size": self.batch_size,
            "poll_interval": self.poll_interval,
        }


def load_config() -> TabUnloadConfig:
    """Load configuration from environment.

    Call this to refresh config if the environment has changed.

    Returns:
        New TabUnloadConfig instance
    """
    return TabUnloadConfig()


# Global configuration instance - loaded once at import time
# Use load_config() to refresh if needed
config = load_config()
