"""tabunload exception hierarchy."""

from __future__ import annotations


class TabUnloadError(Exception):
    """Base exception for all tabunload errors."""

    pass


class ConfigurationError(TabUnloadError):
    """Raised when run parameters are invalid or missing."""

    pass


class TypeMappingError(ConfigurationError):
    """Raised when a source column type has no known mapping."""

    pass


class ConnectionError(TabUnloadError):
    """Raised when a worker fails to connect to the source database."""

    pass


class ConnectorError(TabUnloadError):
    """Raised when a connector operation fails."""

    pass


class ExtractorError(TabUnloadError):
    """Raised when a row producer has to abort."""

    pass


class SinkError(TabUnloadError):
    """Raised when a sink cannot continue (e.g. output file cannot be created)."""

    pass


class ChannelClosedError(TabUnloadError):
    """Raised when sending on a channel that has been closed."""

    pass


class ValidationError(TabUnloadError):
    """Raised when a job file cannot be loaded or validated."""

    pass
