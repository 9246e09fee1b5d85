"""Sink implementations.

This package provides the two interchangeable sinks:
- RotatingFileSink: Delimited text files with size-based rotation and gzip
- DigestSink: Running checksum over the row stream
"""

from tabunload.sinks.digest import DigestSink
from tabunload.sinks.file import RotatingFileSink

__all__ = ["DigestSink", "RotatingFileSink"]
