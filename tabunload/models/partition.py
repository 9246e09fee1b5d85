"""Partition ranges over a numeric key space."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from tabunload.exceptions import ConfigurationError


@dataclass(frozen=True)
class Range:
    """Closed interval ``[first, last]`` of a partition key."""

    first: int
    last: int

    def __post_init__(self) -> None:
        if self.first > self.last:
            raise ConfigurationError(f"Invalid range: first {self.first} > last {self.last}")

    def bind_params(self) -> dict[str, int]:
        """Bind parameters for a ranged query (``:first_value`` / ``:last_value``)."""
        return {"first_value": self.first, "last_value": self.last}

    def __len__(self) -> int:
        return self.last - self.first + 1

    def __str__(self) -> str:
        return f"{self.first}..{self.last}"


def generate_ranges(range_start: int, range_end: int, batch_size: int) -> Iterator[Range]:
    """Walk ``[range_start, range_end]`` in steps of ``batch_size``.

    The last range is clipped to ``range_end``. An inverted interval yields
    nothing.

    Args:
        range_start: First key value (inclusive)
        range_end: Last key value (inclusive)
        batch_size: Width of each range

    Yields:
        Contiguous, non-overlapping ranges

    Raises:
        ConfigurationError: If batch_size is not positive

    Examples:
        >>> list(generate_ranges(1, 25, 10))
        [Range(first=1, last=10), Range(first=11, last=20), Range(first=21, last=25)]
    """
    if batch_size < 1:
        raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")

    first = range_start
    while first <= range_end:
        last = min(first + batch_size - 1, range_end)
        yield Range(first, last)
        first += batch_size


def count_ranges(range_start: int, range_end: int, batch_size: int) -> int:
    """Number of ranges ``generate_ranges`` yields for the same arguments."""
    if batch_size < 1:
        raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")
    if range_end < range_start:
        return 0
    return (range_end - range_start) // batch_size + 1
