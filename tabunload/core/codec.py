"""Row codec: typed values to display strings.

RowCodec renders each NullableValue according to its column descriptor and
applies CSV-style quoting. It never inspects value types to choose a
formatting rule; the descriptor carries that decision.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from tabunload.models.column import (
    ColumnDescriptor,
    DecodedRow,
    NullableValue,
    TargetKind,
    TemporalFormat,
)

QUOTE = '"'

QUOTABLE_KINDS = frozenset({TargetKind.TEXT, TargetKind.TEMPORAL})


def quote(text: str) -> str:
    """Wrap in double quotes, doubling embedded quotes."""
    return QUOTE + text.replace(QUOTE, QUOTE + QUOTE) + QUOTE


def unquote(text: str) -> str:
    """Inverse of ``quote``; unquoted input is returned unchanged."""
    if len(text) >= 2 and text[0] == QUOTE and text[-1] == QUOTE:
        return text[1:-1].replace(QUOTE + QUOTE, QUOTE)
    return text


def format_numeric(raw: Any) -> str:
    """Minimal plain decimal text: no exponent, no superfluous zeros.

    Examples:
        >>> format_numeric(Decimal("1.500"))
        '1.5'
        >>> format_numeric(1e21)
        '1000000000000000000000'
        >>> format_numeric("00042.10")
        '42.1'
    """
    if isinstance(raw, bool):
        raise TypeError(f"Unsupported numeric value: {raw!r}")
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, float):
        if math.isnan(raw):
            return "NaN"
        if math.isinf(raw):
            return "+Inf" if raw > 0 else "-Inf"
        # repr() is the shortest round-tripping form of the float
        value = Decimal(repr(raw))
    elif isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, str):
        value = Decimal(raw.strip())
    else:
        raise TypeError(f"Unsupported numeric value: {raw!r}")

    if not value.is_finite():
        return str(value)
    if value.is_zero():
        return "0"

    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _format_offset(offset: timedelta) -> str:
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, minutes = divmod(abs(total) // 60, 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def _format_fraction(value: datetime, trim: bool) -> str:
    # datetime carries microseconds; render nanosecond precision
    digits = f"{value.microsecond:06d}000"
    if trim:
        digits = digits.rstrip("0")
    return "." + digits if digits else ""


def format_temporal(raw: Any, descriptor: ColumnDescriptor) -> str:
    """Render a date or datetime using the descriptor's temporal format.

    Naive datetimes are taken to be UTC, which matches sessions that pin
    the time zone to UTC on connect.

    Examples:
        >>> format_temporal(datetime(2024, 1, 31, 13, 45), ts_descriptor)
        '2024-01-31 13:45:00.000000000'
    """
    if isinstance(raw, datetime):
        value = raw
    elif isinstance(raw, date):
        value = datetime(raw.year, raw.month, raw.day)
    else:
        raise TypeError(f"Unsupported temporal value: {raw!r}")

    temporal_format = descriptor.temporal_format
    if temporal_format == TemporalFormat.TIMESTAMP_UTC and value.tzinfo is not None:
        value = value.astimezone(timezone.utc)

    day = f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    if temporal_format == TemporalFormat.DATE:
        return day

    clock = f"{day} {value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    if temporal_format == TemporalFormat.DATETIME:
        return clock

    stamp = clock + _format_fraction(value, descriptor.trim_fraction)
    if temporal_format == TemporalFormat.TIMESTAMP_TZ:
        offset = value.utcoffset() or timedelta(0)
        return f"{stamp} {_format_offset(offset)}"
    return stamp


def format_text(raw: Any) -> str:
    """Text columns: strings as-is, bytes decoded as UTF-8."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8")
    return str(raw)


class RowCodec:
    """Turns DecodedRows into lists of display strings.

    Examples:
        >>> codec = RowCodec(descriptors, quoting=True)
        >>> codec.encode([NullableValue.of(TargetKind.NUMERIC, 1),
        ...               NullableValue.of(TargetKind.TEXT, 'a')])
        ['1', '"a"']
    """

    def __init__(
        self,
        descriptors: list[ColumnDescriptor],
        quoting: bool = True,
        quote_all: bool = False,
    ):
        """Initialize codec.

        Args:
            descriptors: Column descriptors, positionally aligned with rows
            quoting: Quote text and temporal fields
            quote_all: Quote every present field, numerics included
        """
        self.descriptors = descriptors
        self.quoting = quoting
        self.quote_all = quote_all

    def decode(self, value: NullableValue, descriptor: ColumnDescriptor) -> str:
        """Render one value.

        Raises:
            TypeError, ValueError, ArithmeticError: If the raw value does not
                fit the column's kind
        """
        if not value.present:
            return ""

        if descriptor.kind == TargetKind.NUMERIC:
            text = format_numeric(value.raw)
        elif descriptor.kind == TargetKind.TEMPORAL:
            text = format_temporal(value.raw, descriptor)
        else:
            text = format_text(value.raw)

        if self.quoting and (self.quote_all or descriptor.kind in QUOTABLE_KINDS):
            return quote(text)
        return text

    def encode(self, row: DecodedRow) -> list[str]:
        """Render a whole row."""
        if len(row) != len(self.descriptors):
            raise ValueError(
                f"Row has {len(row)} values, expected {len(self.descriptors)}"
            )
        return [self.decode(value, descriptor) for value, descriptor in zip(row, self.descriptors)]

    def empty_row(self) -> list[str]:
        """Substitute for a row that could not be decoded."""
        return [""] * len(self.descriptors)
