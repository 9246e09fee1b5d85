"""Tests for the row codec."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tabunload.core.codec import (
    RowCodec,
    format_numeric,
    format_temporal,
    quote,
    unquote,
)
from tabunload.models.column import ColumnDescriptor, NullableValue, TargetKind, TemporalFormat


def temporal(fmt: TemporalFormat, trim: bool = False) -> ColumnDescriptor:
    return ColumnDescriptor(
        name="at",
        source_type="TS",
        kind=TargetKind.TEMPORAL,
        temporal_format=fmt,
        trim_fraction=trim,
    )


NUMBER = ColumnDescriptor(name="id", source_type="NUMBER", kind=TargetKind.NUMERIC)
TEXT = ColumnDescriptor(name="name", source_type="TEXT", kind=TargetKind.TEXT)


class TestQuoting:
    """Test quote/unquote helpers."""

    def test_embedded_quotes_doubled(self):
        assert quote('say "hi"') == '"say ""hi"""'

    def test_unquote_inverts_quote(self):
        for text in ["", "plain", 'a "b" c', '""', "tab\there"]:
            assert unquote(quote(text)) == text

    def test_unquote_leaves_bare_text(self):
        assert unquote("42") == "42"


class TestFormatNumeric:
    """Test canonical numeric rendering."""

    def test_integers(self):
        assert format_numeric(42) == "42"
        assert format_numeric(-7) == "-7"

    def test_decimal_trailing_zeros_removed(self):
        assert format_numeric(Decimal("1.500")) == "1.5"
        assert format_numeric(Decimal("10.000")) == "10"
        assert format_numeric(Decimal("100")) == "100"

    def test_zero(self):
        assert format_numeric(Decimal("0.000")) == "0"
        assert format_numeric(0.0) == "0"

    def test_no_exponent(self):
        assert format_numeric(1e21) == "1000000000000000000000"
        assert format_numeric(Decimal("1E-7")) == "0.0000001"

    def test_float_shortest_form(self):
        assert format_numeric(0.1) == "0.1"
        assert format_numeric(250.75) == "250.75"

    def test_numeric_string(self):
        assert format_numeric("00042.10") == "42.1"

    def test_special_floats(self):
        assert format_numeric(float("nan")) == "NaN"
        assert format_numeric(float("inf")) == "+Inf"
        assert format_numeric(float("-inf")) == "-Inf"

    def test_rejects_non_numeric(self):
        with pytest.raises(TypeError):
            format_numeric(True)
        with pytest.raises(TypeError):
            format_numeric(object())


class TestFormatTemporal:
    """Test temporal rendering by format."""

    def test_date(self):
        assert format_temporal(date(2024, 1, 31), temporal(TemporalFormat.DATE)) == "2024-01-31"

    def test_datetime(self):
        value = datetime(2024, 1, 31, 13, 45, 6, 789)
        assert format_temporal(value, temporal(TemporalFormat.DATETIME)) == "2024-01-31 13:45:06"

    def test_timestamp_nine_digits(self):
        value = datetime(2024, 1, 31, 13, 45, 6, 120000)
        assert (
            format_temporal(value, temporal(TemporalFormat.TIMESTAMP))
            == "2024-01-31 13:45:06.120000000"
        )

    def test_timestamp_trimmed(self):
        value = datetime(2024, 1, 31, 13, 45, 6, 120000)
        descriptor = temporal(TemporalFormat.TIMESTAMP, trim=True)
        assert format_temporal(value, descriptor) == "2024-01-31 13:45:06.12"

    def test_timestamp_trimmed_whole_second(self):
        value = datetime(2024, 1, 31, 13, 45, 6)
        descriptor = temporal(TemporalFormat.TIMESTAMP, trim=True)
        assert format_temporal(value, descriptor) == "2024-01-31 13:45:06"

    def test_timestamp_with_offset(self):
        value = datetime(2024, 1, 31, 13, 45, 6, tzinfo=timezone(timedelta(hours=2)))
        assert (
            format_temporal(value, temporal(TemporalFormat.TIMESTAMP_TZ))
            == "2024-01-31 13:45:06.000000000 +0200"
        )

    def test_negative_offset(self):
        value = datetime(2024, 1, 31, 13, 45, 6, tzinfo=timezone(-timedelta(hours=5, minutes=30)))
        assert format_temporal(value, temporal(TemporalFormat.TIMESTAMP_TZ)).endswith(" -0530")

    def test_naive_timestamp_tz_is_utc(self):
        value = datetime(2024, 1, 31, 13, 45, 6)
        assert format_temporal(value, temporal(TemporalFormat.TIMESTAMP_TZ)).endswith(" +0000")

    def test_utc_conversion(self):
        value = datetime(2024, 1, 31, 13, 45, 6, tzinfo=timezone(timedelta(hours=2)))
        descriptor = temporal(TemporalFormat.TIMESTAMP_UTC, trim=True)
        assert format_temporal(value, descriptor) == "2024-01-31 11:45:06"

    def test_rejects_text(self):
        with pytest.raises(TypeError):
            format_temporal("2024-01-31", temporal(TemporalFormat.DATE))


class TestRowCodec:
    """Test whole-row encoding."""

    def test_quotes_text_not_numbers(self):
        codec = RowCodec([NUMBER, TEXT], quoting=True)
        row = [NullableValue.of(TargetKind.NUMERIC, 1), NullableValue.of(TargetKind.TEXT, "a")]
        assert codec.encode(row) == ["1", '"a"']

    def test_quoting_off(self):
        codec = RowCodec([NUMBER, TEXT], quoting=False)
        row = [NullableValue.of(TargetKind.NUMERIC, 1), NullableValue.of(TargetKind.TEXT, 'a"b')]
        assert codec.encode(row) == ["1", 'a"b']

    def test_quote_all(self):
        codec = RowCodec([NUMBER, TEXT], quoting=True, quote_all=True)
        row = [NullableValue.of(TargetKind.NUMERIC, 1), NullableValue.of(TargetKind.TEXT, "a")]
        assert codec.encode(row) == ['"1"', '"a"']

    def test_absent_values_are_empty_and_unquoted(self):
        codec = RowCodec([NUMBER, TEXT], quoting=True)
        row = [NullableValue.of(TargetKind.NUMERIC, None), NullableValue.of(TargetKind.TEXT, None)]
        assert codec.encode(row) == ["", ""]

    def test_empty_string_is_quoted(self):
        codec = RowCodec([TEXT], quoting=True)
        assert codec.encode([NullableValue.of(TargetKind.TEXT, "")]) == ['""']

    def test_bytes_decoded(self):
        codec = RowCodec([TEXT], quoting=False)
        assert codec.encode([NullableValue.of(TargetKind.TEXT, "é".encode("utf-8"))]) == ["é"]

    def test_row_length_checked(self):
        codec = RowCodec([NUMBER, TEXT])
        with pytest.raises(ValueError):
            codec.encode([NullableValue.of(TargetKind.NUMERIC, 1)])

    def test_empty_row(self):
        assert RowCodec([NUMBER, TEXT]).empty_row() == ["", ""]
