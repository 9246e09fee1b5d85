"""Tests for the row stream producer."""

import pytest

from tabunload.core.channel import Channel
from tabunload.core.producer import RowProducer
from tabunload.exceptions import ExtractorError, TypeMappingError
from conftest import FakeConnector


@pytest.fixture
def connector():
    """Connected in-memory connector with three rows."""
    connector = FakeConnector({"rows": [(1, "a"), (2, "b"), (3, "c")]})
    connector.connect()
    yield connector
    connector.disconnect()


def run_producer(connector, params, bind_params=None):
    rows = Channel(capacity=100, poll_interval=0.01)
    stats = RowProducer(connector, params, worker_id=1).produce(rows, bind_params)
    rows.close()
    return stats, list(rows)


class TestRowProducer:
    """Test query execution and row encoding."""

    def test_rows_pushed_in_cursor_order(self, connector, make_params):
        stats, rows = run_producer(connector, make_params())
        assert stats.rows == 3
        assert rows == [["1", '"a"'], ["2", '"b"'], ["3", '"c"']]

    def test_bind_params_forwarded(self, connector, make_params):
        stats, rows = run_producer(connector, make_params(), {"first_value": 2, "last_value": 3})
        assert connector.queries == [{"first_value": 2, "last_value": 3}]
        assert rows == [["2", '"b"'], ["3", '"c"']]

    def test_quoting_follows_params(self, connector, make_params):
        _, rows = run_producer(connector, make_params(double_quotes=False))
        assert rows[0] == ["1", "a"]

    def test_null_values_empty(self, make_params):
        connector = FakeConnector({"rows": [(1, None), (None, "x")]})
        connector.connect()
        _, rows = run_producer(connector, make_params())
        assert rows == [["1", ""], ["", '"x"']]

    def test_undecodable_row_substituted(self, make_params):
        connector = FakeConnector({"rows": [(1, "a"), ("not a number", "b"), (3, "c")]})
        connector.connect()
        stats, rows = run_producer(connector, make_params())

        assert stats.rows == 3
        assert stats.substituted == 1
        assert rows[1] == ["", ""]
        assert rows[2] == ["3", '"c"']

    def test_unmapped_column_type(self, make_params):
        connector = FakeConnector({"rows": [(1,)], "columns": [("payload", "BLOB")]})
        connector.connect()
        with pytest.raises(TypeMappingError):
            run_producer(connector, make_params())

    def test_query_failure(self, make_params):
        connector = FakeConnector({"fail_query": True})
        connector.connect()
        with pytest.raises(ExtractorError, match="query failed"):
            run_producer(connector, make_params())

    def test_closed_channel_stops_producer(self, connector, make_params):
        rows = Channel(capacity=1, poll_interval=0.01)
        rows.close()
        with pytest.raises(ExtractorError, match="sink stopped"):
            RowProducer(connector, make_params()).produce(rows)
