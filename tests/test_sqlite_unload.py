"""End-to-end unloads from SQLite through SQLAlchemy."""

import gzip
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from tabunload.core.unloader import Unloader
from tabunload.exceptions import ConnectionError, ConnectorError
from tabunload.models.params import UnloadParams
from tabunload.operators.sqlite import SQLiteConnector

QUERY = (
    'SELECT order_id AS "order_id [INTEGER]", customer_name AS "customer_name [TEXT]", '
    'order_date AS "order_date [DATE]", amount AS "amount [NUMERIC]", '
    'updated_at AS "updated_at [DATETIME]" FROM orders'
)


@pytest.fixture
def temp_db(tmp_path):
    """Create a temporary SQLite database with an orders table."""
    db_path = tmp_path / "source.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(
            text(
                """
                CREATE TABLE orders (
                    order_id INTEGER PRIMARY KEY,
                    customer_name TEXT,
                    order_date TEXT,
                    amount REAL,
                    updated_at TEXT
                )
                """
            )
        )
        conn.execute(
            text(
                """
                INSERT INTO orders (order_id, customer_name, order_date, amount, updated_at)
                VALUES
                    (1, 'Alice', '2024-01-15', 100.50, '2024-01-15 08:30:00'),
                    (2, 'Bob "the builder"', '2024-01-16', 250.75, NULL),
                    (3, 'Charlie', NULL, 75, '2024-01-17 23:59:59')
                """
            )
        )
    engine.dispose()
    return str(db_path)


@pytest.fixture
def sqlite_connector(temp_db):
    """Create a connected SQLite connector."""
    connector = SQLiteConnector({"connection": temp_db})
    connector.connect()
    yield connector
    connector.disconnect()


def make_params(temp_db, tmp_path, **overrides):
    values = {
        "connection": temp_db,
        "dialect": "sqlite",
        "query": QUERY + " ORDER BY order_id",
        "file_name": str(tmp_path / "out" / "orders"),
        "tab_separated": False,
    }
    values.update(overrides)
    return UnloadParams.build(**values)


class TestSQLiteConnector:
    """Test SQLite connector."""

    def test_connection(self, sqlite_connector):
        assert sqlite_connector.is_connected
        assert sqlite_connector.test_connection()

    def test_declared_types_from_aliases(self, sqlite_connector):
        with sqlite_connector.stream_query(QUERY) as result:
            columns = [(c.name, c.type_name) for c in result.columns]
            assert len(list(result)) == 3
        assert columns == [
            ("order_id", "INTEGER"),
            ("customer_name", "TEXT"),
            ("order_date", "DATE"),
            ("amount", "NUMERIC"),
            ("updated_at", "DATETIME"),
        ]

    def test_undeclared_column_is_text(self, sqlite_connector):
        with sqlite_connector.stream_query("SELECT customer_name FROM orders") as result:
            assert result.columns[0].type_name == "TEXT"

    def test_bind_params(self, sqlite_connector):
        query = "SELECT order_id FROM orders WHERE order_id BETWEEN :first_value AND :last_value"
        with sqlite_connector.stream_query(query, {"first_value": 2, "last_value": 3}) as result:
            assert [row[0] for row in result] == [2, 3]

    def test_bad_query(self, sqlite_connector):
        with pytest.raises(ConnectorError):
            sqlite_connector.stream_query("SELECT * FROM missing_table")

    def test_disconnect(self, temp_db):
        connector = SQLiteConnector({"connection": temp_db})
        connector.connect()
        connector.disconnect()
        assert not connector.is_connected
        connector.disconnect()

    def test_connect_failure(self, tmp_path):
        connector = SQLiteConnector({"connection": str(tmp_path / "missing" / "dir" / "x.db")})
        with pytest.raises(ConnectionError, match="Failed to connect to SQLite"):
            connector.connect()
        assert not connector.is_connected


class TestSQLiteUnload:
    """Test full unloads from SQLite."""

    def test_whole_table(self, temp_db, tmp_path):
        result = Unloader(make_params(temp_db, tmp_path)).run()

        assert result.success
        assert len(result.files) == 1
        assert Path(result.files[0]).read_text(encoding="utf-8") == (
            '1,"Alice","2024-01-15",100.5,"2024-01-15 08:30:00"\n'
            '2,"Bob ""the builder""","2024-01-16",250.75,\n'
            '3,"Charlie",,75,"2024-01-17 23:59:59"\n'
        )

    def test_ranged_parallel(self, temp_db, tmp_path):
        params = make_params(
            temp_db,
            tmp_path,
            query=QUERY + " WHERE order_id BETWEEN :first_value AND :last_value",
            parallel=2,
            range_start=1,
            range_end=3,
            batch_size=1,
        )

        result = Unloader(params).run()

        assert result.success
        assert result.ranges_dispatched == 3
        assert result.total_rows == 3
        lines = [
            line
            for path in result.files
            for line in Path(path).read_text(encoding="utf-8").splitlines()
        ]
        assert sorted(int(line.split(",")[0]) for line in lines) == [1, 2, 3]

    def test_compressed_output(self, temp_db, tmp_path):
        result = Unloader(make_params(temp_db, tmp_path, compress=True)).run()

        assert result.success
        assert result.files[0].endswith(".csv.gz")
        with gzip.open(result.files[0], "rt", encoding="utf-8") as f:
            assert f.read().count("\n") == 3

    def test_checksum_stable(self, temp_db, tmp_path):
        params = make_params(temp_db, tmp_path, destination="checksum", file_name=None)
        first = Unloader(params).run()
        second = Unloader(params).run()

        assert first.success
        assert first.digests[0] == second.digests[0]

    def test_unmapped_type_fails_run(self, temp_db, tmp_path):
        params = make_params(temp_db, tmp_path, query='SELECT order_id AS "order_id [BLOB]" FROM orders')
        result = Unloader(params).run()

        assert not result.success
        assert "Unexpected type: BLOB" in result.workers[0].error_message
        assert result.files == []
