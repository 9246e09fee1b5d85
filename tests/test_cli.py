"""Tests for the command-line interface."""

import logging
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text
from typer.testing import CliRunner

from tabunload import __version__
from tabunload import cli
from tabunload.cli import app, with_password

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI callback reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def workspace(tmp_path):
    """SQLite database plus a query file."""
    db_path = tmp_path / "source.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)"))
        conn.execute(text("INSERT INTO t VALUES (1, 'a'), (2, 'b'), (3, 'c')"))
    engine.dispose()

    query = tmp_path / "orders.sql"
    query.write_text('SELECT id AS "id [INTEGER]", name FROM t ORDER BY id;\n')
    return tmp_path, str(db_path), query


class TestVersion:
    """Test --version."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestExport:
    """Test the export command."""

    def test_default_output_name(self, workspace):
        tmp_path, db, query = workspace
        result = runner.invoke(
            app,
            ["export", "--conn", db, "--query", str(query), "--dialect", "sqlite", "--comma-separated"],
        )

        assert result.exit_code == 0, result.output
        output = tmp_path / "orders_0000001.csv"
        assert output.read_text(encoding="utf-8") == '1,"a"\n2,"b"\n3,"c"\n'
        assert "Unload succeeded!" in result.output

    def test_explicit_name_and_no_quotes(self, workspace):
        tmp_path, db, query = workspace
        fname = tmp_path / "exports" / "t"
        result = runner.invoke(
            app,
            [
                "export",
                "--conn", db,
                "--query", str(query),
                "--dialect", "sqlite",
                "--fname", str(fname),
                "--no-double-quotes",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "exports" / "t_0000001.tsv").read_text(encoding="utf-8") == "1\ta\n2\tb\n3\tc\n"

    def test_log_file(self, workspace):
        tmp_path, db, query = workspace
        log_path = tmp_path / "unload.log"
        result = runner.invoke(
            app,
            [
                "--log-level", "INFO",
                "--log-file", str(log_path),
                "export",
                "--conn", db,
                "--query", str(query),
                "--dialect", "sqlite",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Starting whole-table unload (sqlite)" in log_path.read_text(encoding="utf-8")

    def test_failed_query_exits_with_error(self, workspace):
        tmp_path, db, _ = workspace
        query = tmp_path / "broken.sql"
        query.write_text("SELECT * FROM missing_table")
        result = runner.invoke(app, ["export", "--conn", db, "--query", str(query), "--dialect", "sqlite"])

        assert result.exit_code == 1
        assert "Unload failed!" in result.output

    def test_invalid_parameters(self, workspace):
        _, db, query = workspace
        result = runner.invoke(
            app,
            ["export", "--conn", db, "--query", str(query), "--dialect", "sqlite", "--range-start", "1"],
        )
        assert result.exit_code == 1


class TestChecksum:
    """Test the checksum command."""

    def test_prints_checksum(self, workspace):
        _, db, query = workspace
        result = runner.invoke(app, ["checksum", "--conn", db, "--query", str(query), "--dialect", "sqlite"])

        assert result.exit_code == 0, result.output
        assert "Checksum: " in result.output


class TestJobFiles:
    """Test run and validate with YAML job files."""

    def write_job(self, tmp_path, db, query, **extra):
        lines = [f"connection: {db}", "dialect: sqlite", f"query_file: {query.name}"]
        lines += [f"{k}: {v}" for k, v in extra.items()]
        job = tmp_path / "job.yaml"
        job.write_text("\n".join(lines) + "\n")
        return job

    def test_validate(self, workspace):
        tmp_path, db, query = workspace
        job = self.write_job(tmp_path, db, query, parallel=2, range_start=1, range_end=3)
        result = runner.invoke(app, ["validate", str(job)])

        assert result.exit_code == 0, result.output
        assert "Job is valid" in result.output
        assert "Workers: 2" in result.output

    def test_validate_invalid(self, workspace):
        tmp_path, db, query = workspace
        job = self.write_job(tmp_path, db, query, parallel=0)
        result = runner.invoke(app, ["validate", str(job)])
        assert result.exit_code == 1

    def test_run(self, workspace):
        tmp_path, db, query = workspace
        job = self.write_job(tmp_path, db, query, tab_separated="false")
        result = runner.invoke(app, ["run", str(job)])

        assert result.exit_code == 0, result.output
        assert Path(tmp_path / "orders_0000001.csv").exists()


class TestPasswordPrompt:
    """Test password splicing for Oracle descriptors."""

    def test_prompts_when_missing(self, monkeypatch):
        monkeypatch.setattr(cli.typer, "prompt", lambda *args, **kwargs: "tiger")
        assert with_password("scott@dbhost:1521/ORCL", "oracle") == "scott/tiger@dbhost:1521/ORCL"

    def test_keeps_existing_password(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("prompted")

        monkeypatch.setattr(cli.typer, "prompt", fail)
        assert with_password("scott/tiger@dbhost/ORCL", "oracle") == "scott/tiger@dbhost/ORCL"
        assert with_password("oracle+oracledb://scott@h/?service_name=X", "oracle").startswith("oracle+")
        assert with_password("scott@db", "sqlite") == "scott@db"
