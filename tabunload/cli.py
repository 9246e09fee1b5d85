"""tabunload CLI - Command-line interface for parallel table unloads."""

import re
from pathlib import Path
from typing import Any, Optional

import typer
from typing_extensions import Annotated

from tabunload import __version__
from tabunload.core.config import config
from tabunload.core.unloader import Unloader
from tabunload.exceptions import TabUnloadError, ValidationError
from tabunload.models.params import UnloadParams, trim_extension
from tabunload.models.results import UnloadResult
from tabunload.utils.logging import setup_logging
from tabunload.utils.yaml_parser import read_query_file

app = typer.Typer(
    name="tabunload",
    help="tabunload - Unload database tables to delimited files in parallel",
    add_completion=True,
)

# user/password@... already carries a password
HAS_PASSWORD = re.compile(r".+/.+@")


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"tabunload version {__version__}")
        raise typer.Exit()


def with_password(connection: str, dialect: str) -> str:
    """Prompt for the password of a ``user@dsn`` Oracle descriptor.

    Other descriptors are returned unchanged.
    """
    if dialect != "oracle" or "://" in connection or "@" not in connection:
        return connection
    if HAS_PASSWORD.match(connection):
        return connection

    password = typer.prompt("Enter password", hide_input=True)
    return connection.replace("@", f"/{password}@", 1)


def _display_result(result: UnloadResult) -> None:
    """Display unload result to console."""
    typer.echo("\n" + "=" * 60)
    if result.success:
        typer.secho("Unload succeeded!", fg=typer.colors.GREEN, bold=True)
    else:
        typer.secho("Unload failed!", fg=typer.colors.RED, bold=True)
        for error in result.errors:
            typer.echo(f"Error: {error}")

    typer.echo(f"\nStart at: {result.started_at:%Y-%m-%d %H:%M:%S}")
    if result.completed_at is not None:
        typer.echo(f"Finish at: {result.completed_at:%Y-%m-%d %H:%M:%S}")
    if result.ranged:
        typer.echo(f"Ranges dispatched: {result.ranges_dispatched}/{result.ranges_generated}")
    typer.echo(f"Rows written: {result.total_rows:,}")
    typer.echo(f"Duration: {result.duration_seconds:.2f}s")

    for worker in result.workers:
        status = "✓" if worker.success else "✗"
        typer.echo(f"  {status} worker {worker.worker_id}: {worker.rows_written:,} rows")
        if worker.rows_substituted:
            typer.echo(f"    Empty rows substituted: {worker.rows_substituted:,}")
        if worker.error_message:
            typer.echo(f"    Error: {worker.error_message}")
        if worker.sink is not None and worker.sink.error_message:
            typer.echo(f"    Sink error: {worker.sink.error_message}")

    for path in result.files:
        typer.echo(f"  {path}")
    for worker_id, digest in result.digests.items():
        typer.echo(f"Checksum: {digest}" if worker_id == 0 else f"Checksum [{worker_id}]: {digest}")


def _run(params: UnloadParams) -> None:
    result = Unloader(params).run()
    _display_result(result)
    if not result.success:
        raise typer.Exit(code=1)


def _fail(kind: str, error: Exception) -> None:
    typer.secho(f"{kind}: {error}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
    ] = config.log_level,
    json_logs: Annotated[
        bool,
        typer.Option("--json-logs", help="Emit logs as JSON lines"),
    ] = config.log_format == "json",
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write logs to this file", dir_okay=False),
    ] = None,
) -> None:
    """tabunload - Stream query results to rotating files or a checksum."""
    setup_logging(
        level=log_level.upper(),
        json_format=json_logs,
        log_file=str(log_file) if log_file else config.log_file or None,
    )


@app.command()
def export(
    conn: Annotated[
        str,
        typer.Option("--conn", help="Connection descriptor (user/password@host:port/service or URL)"),
    ],
    query: Annotated[
        Path,
        typer.Option(
            "--query",
            help="Path to the SQL query file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    fname: Annotated[
        Optional[str],
        typer.Option("--fname", help="Output base name without extension (default: query file name)"),
    ] = None,
    maxsize: Annotated[
        int,
        typer.Option("--maxsize", help="Output file size threshold (MB)"),
    ] = config.max_size_mb,
    compress: Annotated[
        bool,
        typer.Option("--compress", help="Gzip output files"),
    ] = False,
    parallel: Annotated[
        int,
        typer.Option("--parallel", help="Number of workers for ranged unloads"),
    ] = 1,
    range_start: Annotated[
        Optional[int],
        typer.Option("--range-start", help="First partition key value"),
    ] = None,
    range_end: Annotated[
        Optional[int],
        typer.Option("--range-end", help="Last partition key value"),
    ] = None,
    batch: Annotated[
        int,
        typer.Option("--batch", help="Partition width (key values per range)"),
    ] = config.batch_size,
    double_quotes: Annotated[
        bool,
        typer.Option("--double-quotes/--no-double-quotes", help="Quote text and date fields"),
    ] = True,
    quote_all: Annotated[
        bool,
        typer.Option("--quote-all", help="Quote numeric fields too"),
    ] = False,
    tab_separated: Annotated[
        bool,
        typer.Option("--tab-separated/--comma-separated", help="Field delimiter"),
    ] = True,
    dialect: Annotated[
        str,
        typer.Option("--dialect", "-d", help="Source dialect (oracle, snowflake, sqlite)"),
    ] = "oracle",
) -> None:
    """Unload a query's result set to rotating delimited files."""
    try:
        params = UnloadParams.build(
            connection=with_password(conn, dialect.lower()),
            dialect=dialect,
            query=read_query_file(query),
            file_name=fname or trim_extension(query),
            max_size_mb=maxsize,
            compress=compress,
            parallel=parallel,
            range_start=range_start,
            range_end=range_end,
            batch_size=batch,
            double_quotes=double_quotes,
            quote_all=quote_all,
            tab_separated=tab_separated,
        )
        _run(params)
    except ValidationError as e:
        _fail("Validation error", e)
    except TabUnloadError as e:
        _fail("Error", e)


@app.command()
def checksum(
    conn: Annotated[
        str,
        typer.Option("--conn", help="Connection descriptor (user/password@host:port/service or URL)"),
    ],
    query: Annotated[
        Path,
        typer.Option(
            "--query",
            help="Path to the SQL query file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    dialect: Annotated[
        str,
        typer.Option("--dialect", "-d", help="Source dialect (oracle, snowflake, sqlite)"),
    ] = "oracle",
    algorithm: Annotated[
        str,
        typer.Option("--algorithm", help="hashlib digest algorithm"),
    ] = config.digest_algorithm,
) -> None:
    """Compute a checksum over a query's rendered result set."""
    try:
        params = UnloadParams.build(
            connection=with_password(conn, dialect.lower()),
            dialect=dialect,
            query=read_query_file(query),
            destination="checksum",
            double_quotes=True,
            tab_separated=False,
            digest_algorithm=algorithm,
        )
        _run(params)
    except ValidationError as e:
        _fail("Validation error", e)
    except TabUnloadError as e:
        _fail("Error", e)


@app.command()
def run(
    job_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the YAML job file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
) -> None:
    """Run an unload described by a YAML job file."""
    try:
        typer.echo(f"Loading job: {job_path}")
        params = UnloadParams.load_from_yaml(job_path)
        params = params.model_copy(
            update={"connection": with_password(params.connection, params.dialect)}
        )
        _run(params)
    except ValidationError as e:
        _fail("Validation error", e)
    except TabUnloadError as e:
        _fail("Error", e)


@app.command()
def validate(
    job_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the YAML job file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
) -> None:
    """Validate a YAML job file without connecting."""
    try:
        typer.echo(f"Validating job: {job_path}")
        params = UnloadParams.load_from_yaml(job_path)
    except TabUnloadError as e:
        _fail("✗ Validation failed", e)

    typer.secho("✓ Job is valid!", fg=typer.colors.GREEN, bold=True)
    summary: dict[str, Any] = {
        "Dialect": params.dialect,
        "Destination": params.destination,
    }
    if params.destination == "file":
        summary["Output"] = f"{params.file_name}*.{params.extension}" + (".gz" if params.compress else "")
        summary["Max size"] = f"{params.max_size_mb} MB"
    if params.is_ranged:
        summary["Range"] = f"{params.range_start}..{params.range_end} by {params.batch_size}"
        summary["Workers"] = params.parallel
    for key, value in summary.items():
        typer.echo(f"{key}: {value}")


if __name__ == "__main__":
    app()
