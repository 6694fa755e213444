"""Command line interface for energytop."""

from typing import Annotated, Optional

import typer

from energytop import wire
from energytop.aggregator import DEFAULT_MAX_POINTS
from energytop.config import DEFAULT_POLL_INTERVAL_MS, MonitorConfig
from energytop.errors import SnapshotError
from energytop.log import setup_logging
from energytop.providers import DEFAULT_SOURCE, FileSnapshotProvider

cli = typer.Typer(help="Per-process energy monitor for ProcPower snapshot files.")

SourceOption = Annotated[
    str,
    typer.Option("--source", "-s", envvar="ENERGYTOP_SOURCE", help="Snapshot file to read."),
]


@cli.command()
def run(
    source: SourceOption = DEFAULT_SOURCE,
    interval_ms: Annotated[
        int,
        typer.Option("--interval-ms", "-i", envvar="ENERGYTOP_INTERVAL_MS", help="Poll interval."),
    ] = DEFAULT_POLL_INTERVAL_MS,
    max_points: Annotated[
        int,
        typer.Option("--max-points", "-n", envvar="ENERGYTOP_MAX_POINTS", help="Samples kept."),
    ] = DEFAULT_MAX_POINTS,
    log_level: Annotated[
        str, typer.Option("--log-level", envvar="ENERGYTOP_LOG_LEVEL")
    ] = "WARNING",
    log_file: Annotated[
        Optional[str], typer.Option("--log-file", envvar="ENERGYTOP_LOG_FILE")
    ] = None,
) -> None:
    """Launch the live dashboard."""
    try:
        config = MonitorConfig(
            source_path=source,
            poll_interval_ms=interval_ms,
            max_points=max_points,
            log_level=log_level,
            log_file=log_file,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    setup_logging(config.level, config.log_file)

    # Imported here so `dump` works without initialising Textual
    from energytop.app import EnergytopApp

    EnergytopApp(config).run()


@cli.command()
def dump(source: SourceOption = DEFAULT_SOURCE) -> None:
    """Read one snapshot and print it as a JSON payload."""
    provider = FileSnapshotProvider(source)
    try:
        snapshot = provider.now()
    except SnapshotError as e:
        typer.echo(wire.encode(e.to_failure()))
        raise typer.Exit(code=1) from e
    typer.echo(wire.encode(snapshot))


def main() -> None:
    """Entry point for energytop."""
    cli()


if __name__ == "__main__":
    main()
