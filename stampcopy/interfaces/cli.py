"""Command line entry point: one backup run per invocation."""
from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from stampcopy.config.sanitizer import ConfigSanitizer, InvalidDestinationError, SanitizeReport
from stampcopy.config.settings import ConfigNotFoundError, LoggingLevel, MalformedConfigError, load_settings
from stampcopy.infrastructure.filesystem import Outcome
from stampcopy.infrastructure.log_setup import LogSetupError, setup_logging, shutdown_logging
from stampcopy.processing.orchestrator import Orchestrator, RunResult
from stampcopy.reporting.run_log import end_log, start_log

LOGGER = logging.getLogger(__name__)

EXIT_CONFIG_NOT_FOUND = 1
EXIT_CONFIG_MALFORMED = 2
EXIT_DESTINATION_INVALID = 3
EXIT_LOG_UNAVAILABLE = 4
EXIT_INTERRUPTED = 130

app = typer.Typer(help="Copy configured directories into timestamped backups", add_completion=False)

_CONSOLE = Console()


def console() -> Console:
    return _CONSOLE


@contextmanager
def _cancel_on_interrupt(event: threading.Event) -> Iterator[None]:
    """Turn Ctrl+C into a cancellation request honoured between file copies."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame) -> None:
        event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _report_logging_fallback(report: SanitizeReport) -> None:
    issues = report.issues.get("logging_directory")
    if not issues:
        if report.config.logging_directory is not None or report.config.logging_level is LoggingLevel.NONE:
            return
        typer.echo("Logging directory is not set")
    elif issues[0].outcome is Outcome.ACCESS_DENIED:
        typer.echo("Logging directory is inaccessible")
    else:
        typer.echo("Logging directory does not exist")
    typer.echo(f"Log file will be created in '{Path.cwd()}'")


def _print_summary(sources: Sequence[Path], result: RunResult) -> None:
    table = Table(title="Backup summary")
    table.add_column("Source", overflow="fold")
    table.add_column("Copied", justify="right")
    table.add_column("Failed", justify="right")
    for source in sources:
        stats = result.get(str(source))
        if stats is None:
            table.add_row(str(source), "-", "skipped")
        else:
            table.add_row(str(source), str(stats.success), str(stats.fail))
    console().print(table)


@app.command()
def main(
    config: Optional[Path] = typer.Argument(
        None,
        help="Path to the JSON/YAML configuration file. Defaults to ./conf.json, then the user data directory.",
        show_default=False,
    ),
) -> None:
    """Back up every configured source directory into the destination directory."""
    load_dotenv(Path(".env"))
    try:
        settings = load_settings(config)
    except ConfigNotFoundError as exc:
        typer.echo(f"[Fatal] {exc}")
        raise typer.Exit(code=EXIT_CONFIG_NOT_FOUND)
    except MalformedConfigError as exc:
        typer.echo(f"[Fatal] Config file is not formed correctly:\n{exc}")
        raise typer.Exit(code=EXIT_CONFIG_MALFORMED)

    report = ConfigSanitizer(settings).sanitize()
    sanitized = report.config
    _report_logging_fallback(report)

    try:
        log_path = setup_logging(sanitized.logging_directory, sanitized.logging_level)
    except LogSetupError as exc:
        typer.echo(f"[Fatal] {exc}; try a different logging directory")
        raise typer.Exit(code=EXIT_LOG_UNAVAILABLE)

    result: RunResult = {}
    cancel = threading.Event()
    try:
        start_log(log_path, sanitized)
        for issue in report.issues.get("source_directories", []):
            LOGGER.error("Source directory %s", issue.describe())

        try:
            report.raise_for_destination()
        except InvalidDestinationError as exc:
            LOGGER.critical("%s", exc)
            typer.echo(f"[Fatal] {exc}")
            raise typer.Exit(code=EXIT_DESTINATION_INVALID)

        orchestrator = Orchestrator(sanitized.destination_directory, cancel_event=cancel)
        with _cancel_on_interrupt(cancel):
            result = orchestrator.make_copies(sanitized.source_directories)
        _print_summary(sanitized.source_directories, result)
    finally:
        end_log(log_path, sanitized.source_directories, result)
        shutdown_logging()

    if cancel.is_set():
        typer.echo("Backup interrupted")
        raise typer.Exit(code=EXIT_INTERRUPTED)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
