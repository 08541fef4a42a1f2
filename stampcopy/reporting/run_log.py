"""Raw banner and summary lines written around a run, independent of the level filter."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from stampcopy.config.sanitizer import SanitizedConfig
from stampcopy.processing.copy_engine import CopyStats
from stampcopy.processing.orchestrator import RunResult

STAMP_FORMAT = "%Y-%m-%d_%H-%M-%S-%f"
SEPARATOR = "-" * 50


def _append(log_path: Optional[Path], lines: Iterable[str]) -> None:
    if log_path is None:
        return
    with log_path.open("a", encoding="utf-8") as handle:
        for line in lines:
            handle.write(line + "\n")


def summary_line(source: str, stats: CopyStats) -> str:
    return f"'{source}': failed - {stats.fail}, copied - {stats.success} files"


def summary_lines(sources: Iterable[Path], result: RunResult) -> List[str]:
    """One line per processed source, in configuration order."""
    return [summary_line(str(source), result[str(source)]) for source in sources if str(source) in result]


def start_log(log_path: Optional[Path], config: SanitizedConfig, now: Optional[datetime] = None) -> None:
    moment = now or datetime.now()
    _append(
        log_path,
        [
            f"Log started at {moment.strftime(STAMP_FORMAT)}",
            f"Logging level: {config.logging_level.name}",
            f"Destination directory: {config.destination_directory}",
        ],
    )


def end_log(
    log_path: Optional[Path],
    sources: Iterable[Path],
    result: RunResult,
    now: Optional[datetime] = None,
) -> None:
    moment = now or datetime.now()
    lines = [SEPARATOR, *summary_lines(sources, result), f"Log ended at {moment.strftime(STAMP_FORMAT)}"]
    _append(log_path, lines)
