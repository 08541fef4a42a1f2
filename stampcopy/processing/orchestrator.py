"""Runs the backup of every configured source into the destination root."""
from __future__ import annotations

import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from stampcopy.infrastructure.filesystem import Outcome
from stampcopy.infrastructure.naming import DEFAULT_TIME_FORMAT, allocate, timestamped_name
from stampcopy.processing.copy_engine import CopyStats, RecursiveCopyEngine

LOGGER = logging.getLogger(__name__)

RunResult = Dict[str, CopyStats]

_SKIP_MESSAGES = {
    Outcome.DUPLICATE_NAME: "Directory '{source}' cannot be copied due to its name",
    Outcome.PATH_TOO_LONG: "Directory '{source}' cannot be copied because the path is too long",
    Outcome.ACCESS_DENIED: "Directory '{source}' cannot be copied: destination is not writable",
    Outcome.NOT_FOUND: "Directory '{source}' cannot be copied: destination disappeared",
}


class Orchestrator:
    """Copies each source into its own timestamped directory under ``destination``."""

    def __init__(
        self,
        destination: Path,
        time_format: str = DEFAULT_TIME_FORMAT,
        logger: Optional[logging.Logger] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], datetime] = datetime.now,
        engine: Optional[RecursiveCopyEngine] = None,
    ) -> None:
        self.destination = destination
        self.time_format = time_format
        self._logger = logger or LOGGER
        self._cancel = cancel_event
        self._clock = clock
        self._engine = engine or RecursiveCopyEngine(logger=self._logger, cancel_event=cancel_event)

    @property
    def cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def make_copies(self, sources: Iterable[Path]) -> RunResult:
        result: RunResult = {}
        for source in sources:
            if self.cancelled:
                self._logger.error("Run interrupted before '%s'", source)
                break
            stats = self._copy_source(Path(source))
            if stats is None:
                continue
            result[str(source)] = stats
            if self.cancelled:
                self._logger.error(
                    "Copy of '%s' interrupted after %d files", source, stats.total
                )
                break
            self._logger.info("Copied directory '%s'", source)
        return result

    def _copy_source(self, source: Path) -> Optional[CopyStats]:
        if not os.path.isdir(source):
            self._logger.error("Directory '%s' does not exist", source)
            return None

        desired = timestamped_name(source.name, self.time_format, self._clock())
        allocation = allocate(self.destination, desired)
        if not allocation.ok or allocation.path is None:
            template = _SKIP_MESSAGES.get(
                allocation.outcome, "Directory '{source}' cannot be copied: {outcome}"
            )
            self._logger.error(template.format(source=source, outcome=allocation.outcome.value))
            return None

        return self._engine.copy_tree(source, allocation.path)


def make_copies(
    sources: Iterable[Path],
    destination: Path,
    time_format: str = DEFAULT_TIME_FORMAT,
    logger: Optional[logging.Logger] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RunResult:
    orchestrator = Orchestrator(destination, time_format, logger=logger, cancel_event=cancel_event)
    return orchestrator.make_copies(sources)
