"""Collision-free naming of backup directories."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from stampcopy.infrastructure.filesystem import Outcome, outcome_from_error

LOGGER = logging.getLogger(__name__)

DEFAULT_TIME_FORMAT = " copy from %Y-%m-%d_%H-%M-%S"
MAX_SUFFIX = 1000


@dataclass(frozen=True)
class Allocation:
    outcome: Outcome
    path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK


def timestamped_name(name: str, time_format: str = DEFAULT_TIME_FORMAT, now: Optional[datetime] = None) -> str:
    moment = now or datetime.now()
    return f"{name}{moment.strftime(time_format)}"


def _candidates(base_dir: Path, desired_name: str) -> Iterator[Path]:
    yield base_dir / desired_name
    for counter in range(1, MAX_SUFFIX + 1):
        yield base_dir / f"{desired_name} ({counter})"


def allocate(base_dir: Path, desired_name: str) -> Allocation:
    """Create and return the first free directory among ``name``, ``name (1)`` ... ``name (1000)``.

    The name is only tested for existence; creation happens in the same step so
    the caller always receives an empty directory that did not exist before.
    """
    for candidate in _candidates(base_dir, desired_name):
        if os.path.lexists(candidate):
            continue
        try:
            candidate.mkdir()
        except FileExistsError:
            # created by someone else after the existence check
            continue
        except OSError as exc:
            LOGGER.debug("Cannot create %s: %s", candidate, exc)
            return Allocation(outcome_from_error(exc))
        return Allocation(Outcome.OK, candidate)
    return Allocation(Outcome.DUPLICATE_NAME)
