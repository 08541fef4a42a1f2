"""Validation and repair of a loaded configuration before a run."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from stampcopy.config.settings import LoggingLevel, Settings
from stampcopy.infrastructure.filesystem import Outcome, validate_directory

LOGGER = logging.getLogger(__name__)

Validator = Callable[[Optional[Path], bool], Outcome]

_DESCRIPTIONS = {
    Outcome.NOT_FOUND: "does not exist",
    Outcome.ACCESS_DENIED: "is inaccessible",
}


class InvalidDestinationError(RuntimeError):
    """The destination directory is missing or not writable; the run cannot start."""

    def __init__(self, path: Path, outcome: Outcome) -> None:
        super().__init__(f"Destination directory '{path}' {_DESCRIPTIONS.get(outcome, outcome.value)}")
        self.path = path
        self.outcome = outcome


@dataclass(frozen=True, slots=True)
class PathIssue:
    path: str
    outcome: Outcome

    def describe(self) -> str:
        return f"'{self.path}' {_DESCRIPTIONS.get(self.outcome, self.outcome.value)}"


@dataclass(frozen=True, slots=True)
class SanitizedConfig:
    source_directories: Tuple[Path, ...]
    destination_directory: Path
    logging_directory: Optional[Path]
    logging_level: LoggingLevel


@dataclass(slots=True)
class SanitizeReport:
    config: SanitizedConfig
    destination_outcome: Outcome
    issues: Dict[str, List[PathIssue]] = field(default_factory=dict)

    @property
    def destination_ok(self) -> bool:
        return self.destination_outcome is Outcome.OK

    def raise_for_destination(self) -> None:
        if not self.destination_ok:
            raise InvalidDestinationError(self.config.destination_directory, self.destination_outcome)


def _unique(paths: Iterable[Path]) -> List[Path]:
    seen = set()
    ordered: List[Path] = []
    for path in paths:
        if path in seen:
            continue
        seen.add(path)
        ordered.append(path)
    return ordered


class ConfigSanitizer:
    """Drops unusable directories from a :class:`Settings` and orders the sources.

    Sources only need to be readable; destination and logging directories are
    probed for write access.
    """

    def __init__(self, settings: Settings, validator: Validator = validate_directory) -> None:
        self._settings = settings
        self._validate = validator

    @property
    def destination(self) -> Path:
        return Path(self._settings.destination_directory)

    def clean_sources(self, raw: Iterable[str]) -> Tuple[List[Path], List[PathIssue]]:
        cleaned: List[Path] = []
        issues: List[PathIssue] = []
        for path in _unique(Path(item) for item in raw):
            outcome = self._validate(path, False)
            if outcome is Outcome.OK:
                cleaned.append(path)
            else:
                issues.append(PathIssue(str(path), outcome))

        # The destination gains new subdirectories during the run, so it has to
        # be copied before any other source.
        if self.destination in cleaned:
            index = cleaned.index(self.destination)
            cleaned[0], cleaned[index] = cleaned[index], cleaned[0]
        return cleaned, issues

    def clean_destination(self, path: Optional[str]) -> Outcome:
        return self._validate(Path(path) if path else None, True)

    def clean_logging_directory(self, path: Optional[str]) -> Outcome:
        return self._validate(Path(path) if path else None, True)

    def sanitize(self) -> SanitizeReport:
        settings = self._settings
        issues: Dict[str, List[PathIssue]] = {}

        destination_outcome = self.clean_destination(settings.destination_directory)
        if destination_outcome is not Outcome.OK:
            issues["destination_directory"] = [
                PathIssue(settings.destination_directory, destination_outcome)
            ]

        logging_directory: Optional[Path] = None
        if settings.logging_directory:
            logging_outcome = self.clean_logging_directory(settings.logging_directory)
            if logging_outcome is Outcome.OK:
                logging_directory = Path(settings.logging_directory)
            else:
                issues["logging_directory"] = [PathIssue(settings.logging_directory, logging_outcome)]

        sources, source_issues = self.clean_sources(settings.source_directories)
        if source_issues:
            issues["source_directories"] = source_issues

        for name, entries in issues.items():
            for issue in entries:
                LOGGER.debug("Rejected %s: %s", name, issue.describe())

        config = SanitizedConfig(
            source_directories=tuple(sources),
            destination_directory=self.destination,
            logging_directory=logging_directory,
            logging_level=settings.logging_level,
        )
        return SanitizeReport(config=config, destination_outcome=destination_outcome, issues=issues)
