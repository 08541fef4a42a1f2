"""Recursive directory copy with per-file failure accounting."""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from stampcopy.infrastructure.filesystem import copy_file

LOGGER = logging.getLogger(__name__)

CopyFunc = Callable[[Path, Path], None]


@dataclass(frozen=True)
class CopyStats:
    success: int = 0
    fail: int = 0

    def __add__(self, other: "CopyStats") -> "CopyStats":
        return CopyStats(self.success + other.success, self.fail + other.fail)

    @property
    def total(self) -> int:
        return self.success + self.fail


def _path_order(path: Path) -> Tuple[int, str]:
    text = str(path)
    return len(text), text


def _is_self_contained(candidate: Path, dest_dir: Path) -> bool:
    # string prefix, no canonicalisation
    return str(dest_dir).startswith(str(candidate))


class RecursiveCopyEngine:
    """Mirror a source tree under a destination directory.

    A failing file is counted and logged, never fatal for its directory; an
    unreadable directory is logged and contributes whatever was copied before
    the failure. Stats are returned by value and folded by the caller.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        cancel_event: Optional[threading.Event] = None,
        copy: CopyFunc = copy_file,
    ) -> None:
        self._logger = logger or LOGGER
        self._cancel = cancel_event
        self._copy = copy

    @property
    def cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def copy_tree(self, source_dir: Path, dest_dir: Path) -> CopyStats:
        stats = CopyStats()
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            files, subdirs = self._list(source_dir)
        except PermissionError:
            self._logger.error("Directory %s is inaccessible", source_dir)
            return stats
        except OSError as exc:
            self._logger.error("Directory %s cannot be read: %s", source_dir, exc)
            return stats

        subdirs = [sub for sub in subdirs if not _is_self_contained(sub, dest_dir)]

        for file in sorted(files, key=_path_order):
            if self.cancelled:
                return stats
            stats += self._copy_one(file, dest_dir / file.name)

        for sub in sorted(subdirs, key=_path_order):
            if self.cancelled:
                return stats
            stats += self.copy_tree(sub, dest_dir / sub.name)

        return stats

    def _list(self, directory: Path) -> Tuple[List[Path], List[Path]]:
        files: List[Path] = []
        subdirs: List[Path] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(Path(entry.path))
                elif entry.is_dir():
                    self._logger.debug("Skipping directory link %s", entry.path)
                else:
                    # dangling links and special files fail in the copy step
                    files.append(Path(entry.path))
        return files, subdirs

    def _copy_one(self, source: Path, target: Path) -> CopyStats:
        try:
            self._copy(source, target)
        except PermissionError:
            self._logger.error("Access denied to '%s'", source)
            return CopyStats(fail=1)
        except OSError as exc:
            self._logger.error("Error occurred while copying '%s': %s", source, exc)
            return CopyStats(fail=1)
        self._logger.debug("Copied file '%s'", source)
        return CopyStats(success=1)
