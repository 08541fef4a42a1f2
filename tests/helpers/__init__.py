"""Shared helper utilities for the stampcopy test-suite."""

from .fs import build_tree, count_files, ensure_directory, relative_files
from .mocks import DenyingCopy, RecordingCopy, RecordingValidator

__all__ = [
    "build_tree",
    "count_files",
    "ensure_directory",
    "relative_files",
    "DenyingCopy",
    "RecordingCopy",
    "RecordingValidator",
]
