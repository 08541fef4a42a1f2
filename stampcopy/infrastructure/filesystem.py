"""Filesystem primitives: directory probing and non-overwriting file copy."""
from __future__ import annotations

import errno
import os
import secrets
import shutil
import stat
from enum import Enum
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, os.PathLike]

# Windows ERROR_FILENAME_EXCED_RANGE
_WIN_PATH_TOO_LONG = 206


class Outcome(Enum):
    """Closed set of results reported by the filesystem layer."""

    OK = "ok"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    DUPLICATE_NAME = "duplicate_name"
    PATH_TOO_LONG = "path_too_long"
    IO_FAILURE = "io_failure"


def outcome_from_error(exc: OSError) -> Outcome:
    """Map an ``OSError`` raised by the OS onto a result variant."""
    if isinstance(exc, PermissionError):
        return Outcome.ACCESS_DENIED
    if isinstance(exc, (FileNotFoundError, NotADirectoryError)):
        return Outcome.NOT_FOUND
    if isinstance(exc, FileExistsError):
        return Outcome.DUPLICATE_NAME
    if exc.errno == errno.ENAMETOOLONG or getattr(exc, "winerror", None) == _WIN_PATH_TOO_LONG:
        return Outcome.PATH_TOO_LONG
    return Outcome.IO_FAILURE


def _random_name() -> str:
    return f"tmp{secrets.token_hex(6)}"


def validate_directory(path: Optional[PathLike], require_write: bool = False) -> Outcome:
    """Check that ``path`` is an existing directory the current user may use.

    Listing the directory proves read access. With ``require_write`` a randomly
    named subdirectory is created and removed again, since many filesystems
    report a directory as present and listable while refusing writes.

    Returns:
        ``Outcome.OK``, ``Outcome.NOT_FOUND`` or ``Outcome.ACCESS_DENIED``.
    """
    if not path:
        return Outcome.NOT_FOUND
    directory = Path(path)
    if not os.path.isdir(directory):
        return Outcome.NOT_FOUND

    try:
        with os.scandir(directory) as entries:
            for _ in entries:
                pass
    except PermissionError:
        return Outcome.ACCESS_DENIED
    except FileNotFoundError:
        return Outcome.NOT_FOUND
    except OSError:
        return Outcome.ACCESS_DENIED

    if not require_write:
        return Outcome.OK

    probe = directory / _random_name()
    while os.path.lexists(probe):
        probe = directory / _random_name()
    try:
        os.mkdir(probe)
        os.rmdir(probe)
    except OSError:
        return Outcome.ACCESS_DENIED
    return Outcome.OK


def copy_file(source: Path, target: Path) -> None:
    """Copy ``source`` to ``target`` with metadata; never replaces an existing file.

    Raises:
        FileExistsError: ``target`` already exists.
        PermissionError: ``source`` cannot be read or ``target`` cannot be written.
        OSError: ``source`` is missing, a dangling link or not a regular file
            (FIFOs, sockets and devices are never opened), or any other I/O failure.
    """
    if not stat.S_ISREG(os.stat(source).st_mode):
        raise OSError(errno.EINVAL, "Not a regular file", str(source))
    with open(source, "rb") as src, open(target, "xb") as dst:
        shutil.copyfileobj(src, dst)
    shutil.copystat(source, target)
