"""Loading of the backup configuration document."""
from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional

import yaml

APP_NAME = "stampcopy"
CONFIG_ENV_VAR = "STAMPCOPY_CONFIG"
DEFAULT_CONFIG_NAME = "conf.json"


class ConfigurationError(RuntimeError):
    """Raised when the configuration document cannot be used."""


class ConfigNotFoundError(ConfigurationError):
    """The configuration document is missing or unreadable."""


class MalformedConfigError(ConfigurationError):
    """The configuration document cannot be parsed or has invalid fields."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("\n".join(errors))
        self.errors = errors


class LoggingLevel(IntEnum):
    """Severity threshold; a message at level L is written iff L <= threshold."""

    NONE = 0
    FATAL = 5
    ERROR = 10
    INFO = 15
    DEBUG = 20

    @classmethod
    def parse(cls, value: object) -> "LoggingLevel":
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        elif isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown logging level: {value!r}")


@dataclass(slots=True)
class Settings:
    source_directories: List[str]
    destination_directory: str
    logging_directory: Optional[str] = None
    logging_level: LoggingLevel = LoggingLevel.NONE
    path: Optional[Path] = field(default=None, compare=False)


def get_user_data_dir() -> Path:
    """Per-user application data directory for ``stampcopy``."""
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("LOCALAPPDATA", str(Path.home() / "AppData" / "Local")))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def find_config_path(explicit: Optional[Path | str] = None) -> Optional[Path]:
    """Locate the configuration document.

    Order: the explicit path, ``$STAMPCOPY_CONFIG``, ``./conf.json``, then the
    per-user data directory. An explicit path is returned even if it does not
    exist so that loading reports it.
    """
    if explicit:
        return Path(explicit)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    for candidate in (Path(DEFAULT_CONFIG_NAME), get_user_data_dir() / DEFAULT_CONFIG_NAME):
        if candidate.is_file():
            return candidate
    return None


def _load_file(path: Path) -> object:
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found at '{path}'")
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ConfigNotFoundError(f"Config file at '{path}' cannot be read: {exc}") from exc
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise MalformedConfigError([f"Invalid configuration format: {exc}"]) from exc


def _as_path_list(value: object) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ValueError


def parse_settings(raw: object, path: Optional[Path] = None) -> Settings:
    """Build :class:`Settings` from a decoded document, reporting every bad field at once."""
    if not isinstance(raw, dict):
        raise MalformedConfigError(["Configuration root must be a mapping"])

    errors: List[str] = []
    values: Dict[str, object] = {}

    for key in ("source_directories", "destination_directory"):
        if raw.get(key) is None:
            errors.append(f"Missing required field '{key}'")

    if raw.get("source_directories") is not None:
        try:
            values["source_directories"] = _as_path_list(raw["source_directories"])
        except ValueError:
            errors.append("Invalid value for 'source_directories'")

    destination = raw.get("destination_directory")
    if destination is not None:
        if isinstance(destination, str):
            values["destination_directory"] = destination
        else:
            errors.append("Invalid value for 'destination_directory'")

    logging_directory = raw.get("logging_directory")
    if logging_directory is not None and not isinstance(logging_directory, str):
        errors.append("Invalid value for 'logging_directory'")
    else:
        values["logging_directory"] = logging_directory or None

    if raw.get("logging_level") is not None:
        try:
            values["logging_level"] = LoggingLevel.parse(raw["logging_level"])
        except ValueError:
            errors.append("Invalid value for 'logging_level'")

    if errors:
        raise MalformedConfigError(errors)
    return Settings(path=path, **values)


def load_settings(path: Optional[Path | str] = None) -> Settings:
    config_path = find_config_path(path)
    if config_path is None:
        raise ConfigNotFoundError(
            "The configuration file cannot be found.\n"
            "Pass the path to it through the command line argument"
        )
    return parse_settings(_load_file(config_path), config_path)
