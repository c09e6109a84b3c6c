"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/config.py
Application configuration: defaults, TOML loading and validation.

Example config.toml:

    ignore_patterns = ["node_modules/", "*.log"]
    ignore_file_names = [".gitignore", ".dupignore"]
    data_dir = "~/.dupfinder"
    report_output_path = "./duplicate-report.md"
    confirm_destructive_actions = true
    use_trash = false
"""

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from dupfinder.core.exceptions import ConfigError
from dupfinder.core.models import DEFAULT_IGNORE_FILE_NAMES

logger = logging.getLogger(__name__)

DATA_DIR_ENV_VAR = "DUPFINDER_HOME"
CONFIG_FILE_NAME = "config.toml"

DEFAULT_IGNORE_PATTERNS = (
    "node_modules/",
    ".venv/",
    "venv/",
    "env/",
    ".git/",
    "dist/",
    "build/",
    "out/",
    "*.log",
    "*.tmp",
    ".DS_Store",
    "Thumbs.db",
)


def default_data_dir() -> Path:
    """Per-user data directory: $DUPFINDER_HOME, or ~/.dupfinder."""
    override = os.environ.get(DATA_DIR_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".dupfinder"


@dataclass
class AppConfig:
    ignore_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    ignore_file_names: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FILE_NAMES))
    data_dir: Path = field(default_factory=default_data_dir)
    report_output_path: str = "./duplicate-report.md"
    confirm_destructive_actions: bool = True
    use_trash: bool = False

    def __post_init__(self):
        self.data_dir = Path(self.data_dir).expanduser()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<config>") -> 'AppConfig':
        """
        Build a config from a parsed TOML table, validating every key.
        Raises:
            ConfigError: on unknown keys or values of the wrong type
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{source}: unknown option(s): {', '.join(unknown)}")

        for key in ("ignore_patterns", "ignore_file_names"):
            if key in data:
                value = data[key]
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"{source}: '{key}' must be a list of strings")

        for key in ("data_dir", "report_output_path"):
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"{source}: '{key}' must be a string")

        for key in ("confirm_destructive_actions", "use_trash"):
            if key in data and not isinstance(data[key], bool):
                raise ConfigError(f"{source}: '{key}' must be true or false")

        return cls(**data)


def load_config(path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from a TOML file.

    With no explicit path, <data dir>/config.toml is used when it exists and the
    built-in defaults otherwise. An explicit path that does not exist is an error.

    Raises:
        ConfigError: if the file is missing (explicit path), unreadable or malformed
    """
    if path is None:
        candidate = default_data_dir() / CONFIG_FILE_NAME
        if not candidate.is_file():
            logger.debug("No config file found, using defaults")
            return AppConfig()
    else:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise ConfigError(f"Config file not found: {candidate}")

    try:
        with open(candidate, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{candidate}: invalid TOML: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {candidate}: {e}") from e

    config = AppConfig.from_dict(data, source=str(candidate))
    logger.info(f"Configuration loaded from {candidate}")
    return config
