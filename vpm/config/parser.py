"""Configuration file parsing utilities."""

import json
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from vpm.config.schemas import BuildInfo, LockFile, VpmConfig


class ConfigError(Exception):
    """Error loading or parsing configuration."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        super().__init__(message)


def load_json(path: Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON as a dictionary

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"File not found: {path}", path)

    try:
        with open(path, encoding="utf-8") as f:
            result = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", path) from e

    if not isinstance(result, dict):
        raise ConfigError(f"JSON file must contain an object: {path}", path)
    return result


def save_json(path: Path, data: dict[str, Any], indent: int = 2) -> None:
    """Save data to a JSON file.

    Args:
        path: Path to write to
        data: Data to serialize
        indent: JSON indentation level
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)
        f.write("\n")


def load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}", path) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}", path) from e


def load_lockfile(lock_path: Path) -> LockFile:
    """Load and validate the lock file.

    Args:
        lock_path: Path to lock.json

    Returns:
        Parsed LockFile

    Raises:
        ConfigError: If the file is missing or invalid
    """
    data = load_json(lock_path)

    try:
        return LockFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid lock file: {e}", lock_path) from e


def load_config(config_path: Path) -> VpmConfig:
    """Load user configuration from config.toml.

    A missing file yields the default configuration.

    Raises:
        ConfigError: If the file exists but is invalid
    """
    if not config_path.exists():
        return VpmConfig()

    data = load_toml(config_path)

    try:
        return VpmConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}", config_path) from e


def save_build_info(build_info_path: Path, build_info: BuildInfo) -> None:
    """Write build-info.json wholesale.

    Args:
        build_info_path: Path to build-info.json
        build_info: BuildInfo to save
    """
    save_json(build_info_path, build_info.model_dump())
