"""Config file loading and key-case conversion."""

import json
import re
from pathlib import Path
from typing import Any

from loguru import logger

from chatbridge.config.schema import Config


def get_data_dir() -> Path:
    """Return the chatbridge data directory. Writers create it on save."""
    return Path.home() / ".chatbridge"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_data_dir() / "config.json"


def camel_to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def convert_keys(data: Any) -> Any:
    """Recursively convert camelCase dict keys to snake_case."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Recursively convert snake_case dict keys to camelCase."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def load_config(config_path: Path | None = None) -> Config:
    """
    Load config from file, falling back to defaults.

    Environment variables (``CHATBRIDGE_SETTINGS__CLUSTER_NAME`` etc.) fill in
    values the file does not set.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            return Config(**convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> None:
    """Write config to file in camelCase."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(config.model_dump())

    with open(path, "w") as f:
        json.dump(data, f, indent=2)
