"""Configuration schema and loading."""

from chatbridge.config.loader import get_config_path, load_config, save_config
from chatbridge.config.schema import Config, KubectlConfig, Settings, SlackConfig

__all__ = [
    "Config",
    "KubectlConfig",
    "Settings",
    "SlackConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
