"""Credentials schema and persistence (separate from config)."""

import json
import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field


class SlackCredentials(BaseModel):
    """Tokens for the Slack app."""
    bot_token: str = ""  # xoxb-... used for the Web API
    app_token: str = ""  # xapp-... used to open the Socket Mode connection


class ChannelsCredentials(BaseModel):
    """Credentials for chat channels."""
    slack: SlackCredentials = Field(default_factory=SlackCredentials)


class Credentials(BaseModel):
    """Root credentials model. Stored in ~/.chatbridge/credentials.json with 0o600."""
    channels: ChannelsCredentials = Field(default_factory=ChannelsCredentials)


def get_credentials_path() -> Path:
    """Get the default credentials file path."""
    from chatbridge.config.loader import get_data_dir

    return get_data_dir() / "credentials.json"


def load_credentials(creds_path: Path | None = None) -> Credentials:
    """Load credentials from file or return defaults.

    ``SLACK_BOT_TOKEN`` and ``SLACK_APP_TOKEN`` override the file when set.
    """
    from chatbridge.config.loader import convert_keys

    path = creds_path or get_credentials_path()
    creds = Credentials()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            creds = Credentials.model_validate(convert_keys(data))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Failed to load credentials from {path}: {e}")
            logger.warning("Using default credentials.")

    slack = creds.channels.slack
    slack.bot_token = os.environ.get("SLACK_BOT_TOKEN") or slack.bot_token
    slack.app_token = os.environ.get("SLACK_APP_TOKEN") or slack.app_token
    return creds


def save_credentials(creds: Credentials, creds_path: Path | None = None) -> None:
    """Save credentials to file with 0o600 permissions."""
    from chatbridge.config.loader import convert_to_camel

    path = creds_path or get_credentials_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = convert_to_camel(creds.model_dump())

    with open(path, "w") as f:
        json.dump(data, f, indent=2)

    os.chmod(path, 0o600)
