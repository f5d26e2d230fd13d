"""Configuration schema using Pydantic."""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SlackConfig(BaseModel):
    """Slack channel configuration. Tokens live in credentials.json."""
    enabled: bool = True
    channel: str = ""  # Authorized channel, by name ("ops") or id ("C0123456")
    api_url: str | None = None  # Custom Web API endpoint, e.g. a test double
    bot_id: str = ""  # Bot user id to use with api_url (skips auth.test)
    ping_interval: float = Field(default=5.0, gt=0)
    reconnect_max_delay: float = Field(default=60.0, gt=0)


class CommunicationsConfig(BaseModel):
    """Chat platforms the bot listens on."""
    slack: SlackConfig = Field(default_factory=SlackConfig)


class KubectlConfig(BaseModel):
    """Command execution settings handed to the executor."""
    enabled: bool = False
    restrict_access: bool = False  # Only run commands from the authorized channel
    default_namespace: str = "default"
    command_timeout: int = Field(default=60, gt=0)
    commands: list[str] = Field(
        default_factory=lambda: ["get", "describe", "logs", "top", "api-resources", "cluster-info"]
    )


class Settings(BaseModel):
    """Cluster-level settings, passed through to the executor."""
    cluster_name: str = ""
    kubectl: KubectlConfig = Field(default_factory=KubectlConfig)


class Config(BaseSettings):
    """Root configuration for chatbridge."""
    communications: CommunicationsConfig = Field(default_factory=CommunicationsConfig)
    settings: Settings = Field(default_factory=Settings)

    model_config = SettingsConfigDict(
        env_prefix="CHATBRIDGE_",
        env_nested_delimiter="__",
    )

    @property
    def slack(self) -> SlackConfig:
        return self.communications.slack
