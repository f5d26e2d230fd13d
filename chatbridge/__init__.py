"""chatbridge - Slack command bridge."""

__version__ = "0.1.0"
__logo__ = "🌉"
