"""CLI commands for chatbridge."""

import asyncio
import logging
import signal
import sys

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from chatbridge import __logo__, __version__
from chatbridge.errors import ConfigError

app = typer.Typer(
    name="chatbridge",
    help=f"{__logo__} chatbridge - run cluster commands from Slack",
    no_args_is_help=True,
)

console = Console()


def _validate(config, creds) -> None:
    """Check that config and credentials can start a Slack session.

    Raises:
        ConfigError: Naming the first setting that blocks startup.
    """
    slack = config.communications.slack
    tokens = creds.channels.slack

    if not slack.enabled:
        raise ConfigError("Slack is disabled. Run: chatbridge config set communications.slack.enabled true")
    if not tokens.bot_token:
        raise ConfigError("No Slack bot token. Set SLACK_BOT_TOKEN or botToken in ~/.chatbridge/credentials.json")
    if not tokens.app_token:
        raise ConfigError("No Slack app token. Set SLACK_APP_TOKEN or appToken in ~/.chatbridge/credentials.json")
    if slack.api_url and not slack.bot_id:
        raise ConfigError("communications.slack.botId is required when apiUrl is set")
    if not slack.channel:
        logger.warning("No authorized channel configured; every request runs unauthorized")


class _InterceptHandler(logging.Handler):
    """Forward stdlib logging records (slack_sdk, aiohttp) to loguru."""

    def __init__(self, tracebacks: bool = False):
        super().__init__()
        self.tracebacks = tracebacks

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        exception = record.exc_info if self.tracebacks else None
        logger.opt(depth=depth, exception=exception).log(level, record.getMessage())


def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    # slack_sdk logs its reconnect loop through stdlib logging
    logging.basicConfig(
        handlers=[_InterceptHandler(tracebacks=verbose)],
        level=logging.DEBUG if verbose else logging.INFO,
        force=True,
    )


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} chatbridge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """chatbridge - run cluster commands from Slack."""
    pass


# ============================================================================
# Bot
# ============================================================================


@app.command()
def start(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Debug logging"),
):
    """Connect to Slack and answer commands until interrupted."""
    from chatbridge.auth.credentials import load_credentials
    from chatbridge.bot.supervisor import ConnectionSupervisor
    from chatbridge.channels.slack import SlackChannel
    from chatbridge.config.loader import load_config
    from chatbridge.errors import ChatBridgeError
    from chatbridge.executor.default import DefaultExecutorFactory

    _setup_logging(verbose)

    config = load_config()
    creds = load_credentials()

    try:
        _validate(config, creds)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    transport = SlackChannel(
        config.communications.slack,
        bot_token=creds.channels.slack.bot_token,
        app_token=creds.channels.slack.app_token,
    )
    supervisor = ConnectionSupervisor(
        config,
        transport,
        DefaultExecutorFactory(config.settings),
    )

    cluster = config.settings.cluster_name or "(unnamed cluster)"
    console.print(f"{__logo__} Starting chatbridge for {cluster}...")

    async def run():
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)
        await supervisor.start(stop_event)

    try:
        asyncio.run(run())
    except ChatBridgeError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print("Stopped.")


@app.command()
def status():
    """Show chatbridge configuration and credential status."""
    from chatbridge.auth.credentials import get_credentials_path, load_credentials
    from chatbridge.config.loader import get_config_path, load_config

    config = load_config()
    creds = load_credentials()
    slack = config.communications.slack
    kubectl = config.settings.kubectl

    config_path = get_config_path()
    creds_path = get_credentials_path()

    console.print(f"{__logo__} chatbridge Status\n")
    console.print(f"Config: {config_path} {'[green]✓[/green]' if config_path.exists() else '[red]✗[/red]'}")
    console.print(f"Credentials: {creds_path} {'[green]✓[/green]' if creds_path.exists() else '[red]✗[/red]'}")

    table = Table(title="Slack")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    def _mark(ok: bool) -> str:
        return "[green]✓[/green]" if ok else "[dim]not set[/dim]"

    table.add_row("Enabled", "[green]✓[/green]" if slack.enabled else "[dim]disabled[/dim]")
    table.add_row("Bot token", _mark(bool(creds.channels.slack.bot_token)))
    table.add_row("App token", _mark(bool(creds.channels.slack.app_token)))
    table.add_row("Authorized channel", slack.channel or "[dim]not set[/dim]")
    table.add_row("API URL", slack.api_url or "[dim]default[/dim]")
    table.add_row("Cluster", config.settings.cluster_name or "[dim]not set[/dim]")
    table.add_row("kubectl", "[green]enabled[/green]" if kubectl.enabled else "[dim]disabled[/dim]")
    table.add_row("Restrict access", "yes" if kubectl.restrict_access else "no")
    table.add_row("Default namespace", kubectl.default_namespace)
    console.print(table)


# ============================================================================
# Config
# ============================================================================


config_app = typer.Typer(help="Read and change configuration")
app.add_typer(config_app, name="config")


@config_app.command("get")
def config_get(path: str = typer.Argument(..., help="Dot-path, e.g. settings.clusterName")):
    """Print a single config value."""
    from chatbridge.config.loader import load_config
    from chatbridge.config.path_utils import get_by_path

    try:
        value = get_by_path(load_config(), path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(value)


@config_app.command("set")
def config_set(
    path: str = typer.Argument(..., help="Dot-path, e.g. settings.kubectl.enabled"),
    value: str = typer.Argument(..., help="New value; lists are comma-separated"),
):
    """Change a config value and save it."""
    from chatbridge.config.loader import load_config, save_config
    from chatbridge.config.path_utils import set_by_path

    config = load_config()
    try:
        set_by_path(config, path, value)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    save_config(config)
    console.print(f"[green]✓[/green] {path} updated")


@config_app.command("show")
def config_show():
    """List every config value, with credentials masked."""
    from chatbridge.auth.credentials import load_credentials
    from chatbridge.config.loader import load_config
    from chatbridge.config.path_utils import get_all_paths, mask

    table = Table()
    table.add_column("Path", style="cyan")
    table.add_column("Value")
    for path, value in get_all_paths(load_config()).items():
        table.add_row(path, str(mask(path, value)))
    for path, value in get_all_paths(load_credentials(), prefix="credentials").items():
        table.add_row(path, str(mask(path, value)))
    console.print(table)
