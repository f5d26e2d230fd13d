"""Entry point for ``python -m chatbridge``."""

from chatbridge.cli.commands import app

if __name__ == "__main__":
    app()
