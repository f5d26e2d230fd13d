"""Credential management."""

from chatbridge.auth.credentials import (
    Credentials,
    get_credentials_path,
    load_credentials,
    save_credentials,
)

__all__ = [
    "Credentials",
    "load_credentials",
    "save_credentials",
    "get_credentials_path",
]
