"""
settings.py — Credentials and client options from the environment.

Reads ``CVENT_*`` variables, after loading a ``.env`` file if one exists.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

REQUIRED_VARS = ("CVENT_ACCOUNT_NUMBER", "CVENT_USERNAME", "CVENT_PASSWORD")
DEFAULT_TIMEOUT = 30.0
DEFAULT_CACHE_ROOT = "./schema-cache"


@dataclass(frozen=True)
class CventSettings:
    account_number: str
    username: str
    password: str
    sandbox: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"CventSettings(account_number='[REDACTED]', username='[REDACTED]', "
            f"password='[REDACTED]', sandbox={self.sandbox}, timeout={self.timeout})"
        )


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def load_settings(dotenv: bool = True) -> CventSettings:
    """Build ``CventSettings`` from ``CVENT_*`` environment variables.

    Raises:
        RuntimeError: If a required variable is missing or ``CVENT_TIMEOUT``
            is not a number.
    """
    if dotenv:
        load_dotenv()
    missing = [name for name in REQUIRED_VARS if not os.environ.get(name)]
    if missing:
        raise RuntimeError(f"Missing Cvent credentials: set {', '.join(missing)}")

    raw_timeout = os.environ.get("CVENT_TIMEOUT", "")
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise RuntimeError(f"CVENT_TIMEOUT must be a number of seconds, got {raw_timeout!r}")

    return CventSettings(
        account_number=os.environ["CVENT_ACCOUNT_NUMBER"],
        username=os.environ["CVENT_USERNAME"],
        password=os.environ["CVENT_PASSWORD"],
        sandbox=_flag(os.environ.get("CVENT_SANDBOX")),
        timeout=timeout,
    )


def cache_root() -> str:
    """Root directory of the local schema cache."""
    return os.environ.get("CVENT_SCHEMA_CACHE", DEFAULT_CACHE_ROOT)
