"""Utility functions for vmconf."""

from __future__ import annotations

import os
from typing import Any, Optional

from vmconf.constants import _LOG_VERBOSE, MAC_ADDRESS_RE


def log(level: str, message: str) -> None:
    """Lightweight structured logging compatible with existing colour expectation."""
    if level == "DEBUG" and not _LOG_VERBOSE:
        return
    colours = {
        "INFO": "\033[0;34m",
        "WARN": "\033[1;33m",
        "ERROR": "\033[0;31m",
        "SUCCESS": "\033[0;32m",
        "DEBUG": "\033[0;90m",
    }
    colour = colours.get(level, "")
    reset = "\033[0m" if colour else ""
    print(f"{colour}[{level}]{reset} {message}", flush=True)


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def normalize_key(key: Any) -> Any:
    """Map ``snake_case`` config keys onto their ``kebab-case`` form."""
    if isinstance(key, str):
        return key.strip().replace("_", "-").lower()
    return key


def normalize_mac(value: Any) -> Any:
    """Convert ``aa:bb:cc:dd:ee:ff`` into the bare upper-case form VirtualBox stores.

    Values in any other shape are passed through for the platform to judge.
    """
    if isinstance(value, str) and MAC_ADDRESS_RE.match(value.strip().lower()):
        return value.strip().replace(":", "").upper()
    return value


def machine_label(machine: Any) -> str:
    """Best-effort display name for a machine handle in log messages."""
    name = getattr(machine, "name", None)
    return name if isinstance(name, str) else repr(machine)
