"""ANSI color markup understood by game renderers."""

from __future__ import annotations

import re

DIRECTORY = "\x1b[34m"
SUCCESS = "\x1b[32m"
ERROR = "\x1b[31m"
RESET = "\x1b[0m"
CLEAR_SCREEN = "\x1b[2J\x1b[H"

ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*[mJH]")


def directory(text: str) -> str:
    """Mark text as a directory name."""
    return f"{DIRECTORY}{text}{RESET}"


def success(text: str) -> str:
    """Mark text as a success message."""
    return f"{SUCCESS}{text}{RESET}"


def error(text: str) -> str:
    """Mark text as an error message."""
    return f"{ERROR}{text}{RESET}"


def strip(text: str) -> str:
    """Remove all color and screen-control sequences."""
    return ANSI_PATTERN.sub("", text)
