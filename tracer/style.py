"""ANSI styling for terminal output, enabled only where colour is supported."""

from __future__ import annotations

import functools
import os
import sys

_RESET = "\033[0m"
_BOLD = "\033[1m"
_CYAN = "\033[36m"
_BOLD_CYAN = "\033[1;36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"


def _is_terminal(stream) -> bool:
    try:
        return stream is not None and stream.isatty()
    except (AttributeError, ValueError, OSError):
        return False


def _detect_color_support() -> bool:
    if os.environ.get("NO_COLOR", "").strip():
        return False

    preference = os.environ.get("TRACER_COLOR", "").strip().lower()
    if preference in ("always", "1", "true"):
        return True
    if preference in ("never", "0", "false"):
        return False

    term = os.environ.get("TERM", "").strip()
    if term in ("", "dumb"):
        return False

    return _is_terminal(sys.stdout) or _is_terminal(sys.stderr)


@functools.lru_cache(maxsize=None)
def is_color_enabled() -> bool:
    """Report whether colour output is on; decided once per process."""
    return _detect_color_support()


def _style(text: str, code: str) -> str:
    if not text or not is_color_enabled():
        return text
    return f"{code}{text}{_RESET}"


def section(text: str) -> str:
    """Upper-case section heading in bold cyan."""
    return _style(text.upper(), _BOLD_CYAN)


def command(text: str) -> str:
    return _style(text, _CYAN)


def success(text: str) -> str:
    return _style(text, _GREEN)


def warning(text: str) -> str:
    return _style(text, _YELLOW)


def error(text: str) -> str:
    return _style(text, _RED)


def bold(text: str) -> str:
    return _style(text, _BOLD)