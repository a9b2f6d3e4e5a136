"""Session naming, canonical paths and debug output locations."""

from __future__ import annotations

import json
import logging
import os
import re
import unicodedata
from typing import Optional

from tracer.schema import SessionData

logger = logging.getLogger(__name__)

_FILENAME_WORDS = 4
_READABLE_NAME_MAX_BYTES = 100
_NON_WORD = re.compile(r"[^a-z0-9\t\n\f\r ]+")
_SYMBOL_WORDS = (("@", " at "), ("&", " and "), ("#", " hash "))

_debug_base_dir_override = ""


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    kept = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", kept)


def extract_words_from_message(message: str, max_words: int) -> list[str]:
    """Return up to ``max_words`` lower-case ASCII words from a message."""
    if not message:
        return []
    normalized = _strip_accents(message).lower()
    for symbol, word in _SYMBOL_WORDS:
        normalized = normalized.replace(symbol, word)
    normalized = _NON_WORD.sub(" ", normalized)
    return normalized.split()[:max_words]


def generate_filename_from_words(words: list[str]) -> str:
    """Join words with hyphens, collapsing repeats and trimming the ends."""
    if not words:
        return ""
    filename = "-".join(words)
    while "--" in filename:
        filename = filename.replace("--", "-")
    return filename.strip("-")


def generate_filename_from_user_message(message: str) -> str:
    """Build a file-name slug from the first words of a user message."""
    return generate_filename_from_words(extract_words_from_message(message, _FILENAME_WORDS))


def generate_readable_name(message: str) -> str:
    """Collapse whitespace and cut the message to 100 bytes at a word boundary."""
    if not message:
        return ""
    name = " ".join(message.split())
    encoded = name.encode("utf-8")
    if len(encoded) <= _READABLE_NAME_MAX_BYTES:
        return name

    truncated = encoded[:_READABLE_NAME_MAX_BYTES]
    last_space = truncated.rfind(b" ")
    if last_space > 0:
        truncated = truncated[:last_space]
    return truncated.decode("utf-8", errors="ignore") + "..."


def _append_remaining(result: str, parts: list[str]) -> str:
    for part in parts:
        if part:
            result = os.path.join(result, part)
    return result


def get_canonical_path(p: str) -> str:
    """Resolve symlinks and correct the letter case of each path component.

    Components that do not exist on disk are kept as given. Raises
    ``NotADirectoryError`` when a non-final component is a regular file.
    """
    p = os.path.abspath(p)
    try:
        p = os.path.realpath(p, strict=True)
    except OSError as exc:
        logger.warning(
            "get_canonical_path: symlink resolution failed, using original path %s: %s", p, exc
        )

    parts = p.split(os.sep)
    result = os.sep
    for index, part in enumerate(parts[1:], start=1):
        if not part:
            continue
        try:
            names = os.listdir(result)
        except NotADirectoryError:
            raise
        except OSError:
            return _append_remaining(result, parts[index:])

        wanted = part.lower()
        match = next((name for name in names if name.lower() == wanted), None)
        if match is None:
            return _append_remaining(result, parts[index:])
        result = os.path.join(result, match)

    return result


def set_debug_base_dir(directory: str) -> None:
    """Override the base directory for debug output; an empty value restores the default."""
    global _debug_base_dir_override
    _debug_base_dir_override = directory


def _home_dir() -> Optional[str]:
    home = os.path.expanduser("~")
    if not home or home == "~":
        return None
    return home


def _default_debug_base_dir() -> str:
    home = _home_dir()
    if home is None:
        return os.path.join(".tracer", "debug")
    return os.path.join(home, ".local", "state", "tracer", "debug")


def get_debug_dir(session_id: str) -> str:
    """Return the directory that holds debug output for a session."""
    base = _debug_base_dir_override or _default_debug_base_dir()
    return os.path.normpath(os.path.join(base, session_id))


def write_debug_session_data(session_id: str, session_data: Optional[SessionData]) -> None:
    """Write the session as indented JSON to ``session-data.json`` in its debug directory."""
    if session_data is None:
        raise ValueError("session_data is None")

    debug_dir = get_debug_dir(session_id)
    os.makedirs(debug_dir, mode=0o755, exist_ok=True)

    file_path = os.path.join(debug_dir, "session-data.json")
    with open(file_path, "w", encoding="utf-8") as handle:
        handle.write(json.dumps(session_data.to_dict(), indent=2, ensure_ascii=False))

    logger.debug("Wrote debug session data for %s to %s", session_id, os.path.abspath(file_path))