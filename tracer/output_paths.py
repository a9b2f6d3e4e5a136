"""Output directory configuration: archive, debug and runtime state locations."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

TRACER_DIR = ".tracer"
HISTORY_DIR = "history"
DEBUG_DIR = "debug"
DEBUG_LOG_FILE = "debug.log"
STATISTICS_FILE = "statistics.json"
RUNTIME_STATE_DB_FILE = "runtime-state.db"

_LEGACY_HISTORY_FILE = ".history.json"


class ValidationError(Exception):
    """A user-supplied setting is invalid; reported without usage help."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class OutputConfig(Protocol):
    """Anything that knows where history and debug output go."""

    def history_dir(self) -> str: ...

    def debug_dir(self) -> str: ...


def _home_dir() -> Optional[str]:
    home = os.environ.get("USERPROFILE" if os.name == "nt" else "HOME", "")
    return home or None


def expand_tilde(path: str) -> str:
    """Expand a leading ``~`` to the user's home directory."""
    if not path.startswith("~"):
        return path
    home = _home_dir()
    if home is None:
        return path
    rest = path[1:].lstrip("/" + os.sep)
    return os.path.normpath(os.path.join(home, rest) if rest else home)


def _validate_directory(directory: str, label: str) -> str:
    """Return the absolute form of ``directory``, creating it or checking it is writable."""
    directory = expand_tilde(directory)
    try:
        abs_path = os.path.abspath(directory)
    except (OSError, ValueError) as exc:
        raise ValidationError(f"invalid {label} path: {exc}") from exc

    try:
        is_dir = os.path.isdir(abs_path)
        exists = is_dir or os.path.lexists(abs_path)
        if exists:
            os.stat(abs_path)
    except FileNotFoundError:
        exists = False
        is_dir = False
    except OSError as exc:
        raise ValidationError(f"error checking {label}: {exc}") from exc

    if exists:
        if not is_dir:
            raise ValidationError(f"{label} exists but is not a directory: {abs_path}")
        try:
            handle, probe = tempfile.mkstemp(prefix=".tracer_write_test_", dir=abs_path)
        except OSError as exc:
            raise ValidationError(f"{label} is not writable: {abs_path}") from exc
        os.close(handle)
        try:
            os.remove(probe)
        except OSError:
            pass
        logger.debug("Using existing %s %s", label, abs_path)
    else:
        logger.debug("Creating %s %s", label, abs_path)
        try:
            os.makedirs(abs_path, mode=0o755, exist_ok=True)
        except OSError as exc:
            raise ValidationError(f"failed to create {label}: {exc}") from exc
        logger.debug("Created %s %s", label, abs_path)

    return abs_path


@dataclass
class OutputPathConfig:
    """Validated output locations; empty values fall back to defaults."""

    base_dir: str = ""
    debug_base_dir: str = ""

    def history_dir(self) -> str:
        """Directory where markdown transcripts are archived."""
        if self.base_dir:
            return self.base_dir
        home = _home_dir()
        if home is None:
            return os.path.join(TRACER_DIR, HISTORY_DIR)
        return os.path.join(home, ".local", "share", "tracer", "archive")

    def debug_dir(self) -> str:
        """Debug output directory; a custom one is used as given."""
        if self.debug_base_dir:
            return self.debug_base_dir
        return os.path.join(self.tracer_dir(), DEBUG_DIR)

    def log_path(self) -> str:
        return os.path.join(self.debug_dir(), DEBUG_LOG_FILE)

    def tracer_dir(self) -> str:
        """Runtime state directory."""
        home = _home_dir()
        if home is None:
            return TRACER_DIR
        return os.path.join(home, ".local", "state", "tracer")

    def statistics_path(self) -> str:
        return os.path.join(self.tracer_dir(), STATISTICS_FILE)

    def runtime_state_db_path(self) -> str:
        return os.path.join(self.tracer_dir(), RUNTIME_STATE_DB_FILE)


def new_output_path_config(directory: str, debug_directory: str) -> OutputPathConfig:
    """Validate the given directories; either may be empty to use the default."""
    config = OutputPathConfig()
    if directory:
        config.base_dir = _validate_directory(directory, "output directory")
    if debug_directory:
        config.debug_base_dir = _validate_directory(debug_directory, "debug directory")
    return config


def setup_output_config(output_dir: str, debug_dir: str) -> OutputPathConfig:
    """Create the output configuration for the markdown and debug directories."""
    return new_output_path_config(output_dir, debug_dir)


def ensure_history_directory_exists(config: OutputConfig) -> None:
    """Create the archive directory and drop the legacy history file if present."""
    history_path = config.history_dir()
    try:
        os.makedirs(history_path, mode=0o755, exist_ok=True)
    except OSError as exc:
        raise OSError(f"error creating history directory: {exc}") from exc

    legacy = os.path.join(history_path, _LEGACY_HISTORY_FILE)
    if os.path.exists(legacy):
        try:
            os.remove(legacy)
        except OSError:
            pass


def ensure_state_directory_exists(config: OutputPathConfig) -> None:
    """Create the runtime state directory if it is missing."""
    try:
        os.makedirs(config.tracer_dir(), mode=0o755, exist_ok=True)
    except OSError as exc:
        raise OSError(f"error creating state directory: {exc}") from exc