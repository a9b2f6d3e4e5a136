"""Session model, markdown rendering, statistics, shell path hints and path helpers for AI coding agent histories."""

__version__ = "0.1.0"

__all__ = [
    "cmdline",
    "markdown",
    "output_paths",
    "paths",
    "provider",
    "schema",
    "shell_hints",
    "statistics",
    "style",
    "watch",
]