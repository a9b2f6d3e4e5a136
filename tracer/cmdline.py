"""Splitting of command strings into arguments."""

from __future__ import annotations

_WHITESPACE = (" ", "\t", "\n")
_QUOTES = ('"', "'")


def split_command_line(s: str) -> list[str]:
    """Split a command line into arguments, honouring quotes and backslash escapes.

    Single and double quotes behave the same; a backslash escapes the next
    character; empty quoted strings are dropped; an unclosed quote runs to
    the end of the string.
    """
    args: list[str] = []
    current: list[str] = []
    in_quote = ""
    escaped = False

    for ch in s:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif in_quote:
            if ch == in_quote:
                in_quote = ""
            else:
                current.append(ch)
        elif ch in _QUOTES:
            in_quote = ch
        elif ch in _WHITESPACE:
            if current:
                args.append("".join(current))
                current = []
        else:
            current.append(ch)

    if current:
        args.append("".join(current))
    return args