"""Detection of the files a shell command creates or modifies."""

from __future__ import annotations

import os
import posixpath

from tracer.cmdline import split_command_line

_QUOTES = ('"', "'")
_BLANKS = (" ", "\t")
_TOKEN_TERMINATORS = frozenset(" \t\n|;&><")
_SED_DELIMITERS = frozenset("/|#,:")
_SED_SINGLE_COMMANDS = "dpqGHNPx"

# How the positional arguments of a file-creating command are read:
# "all" means every argument is created, "last" only the destination.
_FILE_CREATING_COMMANDS = {
    "touch": "all",
    "mkdir": "all",
    "tee": "all",
    "cp": "last",
    "mv": "last",
    "ln": "last",
}

_FLAGS_WITH_VALUE = ("-o", "-t", "-m")


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join(*parts: str) -> str:
    joined = "/".join(part for part in parts if part)
    return _clean(joined) if joined else ""


def _base(path: str) -> str:
    stripped = path.rstrip("/")
    if not stripped:
        return "/" if path else "."
    return stripped.rsplit("/", 1)[-1]


def _home_dir() -> str | None:
    home = os.path.expanduser("~")
    if not home or home == "~":
        return None
    return home


def normalize_path(path: str, workspace_root: str) -> str:
    """Make an absolute path under ``workspace_root`` relative to it."""
    if not workspace_root:
        return path
    if (
        posixpath.isabs(path)
        and path.startswith(workspace_root)
        and posixpath.isabs(workspace_root)
    ):
        return posixpath.relpath(_clean(path), _clean(workspace_root))
    return path


def expand_tilde(path: str) -> str:
    """Replace a leading ``~/`` with the user's home directory."""
    if not path.startswith("~/"):
        return path
    home = _home_dir()
    if home is None:
        return path
    return _join(home, path[2:])


def _resolve_path(raw: str, cwd: str, workspace_root: str) -> str:
    if not raw:
        return ""
    path = expand_tilde(raw)
    if not posixpath.isabs(path) and cwd:
        path = _join(cwd, path)
    return normalize_path(path, workspace_root)


def _is_numeric(s: str) -> bool:
    return bool(s) and all("0" <= ch <= "9" for ch in s)


def _looks_like_sed_expression(s: str) -> bool:
    if not s:
        return False
    if len(s) >= 2 and s[0] in "sy" and s[1] in _SED_DELIMITERS:
        return True
    if s[0] == "/":
        second_slash = s.find("/", 1)
        if second_slash >= 0:
            after_pattern = s[second_slash + 1:]
            if len(after_pattern.encode()) <= 1 and "/" not in after_pattern:
                return True
    if s == "$":
        return True
    if all(ch == "," or "0" <= ch <= "9" for ch in s):
        return True
    return len(s) == 1 and s in _SED_SINGLE_COMMANDS


def _extract_sed_in_place_paths(raw_args: list[str]) -> list[str]:
    if not any(arg == "-i" or arg.startswith("-i.") for arg in raw_args):
        return []

    positional: list[str] = []
    skip_next = False
    for arg in raw_args:
        if skip_next:
            skip_next = False
            continue
        if arg in ("-e", "-f"):
            skip_next = True
            continue
        if arg.startswith("-"):
            continue
        positional.append(arg)

    return [arg for arg in positional if not _looks_like_sed_expression(arg)]


def _extract_output_flag(args: list[str]) -> str:
    for index, arg in enumerate(args):
        if arg == "-o" and index + 1 < len(args):
            return args[index + 1]
        if len(arg) > 2 and arg[0] == "-" and arg[1] == "o" and arg[2] != "-":
            return arg[2:]
    return ""


def _extract_created_paths(cmd_name: str, args: list[str]) -> list[str]:
    if not args:
        return []
    mode = _FILE_CREATING_COMMANDS.get(cmd_name)
    if mode == "all":
        return list(args)
    if mode == "last" and len(args) >= 2:
        return [args[-1]]
    return []


def _filter_args(tokens: list[str]) -> list[str]:
    args: list[str] = []
    skip_next = False
    for tok in tokens:
        if skip_next:
            skip_next = False
            continue
        if tok.startswith("-"):
            if tok in _FLAGS_WITH_VALUE:
                skip_next = True
            continue
        if tok.startswith(("http://", "https://")):
            continue
        if tok.startswith("$"):
            continue
        if _is_numeric(tok):
            continue
        args.append(tok)
    return args


def _find_command_index(tokens: list[str]) -> int:
    for index, tok in enumerate(tokens):
        if "=" not in tok or tok.startswith(("-", "/", ".")):
            return index
    return len(tokens)


def _split_on_shell_operators(line: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    in_quote = ""
    escaped = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        i += 1
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            current.append(ch)
            escaped = True
        elif in_quote:
            current.append(ch)
            if ch == in_quote:
                in_quote = ""
        elif ch in _QUOTES:
            current.append(ch)
            in_quote = ch
        elif ch == ";":
            parts.append("".join(current))
            current = []
        elif ch == "|":
            if i < n and line[i] == "|":
                i += 1
            parts.append("".join(current))
            current = []
        elif ch == "&" and i < n and line[i] == "&":
            i += 1
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)

    if current:
        parts.append("".join(current))
    return parts


def _redirect_length(text: str, i: int) -> int:
    """Length of the redirect operator at ``i`` (``>``, ``>>``, ``2>``, ``&>`` ...), or 0."""
    ch = text[i]
    n = len(text)
    if ch in "&2" and i + 1 < n and text[i + 1] == ">":
        return 3 if i + 2 < n and text[i + 2] == ">" else 2
    if ch == ">":
        return 2 if i + 1 < n and text[i + 1] == ">" else 1
    return 0


def _read_token(text: str, i: int) -> tuple[str, int]:
    n = len(text)
    if i >= n:
        return "", i

    if text[i] in _QUOTES:
        quote = text[i]
        i += 1
        tok: list[str] = []
        while i < n and text[i] != quote:
            if text[i] == "\\" and i + 1 < n:
                i += 1
            tok.append(text[i])
            i += 1
        if i < n:
            i += 1
        return "".join(tok), i

    start = i
    while i < n and text[i] not in _TOKEN_TERMINATORS:
        i += 1
    return text[start:i], i


def _read_heredoc_marker(text: str, i: int) -> str:
    n = len(text)
    if i >= n:
        return ""
    if text[i] in _QUOTES:
        end = text.find(text[i], i + 1)
        return text[i + 1:] if end < 0 else text[i + 1:end]
    start = i
    while i < n and text[i] not in " \t\n":
        i += 1
    return text[start:i]


def _skip_blanks(text: str, i: int) -> int:
    while i < len(text) and text[i] in _BLANKS:
        i += 1
    return i


def _extract_redirects(cmd: str) -> tuple[list[str], str, str]:
    """Return the redirect targets, the command without them, and any heredoc marker."""
    paths: list[str] = []
    result: list[str] = []
    heredoc_marker = ""
    in_quote = ""
    escaped = False
    i = 0
    n = len(cmd)

    while i < n:
        ch = cmd[i]

        if escaped:
            result.append(ch)
            escaped = False
            i += 1
            continue
        if ch == "\\":
            result.append(ch)
            escaped = True
            i += 1
            continue
        if in_quote:
            result.append(ch)
            if ch == in_quote:
                in_quote = ""
            i += 1
            continue
        if ch in _QUOTES:
            result.append(ch)
            in_quote = ch
            i += 1
            continue

        if ch == "<" and i + 1 < n and cmd[i + 1] == "<":
            j = i + 2
            if j < n and cmd[j] == "-":
                j += 1
            j = _skip_blanks(cmd, j)
            marker = _read_heredoc_marker(cmd, j)
            if marker:
                heredoc_marker = marker
            _, i = _read_token(cmd, j)
            continue

        skip = _redirect_length(cmd, i)
        if skip:
            j = _skip_blanks(cmd, i + skip)
            target, i = _read_token(cmd, j)
            if target:
                paths.append(target)
            continue

        result.append(ch)
        i += 1

    return paths, "".join(result), heredoc_marker


def extract_shell_path_hints(command: str, cwd: str, workspace_root: str) -> list[str]:
    """Return, in order and without duplicates, the paths a shell command writes to.

    Redirect targets, files made by ``touch``/``mkdir``/``tee``/``cp``/``mv``/``ln``,
    ``-o`` build outputs and files edited with ``sed -i`` are reported; read-only
    commands yield nothing. Paths are resolved against ``cwd`` and made relative
    to ``workspace_root`` where they fall under it.
    """
    if not command:
        return []

    paths: list[str] = []
    seen: set[str] = set()

    def add_path(raw: str) -> None:
        resolved = _resolve_path(raw, cwd, workspace_root)
        if resolved and resolved not in seen:
            seen.add(resolved)
            paths.append(resolved)

    heredoc_marker = ""
    for line in command.split("\n"):
        if heredoc_marker:
            if line.strip() == heredoc_marker:
                heredoc_marker = ""
            continue

        for sub in _split_on_shell_operators(line):
            sub = sub.strip()
            if not sub:
                continue

            redirect_paths, remaining, marker = _extract_redirects(sub)
            for target in redirect_paths:
                add_path(target)
            if marker:
                heredoc_marker = marker

            tokens = split_command_line(remaining)
            cmd_index = _find_command_index(tokens)
            if cmd_index >= len(tokens):
                continue
            cmd_name = _base(tokens[cmd_index])
            raw_args = tokens[cmd_index + 1:]

            output = _extract_output_flag(raw_args)
            if output:
                add_path(output)
                continue

            if cmd_name == "sed":
                for sed_path in _extract_sed_in_place_paths(raw_args):
                    add_path(sed_path)
                continue

            for created in _extract_created_paths(cmd_name, _filter_args(raw_args)):
                add_path(created)

    return paths