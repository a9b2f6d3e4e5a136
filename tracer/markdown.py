"""Rendering of unified sessions as Markdown transcripts."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from tracer.schema import ContentPart, Message, SessionData, ToolInfo

GENERATED_BY_TRACER = "<!-- Generated by Tracer, Markdown v2.1.0 -->"
TOOL_USE_OPEN_TAG = '<tool-use data-tool-type="{type}" data-tool-name="{name}"><details>'
TOOL_USE_CLOSE_TAG = "</details></tool-use>"

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _parse_rfc3339(timestamp: str) -> Optional[datetime]:
    match = _RFC3339.fullmatch(timestamp)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        if hours > 23 or minutes > 59:
            return None
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
        )
    except ValueError:
        return None


def format_timestamp(timestamp: str, use_utc: bool) -> str:
    """Format an RFC 3339 timestamp for display; unparsable input is returned as is.

    UTC output looks like ``2025-11-13 21:12:14Z``, local output like
    ``2025-11-13 21:12:14-0700``.
    """
    parsed = _parse_rfc3339(timestamp)
    if parsed is None:
        return timestamp
    if use_utc:
        return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S") + "Z"
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S%z")


def _session_timestamp(session_data: SessionData, use_utc: bool) -> str:
    exchanges = session_data.exchanges
    if exchanges and exchanges[0].start_time:
        return format_timestamp(exchanges[0].start_time, use_utc)
    return format_timestamp(session_data.created_at, use_utc)


def generate_markdown_from_agent_session(
    session_data: Optional[SessionData], include_message_ids: bool, use_utc: bool
) -> str:
    """Render a session as Markdown, ending with exactly one newline."""
    if session_data is None:
        raise ValueError("session_data is None")

    stamp = _session_timestamp(session_data, use_utc)
    pieces = [
        GENERATED_BY_TRACER + "\n\n",
        f"# {stamp}\n\n",
        f"<!-- {session_data.provider.name} Session {session_data.session_id} ({stamp}) -->\n\n",
    ]

    prev_role = ""
    for exchange in session_data.exchanges:
        for message in exchange.messages:
            pieces.append(_render_message(message, prev_role, include_message_ids, use_utc))
            prev_role = message.role

    return "".join(pieces).rstrip("\n") + "\n"


def _render_message(message: Message, prev_role: str, include_ids: bool, use_utc: bool) -> str:
    pieces = []
    if prev_role and message.role != prev_role:
        pieces.append("---\n\n")

    header = _render_role_header(message, use_utc)
    if include_ids and message.id:
        pieces.append(header.removesuffix("\n"))
        pieces.append(f"<!-- message-id: {message.id} -->\n\n")
    else:
        pieces.append(header)

    if message.content:
        pieces.append(_render_content_parts(message.content))

    if message.tool is not None:
        pieces.append(_render_tool_info(message.tool))
        pieces.append("\n")

    return "".join(pieces)


def _render_role_header(message: Message, use_utc: bool) -> str:
    marker = " - sidechain" if message.metadata.get("isSidechain") is True else ""

    if message.role == "user":
        if message.timestamp:
            return f"_**User{marker} ({format_timestamp(message.timestamp, use_utc)})**_\n\n"
        return f"_**User{marker}**_\n\n"

    if message.model and message.timestamp:
        stamp = format_timestamp(message.timestamp, use_utc)
        return f"_**Agent{marker} ({message.model} {stamp})**_\n\n"
    if message.model:
        return f"_**Agent{marker} ({message.model})**_\n\n"
    if message.timestamp:
        return f"_**Agent{marker} ({format_timestamp(message.timestamp, use_utc)})**_\n\n"
    return f"_**Agent{marker}**_\n\n"


def _render_content_parts(parts: list[ContentPart]) -> str:
    pieces = []
    for part in parts:
        if part.type == "text":
            pieces.append(part.text + "\n\n")
        elif part.type == "thinking":
            pieces.append("<think><details><summary>Thought Process</summary>\n")
            pieces.append(part.text)
            if not part.text.endswith("\n"):
                pieces.append("\n")
            pieces.append("</details></think>\n\n")
    return "".join(pieces)


def _render_tool_info(tool: ToolInfo) -> str:
    tool_type = tool.type or "generic"
    pieces = [TOOL_USE_OPEN_TAG.format(type=tool_type, name=tool.name), "\n"]

    if tool.summary:
        pieces.append(f"<summary>{tool.summary}</summary>\n")
    else:
        pieces.append(f"<summary>Tool use: **{tool.name}**</summary>\n")

    if tool.formatted_markdown:
        pieces.append(tool.formatted_markdown)
        if not tool.formatted_markdown.endswith("\n"):
            pieces.append("\n")
    else:
        pieces.append(_render_generic_tool(tool))

    pieces.append(TOOL_USE_CLOSE_TAG + "\n")
    return "".join(pieces)


def _format_value(value: Any) -> str:
    """Render a JSON-decoded value the way a plain value dump shows it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = " ".join(f"{key}:{_format_value(value[key])}" for key in sorted(value))
        return f"map[{items}]"
    return str(value)


def _render_generic_tool(tool: ToolInfo) -> str:
    pieces = ["\n"]

    if tool.input:
        pieces.append("**Input:**\n\n")
        for key in sorted(k for k in tool.input if not k.startswith("_")):
            pieces.append(f"- {key}: `{_format_value(tool.input[key])}`\n")
        pieces.append("\n")

    if tool.output:
        if tool.output.get("is_error") is True:
            pieces.append("**Error:**\n\n")
        else:
            pieces.append("**Result:**\n\n")
        content = tool.output.get("content")
        if isinstance(content, str):
            pieces.append("```\n" + content + "\n```\n")

    return "".join(pieces)