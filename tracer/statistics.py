"""Per-session statistics and their persistence in a JSON file."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from tracer.schema import Role, SessionData

logger = logging.getLogger(__name__)

_INT_FIELDS = ("user_message_count", "agent_message_count", "markdown_size_bytes")
_STR_FIELDS = ("start_timestamp", "end_timestamp", "provider", "last_updated")


@dataclass
class SessionStatistics:
    """Computed statistics for one session."""

    user_message_count: int = 0
    agent_message_count: int = 0
    start_timestamp: str = ""
    end_timestamp: str = ""
    markdown_size_bytes: int = 0
    provider: str = ""
    last_updated: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_message_count": self.user_message_count,
            "agent_message_count": self.agent_message_count,
            "start_timestamp": self.start_timestamp,
            "end_timestamp": self.end_timestamp,
            "markdown_size_bytes": self.markdown_size_bytes,
            "provider": self.provider,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionStatistics:
        """Build from the JSON form; raises TypeError on mistyped fields."""
        if not isinstance(data, Mapping):
            raise TypeError("session statistics must be an object")
        values: dict[str, Any] = {}
        for name in _INT_FIELDS:
            value = data.get(name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer")
            values[name] = value
        for name in _STR_FIELDS:
            value = data.get(name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise TypeError(f"{name} must be a string")
            values[name] = value
        return cls(**values)


def compute_session_statistics(
    session_data: SessionData, markdown_content: str, provider_id: str
) -> SessionStatistics:
    """Count messages and pick start and end times for a session."""
    roles = [m.role for exchange in session_data.exchanges for m in exchange.messages]
    user_count = sum(1 for role in roles if role == Role.USER)

    exchanges = session_data.exchanges
    if exchanges and exchanges[0].start_time:
        start = exchanges[0].start_time
    else:
        start = session_data.created_at

    if exchanges and exchanges[-1].end_time:
        end = exchanges[-1].end_time
    else:
        end = session_data.updated_at or session_data.created_at

    return SessionStatistics(
        user_message_count=user_count,
        agent_message_count=len(roles) - user_count,
        start_timestamp=start,
        end_timestamp=end,
        markdown_size_bytes=len(markdown_content.encode("utf-8")),
        provider=provider_id,
        last_updated=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    )


class StatisticsCollector:
    """Buffers session statistics in memory and writes them to disk on flush."""

    def __init__(self, stats_path: str) -> None:
        self.stats_path = stats_path
        self._lock = threading.Lock()
        self._pending: dict[str, SessionStatistics] = {}

    def add_session_stats(self, session_id: str, stats: SessionStatistics) -> None:
        """Record statistics for a session, replacing any pending ones."""
        with self._lock:
            self._pending[session_id] = stats
            logger.debug("Buffered session statistics for %s", session_id)

    def _read_existing(self) -> dict[str, SessionStatistics]:
        try:
            with open(self.stats_path, encoding="utf-8") as handle:
                text = handle.read()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise OSError(f"failed to read statistics file: {exc}") from exc

        try:
            document = json.loads(text)
            if not isinstance(document, dict):
                raise TypeError("statistics file must hold an object")
            sessions = document.get("sessions") or {}
            if not isinstance(sessions, dict):
                raise TypeError("sessions must be an object")
            return {sid: SessionStatistics.from_dict(s) for sid, s in sessions.items()}
        except (ValueError, TypeError) as exc:
            logger.warning("Failed to parse existing statistics.json, starting fresh: %s", exc)
            return {}

    def flush(self) -> None:
        """Merge pending statistics into the file atomically and clear the buffer."""
        with self._lock:
            if not self._pending:
                return

            sessions = self._read_existing()
            sessions.update(self._pending)

            document = {"sessions": {sid: sessions[sid].to_dict() for sid in sorted(sessions)}}
            payload = json.dumps(document, indent=2, ensure_ascii=False) + "\n"

            temp_path = self.stats_path + ".tmp"
            try:
                with open(temp_path, "w", encoding="utf-8") as handle:
                    handle.write(payload)
            except OSError as exc:
                raise OSError(f"failed to write temp statistics file: {exc}") from exc

            try:
                os.replace(temp_path, self.stats_path)
            except OSError as exc:
                try:
                    os.remove(temp_path)
                except OSError:
                    pass
                raise OSError(f"failed to rename temp statistics file: {exc}") from exc

            logger.debug("Flushed %d session statistics to %s", len(self._pending), self.stats_path)
            self._pending = {}