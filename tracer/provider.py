"""The interface every agent provider implements, and the values it exchanges."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from tracer.schema import SessionData

ProgressCallback = Callable[[int, int], None]
"""Called with (current, total) while sessions are processed; current is 1-based."""


@dataclass
class CheckResult:
    """Outcome of checking that a provider is installed."""

    success: bool = False
    version: str = ""
    location: str = ""
    error_message: str = ""


@dataclass
class AgentChatSession:
    """A chat session from an AI coding agent."""

    session_id: str = ""
    created_at: str = ""
    slug: str = ""
    session_data: Optional[SessionData] = None
    raw_data: str = ""


@dataclass
class SessionMetadata:
    """Lightweight description of a session, without its content."""

    session_id: str = ""
    created_at: str = ""
    slug: str = ""
    name: str = ""
    workspace_root: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at,
            "slug": self.slug,
            "name": self.name,
            "workspace_root": self.workspace_root,
        }


class Provider(ABC):
    """An agent coding tool whose sessions can be read and watched."""

    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""

    @abstractmethod
    def check(self, custom_command: str) -> CheckResult:
        """Verify installation; an empty command means the detected default."""

    @abstractmethod
    def detect_agent(self, project_path: str, help_output: bool) -> bool:
        """Report whether the agent has left sessions for ``project_path``."""

    @abstractmethod
    def get_agent_chat_sessions(
        self,
        project_path: str,
        debug_raw: bool,
        progress: Optional[ProgressCallback],
    ) -> list[AgentChatSession]:
        """Return every chat session for ``project_path``."""

    @abstractmethod
    def list_agent_chat_sessions(self, project_path: str) -> list[SessionMetadata]:
        """Return metadata for every session without parsing it fully."""

    @abstractmethod
    def watch_agent(
        self,
        stop: threading.Event,
        project_path: str,
        debug_raw: bool,
        session_callback: Callable[[AgentChatSession], None],
    ) -> None:
        """Watch for agent activity until ``stop`` is set, reporting updated sessions."""