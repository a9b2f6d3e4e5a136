"""Unified session data model shared by all agent providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0"


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return str(self.value)


class Role(_StrEnum):
    """Who wrote a message."""

    USER = "user"
    AGENT = "agent"


class ContentType(_StrEnum):
    """Kinds of message content parts."""

    TEXT = "text"
    THINKING = "thinking"


class ToolType(_StrEnum):
    """Classification of tool uses."""

    WRITE = "write"
    READ = "read"
    SEARCH = "search"
    SHELL = "shell"
    TASK = "task"
    GENERIC = "generic"
    UNKNOWN = "unknown"


_ROLES = tuple(r.value for r in Role)
_CONTENT_TYPES = tuple(c.value for c in ContentType)
_TOOL_TYPES = tuple(t.value for t in ToolType)


def _text(value: Any) -> str:
    return str(value) if value is not None else ""


def get_int_from_map(m: Optional[Mapping[str, Any]], key: str) -> int:
    """Return ``m[key]`` as an int when it is numeric, else 0."""
    if m is None:
        return 0
    value = m.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, float):
        return int(value)
    if isinstance(value, int):
        return value
    return 0


@dataclass
class ProviderInfo:
    """The agent provider that produced a session."""

    id: str = ""
    name: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "version": self.version}


@dataclass
class ContentPart:
    """A piece of message content: text or thinking."""

    type: str = ""
    text: str = ""

    def validate(self, exchange_index: int, message_index: int, part_index: int) -> bool:
        if self.type not in _CONTENT_TYPES:
            logger.warning(
                "schema validation: contentPart.type must be 'text' or 'thinking' "
                "(exchange %d, message %d, part %d, got %r)",
                exchange_index, message_index, part_index, _text(self.type),
            )
            return False
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"type": _text(self.type), "text": self.text}


_USAGE_FIELDS = (
    ("input_tokens", "inputTokens"),
    ("output_tokens", "outputTokens"),
    ("cache_creation_input_tokens", "cacheCreationInputTokens"),
    ("cache_read_input_tokens", "cacheReadInputTokens"),
    ("cached_input_tokens", "cachedInputTokens"),
    ("reasoning_output_tokens", "reasoningOutputTokens"),
    ("cached_tokens", "cachedTokens"),
    ("thought_tokens", "thoughtTokens"),
    ("tool_tokens", "toolTokens"),
    ("thinking_tokens", "thinkingTokens"),
)


@dataclass
class Usage:
    """Token usage of an agent message; unused counters stay zero."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    cached_input_tokens: int = 0
    reasoning_output_tokens: int = 0
    cached_tokens: int = 0
    thought_tokens: int = 0
    tool_tokens: int = 0
    thinking_tokens: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            json_name: getattr(self, attr)
            for attr, json_name in _USAGE_FIELDS
            if getattr(self, attr)
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Usage:
        return cls(**{attr: get_int_from_map(data, json_name) for attr, json_name in _USAGE_FIELDS})


@dataclass
class ToolInfo:
    """A tool use made by the agent."""

    name: str = ""
    type: str = ""
    use_id: str = ""
    input: dict[str, Any] = field(default_factory=dict)
    output: dict[str, Any] = field(default_factory=dict)
    summary: Optional[str] = None
    formatted_markdown: Optional[str] = None

    def validate(self, exchange_index: int, message_index: int) -> bool:
        valid = True
        if not self.name:
            logger.warning(
                "schema validation: tool.name is required (exchange %d, message %d)",
                exchange_index, message_index,
            )
            valid = False
        if self.type not in _TOOL_TYPES:
            logger.warning(
                "schema validation: tool.type must be one of: %s (exchange %d, message %d, got %r)",
                ", ".join(_TOOL_TYPES), exchange_index, message_index, _text(self.type),
            )
            valid = False
        return valid

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name, "type": _text(self.type)}
        if self.use_id:
            result["useId"] = self.use_id
        if self.input:
            result["input"] = dict(self.input)
        if self.output:
            result["output"] = dict(self.output)
        if self.summary is not None:
            result["summary"] = self.summary
        if self.formatted_markdown is not None:
            result["formattedMarkdown"] = self.formatted_markdown
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolInfo:
        return cls(
            name=data.get("name") or "",
            type=data.get("type") or "",
            use_id=data.get("useId") or "",
            input=dict(data.get("input") or {}),
            output=dict(data.get("output") or {}),
            summary=data.get("summary"),
            formatted_markdown=data.get("formattedMarkdown"),
        )


@dataclass
class Message:
    """A user or agent message."""

    role: str = ""
    id: str = ""
    timestamp: str = ""
    model: str = ""
    content: list[ContentPart] = field(default_factory=list)
    tool: Optional[ToolInfo] = None
    path_hints: list[str] = field(default_factory=list)
    usage: Optional[Usage] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def validate(self, exchange_index: int, message_index: int) -> bool:
        valid = True
        where = f"(exchange {exchange_index}, message {message_index})"

        if self.role not in _ROLES:
            logger.warning(
                "schema validation: message.role must be 'user' or 'agent' %s, got %r",
                where, _text(self.role),
            )
            valid = False

        if self.role == Role.USER:
            if not self.content:
                logger.warning("schema validation: user message must have non-empty content %s", where)
                valid = False
            if self.tool is not None:
                logger.warning("schema validation: user message cannot have tool %s", where)
                valid = False
            if self.model:
                logger.warning("schema validation: user message cannot have model %s", where)
                valid = False

        if self.role == Role.AGENT and not (self.content or self.tool is not None or self.path_hints):
            logger.warning(
                "schema validation: agent message must have content, tool, or pathHints %s", where
            )
            valid = False

        for part_index, part in enumerate(self.content):
            if not part.validate(exchange_index, message_index, part_index):
                valid = False

        if self.tool is not None and not self.tool.validate(exchange_index, message_index):
            valid = False

        return valid

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.id:
            result["id"] = self.id
        if self.timestamp:
            result["timestamp"] = self.timestamp
        result["role"] = _text(self.role)
        if self.model:
            result["model"] = self.model
        if self.content:
            result["content"] = [part.to_dict() for part in self.content]
        if self.tool is not None:
            result["tool"] = self.tool.to_dict()
        if self.path_hints:
            result["pathHints"] = list(self.path_hints)
        if self.usage is not None:
            result["usage"] = self.usage.to_dict()
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        tool = data.get("tool")
        usage = data.get("usage")
        return cls(
            role=data.get("role") or "",
            id=data.get("id") or "",
            timestamp=data.get("timestamp") or "",
            model=data.get("model") or "",
            content=[
                ContentPart(type=part.get("type") or "", text=part.get("text") or "")
                for part in data.get("content") or []
            ],
            tool=ToolInfo.from_dict(tool) if tool is not None else None,
            path_hints=list(data.get("pathHints") or []),
            usage=Usage.from_dict(usage) if usage is not None else None,
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class Exchange:
    """A conversational turn made of ordered messages."""

    exchange_id: str = ""
    start_time: str = ""
    end_time: str = ""
    messages: list[Message] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"exchangeId": self.exchange_id}
        if self.start_time:
            result["startTime"] = self.start_time
        if self.end_time:
            result["endTime"] = self.end_time
        result["messages"] = [message.to_dict() for message in self.messages]
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Exchange:
        return cls(
            exchange_id=data.get("exchangeId") or "",
            start_time=data.get("startTime") or "",
            end_time=data.get("endTime") or "",
            messages=[Message.from_dict(m) for m in data.get("messages") or []],
            metadata=dict(data.get("metadata") or {}),
        )


@dataclass
class SessionData:
    """A session from any agent provider in the unified format."""

    schema_version: str = SCHEMA_VERSION
    provider: ProviderInfo = field(default_factory=ProviderInfo)
    session_id: str = ""
    created_at: str = ""
    updated_at: str = ""
    slug: str = ""
    workspace_root: str = ""
    exchanges: list[Exchange] = field(default_factory=list)

    def validate(self) -> bool:
        """Check schema constraints, logging a warning for each problem found."""
        valid = True

        if self.schema_version != SCHEMA_VERSION:
            logger.warning(
                "schema validation: schemaVersion must be '%s', got %r",
                SCHEMA_VERSION, self.schema_version,
            )
            valid = False

        required = (
            (self.provider.id, "provider.id"),
            (self.provider.name, "provider.name"),
            (self.provider.version, "provider.version"),
            (self.session_id, "sessionId"),
            (self.created_at, "createdAt"),
            (self.workspace_root, "workspaceRoot"),
        )
        for value, label in required:
            if not value:
                logger.warning("schema validation: %s is required", label)
                valid = False

        for exchange_index, exchange in enumerate(self.exchanges):
            if not exchange.exchange_id:
                logger.warning(
                    "schema validation: exchange.exchangeId is required (exchange %d)", exchange_index
                )
                valid = False
            for message_index, message in enumerate(exchange.messages):
                if not message.validate(exchange_index, message_index):
                    valid = False

        return valid

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form, omitting empty optional fields."""
        result: dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "provider": self.provider.to_dict(),
            "sessionId": self.session_id,
            "createdAt": self.created_at,
        }
        if self.updated_at:
            result["updatedAt"] = self.updated_at
        if self.slug:
            result["slug"] = self.slug
        result["workspaceRoot"] = self.workspace_root
        result["exchanges"] = [exchange.to_dict() for exchange in self.exchanges]
        return result


def session_data_from_dict(data: Mapping[str, Any]) -> SessionData:
    """Build a SessionData from its JSON dictionary form."""
    provider = data.get("provider") or {}
    return SessionData(
        schema_version=data.get("schemaVersion") or "",
        provider=ProviderInfo(
            id=provider.get("id") or "",
            name=provider.get("name") or "",
            version=provider.get("version") or "",
        ),
        session_id=data.get("sessionId") or "",
        created_at=data.get("createdAt") or "",
        updated_at=data.get("updatedAt") or "",
        slug=data.get("slug") or "",
        workspace_root=data.get("workspaceRoot") or "",
        exchanges=[Exchange.from_dict(e) for e in data.get("exchanges") or []],
    )