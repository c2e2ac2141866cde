"""
Provider data models for Rolecall.

Message and response types shared by the conversation layer and the
completion service.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class MessageRole(str, Enum):
    """Valid message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_CONTEXT = "tool_context"

    @property
    def wire_role(self) -> str:
        """Role name sent to the completion service."""
        # Tool results travel as system context
        if self is MessageRole.TOOL_CONTEXT:
            return MessageRole.SYSTEM.value
        return self.value


@dataclass(frozen=True)
class Message:
    """Conversation message."""

    role: MessageRole
    content: str
    timestamp: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to LiteLLM-compatible dict."""
        return {"role": self.role.wire_role, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content, timestamp=datetime.now())

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content, timestamp=datetime.now())

    @classmethod
    def tool_context(cls, content: str) -> "Message":
        """Create a tool-result context message."""
        return cls(role=MessageRole.TOOL_CONTEXT, content=content, timestamp=datetime.now())


@dataclass
class TokenUsage:
    """Token usage statistics."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self) -> None:
        if self.total_tokens == 0:
            self.total_tokens = self.input_tokens + self.output_tokens


@dataclass
class CompletionResponse:
    """Unified completion response from any provider."""

    content: str
    model: str
    provider: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: str = "unknown"
    created_at: datetime = field(default_factory=datetime.now)
