"""
Chat message models for the AI assistant conversations.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import Field

from .base import EmbeddedModel, utc_now


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(EmbeddedModel):
    """A single message in an assistant conversation."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    role: MessageRole
    content: str = ""
    timestamp: datetime = Field(default_factory=utc_now)
    is_streaming: bool = False
    follow_up_suggestions: list[str] = Field(default_factory=list)

    @property
    def is_assistant(self) -> bool:
        """Check if the assistant wrote this message."""
        return self.role == MessageRole.ASSISTANT.value

    def to_history_entry(self) -> dict[str, str]:
        """Shape sent to the endpoint as conversation history."""
        return {"role": self.role, "content": self.content}
