"""
AI assistant integration for ATS Assist.

- client: streaming HTTP client for the hosted assistant function
- conversation: message history, retries and pinned questions
- session_store: per-session persistence of conversations
- suggestions: suggested questions and workflow progress
- parsing: extraction of insertable blocks from replies
"""

from src.assistant.client import (
    AssistantClient,
    AssistantConnectionError,
    AssistantError,
    AssistantRequestError,
    RateLimitError,
    UsageLimitError,
)
from src.assistant.conversation import AssistantConversation
from src.assistant.session_store import (
    SessionStore,
    candidate_session_key,
    comparison_session_key,
    job_editor_session_key,
)

__all__ = [
    "AssistantClient",
    "AssistantConnectionError",
    "AssistantError",
    "AssistantRequestError",
    "RateLimitError",
    "UsageLimitError",
    "AssistantConversation",
    "SessionStore",
    "candidate_session_key",
    "comparison_session_key",
    "job_editor_session_key",
]
