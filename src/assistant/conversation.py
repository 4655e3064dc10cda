"""
Stateful assistant conversation.

Holds the message list for one session key, streams replies from the
assistant function into it and persists it after every exchange.
"""

from typing import Callable, Optional

from src.assistant.client import AssistantClient, AssistantContext, AssistantError
from src.assistant.parsing import InsertableBlockParser, ParseResult, get_block_parser
from src.assistant.session_store import (
    SessionStore,
    candidate_session_key,
    comparison_session_key,
    job_editor_session_key,
)
from src.assistant.suggestions import comparison_follow_ups
from src.data.models import (
    CandidateContext,
    ChatMessage,
    ComparisonContext,
    MessageRole,
)
from src.utils.constants import ERROR_MESSAGE_PREFIX
from src.utils.logger import LoggerMixin, preview

ChunkCallback = Callable[[str], None]


def session_key_for(context: Optional[AssistantContext]) -> str:
    """Stable session key for the given context."""
    if isinstance(context, CandidateContext):
        return candidate_session_key(context.id)
    if isinstance(context, ComparisonContext):
        return comparison_session_key(context.job_id)
    return job_editor_session_key()


class AssistantConversation(LoggerMixin):
    """
    One assistant chat, bound to a session key.

    Usage:
        conversation = AssistantConversation(context=job_editor_context)
        reply = conversation.send("Suggest a job title", on_chunk=print)
        for block in conversation.insertable_blocks(reply).blocks:
            ...
    """

    def __init__(
        self,
        client: Optional[AssistantClient] = None,
        store: Optional[SessionStore] = None,
        session_key: Optional[str] = None,
        context: Optional[AssistantContext] = None,
        history_limit: Optional[int] = None,
        parser: Optional[InsertableBlockParser] = None,
        max_follow_ups: Optional[int] = None,
    ):
        if history_limit is None or max_follow_ups is None:
            from src.utils.config import get_settings

            assistant_settings = get_settings().assistant
            if history_limit is None:
                history_limit = assistant_settings.history_limit
            if max_follow_ups is None:
                max_follow_ups = assistant_settings.max_follow_ups

        self.client = client or AssistantClient()
        self.store = store or SessionStore()
        self.context = context
        self.session_key = session_key or session_key_for(context)
        self.history_limit = history_limit
        self.max_follow_ups = max_follow_ups
        self.parser = parser or get_block_parser()

        self.messages: list[ChatMessage] = self.store.load(self.session_key)
        self.pinned_questions: list[str] = self.store.load_pinned(self.session_key)
        self.is_loading = False
        self.error: Optional[str] = None
        self.error_title: Optional[str] = None
        self.last_failed_message: Optional[str] = None

    @property
    def last_message(self) -> Optional[ChatMessage]:
        return self.messages[-1] if self.messages else None

    @property
    def has_error(self) -> bool:
        """Check if the latest reply is an error message."""
        last = self.last_message
        return (
            self.error is not None
            and last is not None
            and last.content.startswith(ERROR_MESSAGE_PREFIX)
        )

    @property
    def follow_up_suggestions(self) -> list[str]:
        """Follow-ups attached to the latest completed reply."""
        last = self.last_message
        if last is None or not last.is_assistant or last.is_streaming:
            return []
        return list(last.follow_up_suggestions)

    def _history(self) -> list[ChatMessage]:
        if self.history_limit <= 0:
            return []
        return self.messages[-self.history_limit:]

    def send(self, content: str, on_chunk: Optional[ChunkCallback] = None) -> Optional[ChatMessage]:
        """
        Ask the assistant a question and stream the reply into the history.

        Blank input and calls made while a reply is still streaming are
        ignored.

        Args:
            content: Question text
            on_chunk: Called with each streamed text fragment

        Returns:
            The assistant message, or None if the call was ignored
        """
        question = content.strip() if content else ""
        if not question or self.is_loading:
            return None

        self.error = None
        self.error_title = None
        self.is_loading = True

        history = self._history()
        user_message = ChatMessage(role=MessageRole.USER, content=question)
        reply = ChatMessage(role=MessageRole.ASSISTANT, is_streaming=True)
        self.messages.extend([user_message, reply])
        self.logger.debug(
            f"Session '{self.session_key}': asking {preview(question)!r} with {len(history)} prior messages"
        )

        try:
            for chunk in self.client.stream_reply(question, history, self.context):
                reply.content += chunk
                if on_chunk is not None:
                    on_chunk(chunk)

            reply.follow_up_suggestions = self._follow_ups(question, reply.content)
            self.logger.debug(f"Session '{self.session_key}': reply {preview(reply.content)!r}")
            self.last_failed_message = None
        except AssistantError as e:
            self.logger.warning(f"Assistant request failed for session '{self.session_key}': {e.message}")
            self.error = e.message
            self.error_title = e.title
            self.last_failed_message = question
            reply.content = f"{ERROR_MESSAGE_PREFIX}{e.message}"
        finally:
            reply.is_streaming = False
            self.is_loading = False
            self.store.save(self.session_key, self.messages)

        return reply

    def retry_last(self, on_chunk: Optional[ChunkCallback] = None) -> Optional[ChatMessage]:
        """Send the last failed question again."""
        if not self.last_failed_message:
            return None
        return self.send(self.last_failed_message, on_chunk=on_chunk)

    def _follow_ups(self, question: str, response: str) -> list[str]:
        if isinstance(self.context, ComparisonContext):
            return comparison_follow_ups(
                question, response, self.context.result, limit=self.max_follow_ups
            )
        return []

    def clear(self) -> None:
        """Forget the conversation, including its stored copy."""
        self.messages = []
        self.error = None
        self.error_title = None
        self.last_failed_message = None
        self.store.clear(self.session_key)

    # -- pinned questions ----------------------------------------------------

    def pin(self, question: str) -> None:
        """Pin a question so it is offered first next time."""
        if question not in self.pinned_questions:
            self.pinned_questions.append(question)
            self.store.save_pinned(self.session_key, self.pinned_questions)

    def unpin(self, question: str) -> None:
        """Remove a pinned question."""
        if question in self.pinned_questions:
            self.pinned_questions.remove(question)
            self.store.save_pinned(self.session_key, self.pinned_questions)

    # -- job editor ----------------------------------------------------------

    def insertable_blocks(self, message: ChatMessage) -> ParseResult:
        """Split an assistant reply into display text and insertable blocks."""
        if not message.is_assistant or message.is_streaming:
            return ParseResult(clean_text=message.content)
        return self.parser.parse(message.content)
