"""
Tests for src.assistant.conversation — streaming, persistence, errors and pins.
"""

import pytest

from src.assistant.client import RateLimitError, UsageLimitError
from src.assistant.conversation import AssistantConversation, session_key_for
from src.assistant.parsing import InsertableField
from src.data.models import ChatMessage, MessageRole
from src.utils.constants import ERROR_MESSAGE_PREFIX


@pytest.fixture
def make_conversation(session_store, stub_client):
    """Factory for conversations backed by a temp store and a stub client."""

    def _factory(client=None, context=None, history_limit=10, **kwargs):
        return AssistantConversation(
            client=client or stub_client,
            store=session_store,
            context=context,
            history_limit=history_limit,
            max_follow_ups=3,
            **kwargs,
        )

    return _factory


# ── Session keys ─────────────────────────────────────────────────────────────


class TestSessionKeyFor:
    def test_no_context(self):
        assert session_key_for(None) == "job-editor-ai-messages"

    def test_job_editor(self, sample_job_context):
        assert session_key_for(sample_job_context) == "job-editor-ai-messages"

    def test_candidate(self, sample_candidate_context):
        assert session_key_for(sample_candidate_context) == "ai-assistant-candidate-app-123"

    def test_comparison(self, sample_comparison_context):
        assert session_key_for(sample_comparison_context) == "ai-assistant-comparison-job-42"


# ── send() ───────────────────────────────────────────────────────────────────


class TestSend:
    def test_streams_reply(self, make_conversation):
        conversation = make_conversation()
        chunks = []
        reply = conversation.send("Suggest a title", on_chunk=chunks.append)

        assert chunks == ["Hello", " there."]
        assert reply.content == "Hello there."
        assert reply.is_streaming is False
        assert [m.role for m in conversation.messages] == ["user", "assistant"]
        assert conversation.messages[0].content == "Suggest a title"
        assert conversation.is_loading is False

    def test_question_stripped(self, make_conversation, stub_client):
        make_conversation().send("  Hi  ")
        assert stub_client.calls[0]["question"] == "Hi"

    @pytest.mark.parametrize("content", ["", "   ", None])
    def test_blank_input_ignored(self, make_conversation, stub_client, content):
        conversation = make_conversation()
        assert conversation.send(content) is None
        assert conversation.messages == []
        assert stub_client.calls == []

    def test_ignored_while_loading(self, make_conversation, stub_client):
        conversation = make_conversation()
        conversation.is_loading = True
        assert conversation.send("Hi") is None
        assert stub_client.calls == []

    def test_context_forwarded(self, make_conversation, stub_client, sample_job_context):
        make_conversation(context=sample_job_context).send("Hi")
        assert stub_client.calls[0]["context"] is sample_job_context

    def test_persisted(self, make_conversation, session_store):
        make_conversation().send("Hi")
        stored = session_store.load("job-editor-ai-messages")
        assert [m.content for m in stored] == ["Hi", "Hello there."]

    def test_history_reloaded(self, make_conversation):
        make_conversation().send("Hi")
        again = make_conversation()
        assert len(again.messages) == 2


class TestHistory:
    def test_history_excludes_new_question(self, make_conversation, stub_client):
        conversation = make_conversation()
        conversation.send("First")
        conversation.send("Second")
        history = stub_client.calls[1]["history"]
        assert [m.content for m in history] == ["First", "Hello there."]

    def test_history_limit(self, make_conversation, stub_client):
        conversation = make_conversation(history_limit=3)
        for question in ("One", "Two", "Three"):
            conversation.send(question)
        history = stub_client.calls[2]["history"]
        assert [m.content for m in history] == ["Hello there.", "Two", "Hello there."]

    def test_zero_limit_sends_nothing(self, make_conversation, stub_client):
        conversation = make_conversation(history_limit=0)
        conversation.send("One")
        conversation.send("Two")
        assert stub_client.calls[1]["history"] == []


# ── Errors and retry ─────────────────────────────────────────────────────────


class TestErrors:
    @pytest.fixture
    def failing_client(self, make_stub_client):
        return make_stub_client(
            chunks=["Partial"],
            error=RateLimitError("Rate limit exceeded. Please wait a moment and try again.", 429),
        )

    def test_error_replaces_reply(self, make_conversation, failing_client):
        conversation = make_conversation(client=failing_client)
        reply = conversation.send("Hi")

        assert reply.content == (
            f"{ERROR_MESSAGE_PREFIX}Rate limit exceeded. Please wait a moment and try again."
        )
        assert reply.is_streaming is False
        assert conversation.has_error is True
        assert conversation.error_title == "Too many requests"
        assert conversation.last_failed_message == "Hi"
        assert conversation.is_loading is False

    def test_error_reply_persisted(self, make_conversation, failing_client, session_store):
        make_conversation(client=failing_client).send("Hi")
        stored = session_store.load("job-editor-ai-messages")
        assert stored[-1].content.startswith(ERROR_MESSAGE_PREFIX)

    def test_retry_last(self, make_conversation, failing_client):
        conversation = make_conversation(client=failing_client)
        conversation.send("Hi")

        failing_client.error = None
        failing_client.chunks = ["Recovered"]
        reply = conversation.retry_last()

        assert reply.content == "Recovered"
        assert conversation.has_error is False
        assert conversation.error is None
        assert conversation.last_failed_message is None
        assert [m.content for m in conversation.messages][-2:] == ["Hi", "Recovered"]
        assert len(conversation.messages) == 4

    def test_retry_without_failure(self, make_conversation, stub_client):
        conversation = make_conversation()
        assert conversation.retry_last() is None
        assert stub_client.calls == []

    def test_usage_limit_title(self, make_conversation, make_stub_client):
        client = make_stub_client(
            chunks=[], error=UsageLimitError("AI usage limit reached. Please try again later.", 402)
        )
        conversation = make_conversation(client=client)
        conversation.send("Hi")
        assert conversation.error_title == "Usage limit reached"


class TestClear:
    def test_clear(self, make_conversation, session_store, make_stub_client):
        client = make_stub_client(error=RateLimitError("slow down", 429))
        conversation = make_conversation(client=client)
        conversation.send("Hi")
        conversation.clear()

        assert conversation.messages == []
        assert conversation.error is None
        assert conversation.error_title is None
        assert conversation.last_failed_message is None
        assert session_store.load("job-editor-ai-messages") == []


# ── Follow-ups ───────────────────────────────────────────────────────────────


class TestFollowUps:
    def test_comparison_follow_ups(self, make_conversation, sample_comparison_context):
        conversation = make_conversation(context=sample_comparison_context)
        reply = conversation.send("Why is Jane ranked first?")
        assert reply.follow_up_suggestions == [
            "What specific evidence supports choosing Jane Smith?",
            "When would John Doe be a better choice?",
        ]
        assert conversation.follow_up_suggestions == reply.follow_up_suggestions

    def test_no_follow_ups_outside_comparison(self, make_conversation, sample_candidate_context):
        conversation = make_conversation(context=sample_candidate_context)
        conversation.send("Why?")
        assert conversation.follow_up_suggestions == []

    def test_no_follow_ups_after_error(
        self, make_conversation, make_stub_client, sample_comparison_context
    ):
        client = make_stub_client(error=RateLimitError("slow down", 429))
        conversation = make_conversation(client=client, context=sample_comparison_context)
        conversation.send("Why?")
        assert conversation.follow_up_suggestions == []


# ── Pinned questions ─────────────────────────────────────────────────────────


class TestPinned:
    def test_pin_persisted(self, make_conversation, session_store):
        conversation = make_conversation()
        conversation.pin("Why Jane?")
        conversation.pin("Why Jane?")
        assert conversation.pinned_questions == ["Why Jane?"]
        assert session_store.load_pinned("job-editor-ai-messages") == ["Why Jane?"]

    def test_unpin(self, make_conversation, session_store):
        conversation = make_conversation()
        conversation.pin("A")
        conversation.pin("B")
        conversation.unpin("A")
        conversation.unpin("missing")
        assert session_store.load_pinned("job-editor-ai-messages") == ["B"]

    def test_pins_reloaded(self, make_conversation):
        make_conversation().pin("A")
        assert make_conversation().pinned_questions == ["A"]


# ── Insertable blocks ────────────────────────────────────────────────────────


class TestInsertableBlocks:
    def test_assistant_reply_parsed(self, make_conversation, make_stub_client):
        client = make_stub_client(chunks=["Try this:\n", "[INSERTABLE:title]Staff Engineer[/INSERTABLE]"])
        conversation = make_conversation(client=client)
        reply = conversation.send("Suggest a title")
        result = conversation.insertable_blocks(reply)
        assert result.fields == [InsertableField.TITLE]
        assert result.get(InsertableField.TITLE).content == "Staff Engineer"
        assert "INSERTABLE" not in result.clean_text

    def test_user_message_not_parsed(self, make_conversation):
        message = ChatMessage(role=MessageRole.USER, content="[INSERTABLE:title]X[/INSERTABLE]")
        result = make_conversation().insertable_blocks(message)
        assert result.blocks == []
        assert result.clean_text == message.content

    def test_streaming_message_not_parsed(self, make_conversation):
        message = ChatMessage(
            role=MessageRole.ASSISTANT,
            content="[INSERTABLE:title]Partial",
            is_streaming=True,
        )
        result = make_conversation().insertable_blocks(message)
        assert result.blocks == []
        assert result.clean_text == "[INSERTABLE:title]Partial"
