"""
HTTP client for the hosted AI assistant function.

The backend exposes the assistant as a serverless function that answers
with a server-sent event stream. Each ``data:`` line carries a JSON chunk,
either in OpenAI delta form (``choices[0].delta.content``) or as a bare
``{"content": ...}`` object, and the stream ends with ``data: [DONE]``.
"""

import json
from typing import Any, Iterable, Iterator, Optional, Union

import requests

from src.data.models import CandidateContext, ChatMessage, ComparisonContext, JobEditorContext
from src.utils.config import BackendSettings
from src.utils.logger import get_logger, sanitize_for_logging

logger = get_logger(__name__)

AssistantContext = Union[JobEditorContext, CandidateContext, ComparisonContext]

SSE_DATA_PREFIX = "data: "
SSE_DONE = "[DONE]"

# Request body key for each context type
CONTEXT_KEYS: dict[type, str] = {
    JobEditorContext: "jobEditorContext",
    CandidateContext: "candidateContext",
    ComparisonContext: "comparisonContext",
}


class AssistantError(Exception):
    """Base error for assistant requests; ``title`` is a short heading for display."""

    title = "Error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RateLimitError(AssistantError):
    """The backend rejected the request with HTTP 429."""

    title = "Too many requests"


class UsageLimitError(AssistantError):
    """The AI usage quota is exhausted (HTTP 402)."""

    title = "Usage limit reached"


class AssistantRequestError(AssistantError):
    """Any other non-success response."""


class AssistantConnectionError(AssistantError):
    """The backend could not be reached or the stream broke off."""

    title = "Connection error"


def error_for_status(status_code: int, reason: str = "") -> AssistantError:
    """Map a non-success HTTP status to the matching assistant error."""
    if status_code == 429:
        return RateLimitError(
            "Rate limit exceeded. Please wait a moment and try again.", status_code
        )
    if status_code == 402:
        return UsageLimitError("AI usage limit reached. Please try again later.", status_code)
    return AssistantRequestError(f"Request failed: {reason or status_code}", status_code)


def extract_chunk_content(payload: Any) -> str:
    """Text carried by one decoded stream chunk, or an empty string."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        delta = choices[0].get("delta") if isinstance(choices[0], dict) else None
        if isinstance(delta, dict) and isinstance(delta.get("content"), str):
            return delta["content"]
    content = payload.get("content")
    return content if isinstance(content, str) else ""


def iter_sse_content(lines: Iterable[Union[str, bytes]]) -> Iterator[str]:
    """
    Yield text chunks from server-sent event lines.

    Lines that are not ``data:`` lines, the ``[DONE]`` marker and payloads
    that are not valid JSON are skipped.
    """
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        if not line or not line.startswith(SSE_DATA_PREFIX):
            continue

        data = line[len(SSE_DATA_PREFIX):].strip()
        if data == SSE_DONE:
            continue

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            # Non-JSON data lines are dropped, not appended to the reply as raw text
            continue

        content = extract_chunk_content(payload)
        if content:
            yield content


class AssistantClient:
    """
    Client for the AI assistant function.

    Usage:
        client = AssistantClient()
        for chunk in client.stream_reply("Suggest a title", history=[]):
            print(chunk, end="")
    """

    def __init__(
        self,
        settings: Optional[BackendSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        if settings is None:
            from src.utils.config import get_settings

            settings = get_settings().backend
        self.settings = settings
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.settings.bearer_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def build_payload(
        self,
        question: str,
        history: Iterable[ChatMessage],
        context: Optional[AssistantContext] = None,
    ) -> dict[str, Any]:
        """Request body for one question."""
        payload: dict[str, Any] = {
            "question": question.strip(),
            "conversationHistory": [m.to_history_entry() for m in history],
        }
        if context is not None:
            payload[CONTEXT_KEYS[type(context)]] = context.model_dump(by_alias=True, mode="json")
        return payload

    def stream_reply(
        self,
        question: str,
        history: Iterable[ChatMessage] = (),
        context: Optional[AssistantContext] = None,
    ) -> Iterator[str]:
        """
        Send a question and yield the reply as it streams in.

        Raises:
            AssistantError: On a non-success status or a transport failure
        """
        payload = self.build_payload(question, history, context)
        url = self.settings.assistant_endpoint
        logger.debug(
            f"POST {url} "
            f"{sanitize_for_logging({'headers': self._headers(), 'history': len(payload['conversationHistory'])})}"
        )

        try:
            response = self.session.post(
                url,
                headers=self._headers(),
                json=payload,
                stream=True,
                timeout=self.settings.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Assistant request failed: {e}")
            raise AssistantConnectionError(f"Could not reach the assistant: {e}") from e

        try:
            if not response.ok:
                error = error_for_status(response.status_code, response.reason)
                logger.error(f"Assistant returned HTTP {response.status_code}: {error.message}")
                raise error

            if response.encoding is None:
                response.encoding = "utf-8"
            try:
                yield from iter_sse_content(response.iter_lines(decode_unicode=True))
            except requests.exceptions.RequestException as e:
                logger.error(f"Assistant stream interrupted: {e}")
                raise AssistantConnectionError(f"The response stream was interrupted: {e}") from e
        finally:
            response.close()

    def ask(
        self,
        question: str,
        history: Iterable[ChatMessage] = (),
        context: Optional[AssistantContext] = None,
    ) -> str:
        """Send a question and return the complete reply."""
        return "".join(self.stream_reply(question, history, context))
