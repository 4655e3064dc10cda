"""
Shared test fixtures for the ATS Assist test suite.

Sets environment variables before any src imports to prevent config failures,
then provides fakes for the HTTP layer and sample context fixtures.
"""

import os

# === Set environment BEFORE any src imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("BACKEND_URL", "https://project.example.test")
os.environ.setdefault("BACKEND_API_KEY", "public-anon-key")

import json
from typing import Any, Iterator, Optional

import pytest
import requests

from src.assistant.client import AssistantClient, AssistantError
from src.assistant.session_store import SessionStore
from src.data.models import (
    CandidateContext,
    ComparisonContext,
    ComparisonResult,
    JobEditorContext,
)
from src.utils.config import BackendSettings


# ---------------------------------------------------------------------------
# HTTP fakes
# ---------------------------------------------------------------------------


def sse_line(payload: Any) -> str:
    """One server-sent event data line."""
    if isinstance(payload, str):
        return f"data: {payload}"
    return f"data: {json.dumps(payload)}"


def delta(content: str) -> str:
    """An OpenAI-style streaming delta line."""
    return sse_line({"choices": [{"delta": {"content": content}}]})


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(
        self,
        lines: Optional[list[str]] = None,
        status_code: int = 200,
        reason: str = "OK",
        fail_midway: bool = False,
    ):
        self.lines = lines or []
        self.status_code = status_code
        self.reason = reason
        self.encoding: Optional[str] = None
        self.fail_midway = fail_midway
        self.closed = False

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def iter_lines(self, decode_unicode: bool = False) -> Iterator[str]:
        for line in self.lines:
            yield line
        if self.fail_midway:
            raise requests.exceptions.ChunkedEncodingError("connection reset")

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """Records POST calls and replays a canned response."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def backend_settings():
    return BackendSettings(
        url="https://project.example.test/",
        api_key="public-anon-key",
        access_token=None,
    )


@pytest.fixture
def make_client(backend_settings):
    """Factory building an AssistantClient around a FakeSession."""

    def _factory(
        lines: Optional[list[str]] = None,
        status_code: int = 200,
        reason: str = "OK",
        error: Optional[Exception] = None,
        fail_midway: bool = False,
    ) -> tuple[AssistantClient, FakeSession]:
        response = FakeResponse(lines, status_code, reason, fail_midway)
        session = FakeSession(response, error)
        return AssistantClient(settings=backend_settings, session=session), session

    return _factory


class StubAssistantClient:
    """Assistant client double yielding canned chunks or raising an error."""

    def __init__(self, chunks: Optional[list[str]] = None, error: Optional[AssistantError] = None):
        self.chunks = chunks if chunks is not None else ["Hello", " there."]
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def stream_reply(self, question, history=(), context=None):
        self.calls.append({"question": question, "history": list(history), "context": context})
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error


@pytest.fixture
def stub_client():
    return StubAssistantClient()


@pytest.fixture
def make_stub_client():
    """Factory for StubAssistantClient with custom chunks or a failure."""
    return StubAssistantClient


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture
def session_store(tmp_path):
    return SessionStore(tmp_path / "sessions")


# ---------------------------------------------------------------------------
# Sample contexts
# ---------------------------------------------------------------------------


@pytest.fixture
def empty_job_context():
    return JobEditorContext()


@pytest.fixture
def sample_job_context():
    return JobEditorContext(
        title="Senior Backend Engineer",
        location="Amsterdam",
        type="full-time",
        description="Build and run the services behind our hiring platform.",
        responsibilities=["Design APIs", "Review code", "Mentor engineers"],
        requirements=["5+ years of Python", "PostgreSQL", "Distributed systems"],
        benefits=["Remote budget", "Learning allowance"],
    )


@pytest.fixture
def sample_candidate_context():
    return CandidateContext(
        id="app-123",
        name="Jane Smith",
        email="jane.smith@example.com",
        job_title="Senior Backend Engineer",
        job_id="job-42",
        status="screening",
        ai_score=78,
        strengths=["Python", "Mentoring"],
        concerns=["Limited cloud experience"],
        disc_profile="DI",
    )


@pytest.fixture
def comparison_payload() -> dict[str, Any]:
    """Comparison document as returned by the compare-candidates function."""
    return {
        "executive_summary": "Jane is the strongest overall fit.",
        "rankings": [
            {
                "rank": 2,
                "candidate_name": "John Doe",
                "application_id": "app-456",
                "score": 71,
                "key_differentiator": "Deep cloud background",
            },
            {
                "rank": 1,
                "candidate_name": "Jane Smith",
                "application_id": "app-123",
                "score": 86,
                "key_differentiator": "Strong system design",
            },
        ],
        "comparison_matrix": [
            {
                "criterion": "Technical depth",
                "candidates": [
                    {"application_id": "app-123", "score": 90, "notes": "Excellent"},
                    {"application_id": "app-456", "score": 70},
                ],
            }
        ],
        "recommendation": {
            "top_choice": "Jane Smith",
            "application_id": "app-123",
            "confidence": "high",
            "justification": "Best combination of depth and leadership.",
            "alternative": "John Doe",
        },
        "risks": [
            {"candidate_name": "Jane Smith", "application_id": "app-123", "risks": ["Notice period"]},
        ],
        "interview_performance": [
            {
                "application_id": "app-123",
                "candidate_name": "Jane Smith",
                "interview_score": 88,
                "score_trajectory": {
                    "initial_score": 80,
                    "final_score": 86,
                    "change": 6,
                },
            },
            {"application_id": "app-456", "candidate_name": "John Doe"},
        ],
    }


@pytest.fixture
def sample_comparison_result(comparison_payload):
    return ComparisonResult.model_validate(comparison_payload)


@pytest.fixture
def sample_comparison_context(sample_comparison_result):
    return ComparisonContext(
        job_title="Senior Backend Engineer",
        job_id="job-42",
        candidate_count=2,
        result=sample_comparison_result,
    )
