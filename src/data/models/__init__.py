"""
Data models for ATS Assist.

Pydantic schemas for the payloads exchanged with the hosted backend and
its AI functions. Records themselves are owned by the backend; these models
only validate what crosses the boundary.
"""

from .base import CamelModel, EmbeddedModel, utc_now
from .chat import ChatMessage, MessageRole
from .comparison import (
    BusinessCaseAnalysisItem,
    BusinessCaseResponseAnalysis,
    CandidateRanking,
    CandidateRisk,
    ComparisonMatrixItem,
    ComparisonRecommendation,
    ComparisonResult,
    CriterionScore,
    InterviewPerformance,
    ScoreTrajectory,
)
from .context import CandidateContext, ComparisonContext, JobEditorContext
from .questions import (
    BusinessCaseQuestion,
    DraftBusinessCaseQuestion,
    DraftInterviewQuestion,
    FixedInterviewQuestion,
)

__all__ = [
    # Base
    "CamelModel",
    "EmbeddedModel",
    "utc_now",
    # Chat
    "ChatMessage",
    "MessageRole",
    # Comparison
    "BusinessCaseAnalysisItem",
    "BusinessCaseResponseAnalysis",
    "CandidateRanking",
    "CandidateRisk",
    "ComparisonMatrixItem",
    "ComparisonRecommendation",
    "ComparisonResult",
    "CriterionScore",
    "InterviewPerformance",
    "ScoreTrajectory",
    # Context
    "CandidateContext",
    "ComparisonContext",
    "JobEditorContext",
    # Questions
    "BusinessCaseQuestion",
    "DraftBusinessCaseQuestion",
    "DraftInterviewQuestion",
    "FixedInterviewQuestion",
]
