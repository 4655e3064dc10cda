"""
Context payloads sent to the assistant alongside a question.

Exactly one context accompanies a request: the job editor form state, the
candidate being viewed, or a candidate comparison.
"""

from typing import Optional

from pydantic import Field

from src.utils.constants import EvaluationStage

from .base import CamelModel
from .comparison import ComparisonResult
from .questions import DraftBusinessCaseQuestion, DraftInterviewQuestion


def _filled(values: list[str]) -> int:
    return len([v for v in values if v.strip()])


class JobEditorContext(CamelModel):
    """Current state of the job editing form."""

    title: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    department: Optional[str] = None
    description: Optional[str] = None
    responsibilities: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    business_case_questions: list[DraftBusinessCaseQuestion] = Field(default_factory=list)
    fixed_interview_questions: list[DraftInterviewQuestion] = Field(default_factory=list)
    ai_system_prompt: Optional[str] = None
    ai_interview_prompt: Optional[str] = None
    is_editing: bool = False

    @property
    def has_title(self) -> bool:
        return bool(self.title and self.title.strip())

    @property
    def has_location(self) -> bool:
        return bool(self.location and self.location.strip())

    @property
    def has_description(self) -> bool:
        return bool(self.description and self.description.strip())

    @property
    def responsibilities_count(self) -> int:
        return _filled(self.responsibilities)

    @property
    def requirements_count(self) -> int:
        return _filled(self.requirements)

    @property
    def benefits_count(self) -> int:
        return _filled(self.benefits)


class CandidateContext(CamelModel):
    """Summary of the candidate profile being discussed."""

    id: str
    name: str
    email: Optional[str] = None
    job_title: str
    job_id: str
    status: str
    applied_at: Optional[str] = None
    ai_score: Optional[float] = None
    recommendation: Optional[str] = None
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    evaluation_summary: Optional[str] = None
    evaluation_stage: Optional[EvaluationStage] = None
    initial_score: Optional[float] = None
    disc_profile: Optional[str] = None


class ComparisonContext(CamelModel):
    """A finished comparison the recruiter is asking about."""

    job_title: str
    job_id: Optional[str] = None
    candidate_count: int = Field(ge=0)
    result: ComparisonResult
