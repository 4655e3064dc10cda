"""
Candidate comparison payload models.

The compare-candidates function returns a JSON document ranking the
candidates for a job. These models validate it once at the boundary so
that report rendering can rely on a fixed shape.
"""

from typing import Any, Optional

from pydantic import Field, model_validator

from src.utils.constants import ConfidenceLevel

from .base import EmbeddedModel


class CandidateRanking(EmbeddedModel):
    """Position of one candidate in the comparison."""

    rank: int = Field(ge=1)
    candidate_name: str
    application_id: str
    score: float = Field(ge=0, le=100)
    key_differentiator: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class CriterionScore(EmbeddedModel):
    """Score of one candidate on one comparison criterion."""

    application_id: str
    candidate_name: Optional[str] = None
    score: float = Field(ge=0, le=100)
    notes: str = ""


class ComparisonMatrixItem(EmbeddedModel):
    """One row of the comparison matrix."""

    criterion: str
    candidates: list[CriterionScore] = Field(default_factory=list)


class ComparisonRecommendation(EmbeddedModel):
    """Final hiring recommendation."""

    top_choice: str
    application_id: str
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM
    justification: str = ""
    alternative: Optional[str] = None
    alternative_justification: Optional[str] = None

    @property
    def has_alternative(self) -> bool:
        """Check if a meaningful alternative candidate was named."""
        return bool(self.alternative) and self.alternative.strip().lower() != "none"


class CandidateRisk(EmbeddedModel):
    """Risks identified for a candidate."""

    candidate_name: str
    application_id: str
    risks: list[str] = Field(default_factory=list)


class BusinessCaseResponseAnalysis(EmbeddedModel):
    """Assessment of one candidate's answer to a business case question."""

    application_id: str
    candidate_name: str
    response_summary: str = ""
    score: float = Field(ge=0, le=100)
    assessment: str = ""


class BusinessCaseAnalysisItem(EmbeddedModel):
    """Side-by-side analysis of one business case question."""

    question_title: str
    question_description: Optional[str] = None
    candidate_responses: list[BusinessCaseResponseAnalysis] = Field(default_factory=list)
    comparative_analysis: str = ""
    best_response: str = ""


class ScoreTrajectory(EmbeddedModel):
    """Score movement between the initial and final evaluation stages."""

    initial_score: float
    final_score: float
    change: float
    explanation: str = ""


class InterviewPerformance(EmbeddedModel):
    """
    Interview outcome for one candidate.

    ``has_interview`` is the tag of this schema. Payloads that omit it get
    it derived from the presence of ``interview_score``; a payload that
    declares no interview but still carries a score is rejected.
    """

    application_id: str
    candidate_name: str
    has_interview: bool
    interview_score: Optional[float] = Field(default=None, ge=0, le=100)
    application_vs_interview: Optional[str] = None
    score_trajectory: Optional[ScoreTrajectory] = None
    strengths_demonstrated: list[str] = Field(default_factory=list)
    concerns_raised: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def derive_interview_tag(cls, data: Any) -> Any:
        """Fill in the tag from the score when the payload omits it."""
        if isinstance(data, dict) and data.get("has_interview") is None:
            data = {**data, "has_interview": data.get("interview_score") is not None}
        return data

    @model_validator(mode="after")
    def check_score_matches_tag(self) -> "InterviewPerformance":
        """Reject a score on a candidate that was never interviewed."""
        if not self.has_interview and self.interview_score is not None:
            raise ValueError("interview_score given for a candidate without an interview")
        return self


class ComparisonResult(EmbeddedModel):
    """Complete AI comparison of the candidates for one job."""

    executive_summary: str = ""
    rankings: list[CandidateRanking] = Field(default_factory=list)
    comparison_matrix: list[ComparisonMatrixItem] = Field(default_factory=list)
    recommendation: ComparisonRecommendation
    risks: list[CandidateRisk] = Field(default_factory=list)
    business_case_analysis: list[BusinessCaseAnalysisItem] = Field(default_factory=list)
    interview_performance: list[InterviewPerformance] = Field(default_factory=list)

    @property
    def ordered_rankings(self) -> list[CandidateRanking]:
        """Rankings sorted by rank."""
        return sorted(self.rankings, key=lambda r: r.rank)

    @property
    def interviewed(self) -> list[InterviewPerformance]:
        """Candidates that went through an interview."""
        return [p for p in self.interview_performance if p.has_interview]

    def risks_for(self, application_id: str) -> list[str]:
        """Get the risks recorded for a given application."""
        for entry in self.risks:
            if entry.application_id == application_id:
                return entry.risks
        return []
