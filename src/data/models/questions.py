"""
Question models suggested by the assistant for a job posting.

Business case questions are answered by candidates on video; fixed interview
questions are asked to every candidate for the role.
"""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from src.utils.constants import InterviewQuestionCategory

from .base import EmbeddedModel


class BusinessCaseQuestion(EmbeddedModel):
    """A business case (BCQ) scenario with its prompt text."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        """Trim surrounding whitespace so blank strings fail validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class FixedInterviewQuestion(EmbeddedModel):
    """A standardized interview question."""

    text: str = Field(min_length=1, validation_alias=AliasChoices("text", "question"))
    category: InterviewQuestionCategory = InterviewQuestionCategory.GENERAL

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        """Trim surrounding whitespace so blank strings fail validation."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("category", mode="before")
    @classmethod
    def default_unknown_category(cls, v: Any) -> Any:
        """Map labels and unknown categories onto the known set."""
        if isinstance(v, InterviewQuestionCategory):
            return v
        if not isinstance(v, str):
            return InterviewQuestionCategory.GENERAL
        normalized = v.strip().lower().replace(" ", "_").replace("-", "_")
        aliases = {
            "skills": InterviewQuestionCategory.SKILLS_VERIFICATION,
            "technical": InterviewQuestionCategory.SKILLS_VERIFICATION,
            "concerns": InterviewQuestionCategory.CONCERN_PROBING,
            "culture": InterviewQuestionCategory.CULTURAL_FIT,
            "behavioral": InterviewQuestionCategory.EXPERIENCE,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return InterviewQuestionCategory(normalized)
        except ValueError:
            return InterviewQuestionCategory.GENERAL


class DraftBusinessCaseQuestion(BusinessCaseQuestion):
    """A business case question as held by the job form, possibly half written."""

    title: str = ""
    description: str = ""


class DraftInterviewQuestion(FixedInterviewQuestion):
    """A fixed interview question as held by the job form, possibly empty."""

    text: str = Field(default="", validation_alias=AliasChoices("text", "question"))
