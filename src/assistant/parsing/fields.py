"""
Field names accepted inside ``[INSERTABLE:<field>]`` tags.
"""

from enum import Enum
from typing import Optional


class InsertableField(str, Enum):
    """Job editor form field an insertable block targets."""

    TITLE = "title"
    LOCATION = "location"
    JOB_TYPE = "jobType"
    DESCRIPTION = "description"
    RESPONSIBILITIES = "responsibilities"
    REQUIREMENTS = "requirements"
    BENEFITS = "benefits"
    TAGS = "tags"
    AI_PROMPT = "aiPrompt"
    INTERVIEW_PROMPT = "interviewPrompt"
    BUSINESS_CASE_QUESTIONS = "businessCaseQuestions"
    FIXED_INTERVIEW_QUESTIONS = "fixedInterviewQuestions"

    @property
    def is_list(self) -> bool:
        """Content is a bullet list split into items."""
        return self in LIST_FIELDS

    @property
    def is_json(self) -> bool:
        """Content is a JSON payload."""
        return self in JSON_FIELDS


LIST_FIELDS: frozenset[InsertableField] = frozenset({
    InsertableField.RESPONSIBILITIES,
    InsertableField.REQUIREMENTS,
    InsertableField.BENEFITS,
    InsertableField.TAGS,
})

JSON_FIELDS: frozenset[InsertableField] = frozenset({
    InsertableField.BUSINESS_CASE_QUESTIONS,
    InsertableField.FIXED_INTERVIEW_QUESTIONS,
})

_BY_LOWER_NAME: dict[str, InsertableField] = {f.value.lower(): f for f in InsertableField}

# Longest names first so alternations never stop at a shorter prefix
FIELD_NAME_PATTERN: str = "|".join(
    sorted((f.value for f in InsertableField), key=len, reverse=True)
)


def resolve_field(name: str) -> Optional[InsertableField]:
    """
    Resolve a tag field name, ignoring case and surrounding whitespace.

    Returns:
        The matching field, or None for names outside the enumeration
    """
    return _BY_LOWER_NAME.get(name.strip().lower())
