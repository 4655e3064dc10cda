"""
Parsing and validation of JSON payloads inside insertable blocks.
"""

import json
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from src.data.models import BusinessCaseQuestion, FixedInterviewQuestion
from src.utils.constants import JOB_TYPES
from src.utils.logger import get_logger

from .fields import InsertableField
from .json_recovery import attempt_json_recovery, strip_code_fence

logger = get_logger(__name__)


def parse_json_payload(content: str) -> tuple[Optional[Any], bool]:
    """
    Parse block content as JSON, falling back to recovery.

    Returns:
        Tuple of (parsed value or None, whether recovery was needed)
    """
    try:
        return json.loads(strip_code_fence(content)), False
    except (json.JSONDecodeError, ValueError):
        pass

    recovered = attempt_json_recovery(content)
    return recovered, recovered is not None


def _validate_items(data: Any, model: type[BaseModel], label: str) -> list[Any]:
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        logger.warning(f"Expected a list of {label}, got {type(data).__name__}")
        return []

    valid = []
    for element in data:
        if not isinstance(element, dict):
            continue
        try:
            valid.append(model.model_validate(element))
        except ValidationError:
            continue

    if len(valid) != len(data):
        logger.warning(f"Dropped {len(data) - len(valid)} of {len(data)} {label} failing validation")
    return valid


def validate_business_case_questions(data: Any) -> list[BusinessCaseQuestion]:
    """
    Keep only business case questions with a title and a description.

    Invalid elements are dropped silently; order is preserved.
    """
    return _validate_items(data, BusinessCaseQuestion, "business case questions")


def validate_fixed_interview_questions(data: Any) -> list[FixedInterviewQuestion]:
    """Keep only interview questions that carry question text."""
    return _validate_items(data, FixedInterviewQuestion, "fixed interview questions")


STRUCTURED_VALIDATORS: dict[InsertableField, Callable[[Any], list[Any]]] = {
    InsertableField.BUSINESS_CASE_QUESTIONS: validate_business_case_questions,
    InsertableField.FIXED_INTERVIEW_QUESTIONS: validate_fixed_interview_questions,
}


def element_count(data: Any) -> int:
    """Number of candidate elements in a parsed payload."""
    if isinstance(data, list):
        return len(data)
    return 1 if isinstance(data, dict) else 0


def normalize_job_type(content: str) -> Optional[str]:
    """Map free-form job type text ("Full Time") onto a known job type."""
    first_line = content.strip().splitlines()[0] if content.strip() else ""
    normalized = first_line.strip().strip(".").lower().replace("_", "-").replace(" ", "-")
    return normalized if normalized in JOB_TYPES else None
