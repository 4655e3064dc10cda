"""
Application-wide constants for ATS Assist.

This module contains all constant values used throughout the application.
Modify these values to customize behavior without changing code logic.
"""

from enum import Enum
from typing import Final, Optional


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "ats-assist"
APP_DISPLAY_NAME: Final[str] = "ATS Assist"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Insertable Block Protocol
# =============================================================================

INSERTABLE_CLOSE_TAG: Final[str] = "[/INSERTABLE]"

# Lines the assistant occasionally echoes from its own system prompt
INTERNAL_STATE_MARKERS: Final[tuple[str, ...]] = (
    "_TITLE",
    "_DESC",
    "_RESP",
    "_REQS",
    "_BENS",
    "_BC",
    "_IQ",
)

# Accepted values for the jobType insertable field
JOB_TYPES: Final[tuple[str, ...]] = (
    "full-time",
    "part-time",
    "contract",
    "internship",
)


# =============================================================================
# Assistant Constants
# =============================================================================

ERROR_MESSAGE_PREFIX: Final[str] = "Sorry, I encountered an error: "

SESSION_KEY_JOB_EDITOR: Final[str] = "job-editor-ai-messages"
SESSION_KEY_CANDIDATE_PREFIX: Final[str] = "ai-assistant-candidate-"
SESSION_KEY_COMPARISON_PREFIX: Final[str] = "ai-assistant-comparison-"

# Job editor workflow targets
WORKFLOW_TARGETS: Final[dict[str, int]] = {
    "responsibilities": 3,
    "requirements": 3,
    "benefits": 2,
}

MAX_SUGGESTED_QUESTIONS: Final[int] = 4


# =============================================================================
# Scoring Constants
# =============================================================================

# Score bands (0-100) per display scale
SCORE_THRESHOLDS: Final[dict[str, dict[str, float]]] = {
    # Comparison reports and interview performance
    "comparison": {"high": 80, "medium": 60},
    # Candidate lists and profile headers
    "candidate": {"high": 70, "medium": 40},
}


# =============================================================================
# Enums
# =============================================================================


class EvaluationStage(str, Enum):
    """Phase of AI scoring attached to an application."""

    INITIAL = "initial"
    POST_BCQ = "post_bcq"
    POST_INTERVIEW = "post_interview"
    FINAL = "final"


class InterviewQuestionCategory(str, Enum):
    """Category of a fixed interview question."""

    SKILLS_VERIFICATION = "skills_verification"
    CONCERN_PROBING = "concern_probing"
    CULTURAL_FIT = "cultural_fit"
    EXPERIENCE = "experience"
    MOTIVATION = "motivation"
    GENERAL = "general"


class ConfidenceLevel(str, Enum):
    """Confidence of a comparison recommendation."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ScoreLevel(Enum):
    """Categorical levels for 0-100 scores, used for colouring."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def from_score(cls, score: Optional[float], scale: str = "comparison") -> "ScoreLevel":
        """Convert a numeric score to a level on the given scale."""
        if score is None:
            return cls.UNKNOWN
        thresholds = SCORE_THRESHOLDS[scale]
        if score >= thresholds["high"]:
            return cls.HIGH
        elif score >= thresholds["medium"]:
            return cls.MEDIUM
        return cls.LOW

    @property
    def color(self) -> str:
        """Rich colour name for this level."""
        return SCORE_COLORS[self]


SCORE_COLORS: Final[dict[ScoreLevel, str]] = {
    ScoreLevel.HIGH: "green",
    ScoreLevel.MEDIUM: "yellow",
    ScoreLevel.LOW: "red",
    ScoreLevel.UNKNOWN: "dim",
}


def score_level(score: Optional[float], scale: str = "comparison") -> ScoreLevel:
    """Shortcut for :meth:`ScoreLevel.from_score`."""
    return ScoreLevel.from_score(score, scale)
