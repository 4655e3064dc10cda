"""
Shared utilities for ATS Assist.

- config: settings loaded from the environment and ``.env``
- constants: protocol markers, session keys, score bands and enums
- logger: Loguru setup and log redaction helpers
"""

from src.utils.config import (
    AppSettings,
    AssistantSettings,
    BackendSettings,
    DATA_DIR,
    get_settings,
    reload_settings,
)
from src.utils.constants import (
    APP_DISPLAY_NAME,
    APP_NAME,
    ERROR_MESSAGE_PREFIX,
    VERSION,
    ConfidenceLevel,
    EvaluationStage,
    InterviewQuestionCategory,
    ScoreLevel,
    score_level,
)
from src.utils.logger import (
    LoggerMixin,
    get_logger,
    preview,
    sanitize_for_logging,
    setup_logging,
)

__all__ = [
    # Config
    "AppSettings",
    "AssistantSettings",
    "BackendSettings",
    "DATA_DIR",
    "get_settings",
    "reload_settings",
    # Constants
    "APP_DISPLAY_NAME",
    "APP_NAME",
    "ERROR_MESSAGE_PREFIX",
    "VERSION",
    "ConfidenceLevel",
    "EvaluationStage",
    "InterviewQuestionCategory",
    "ScoreLevel",
    "score_level",
    # Logger
    "LoggerMixin",
    "get_logger",
    "preview",
    "sanitize_for_logging",
    "setup_logging",
]
