"""
Logging infrastructure for ATS Assist.

Loguru sinks for the console and a rotating log file, plus helpers that
keep credentials and candidate text out of the logs.
"""

import re
import sys
from typing import Any

from loguru import logger

from src.utils.config import get_settings

REDACTED = "***REDACTED***"

# Dict keys whose values never reach a log line
SENSITIVE_KEYS = {
    "authorization", "apikey", "api_key", "access_token", "refresh_token",
    "token", "secret", "password", "email",
}

BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)

# Assistant replies and questions are logged as short previews only
PREVIEW_LENGTH = 80

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging() -> None:
    """
    Configure the console and file sinks from ``LOG_*`` settings.

    The file sink is skipped while the test suite runs.
    """
    settings = get_settings()
    log_settings = settings.logging

    logger.remove()
    logger.configure(extra={"name": "ats-assist"})

    # Variable values in tracebacks can hold tokens and candidate data
    diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            backtrace=settings.debug,
            diagnose=diagnose,
        )

    if settings.environment == "testing":
        return

    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        diagnose=diagnose,
        enqueue=True,
    )

    logger.debug(f"Logging to {log_file} at level {log_settings.level}")


def get_logger(name: str) -> Any:
    """Logger bound to a module or class name (shown in the console format)."""
    return logger.bind(name=name)


def sanitize_for_logging(data: Any) -> Any:
    """
    Redact credentials before logging.

    Values under sensitive keys are replaced and bearer tokens inside
    strings are masked. Nested dicts and lists are walked.
    """
    if isinstance(data, dict):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else sanitize_for_logging(v)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item) for item in data]
    if isinstance(data, str):
        return BEARER_PATTERN.sub(rf"\g<1>{REDACTED}", data)
    return data


def preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Single-line excerpt of user or assistant text."""
    flat = " ".join(text.split())
    if len(flat) <= limit:
        return flat
    return f"{flat[:limit]}... ({len(flat)} chars)"


class LoggerMixin:
    """
    Gives a class a ``self.logger`` named after it.

    Usage:
        class AssistantConversation(LoggerMixin):
            def send(self, content):
                self.logger.debug(f"Sending {preview(content)}")
    """

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        return self._logger


# Shortcut for scripts
log = logger


try:
    setup_logging()
except (OSError, ValueError) as e:  # pragma: no cover - unwritable log dir or bad level
    logger.warning(f"Falling back to default logging: {e}")
