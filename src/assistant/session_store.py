"""
Persistent chat history for assistant conversations.

Each conversation lives under a stable session key (one for the job
editor, one per candidate, one per comparison job) and is stored as a JSON
file in the session directory. Pinned questions are kept alongside.
"""

import json
import re
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from src.data.models import ChatMessage
from src.utils.constants import (
    SESSION_KEY_CANDIDATE_PREFIX,
    SESSION_KEY_COMPARISON_PREFIX,
    SESSION_KEY_JOB_EDITOR,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

_messages_adapter = TypeAdapter(list[ChatMessage])
_pinned_adapter = TypeAdapter(list[str])

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")
PINNED_SUFFIX = ".pinned"


def job_editor_session_key() -> str:
    """Session key of the job editor assistant."""
    return SESSION_KEY_JOB_EDITOR


def candidate_session_key(candidate_id: str) -> str:
    """Session key of the assistant for one candidate."""
    return f"{SESSION_KEY_CANDIDATE_PREFIX}{candidate_id}"


def comparison_session_key(job_id: Optional[str] = None) -> str:
    """Session key of the comparison assistant for a job."""
    return f"{SESSION_KEY_COMPARISON_PREFIX}{job_id or 'default'}"


class SessionStore:
    """
    Keyed JSON store for chat messages and pinned questions.

    Usage:
        store = SessionStore(Path("data/sessions"))
        messages = store.load(candidate_session_key("42"))
        store.save(candidate_session_key("42"), messages)
    """

    def __init__(self, directory: Optional[Path] = None):
        if directory is None:
            from src.utils.config import get_settings

            directory = get_settings().assistant.session_directory
        self.directory = Path(directory)

    @staticmethod
    def slugify(key: str) -> str:
        """File-system safe form of a session key."""
        slug = UNSAFE_FILENAME_CHARS.sub("-", key.strip()).strip("-")
        return slug or "default"

    def _path(self, key: str, suffix: str = "") -> Path:
        return self.directory / f"{self.slugify(key)}{suffix}.json"

    def _read(self, path: Path, adapter: TypeAdapter) -> list:
        if not path.exists():
            return []
        try:
            return adapter.validate_json(path.read_bytes())
        except (ValidationError, ValueError, OSError) as e:
            logger.warning(f"Discarding unreadable session file {path.name}: {e}")
            return []

    def _write(self, path: Path, adapter: TypeAdapter, value: list) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(adapter.dump_json(value, indent=2))

    # -- messages ------------------------------------------------------------

    def load(self, key: str) -> list[ChatMessage]:
        """
        Load the chat history stored under a key.

        Missing or corrupt files yield an empty history. Loaded messages are
        never marked as streaming.
        """
        messages = self._read(self._path(key), _messages_adapter)
        for message in messages:
            message.is_streaming = False
        return messages

    def save(self, key: str, messages: list[ChatMessage]) -> None:
        """Persist the chat history; an empty history removes the file."""
        if not messages:
            self.clear(key)
            return
        self._write(self._path(key), _messages_adapter, messages)
        logger.debug(f"Saved {len(messages)} messages for session '{key}'")

    def clear(self, key: str) -> None:
        """Remove the stored history for a key."""
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Cleared session '{key}'")

    def keys(self) -> list[str]:
        """Stored session keys (in their file-system form), sorted."""
        if not self.directory.exists():
            return []
        return sorted(
            p.stem for p in self.directory.glob("*.json") if not p.stem.endswith(PINNED_SUFFIX)
        )

    def clear_all(self) -> int:
        """Remove every stored history and pinned list. Returns the number of files removed."""
        if not self.directory.exists():
            return 0
        removed = 0
        for path in self.directory.glob("*.json"):
            path.unlink()
            removed += 1
        logger.info(f"Removed {removed} session files from {self.directory}")
        return removed

    # -- pinned questions ----------------------------------------------------

    def load_pinned(self, key: str) -> list[str]:
        """Questions the recruiter pinned for this session."""
        return self._read(self._path(key, PINNED_SUFFIX), _pinned_adapter)

    def save_pinned(self, key: str, questions: list[str]) -> None:
        """Persist pinned questions, dropping duplicates but keeping order."""
        unique = list(dict.fromkeys(q.strip() for q in questions if q.strip()))
        path = self._path(key, PINNED_SUFFIX)
        if not unique:
            if path.exists():
                path.unlink()
            return
        self._write(path, _pinned_adapter, unique)

    def export(self, key: str) -> str:
        """The stored history as pretty-printed JSON."""
        messages = self.load(key)
        return json.dumps(_messages_adapter.dump_python(messages, mode="json"), indent=2)
