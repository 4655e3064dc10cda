"""
Fallback detectors for replies whose tags could not be repaired.

Two situations are handled here:

- A closing ``[/INSERTABLE]`` survives without any opener. Ordered
  :class:`OrphanCloserStrategy` objects look for the prose that must have
  been the block body.
- The assistant emitted a business case JSON array without wrapping it in
  a tag at all. :class:`RawJsonDetector` finds it, even when truncated.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from src.utils.constants import INSERTABLE_CLOSE_TAG

from .fields import InsertableField

CLOSER = INSERTABLE_CLOSE_TAG

BLANK_LINE_PATTERN = re.compile(r"\n[ \t]*\n")
RAW_JSON_START_PATTERN = re.compile(r"(?:```(?:json)?[ \t]*\n)?(\[\s*\{)")
TITLE_KEY_PATTERN = re.compile(r'"title"\s*:')
CLOSING_FENCE_PATTERN = re.compile(r"\s*```")


@dataclass
class RecoveredSpan:
    """Region of text recovered as the body of a block."""

    start: int
    end: int
    content: str
    field: InsertableField = InsertableField.DESCRIPTION


def is_plausible_prose(content: str, min_length: int) -> bool:
    """Crude check that text reads like a paragraph rather than a fragment."""
    return len(content) >= min_length and "." in content


class OrphanCloserStrategy(ABC):
    """Locates block content preceding a closer that has no opener."""

    name: str = "orphan"

    @abstractmethod
    def find(self, text: str, min_length: int) -> Optional[RecoveredSpan]:
        """Return the recovered span, or None when the heuristic does not apply."""


class BracketOpenedProseStrategy(OrphanCloserStrategy):
    """
    A line that starts with a bare ``[`` and runs up to the closer.

    Example: ``[ Are you a natural networker? ... [/INSERTABLE]``
    """

    name = "bracket_opened_prose"

    PATTERN = re.compile(
        r"^[ \t]*\[[ \t]*(?!/?INSERTABLE)([^\[\]]+?)[ \t]*\[/INSERTABLE\]",
        re.MULTILINE,
    )

    def find(self, text: str, min_length: int) -> Optional[RecoveredSpan]:
        for match in self.PATTERN.finditer(text):
            content = match.group(1).strip()
            if is_plausible_prose(content, min_length):
                return RecoveredSpan(match.start(), match.end(), content)
        return None


class PrecedingParagraphStrategy(OrphanCloserStrategy):
    """The paragraph immediately before the first closer."""

    name = "preceding_paragraph"

    def find(self, text: str, min_length: int) -> Optional[RecoveredSpan]:
        closer_at = text.find(CLOSER)
        if closer_at < 0:
            return None

        before = text[:closer_at]
        start = 0
        for match in BLANK_LINE_PATTERN.finditer(before):
            start = match.end()

        content = before[start:].strip()
        if not is_plausible_prose(content, min_length):
            return None
        return RecoveredSpan(start, closer_at + len(CLOSER), content)


DEFAULT_ORPHAN_STRATEGIES: tuple[OrphanCloserStrategy, ...] = (
    BracketOpenedProseStrategy(),
    PrecedingParagraphStrategy(),
)


@dataclass
class RawJsonMatch:
    """An untagged JSON array found in the reply."""

    start: int
    end: int
    raw: str
    complete: bool


class RawJsonDetector:
    """Finds a top-level array of objects with a ``title`` key."""

    def find(self, text: str) -> Optional[RawJsonMatch]:
        match = self._first_titled_array(text)
        if not match:
            return None

        json_start = match.start(1)
        json_end = self._matching_bracket(text, json_start)
        complete = json_end is not None
        if json_end is None:
            json_end = len(text)

        end = json_end
        fence = CLOSING_FENCE_PATTERN.match(text, json_end)
        if fence and match.start() != json_start:
            end = fence.end()

        return RawJsonMatch(match.start(), end, text[json_start:json_end], complete)

    def _first_titled_array(self, text: str) -> Optional[re.Match]:
        """First array opening whose first object carries a ``title`` key."""
        for match in RAW_JSON_START_PATTERN.finditer(text):
            object_start = match.end(1) - 1
            object_end = self._matching_bracket(text, object_start) or len(text)
            if TITLE_KEY_PATTERN.search(text, object_start, object_end):
                return match
        return None

    @staticmethod
    def _matching_bracket(text: str, start: int) -> Optional[int]:
        """Index just past the bracket closing the one at ``start``."""
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch in "[{":
                depth += 1
            elif ch in "]}":
                depth -= 1
                if depth == 0:
                    return i + 1
        return None
