"""
Pre-clean pass for raw assistant replies.

The assistant model occasionally leaks lines from its system prompt and
mangles the ``[INSERTABLE:field]`` delimiters. Each repair is a named
:class:`CleanupRule`; rules run in a fixed order and every rule is
idempotent, so cleaning already-clean text leaves it unchanged.
"""

import re
from dataclasses import dataclass
from typing import Callable, Sequence, Union

from src.utils.constants import INTERNAL_STATE_MARKERS
from src.utils.logger import get_logger

from .fields import FIELD_NAME_PATTERN

logger = get_logger(__name__)

Replacement = Union[str, Callable[[re.Match], str]]


@dataclass(frozen=True)
class CleanupRule:
    """A single regex substitution applied to the whole reply."""

    name: str
    pattern: re.Pattern
    replacement: Replacement = ""

    def apply(self, text: str) -> str:
        """Return the text with every match replaced."""
        return self.pattern.sub(self.replacement, text)


def _keep_unless_truncated(match: re.Match) -> str:
    """Drop a trailing "Next steps" line that stops mid-sentence."""
    line = match.group(0).strip().strip("*").strip()
    if line.endswith((".", "!", "?", ")")):
        return match.group(0)
    return ""


_STATE_MARKERS = "|".join(re.escape(m) for m in INTERNAL_STATE_MARKERS)
_FIELDS = FIELD_NAME_PATTERN


# -- leaked internal state ---------------------------------------------------

# Without an END comment only the header and the state lines right after it go
INTERNAL_STATE_BLOCK = CleanupRule(
    "internal_state_block",
    re.compile(
        r"<!--\s*SYSTEM_INTERNAL_STATE"
        r"(?:[\s\S]*?<!--\s*END\s+SYSTEM_INTERNAL_STATE[^>]*-->"
        r"|(?:[^\n]*?-->|[^\n]*)(?:\n[ \t]*_[A-Z][A-Z_]*[ \t]*:[^\n]*)*)"
    ),
)

HTML_COMMENT_LINES = CleanupRule(
    "html_comment_lines",
    re.compile(r"^[ \t]*<!--.*?-->[ \t]*(?:\n|\Z)", re.MULTILINE),
)

INTERNAL_STATE_LINES = CleanupRule(
    "internal_state_lines",
    re.compile(
        rf"^[ \t]*(?:{_STATE_MARKERS}|_[A-Z][A-Z_]*_(?:STATUS|COUNT))[ \t]*:.*(?:\n|\Z)",
        re.MULTILINE,
    ),
)

EMOJI_STATUS_LINES = CleanupRule(
    "emoji_status_lines",
    re.compile(
        r"^[ \t]*[❌⏳✅⚠\U0001F534\U0001F7E1\U0001F7E2]\ufe0f?[ \t]*"
        r"(?:\*\*)?[A-Z][A-Z /_-]*(?:\*\*)?[ \t]*:.*(?:\n|\Z)",
        re.MULTILINE,
    ),
)

# -- malformed delimiters ----------------------------------------------------

TAG_SPACING = CleanupRule(
    "tag_spacing",
    re.compile(r"\[[ \t]*INSERTABLE[ \t]*:[ \t]*([A-Za-z]+)[ \t]*\]", re.IGNORECASE),
    r"[INSERTABLE:\1]",
)

CLOSER_SPACING = CleanupRule(
    "closer_spacing",
    re.compile(r"\[[ \t]*/[ \t]*INSERTABLE[ \t]*\]", re.IGNORECASE),
    "[/INSERTABLE]",
)

# "GotABLE:title]", "INSERTABLE:title]"
TRUNCATED_OPENER = CleanupRule(
    "truncated_opener",
    re.compile(rf"(?<![\[\w])\w*ABLE:[ \t]*({_FIELDS})\]", re.IGNORECASE),
    r"[INSERTABLE:\1]",
)

# "INSERTABLEtitle]", "[INSERTtitle]"
MISSING_COLON = CleanupRule(
    "missing_colon",
    re.compile(rf"(?<![\w\[])\[?INSERT(?:ABLE)?({_FIELDS})\]", re.IGNORECASE),
    r"[INSERTABLE:\1]",
)

# "Notitle]", "Lettitle]", "title]" at the start of a line, before a closer
PREFIXED_FIELD = CleanupRule(
    "prefixed_field",
    re.compile(
        rf"^[ \t]*[A-Za-z]{{0,12}}?({_FIELDS})\](?=[\s\S]*\[/INSERTABLE\])",
        re.MULTILINE | re.IGNORECASE,
    ),
    r"[INSERTABLE:\1]",
)

# -- presentation artifacts --------------------------------------------------

POINTING_EMOJI = CleanupRule(
    "pointing_emoji",
    re.compile(r"[\U0001F446\U0001F447☝][\ufe0f\U0001F3FB-\U0001F3FF]*[ \t]*"),
)

INSERT_BUTTONS_BELOW = CleanupRule(
    "insert_buttons_below",
    re.compile(r"(Insert[\"'“”]?[ \t]+buttons?[ \t]+)above", re.IGNORECASE),
    r"\1below",
)

TRUNCATED_NEXT_STEPS = CleanupRule(
    "truncated_next_steps",
    re.compile(r"(?:^|\n)[ \t]*(?:\*\*)?Next steps\b[^\n]*\s*\Z", re.IGNORECASE),
    _keep_unless_truncated,
)

BLANK_LINE_RUNS = CleanupRule(
    "blank_line_runs",
    re.compile(r"\n[ \t]*(?:\n[ \t]*){2,}"),
    "\n\n",
)

ORPHAN_CLOSERS = CleanupRule(
    "orphan_closers",
    re.compile(r"\[/INSERTABLE\]"),
)


DEFAULT_CLEANUP_RULES: tuple[CleanupRule, ...] = (
    INTERNAL_STATE_BLOCK,
    HTML_COMMENT_LINES,
    INTERNAL_STATE_LINES,
    EMOJI_STATUS_LINES,
    TAG_SPACING,
    CLOSER_SPACING,
    TRUNCATED_OPENER,
    MISSING_COLON,
    PREFIXED_FIELD,
    POINTING_EMOJI,
    INSERT_BUTTONS_BELOW,
    TRUNCATED_NEXT_STEPS,
    BLANK_LINE_RUNS,
)

# Applied once all recognizable blocks have been taken out of the text
FINAL_CLEANUP_RULES: tuple[CleanupRule, ...] = (
    ORPHAN_CLOSERS,
    TRUNCATED_NEXT_STEPS,
    BLANK_LINE_RUNS,
)


class ResponseCleaner:
    """Runs an ordered sequence of cleanup rules over assistant replies."""

    def __init__(self, rules: Sequence[CleanupRule] = DEFAULT_CLEANUP_RULES):
        self.rules = tuple(rules)

    def clean(self, text: str) -> str:
        """Apply every rule in order."""
        for rule in self.rules:
            updated = rule.apply(text)
            if updated != text:
                logger.debug(f"Cleanup rule '{rule.name}' rewrote the response")
            text = updated
        return text


_default_cleaner = ResponseCleaner()


def clean_ai_response(text: str) -> str:
    """Pre-clean a raw assistant reply with the default rule set."""
    return _default_cleaner.clean(text)
