"""
Best-effort recovery of malformed JSON emitted by the assistant.

Replies are frequently cut off by the token limit in the middle of a JSON
array. Recovery is organised as an ordered list of
:class:`JsonRepairStrategy` objects, from least to most invasive. Each
strategy runs its repair steps over the original text and returns the
parsed value or None; the first strategy that yields valid JSON wins.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from src.utils.logger import get_logger

logger = get_logger(__name__)

RepairStep = Callable[[str], str]

CODE_FENCE_PATTERN = re.compile(r"^\s*```[a-zA-Z]*[ \t]*\n?|\n?[ \t]*```\s*$")
TITLE_ONLY_OBJECT_PATTERN = re.compile(r'(\{\s*"title"\s*:\s*"(?:[^"\\]|\\.)*")\s*\}')
OPEN_DESCRIPTION_PATTERN = re.compile(r'("description"\s*:\s*"(?:[^"\\]|\\.)*?)\\?$')
TRAILING_COMMA_PATTERN = re.compile(r",\s*([\]}])")

_CLOSERS = {"[": "]", "{": "}"}


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    return CODE_FENCE_PATTERN.sub("", text).strip()


def _scan(text: str):
    """
    Walk the text tracking string state and bracket nesting.

    Yields (index, char, depth_after) for every bracket outside strings.
    """
    depth = 0
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
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
            yield i, ch, depth
        elif ch in "]}":
            depth -= 1
            yield i, ch, depth


# -- repair steps ------------------------------------------------------------


def isolate_json(text: str) -> str:
    """Drop code fences and any prose before the first bracket."""
    text = strip_code_fence(text)
    starts = [i for i in (text.find("["), text.find("{")) if i >= 0]
    if not starts:
        return text
    return text[min(starts):].rstrip()


def insert_missing_description(text: str) -> str:
    """Give objects that only carry a title an empty description."""
    return TITLE_ONLY_OBJECT_PATTERN.sub(r'\1, "description": ""}', text)


def close_truncated_description(text: str) -> str:
    """Terminate a description string the reply was cut off in."""
    stripped = text.rstrip()
    if _ends_inside_string(stripped):
        match = OPEN_DESCRIPTION_PATTERN.search(stripped)
        if match:
            return stripped[: match.start()] + match.group(1) + '"}'
    return text


def balance_brackets(text: str) -> str:
    """
    Close an open string, then append the missing closing brackets.

    Closers without a matching opener are dropped.
    """
    stack: list[str] = []
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            out.append(ch)
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
            stack.append(ch)
        elif ch in "]}":
            if not stack or _CLOSERS[stack[-1]] != ch:
                continue
            stack.pop()
        out.append(ch)

    repaired = "".join(out)
    if in_string:
        if escaped:
            repaired = repaired[:-1]
        repaired += '"'
    repaired = repaired.rstrip()
    if repaired.endswith(","):
        repaired = repaired[:-1]
    return repaired + "".join(_CLOSERS[opener] for opener in reversed(stack))


def drop_trailing_commas(text: str) -> str:
    """Remove commas directly before a closing bracket."""
    return TRAILING_COMMA_PATTERN.sub(r"\1", text)


def truncate_to_last_complete_element(text: str) -> str:
    """
    Cut an unterminated top-level array after its last complete element.

    Text that is not an array, or that is already balanced, is returned
    unchanged.
    """
    stripped = text.strip()
    if not stripped.startswith("["):
        return text
    last_complete = None
    final_depth = 0
    for index, char, depth in _scan(stripped):
        final_depth = depth
        if char in "]}" and depth == 1:
            last_complete = index + 1
    if last_complete is None or (final_depth == 0 and not _ends_inside_string(stripped)):
        return text
    return stripped[:last_complete]


def _ends_inside_string(text: str) -> bool:
    in_string = False
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif in_string and ch == "\\":
            escaped = True
        elif ch == '"':
            in_string = not in_string
    return in_string


# -- strategies --------------------------------------------------------------


@dataclass(frozen=True)
class JsonRepairStrategy:
    """A named sequence of repair steps followed by a parse attempt."""

    name: str
    steps: tuple[RepairStep, ...]

    def repair(self, text: str) -> str:
        """Run every step in order."""
        for step in self.steps:
            text = step(text)
        return text

    def attempt(self, text: str) -> Optional[Any]:
        """Return the parsed value, or None when the repaired text is still invalid."""
        try:
            return json.loads(self.repair(text))
        except (json.JSONDecodeError, ValueError):
            return None


DEFAULT_REPAIR_STRATEGIES: tuple[JsonRepairStrategy, ...] = (
    JsonRepairStrategy("isolate", (isolate_json,)),
    JsonRepairStrategy(
        "close_and_balance",
        (
            isolate_json,
            insert_missing_description,
            close_truncated_description,
            balance_brackets,
            insert_missing_description,
            drop_trailing_commas,
        ),
    ),
    JsonRepairStrategy(
        "last_complete_element",
        (
            isolate_json,
            truncate_to_last_complete_element,
            balance_brackets,
            insert_missing_description,
            drop_trailing_commas,
        ),
    ),
)


def attempt_json_recovery(
    text: str,
    strategies: Sequence[JsonRepairStrategy] = DEFAULT_REPAIR_STRATEGIES,
) -> Optional[Any]:
    """
    Try each repair strategy in order until one produces valid JSON.

    Args:
        text: Raw, possibly truncated JSON text
        strategies: Ordered strategies to try

    Returns:
        The parsed value, or None if no strategy succeeded
    """
    if not text or not text.strip():
        return None

    for strategy in strategies:
        value = strategy.attempt(text)
        if value is not None:
            logger.debug(f"Recovered malformed JSON with strategy '{strategy.name}'")
            return value

    logger.debug("JSON recovery failed for all strategies")
    return None
