"""
Insertable block parser for job editor assistant replies.

Extracts ``[INSERTABLE:<field>]...[/INSERTABLE]`` regions from an assistant
reply, returning the remaining prose for display and typed blocks the
recruiter can insert into the job form.

The parser never raises. Every malformed input degrades to "no block,
text shown as-is".
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from src.utils.logger import get_logger

from .fallbacks import DEFAULT_ORPHAN_STRATEGIES, CLOSER, OrphanCloserStrategy, RawJsonDetector
from .fields import InsertableField, resolve_field
from .response_cleaner import FINAL_CLEANUP_RULES, ResponseCleaner
from .structured import (
    STRUCTURED_VALIDATORS,
    element_count,
    normalize_job_type,
    parse_json_payload,
    validate_business_case_questions,
)

logger = get_logger(__name__)

CANONICAL_BLOCK_PATTERN = re.compile(r"\[INSERTABLE:([A-Za-z]+)\]([\s\S]*?)\[/INSERTABLE\]")
BULLET_PATTERN = re.compile(r"^\s*(?:[-*•‣◦▪]|\d+[.)])\s+")


@dataclass
class InsertableBlock:
    """A suggestion the recruiter can insert into one job form field."""

    field: InsertableField
    content: str
    items: Optional[list[str]] = None
    structured_data: Optional[Any] = None
    recovered: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation (camelCase, as the editor expects)."""
        data: dict[str, Any] = {"field": self.field.value, "content": self.content}
        if self.items is not None:
            data["items"] = list(self.items)
        if self.structured_data is not None:
            if isinstance(self.structured_data, list):
                data["structuredData"] = [
                    item.model_dump() if hasattr(item, "model_dump") else item
                    for item in self.structured_data
                ]
            else:
                data["structuredData"] = self.structured_data
        return data


@dataclass
class ParseResult:
    """Result of parsing one assistant reply."""

    clean_text: str = ""
    blocks: list[InsertableBlock] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_blocks(self) -> bool:
        """Check if anything insertable was found."""
        return len(self.blocks) > 0

    @property
    def fields(self) -> list[InsertableField]:
        """Fields of the extracted blocks, in order."""
        return [b.field for b in self.blocks]

    def get(self, target: InsertableField) -> Optional[InsertableBlock]:
        """First block for the given field, if any."""
        for block in self.blocks:
            if block.field == target:
                return block
        return None


class InsertableBlockParser:
    """
    Staged parser for assistant replies.

    Stages, each working on the output of the previous one:
    pre-clean, canonical extraction, orphan-closer fallback (only when no
    block was found), untagged business case JSON fallback (only when no
    business case block was found), final cleanup.
    """

    def __init__(
        self,
        cleaner: Optional[ResponseCleaner] = None,
        orphan_strategies: Sequence[OrphanCloserStrategy] = DEFAULT_ORPHAN_STRATEGIES,
        raw_json_detector: Optional[RawJsonDetector] = None,
        min_recovered_length: int = 50,
    ):
        self.cleaner = cleaner or ResponseCleaner()
        self.finalizer = ResponseCleaner(FINAL_CLEANUP_RULES)
        self.orphan_strategies = tuple(orphan_strategies)
        self.raw_json_detector = raw_json_detector or RawJsonDetector()
        self.min_recovered_length = min_recovered_length

    def parse(self, text: str) -> ParseResult:
        """
        Parse an assistant reply.

        Args:
            text: Raw assistant message

        Returns:
            ParseResult with display text and extracted blocks
        """
        result = ParseResult()
        if not isinstance(text, str) or not text.strip():
            return result

        remaining = self.cleaner.clean(text)
        remaining = self._extract_canonical(remaining, result)

        if not result.blocks and CLOSER in remaining:
            remaining = self._recover_orphan_block(remaining, result)

        if result.get(InsertableField.BUSINESS_CASE_QUESTIONS) is None:
            remaining = self._detect_raw_json(remaining, result)

        result.clean_text = self.finalizer.clean(remaining).strip()
        return result

    # -- canonical blocks ----------------------------------------------------

    def _extract_canonical(self, text: str, result: ParseResult) -> str:
        def replace(match: re.Match) -> str:
            target = resolve_field(match.group(1))
            if target is None:
                result.warnings.append(f"Unknown insertable field '{match.group(1)}'")
                logger.debug(f"Keeping content of unknown insertable field '{match.group(1)}' as text")
                return match.group(2).strip()

            block = self._build_block(target, match.group(2), result)
            if block is not None:
                result.blocks.append(block)
            return ""

        return CANONICAL_BLOCK_PATTERN.sub(replace, text)

    def _build_block(
        self, target: InsertableField, raw_content: str, result: ParseResult
    ) -> Optional[InsertableBlock]:
        content = raw_content.strip()
        if not content:
            result.warnings.append(f"Empty {target.value} block skipped")
            return None

        block = InsertableBlock(field=target, content=content)
        if target.is_list:
            block.items = self._split_items(content)
        elif target.is_json:
            self._attach_structured_data(block, result)
        elif target == InsertableField.JOB_TYPE:
            block.structured_data = normalize_job_type(content)
        return block

    @staticmethod
    def _split_items(content: str) -> list[str]:
        """Split a bullet list into items, dropping markers and blank lines."""
        items = []
        for line in content.splitlines():
            item = BULLET_PATTERN.sub("", line).strip()
            if item:
                items.append(item)
        return items

    def _attach_structured_data(self, block: InsertableBlock, result: ParseResult) -> None:
        data, recovered = parse_json_payload(block.content)
        if data is None:
            result.warnings.append(f"Could not parse {block.field.value} JSON; keeping raw content")
            logger.debug(f"Unparseable {block.field.value} payload left as raw text")
            return

        items = STRUCTURED_VALIDATORS[block.field](data)
        self._note_dropped(block.field, element_count(data), len(items), result)
        block.structured_data = items
        block.recovered = recovered

    # -- fallbacks -----------------------------------------------------------

    def _recover_orphan_block(self, text: str, result: ParseResult) -> str:
        for strategy in self.orphan_strategies:
            span = strategy.find(text, self.min_recovered_length)
            if span is None:
                continue
            logger.debug(f"Recovered {span.field.value} block with strategy '{strategy.name}'")
            result.blocks.append(InsertableBlock(field=span.field, content=span.content, recovered=True))
            return text[: span.start] + text[span.end:]
        return text

    def _detect_raw_json(self, text: str, result: ParseResult) -> str:
        match = self.raw_json_detector.find(text)
        if match is None:
            return text

        data, _ = parse_json_payload(match.raw)
        if data is None:
            return text

        questions = validate_business_case_questions(data)
        if not questions:
            return text

        target = InsertableField.BUSINESS_CASE_QUESTIONS
        self._note_dropped(target, element_count(data), len(questions), result)
        logger.debug(f"Recovered {len(questions)} untagged business case questions")
        result.blocks.append(
            InsertableBlock(
                field=target,
                content=match.raw.strip(),
                structured_data=questions,
                recovered=True,
            )
        )
        return text[: match.start] + text[match.end:]

    @staticmethod
    def _note_dropped(target: InsertableField, total: int, kept: int, result: ParseResult) -> None:
        if kept < total:
            result.warnings.append(f"Dropped {total - kept} invalid {target.value} entries")


# Singleton instance
_block_parser: Optional[InsertableBlockParser] = None


def get_block_parser() -> InsertableBlockParser:
    """Get the block parser singleton instance."""
    global _block_parser
    if _block_parser is None:
        from src.utils.config import get_settings

        _block_parser = InsertableBlockParser(
            min_recovered_length=get_settings().assistant.min_recovered_block_length,
        )
    return _block_parser


def parse_insertable_blocks(text: str) -> ParseResult:
    """Parse an assistant reply with the shared parser."""
    return get_block_parser().parse(text)
