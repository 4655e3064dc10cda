"""
Parsing of AI assistant replies.

This package extracts insertable job form suggestions from the free text
the assistant streams back:
- response_cleaner: pre-clean pass repairing leaked state and mangled tags
- json_recovery: best-effort repair of truncated JSON payloads
- fallbacks: recovery of untagged or half-tagged content
- block_parser: the staged parser tying these together
"""

from .block_parser import (
    InsertableBlock,
    InsertableBlockParser,
    ParseResult,
    get_block_parser,
    parse_insertable_blocks,
)
from .fields import InsertableField, resolve_field
from .json_recovery import JsonRepairStrategy, attempt_json_recovery
from .response_cleaner import CleanupRule, ResponseCleaner, clean_ai_response

__all__ = [
    "InsertableBlock",
    "InsertableBlockParser",
    "ParseResult",
    "get_block_parser",
    "parse_insertable_blocks",
    "InsertableField",
    "resolve_field",
    "JsonRepairStrategy",
    "attempt_json_recovery",
    "CleanupRule",
    "ResponseCleaner",
    "clean_ai_response",
]
