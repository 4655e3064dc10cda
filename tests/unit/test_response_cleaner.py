"""
Tests for src.assistant.parsing.response_cleaner — cleanup rules and ordering.
"""

import re

import pytest

from src.assistant.parsing.response_cleaner import (
    BLANK_LINE_RUNS,
    DEFAULT_CLEANUP_RULES,
    EMOJI_STATUS_LINES,
    INSERT_BUTTONS_BELOW,
    INTERNAL_STATE_BLOCK,
    INTERNAL_STATE_LINES,
    MISSING_COLON,
    POINTING_EMOJI,
    PREFIXED_FIELD,
    TRUNCATED_NEXT_STEPS,
    TRUNCATED_OPENER,
    CleanupRule,
    ResponseCleaner,
    clean_ai_response,
)


# ── Leaked internal state ────────────────────────────────────────────────────


class TestInternalState:
    def test_internal_state_block_removed(self):
        text = (
            "<!-- SYSTEM_INTERNAL_STATE\n_TITLE: Engineer\n_DESC: missing\n"
            "<!-- END SYSTEM_INTERNAL_STATE -->\nHello!"
        )
        assert INTERNAL_STATE_BLOCK.apply(text).strip() == "Hello!"

    def test_unterminated_block_takes_state_lines(self):
        text = "<!-- SYSTEM_INTERNAL_STATE\n_TITLE: Engineer\n\nHello!"
        assert INTERNAL_STATE_BLOCK.apply(text).strip() == "Hello!"

    def test_header_comment_alone_keeps_following_prose(self):
        text = (
            "<!-- SYSTEM_INTERNAL_STATE - MACHINE USE ONLY - DO NOT OUTPUT -->\n"
            "Great! Here's a title suggestion:\n"
            "[INSERTABLE:title]Senior Backend Engineer[/INSERTABLE]"
        )
        assert INTERNAL_STATE_BLOCK.apply(text) == (
            "\nGreat! Here's a title suggestion:\n"
            "[INSERTABLE:title]Senior Backend Engineer[/INSERTABLE]"
        )

    def test_header_comment_with_state_lines(self):
        text = (
            "<!-- SYSTEM_INTERNAL_STATE - MACHINE USE ONLY -->\n"
            "_TITLE: Engineer\n_RESP: 2\nShall we add benefits next?"
        )
        assert INTERNAL_STATE_BLOCK.apply(text) == "\nShall we add benefits next?"

    def test_unclosed_header_stops_at_end_of_line(self):
        text = "<!-- SYSTEM_INTERNAL_STATE\nHere is the description you asked for."
        assert INTERNAL_STATE_BLOCK.apply(text) == "\nHere is the description you asked for."

    @pytest.mark.parametrize(
        "line",
        ["_TITLE: Senior Engineer", "_RESP: 2", "_BC_COUNT: 0", "_DESCRIPTION_STATUS: SET"],
    )
    def test_state_lines_removed(self, line):
        assert INTERNAL_STATE_LINES.apply(f"{line}\nKeep me") == "Keep me"

    def test_underscored_words_in_prose_kept(self):
        text = "Use snake_case names: they read well."
        assert INTERNAL_STATE_LINES.apply(text) == text

    @pytest.mark.parametrize(
        "line",
        ["❌ TITLE: NOT SET", "⏳ DESCRIPTION: pending", "✅ **BENEFITS**: 2 added"],
    )
    def test_emoji_status_lines_removed(self, line):
        assert EMOJI_STATUS_LINES.apply(f"{line}\nKeep me") == "Keep me"

    def test_emoji_in_prose_kept(self):
        text = "✅ Looks great, nice work!"
        assert EMOJI_STATUS_LINES.apply(text) == text


# ── Tag repairs ──────────────────────────────────────────────────────────────


class TestTagRepairs:
    @pytest.mark.parametrize("text", ["GotABLE:title]", "INSERTABLE:title]", "ABLE: title]"])
    def test_truncated_opener(self, text):
        assert TRUNCATED_OPENER.apply(text) == "[INSERTABLE:title]"

    def test_canonical_opener_untouched(self):
        text = "[INSERTABLE:description]"
        assert TRUNCATED_OPENER.apply(text) == text
        assert MISSING_COLON.apply(text) == text

    @pytest.mark.parametrize("text", ["INSERTABLEtitle]", "[INSERTtitle]", "[INSERTABLEbenefits]"])
    def test_missing_colon(self, text):
        assert MISSING_COLON.apply(text).startswith("[INSERTABLE:")

    def test_prefixed_field_needs_following_closer(self):
        assert PREFIXED_FIELD.apply("Lettitle]Foo[/INSERTABLE]") == "[INSERTABLE:title]Foo[/INSERTABLE]"
        assert PREFIXED_FIELD.apply("Lettitle] without a closer") == "Lettitle] without a closer"

    def test_prefixed_field_keeps_longest_name(self):
        text = "fixedInterviewQuestions][]\n[/INSERTABLE]"
        assert PREFIXED_FIELD.apply(text).startswith("[INSERTABLE:fixedInterviewQuestions]")


# ── Presentation artifacts ───────────────────────────────────────────────────


class TestPresentation:
    def test_pointing_emoji_removed(self):
        assert POINTING_EMOJI.apply("Use the button 👇 to insert") == "Use the button to insert"

    def test_insert_buttons_above_corrected(self):
        text = 'Click the "Insert" buttons above to add them.'
        assert INSERT_BUTTONS_BELOW.apply(text) == 'Click the "Insert" buttons below to add them.'

    def test_truncated_next_steps_dropped(self):
        assert TRUNCATED_NEXT_STEPS.apply("Done.\n\nNext steps: add the") == "Done.\n"

    def test_complete_next_steps_kept(self):
        text = "Done.\n\nNext steps: add the benefits."
        assert TRUNCATED_NEXT_STEPS.apply(text) == text

    def test_next_steps_only_at_end(self):
        text = "Next steps: review\n\nThen we continue."
        assert TRUNCATED_NEXT_STEPS.apply(text) == text

    def test_blank_line_runs_collapsed(self):
        assert BLANK_LINE_RUNS.apply("a\n\n\n\n\nb") == "a\n\nb"
        assert BLANK_LINE_RUNS.apply("a\n\nb") == "a\n\nb"


# ── ResponseCleaner ──────────────────────────────────────────────────────────


class TestResponseCleaner:
    def test_rules_run_in_order(self):
        rules = [
            CleanupRule("a_to_b", re.compile("a"), "b"),
            CleanupRule("b_to_c", re.compile("b"), "c"),
        ]
        assert ResponseCleaner(rules).clean("a") == "c"

    def test_no_rules_is_identity(self):
        assert ResponseCleaner([]).clean("anything") == "anything"

    def test_default_rules_are_idempotent(self):
        text = (
            "_TITLE_STATUS: SET\n"
            "GotABLE:title]Engineer[/INSERTABLE]\n\n\n\n"
            "[ INSERTABLE: description ]About us.[ /INSERTABLE ]\n"
            "Use the Insert buttons above 👆\n"
        )
        once = clean_ai_response(text)
        assert clean_ai_response(once) == once

    def test_every_rule_is_idempotent(self):
        text = "Notitle]Foo[/INSERTABLE]\n❌ TITLE: NOT SET\n\n\n\nINSERTABLEtitle]Bar[/INSERTABLE]"
        for rule in DEFAULT_CLEANUP_RULES:
            once = rule.apply(text)
            assert rule.apply(once) == once, rule.name
