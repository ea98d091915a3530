# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Tests for tool call ID templates."""

import re

import pytest
from chainsum.chain.tool_ids import (
    DEFAULT_TOOL_CALL_ID_TEMPLATE,
    PatternSample,
    generate_from_pattern,
    matches_pattern,
    parse_pattern,
    validate_pattern,
)
from chainsum.errors import PatternValidationError


class TestParsePattern:
    """Tests for parse_pattern."""

    def test_literal_and_random(self):
        """Verify literal prefixes and random placeholders are split."""
        parts = parse_pattern("call_{r:24:x}")
        assert len(parts) == 2
        assert parts[0].literal == "call_"
        assert parts[1].is_random
        assert parts[1].length == 24

    def test_function_placeholder(self):
        """Verify {f} parses as a function name placeholder."""
        parts = parse_pattern("{f}:{r:2:d}")
        assert parts[0].is_function
        assert parts[1].literal == ":"
        assert parts[2].charset == "0123456789"

    def test_unknown_placeholder_is_literal(self):
        """Verify unknown placeholders stay literal text."""
        parts = parse_pattern("id_{r:4:zz}")
        assert len(parts) == 1
        assert parts[0].literal == "id_{r:4:zz}"


class TestGenerateFromPattern:
    """Tests for generate_from_pattern."""

    def test_default_template(self):
        """Verify the default template yields OpenAI style IDs."""
        value = generate_from_pattern(DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert re.fullmatch(r"call_[A-Za-z0-9]{24}", value)

    @pytest.mark.parametrize(
        "pattern,regex",
        [
            ("toolu_{r:10:h}", r"toolu_[0-9a-f]{10}"),
            ("{r:6:H}", r"[0-9A-F]{6}"),
            ("{r:5:l}-{r:5:u}", r"[a-z]{5}-[A-Z]{5}"),
            ("{r:8:base62}", r"[0-9A-Za-z]{8}"),
            ("{r:3:alpha}", r"[A-Za-z]{3}"),
        ],
    )
    def test_charsets(self, pattern, regex):
        """Verify each charset produces characters from its range."""
        assert re.fullmatch(regex, generate_from_pattern(pattern))

    def test_function_name(self):
        """Verify {f} is replaced with the function name."""
        assert re.fullmatch(r"get_number:\d", generate_from_pattern("{f}:{r:1:d}", "get_number"))

    def test_function_name_fallback(self):
        """Verify {f} falls back to 'function' without a name."""
        assert generate_from_pattern("{f}") == "function"

    def test_values_differ(self):
        """Verify generated values are random."""
        values = {generate_from_pattern(DEFAULT_TOOL_CALL_ID_TEMPLATE) for _ in range(10)}
        assert len(values) == 10


class TestValidatePattern:
    """Tests for validate_pattern and matches_pattern."""

    def test_valid_samples(self):
        """Verify matching samples pass."""
        validate_pattern(
            "{f}:{r:1:d}",
            [PatternSample(value="get_number:0", function_name="get_number"), PatternSample(value="function:7")],
        )

    def test_no_samples(self):
        """Verify an empty sample list passes."""
        validate_pattern("call_{r:24:x}", [])

    def test_length_mismatch(self):
        """Verify a wrong length reports position -1."""
        with pytest.raises(PatternValidationError, match="incorrect length: expected 9, got 8") as exc_info:
            validate_pattern("call_{r:4:d}", [PatternSample(value="call_123")])
        assert exc_info.value.position == -1

    def test_charset_mismatch(self):
        """Verify a character outside the charset reports its position."""
        with pytest.raises(PatternValidationError, match="pattern mismatch") as exc_info:
            validate_pattern("call_{r:4:d}", [PatternSample(value="call_12a4")])
        assert exc_info.value.position == 7
        assert exc_info.value.got == "a"
        assert "0-9" in exc_info.value.expected

    def test_literal_mismatch(self):
        """Verify a wrong literal prefix reports the first differing offset."""
        with pytest.raises(PatternValidationError) as exc_info:
            validate_pattern("call_{r:2:d}", [PatternSample(value="cell_12")])
        assert exc_info.value.position == 1
        assert exc_info.value.expected == "'call_'"

    def test_is_value_error(self):
        """Verify validation errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            validate_pattern("{r:1:d}", [PatternSample(value="x")])

    def test_matches_pattern(self):
        """Verify matches_pattern returns a boolean instead of raising."""
        assert matches_pattern("call_{r:2:d}", "call_42")
        assert not matches_pattern("call_{r:2:d}", "call_4x")
        assert matches_pattern("{f}_{r:1:d}", "bash_1", "bash")
        assert not matches_pattern("{f}_{r:1:d}", "grep_1", "bash")
