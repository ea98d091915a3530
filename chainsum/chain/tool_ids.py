# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Tool call ID templates.

Providers validate the shape of tool call IDs (``call_...`` for OpenAI,
``toolu_...`` for Anthropic, ``{f}:{n}`` for some open models).  Synthetic
tool calls created by the summarizer must look like the provider's own, so
their IDs are generated from a template:

    literal text, ``{r:LENGTH:CHARSET}`` for random characters and ``{f}``
    for the function name.

Charsets: ``d``/``digit``, ``l``/``lower``, ``u``/``upper``, ``a``/``alpha``,
``x``/``alnum``, ``h``/``hex``, ``H``/``HEX``, ``b``/``base62``.

Examples:
    ``call_{r:24:x}``   → ``call_Xk9pQw2mN5vR8tY7uI6oP3zA``
    ``{f}:{r:1:d}``     → ``get_number:0`` for ``function_name="get_number"``
"""

from __future__ import annotations

import re
import secrets
import string
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from chainsum.errors import PatternValidationError

DEFAULT_TOOL_CALL_ID_TEMPLATE = "call_{r:24:x}"

_FUNCTION_FALLBACK = "function"

_CHARSET_DIGIT = string.digits
_CHARSET_LOWER = string.ascii_lowercase
_CHARSET_UPPER = string.ascii_uppercase
_CHARSET_ALPHA = _CHARSET_LOWER + _CHARSET_UPPER
_CHARSET_ALNUM = _CHARSET_DIGIT + _CHARSET_ALPHA
_CHARSET_HEX = "0123456789abcdef"
_CHARSET_HEX_UPPER = "0123456789ABCDEF"
_CHARSET_BASE62 = _CHARSET_DIGIT + _CHARSET_UPPER + _CHARSET_LOWER

_CHARSETS = {
    "d": _CHARSET_DIGIT,
    "digit": _CHARSET_DIGIT,
    "l": _CHARSET_LOWER,
    "lower": _CHARSET_LOWER,
    "u": _CHARSET_UPPER,
    "upper": _CHARSET_UPPER,
    "a": _CHARSET_ALPHA,
    "alpha": _CHARSET_ALPHA,
    "x": _CHARSET_ALNUM,
    "alnum": _CHARSET_ALNUM,
    "h": _CHARSET_HEX,
    "hex": _CHARSET_HEX,
    "H": _CHARSET_HEX_UPPER,
    "HEX": _CHARSET_HEX_UPPER,
    "b": _CHARSET_BASE62,
    "base62": _CHARSET_BASE62,
}

_CHARSET_DESCRIPTIONS = {
    _CHARSET_DIGIT: "0-9",
    _CHARSET_LOWER: "a-z",
    _CHARSET_UPPER: "A-Z",
    _CHARSET_ALPHA: "a-zA-Z",
    _CHARSET_ALNUM: "a-zA-Z0-9",
    _CHARSET_HEX: "0-9a-f",
    _CHARSET_HEX_UPPER: "0-9A-F",
    _CHARSET_BASE62: "0-9A-Za-z",
}

_PATTERN_RE = re.compile(r"\{r:(\d+):(d|digit|l|lower|u|upper|a|alpha|x|alnum|h|hex|H|HEX|b|base62)\}|\{f\}")


@dataclass(frozen=True)
class PatternPart:
    """One parsed piece of a template.

    Attributes:
        literal (str): Literal text (empty for placeholders).
        is_random (bool): ``{r:...}`` placeholder.
        is_function (bool): ``{f}`` placeholder.
        length (int): Number of random characters.
        charset (str): Characters random output is drawn from.
    """

    literal: str = ""
    is_random: bool = False
    is_function: bool = False
    length: int = 0
    charset: str = ""

    def expected_text(self, function_name: str) -> str:
        """Text this part produces when it is not random."""
        if self.is_function:
            return function_name or _FUNCTION_FALLBACK
        return self.literal


@dataclass(frozen=True)
class PatternSample:
    """Sample value checked against a template.

    Attributes:
        value (str): The tool call ID.
        function_name (str): Function name substituted for ``{f}``.
    """

    value: str
    function_name: str = ""


def parse_pattern(pattern: str) -> List[PatternPart]:
    """Split a template into literal and placeholder parts.

    Args:
        pattern (str): Template such as ``call_{r:24:x}``.

    Returns:
        List[PatternPart]: Parts in template order.
    """
    parts: List[PatternPart] = []
    last = 0
    for match in _PATTERN_RE.finditer(pattern):
        if match.start() > last:
            parts.append(PatternPart(literal=pattern[last : match.start()]))
        if match.group(0) == "{f}":
            parts.append(PatternPart(is_function=True))
        else:
            parts.append(
                PatternPart(
                    is_random=True,
                    length=int(match.group(1)),
                    charset=_CHARSETS.get(match.group(2), _CHARSET_ALNUM),
                )
            )
        last = match.end()
    if last < len(pattern):
        parts.append(PatternPart(literal=pattern[last:]))
    return parts


def generate_from_pattern(pattern: str, function_name: str = "") -> str:
    """Generate a random value matching *pattern*.

    Never fails: unknown placeholders are kept as literal text.

    Args:
        pattern (str): Template such as ``call_{r:24:x}``.
        function_name (str): Value for ``{f}``. Defaults to ``"function"``
            when empty.

    Returns:
        str: A freshly generated value.
    """
    out: List[str] = []
    for part in parse_pattern(pattern):
        if part.is_random:
            out.append("".join(secrets.choice(part.charset) for _ in range(part.length)))
        else:
            out.append(part.expected_text(function_name))
    return "".join(out)


def _find_mismatch(value: str, parts: Sequence[PatternPart], function_name: str) -> Tuple[int, Optional[PatternPart]]:
    """Return the first offset where *value* diverges and the part expected there."""
    pos = 0
    for part in parts:
        if part.is_random:
            for _ in range(part.length):
                if pos >= len(value):
                    return pos, part
                if value[pos] not in part.charset:
                    return pos, part
                pos += 1
        else:
            for ch in part.expected_text(function_name):
                if pos >= len(value) or value[pos] != ch:
                    return pos, part
                pos += 1
    return pos, None


def _expected_length(parts: Sequence[PatternPart], function_name: str) -> int:
    return sum(part.length if part.is_random else len(part.expected_text(function_name)) for part in parts)


def _describe(part: PatternPart, function_name: str) -> str:
    if part.is_random:
        return f"character from charset [{_CHARSET_DESCRIPTIONS.get(part.charset, part.charset)}]"
    if part.is_function:
        return f"function name '{function_name}'" if function_name else "function name"
    return f"'{part.literal}'"


def validate_pattern(pattern: str, samples: Sequence[PatternSample]) -> None:
    """Check that every sample matches *pattern*.

    Args:
        pattern (str): Template such as ``call_{r:24:x}``.
        samples (Sequence[PatternSample]): Values to check.

    Raises:
        PatternValidationError: On the first sample that does not match,
            with the offending position and what was expected there.
    """
    if not samples:
        return

    parts = parse_pattern(pattern)
    for sample in samples:
        value = sample.value
        expected_len = _expected_length(parts, sample.function_name)
        if len(value) != expected_len:
            raise PatternValidationError(
                value=value,
                position=-1,
                expected=f"length {expected_len}",
                got=f"length {len(value)}",
                message=f"incorrect length: expected {expected_len}, got {len(value)}",
            )

        pos, part = _find_mismatch(value, parts, sample.function_name)
        if part is not None:
            raise PatternValidationError(
                value=value,
                position=pos,
                expected=_describe(part, sample.function_name),
                got=value[pos] if pos < len(value) else "",
                message="pattern mismatch",
            )


def matches_pattern(pattern: str, value: str, function_name: str = "") -> bool:
    """Whether a single value matches *pattern*."""
    try:
        validate_pattern(pattern, [PatternSample(value=value, function_name=function_name)])
    except PatternValidationError:
        return False
    return True
