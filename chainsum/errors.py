# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Exceptions raised by the chain model and the summarizer."""

from __future__ import annotations

from typing import Dict


class SummarizerError(Exception):
    """Base class for every error raised by chainsum."""


class ChainParseError(SummarizerError):
    """The flat message chain cannot be turned into a ChainAST."""


class SummaryGenerationError(SummarizerError):
    """The summarization handler failed or had nothing to summarize."""


class SectionsSummarizationError(SummarizerError):
    """One or more sections failed to collapse.

    Attributes:
        failures (Dict[int, Exception]): Section index mapped to the error
            raised while summarizing that section.
    """

    def __init__(self, failures: Dict[int, Exception]):
        self.failures = dict(sorted(failures.items()))
        joined = "\n".join(f"section {idx} summary generation failed: {err}" for idx, err in self.failures.items())
        super().__init__(f"failed to summarize sections: {joined}")


class ToolCallNotFoundError(SummarizerError, LookupError):
    """No body pair holds a tool call with the requested ID."""

    def __init__(self, tool_call_id: str):
        self.tool_call_id = tool_call_id
        super().__init__(f"tool call with ID {tool_call_id} not found")


class PatternValidationError(SummarizerError, ValueError):
    """A value does not match a tool call ID template.

    Attributes:
        value (str): The rejected value.
        position (int): Offset of the first mismatch, ``-1`` when the
            length is wrong.
        expected (str): Description of what the template expects there.
        got (str): What was found instead.
    """

    def __init__(self, value: str, position: int, expected: str, got: str, message: str):
        self.value = value
        self.position = position
        self.expected = expected
        self.got = got
        if position >= 0:
            text = f"validation failed for '{value}' at position {position}: expected {expected}, got '{got}': {message}"
        else:
            text = f"validation failed for '{value}': {message}"
        super().__init__(text)
