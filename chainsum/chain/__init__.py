# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Chain model: sections, body pairs and tool call ID templates."""

from chainsum.chain.ast import (
    FAKE_REASONING_SIGNATURE_GEMINI,
    SUMMARIZATION_TOOL_ARGS,
    SUMMARIZATION_TOOL_NAME,
    SUMMARIZED_CONTENT_PREFIX,
    BodyPair,
    BodyPairType,
    ChainAST,
    ChainSection,
    Header,
    ToolCallPair,
    ToolCallsInfo,
    contains_summarized_content,
)
from chainsum.chain.tool_ids import (
    DEFAULT_TOOL_CALL_ID_TEMPLATE,
    PatternSample,
    generate_from_pattern,
    matches_pattern,
    validate_pattern,
)

__all__ = [
    "ChainAST",
    "ChainSection",
    "Header",
    "BodyPair",
    "BodyPairType",
    "ToolCallPair",
    "ToolCallsInfo",
    "contains_summarized_content",
    "SUMMARIZATION_TOOL_NAME",
    "SUMMARIZATION_TOOL_ARGS",
    "SUMMARIZED_CONTENT_PREFIX",
    "FAKE_REASONING_SIGNATURE_GEMINI",
    "DEFAULT_TOOL_CALL_ID_TEMPLATE",
    "PatternSample",
    "generate_from_pattern",
    "matches_pattern",
    "validate_pattern",
]
