# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
chainsum: compaction of LLM agent message chains.

    from chainsum import Summarizer, SummarizerConfig

    summarizer = Summarizer(SummarizerConfig(use_qa=True))
    messages = await summarizer.summarize_chain(handler, messages)

``handler`` is any ``async (prompt: str) -> str`` callable;
``chainsum.services.llm.build_summarize_handler`` builds one from a
LangChain chat model.
"""

from chainsum.chain.ast import BodyPair, BodyPairType, ChainAST, ChainSection, Header
from chainsum.errors import (
    ChainParseError,
    PatternValidationError,
    SectionsSummarizationError,
    SummarizerError,
    SummaryGenerationError,
    ToolCallNotFoundError,
)
from chainsum.models import (
    BinaryContent,
    ChatMessageType,
    ContentReasoning,
    ImageURLContent,
    Message,
    TextContent,
    ToolCall,
    ToolCallResponse,
)
from chainsum.services.summarization import SummarizeHandler, Summarizer, SummarizerConfig, summarize_chain

__all__ = [
    "ChatMessageType",
    "ContentReasoning",
    "TextContent",
    "ToolCall",
    "ToolCallResponse",
    "ImageURLContent",
    "BinaryContent",
    "Message",
    "ChainAST",
    "ChainSection",
    "Header",
    "BodyPair",
    "BodyPairType",
    "Summarizer",
    "SummarizerConfig",
    "SummarizeHandler",
    "summarize_chain",
    "SummarizerError",
    "ChainParseError",
    "SummaryGenerationError",
    "SectionsSummarizationError",
    "PatternValidationError",
    "ToolCallNotFoundError",
]
