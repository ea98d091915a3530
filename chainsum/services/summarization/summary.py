# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Summary generation shared by every compaction phase.

Messages are serialized into an XML-tagged prompt and handed to a
``SummarizeHandler``. The handler is the only place an LLM is involved;
everything here is deterministic text building.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, List, Sequence

from chainsum.chain.ast import (
    SUMMARIZED_CONTENT_PREFIX,
    BodyPair,
    BodyPairType,
    ChainSection,
)
from chainsum.errors import SummaryGenerationError
from chainsum.models import (
    BinaryContent,
    ChatMessageType,
    ImageURLContent,
    Message,
    TextContent,
    ToolCall,
    ToolCallResponse,
)
from chainsum.services.prompts.base import (
    CONTEXTUAL_SUMMARY_INSTRUCTIONS,
    NOTHING_TO_SUMMARIZE,
    STANDALONE_SUMMARY_INSTRUCTIONS,
    TASKS_SUMMARY_INSTRUCTIONS,
)

logger = logging.getLogger(__name__)

SummarizeHandler = Callable[[str], Awaitable[str]]

_BINARY_PREVIEW_BYTES = 100


def _binary_preview(data: bytes) -> str:
    return f"first {_BINARY_PREVIEW_BYTES} bytes in hex: {data[:_BINARY_PREVIEW_BYTES].hex()}\n"


def human_messages_to_text(human_messages: Sequence[Message]) -> str:
    """Render human messages as a ``<tasks>`` block.

    Non-human messages are skipped; task IDs keep the original index.

    Args:
        human_messages (Sequence[Message]): Messages to render.

    Returns:
        str: The ``<tasks>...</tasks>`` block followed by a newline.
    """
    out: List[str] = ["<tasks>\n"]
    for mdx, msg in enumerate(human_messages):
        if msg.role != ChatMessageType.HUMAN:
            continue
        out.append(f'<task id="{mdx}">\n')
        for part in msg.parts:
            if isinstance(part, TextContent):
                out.append(f"{part.text}\n")
            elif isinstance(part, ImageURLContent):
                out.append(f'<image url="{part.url}">\n')
                if part.detail:
                    out.append(f"{part.detail}\n")
                out.append("</image>\n")
            elif isinstance(part, BinaryContent):
                out.append(f'<binary mime="{part.mime_type}">\n')
                if part.data:
                    out.append(_binary_preview(part.data))
                out.append("</binary>\n")
        out.append("</task>\n")
    out.append("</tasks>\n")
    return "".join(out)


def ai_messages_to_text(ai_messages: Sequence[Message]) -> str:
    """Render AI and tool messages as a ``<messages>`` block.

    Args:
        ai_messages (Sequence[Message]): Messages to render.

    Returns:
        str: The ``<messages>...</messages>`` block.
    """
    out: List[str] = ["<messages>\n"]
    for mdx, msg in enumerate(ai_messages):
        out.append(f'<message id="{mdx}" role="{msg.role.value}">\n')
        for pdx, part in enumerate(msg.parts):
            part_num = f'part="{pdx}"'
            if isinstance(part, TextContent):
                out.append(f"<content {part_num}>\n{part.text}\n</content>\n")
            elif isinstance(part, ToolCall):
                out.append(f'<tool_call name="{part.name}" {part_num}>\n{part.arguments}\n</tool_call>\n')
            elif isinstance(part, ToolCallResponse):
                out.append(
                    f'<tool_call_response name="{part.name}" {part_num}>\n{part.content}\n</tool_call_response>\n'
                )
            elif isinstance(part, ImageURLContent):
                out.append(f'<image url="{part.url}" {part_num}>\n')
                if part.detail:
                    out.append(f"{part.detail}\n")
                out.append("</image>\n")
            elif isinstance(part, BinaryContent):
                out.append(f'<binary mime="{part.mime_type}" {part_num}>\n')
                if part.data:
                    out.append(_binary_preview(part.data))
                out.append("</binary>\n")
        out.append("</message>\n")
    out.append("</messages>")
    return "".join(out)


def messages_to_prompt(human_messages: Sequence[Message], ai_messages: Sequence[Message]) -> str:
    """Build the handler prompt for the given message groups.

    Human + AI messages: human messages are context for summarizing the
    AI side. AI only: standalone summary. Human only: the human messages
    themselves are summarized.

    Args:
        human_messages (Sequence[Message]): Human messages.
        ai_messages (Sequence[Message]): AI and tool messages.

    Returns:
        str: Prompt text.
    """
    if not human_messages and not ai_messages:
        return NOTHING_TO_SUMMARIZE

    if human_messages and ai_messages:
        return (
            f"<instructions>{CONTEXTUAL_SUMMARY_INSTRUCTIONS}</instructions>\n\n"
            + human_messages_to_text(human_messages)
            + ai_messages_to_text(ai_messages)
        )
    if ai_messages:
        return f"<instructions>{STANDALONE_SUMMARY_INSTRUCTIONS}</instructions>\n\n" + ai_messages_to_text(
            ai_messages
        )
    return f"<instructions>{TASKS_SUMMARY_INSTRUCTIONS}</instructions>\n\n" + human_messages_to_text(human_messages)


async def generate_summary(
    handler: SummarizeHandler,
    human_messages: Sequence[Message],
    ai_messages: Sequence[Message],
) -> str:
    """Summarize messages through *handler*.

    Args:
        handler (SummarizeHandler): Async callable turning a prompt into a
            summary.
        human_messages (Sequence[Message]): Human messages (context, or the
            subject when no AI messages are given).
        ai_messages (Sequence[Message]): AI and tool messages to summarize.

    Returns:
        str: The summary text.

    Raises:
        SummaryGenerationError: If both groups are empty or the handler
            fails.
    """
    if handler is None:
        raise SummaryGenerationError("summarizer handler cannot be None")
    if not human_messages and not ai_messages:
        raise SummaryGenerationError("cannot summarize empty message list")

    prompt = messages_to_prompt(human_messages, ai_messages)
    logger.debug(
        "Generating summary: %d human, %d AI/tool messages, prompt %d chars",
        len(human_messages),
        len(ai_messages),
        len(prompt),
    )
    try:
        return await handler(prompt)
    except SummaryGenerationError:
        raise
    except Exception as e:
        raise SummaryGenerationError(f"summarization failed: {e}") from e


def determine_summarized_type(pairs: Iterable[BodyPair]) -> BodyPairType:
    """Type of the pair replacing *pairs*.

    Any tool activity (request/response or an earlier summary) yields
    SUMMARIZATION; plain completions yield COMPLETION.
    """
    for pair in pairs:
        if pair.type in (BodyPairType.REQUEST_RESPONSE, BodyPairType.SUMMARIZATION):
            return BodyPairType.SUMMARIZATION
    return BodyPairType.COMPLETION


def determine_summarized_type_for_sections(sections: Iterable[ChainSection]) -> BodyPairType:
    for section in sections:
        if determine_summarized_type(section.body) == BodyPairType.SUMMARIZATION:
            return BodyPairType.SUMMARIZATION
    return BodyPairType.COMPLETION


def build_summary_pair(summary_type: BodyPairType, summary: str, tool_call_id_template: str) -> BodyPair:
    """Wrap *summary* into a pair of the requested type.

    Raises:
        ValueError: If *summary_type* is not COMPLETION or SUMMARIZATION.
    """
    if summary_type == BodyPairType.SUMMARIZATION:
        return BodyPair.from_summarization(summary, tool_call_id_template)
    if summary_type == BodyPairType.COMPLETION:
        return BodyPair.from_completion(SUMMARIZED_CONTENT_PREFIX + summary)
    raise ValueError(f"invalid summarized section type: {summary_type}")


def flatten_pairs(pairs: Iterable[BodyPair]) -> List[Message]:
    messages: List[Message] = []
    for pair in pairs:
        messages.extend(pair.messages())
    return messages


def section_context(section: ChainSection) -> List[Message]:
    """Human message of *section* as summary context (empty if absent)."""
    human = section.header.human_message
    return [human] if human is not None else []
