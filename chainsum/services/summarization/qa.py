# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
QA pair reduction.

Caps the number and total size of sections by folding the oldest ones into
a single leading summary section:

    [S0 S1 S2 S3 S4 S5 S6]   max_sections=2
    [Q(S0..S4) S5 S6]        Q carries S0's system message

Each section is treated as one question/answer unit.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from chainsum.chain.ast import ChainAST, ChainSection, Header, contains_summarized_content
from chainsum.errors import SummaryGenerationError
from chainsum.models import ChatMessageType, Message
from chainsum.services.summarization.summary import (
    SummarizeHandler,
    build_summary_pair,
    determine_summarized_type_for_sections,
    flatten_pairs,
    generate_summary,
)

logger = logging.getLogger(__name__)

# Keeps the folded chain clear of max_bytes once the summary section is added.
QA_BUFFER_BYTES = 1000


def exceeds_qa_section_limits(ast: ChainAST, max_sections: int, max_bytes: int) -> bool:
    return len(ast.sections) > max_sections or ast.size > max_bytes


def determine_recent_sections_to_keep(ast: ChainAST, max_sections: int, max_bytes: int) -> int:
    """Number of newest sections that fit both caps.

    Args:
        ast (ChainAST): Chain to inspect.
        max_sections (int): Section count cap.
        max_bytes (int): Byte cap, reduced by ``QA_BUFFER_BYTES``.

    Returns:
        int: How many sections, counted from the end, are kept.
    """
    effective_max_bytes = max_bytes - QA_BUFFER_BYTES
    keep_count = 0
    current_size = 0

    for section in reversed(ast.sections):
        if keep_count >= max_sections:
            break
        section_size = section.size
        if current_size + section_size > effective_max_bytes:
            break
        current_size += section_size
        keep_count += 1

    return keep_count


def prepare_qa_sections_for_summarization(
    ast: ChainAST,
    max_sections: int,
    max_bytes: int,
) -> Tuple[List[Message], List[Message]]:
    """Human and AI/tool messages of the sections to fold.

    Returns two empty lists when nothing should be folded: no candidates,
    or a single candidate that already is one summarized pair.

    Args:
        ast (ChainAST): Chain to inspect.
        max_sections (int): Section count cap.
        max_bytes (int): Byte cap.

    Returns:
        Tuple[List[Message], List[Message]]: ``(human_messages, ai_messages)``.
    """
    if not ast.sections:
        return [], []

    keep_count = determine_recent_sections_to_keep(ast, max_sections, max_bytes)
    candidates = ast.sections[: len(ast.sections) - keep_count]
    if not candidates:
        return [], []
    only = candidates[0]
    if len(candidates) == 1 and len(only.body) == 1 and contains_summarized_content(only.body[0]):
        return [], []

    human_messages = [s.header.human_message for s in candidates if s.header.human_message is not None]
    ai_messages: List[Message] = []
    for section in candidates:
        ai_messages.extend(flatten_pairs(section.body))
    return human_messages, ai_messages


async def _combined_human_message(
    handler: SummarizeHandler,
    human_messages: List[Message],
    summarize_human: bool,
) -> Optional[Message]:
    if not human_messages:
        return None
    if summarize_human:
        try:
            summary = await generate_summary(handler, human_messages, [])
        except SummaryGenerationError as e:
            raise SummaryGenerationError(f"QA (human) summary generation failed: {e}") from e
        return Message.text(ChatMessageType.HUMAN, summary)

    combined = Message(role=ChatMessageType.HUMAN, parts=[])
    for msg in human_messages:
        combined.parts.extend(msg.parts)
    return combined


async def summarize_qa_pairs(
    ast: ChainAST,
    handler: SummarizeHandler,
    max_sections: int,
    max_bytes: int,
    summarize_human: bool,
    tool_call_id_template: str,
) -> bool:
    """Fold the oldest sections into one leading summary section.

    Nothing happens unless the chain exceeds *max_sections* or *max_bytes*.
    The new section list is built completely and then swapped in, so a
    failure leaves *ast* untouched.

    Args:
        ast (ChainAST): Chain to modify in place.
        handler (SummarizeHandler): Summarization handler.
        max_sections (int): Section count cap.
        max_bytes (int): Byte cap.
        summarize_human (bool): Summarize folded human messages instead of
            concatenating their parts verbatim.
        tool_call_id_template (str): Template for synthetic call IDs.

    Returns:
        bool: Whether sections were folded.

    Raises:
        SummaryGenerationError: If the handler fails.
    """
    if not exceeds_qa_section_limits(ast, max_sections, max_bytes):
        return False

    human_messages, ai_messages = prepare_qa_sections_for_summarization(ast, max_sections, max_bytes)
    if not human_messages and not ai_messages:
        logger.debug("QA limits exceeded but nothing left to fold")
        return False

    human_message = await _combined_human_message(handler, human_messages, summarize_human)

    try:
        ai_summary = await generate_summary(handler, human_messages, ai_messages)
    except SummaryGenerationError as e:
        raise SummaryGenerationError(f"QA (ai) summary generation failed: {e}") from e

    keep_count = determine_recent_sections_to_keep(ast, max_sections, max_bytes)
    folded = ast.sections[: len(ast.sections) - keep_count]
    kept = ast.sections[len(ast.sections) - keep_count :]

    summary_pair = build_summary_pair(
        determine_summarized_type_for_sections(folded), ai_summary, tool_call_id_template
    )
    system_message = ast.sections[0].header.system_message
    sections = [
        ChainSection(
            header=Header(system_message=system_message, human_message=human_message),
            body=[summary_pair],
        )
    ]
    for section in kept:
        sections.append(ChainSection(header=Header(human_message=section.header.human_message), body=section.body))

    before = len(ast.sections)
    ast.sections = sections
    logger.info("Folded %d of %d sections into a QA summary, %d kept", len(folded), before, len(kept))
    return True
