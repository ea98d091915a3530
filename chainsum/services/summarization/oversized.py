# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Oversized body pair compaction.

Summarizes single pairs larger than a byte ceiling in place. Runs before the
active-window rotation, which remains the backstop when a summary fails.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Tuple

from chainsum.chain.ast import BodyPair, ChainSection, contains_summarized_content
from chainsum.services.summarization.reasoning import build_oversized_replacement
from chainsum.services.summarization.summary import SummarizeHandler, generate_summary, section_context

logger = logging.getLogger(__name__)


async def summarize_oversized_body_pairs(
    section: ChainSection,
    handler: SummarizeHandler,
    max_body_pair_bytes: int,
    tool_call_id_template: str,
) -> int:
    """Replace pairs above *max_body_pair_bytes* with their summaries.

    The last pair of the section is never inspected: providers validate
    the reasoning signature of the most recent turn. Pairs are summarized
    concurrently; a failed summary leaves its pair as it was.

    Args:
        section (ChainSection): Section to compact in place.
        handler (SummarizeHandler): Summarization handler.
        max_body_pair_bytes (int): Per-pair byte ceiling.
        tool_call_id_template (str): Template for synthetic call IDs.

    Returns:
        int: Number of pairs replaced.
    """
    if len(section.body) < 2:
        return 0

    context = section_context(section)
    candidates: List[Tuple[int, BodyPair]] = [
        (idx, section.body[idx]) for idx in find_oversized_body_pairs(section, max_body_pair_bytes)
    ]
    if not candidates:
        return 0

    lock = asyncio.Lock()
    replacements: Dict[int, BodyPair] = {}

    async def _summarize(idx: int, pair: BodyPair) -> None:
        try:
            summary = await generate_summary(handler, context, pair.messages())
        except Exception as e:
            logger.warning("Oversized body pair %d (%d bytes) not summarized: %s", idx, pair.size, e)
            return
        replacement = build_oversized_replacement(pair, summary, tool_call_id_template)
        async with lock:
            replacements[idx] = replacement

    await asyncio.gather(*(_summarize(idx, pair) for idx, pair in candidates))

    for idx, replacement in replacements.items():
        section.body[idx] = replacement

    if replacements:
        logger.info(
            "Summarized %d/%d oversized body pairs (ceiling %d bytes)",
            len(replacements),
            len(candidates),
            max_body_pair_bytes,
        )
    return len(replacements)


def find_oversized_body_pairs(section: ChainSection, max_body_pair_bytes: int) -> List[int]:
    """Indices of pairs ``summarize_oversized_body_pairs`` would summarize."""
    return [
        idx
        for idx, pair in enumerate(section.body[:-1])
        if pair.size > max_body_pair_bytes and not contains_summarized_content(pair)
    ]
