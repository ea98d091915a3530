# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Active window rotation.

Keeps a section under a byte budget by folding its older body pairs into a
single summary pair, leaving a reserve so that the next few turns fit
without another rotation:

    [p0 p1 p2 p3 p4 p5]   over budget
    [S(p0..p3) p4 p5]     p4, p5 fit under (100 - reserve)% of the budget

The newest pair is always kept verbatim.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from chainsum.chain.ast import BodyPair, BodyPairType, ChainAST, ChainSection
from chainsum.errors import SummaryGenerationError
from chainsum.services.summarization.oversized import summarize_oversized_body_pairs
from chainsum.services.summarization.summary import (
    SummarizeHandler,
    build_summary_pair,
    determine_summarized_type,
    flatten_pairs,
    generate_summary,
    section_context,
)

logger = logging.getLogger(__name__)


def determine_last_section_pairs(
    section: ChainSection,
    max_bytes: int,
    reserve_percent: int,
) -> Tuple[List[BodyPair], List[BodyPair]]:
    """Split the section body into pairs to keep and pairs to summarize.

    Walks from the newest pair to the oldest, keeping pairs while the
    running size (header included) stays under the reserved threshold. The
    first pair that does not fit and every older pair go to the summarize
    set, so both sets are contiguous.

    Args:
        section (ChainSection): Section to split.
        max_bytes (int): Byte budget of the section.
        reserve_percent (int): Share of the budget left free.

    Returns:
        Tuple[List[BodyPair], List[BodyPair]]: ``(keep, summarize)``, both
            in chronological order.
    """
    keep: List[BodyPair] = []
    summarize: List[BodyPair] = []

    if section.body:
        threshold = max_bytes * (100 - reserve_percent) // 100

        last = section.body[-1]
        keep.append(last)
        current_size = section.header.size + last.size
        summarize_size = 0
        border_found = False

        for pair in reversed(section.body[:-1]):
            pair_size = pair.size
            if not border_found and current_size + pair_size <= threshold:
                keep.append(pair)
                current_size += pair_size
            else:
                summarize.append(pair)
                summarize_size += pair_size
                border_found = True

        keep.reverse()
        summarize.reverse()

        if current_size + summarize_size <= max_bytes:
            keep = summarize + keep
            summarize = []

    # A lone summary is never summarized again.
    if len(summarize) == 1 and summarize[0].type == BodyPairType.SUMMARIZATION:
        keep = summarize + keep
        summarize = []

    return keep, summarize


async def summarize_last_section(
    ast: ChainAST,
    handler: SummarizeHandler,
    section_index: int,
    max_last_section_bytes: int,
    max_single_body_pair_bytes: int,
    reserve_percent: int,
    tool_call_id_template: str,
) -> None:
    """Rotate section *section_index* under *max_last_section_bytes*.

    Oversized pairs are compacted first. If the section still exceeds the
    budget, its older pairs are replaced by one summary pair placed before
    the kept pairs. An out-of-range index is ignored.

    Args:
        ast (ChainAST): Chain to modify in place.
        handler (SummarizeHandler): Summarization handler.
        section_index (int): Index of the section to rotate.
        max_last_section_bytes (int): Byte budget of the section.
        max_single_body_pair_bytes (int): Ceiling for single pairs.
        reserve_percent (int): Share of the budget left free.
        tool_call_id_template (str): Template for synthetic call IDs.

    Raises:
        SummaryGenerationError: If the handler fails. The section keeps the
            result of the oversized pass.
    """
    if section_index < 0 or section_index >= len(ast.sections):
        return

    section = ast.sections[section_index]

    await summarize_oversized_body_pairs(section, handler, max_single_body_pair_bytes, tool_call_id_template)

    size = section.size
    if size <= max_last_section_bytes:
        logger.debug("Section %d within budget (%d/%d bytes)", section_index, size, max_last_section_bytes)
        return

    keep, summarize = determine_last_section_pairs(section, max_last_section_bytes, reserve_percent)
    if not summarize:
        return

    try:
        summary = await generate_summary(handler, section_context(section), flatten_pairs(summarize))
    except SummaryGenerationError as e:
        raise SummaryGenerationError(f"last section summary generation failed: {e}") from e

    summary_pair = build_summary_pair(determine_summarized_type(summarize), summary, tool_call_id_template)
    ast.sections[section_index] = ChainSection(header=section.header, body=[summary_pair, *keep])

    logger.info(
        "Rotated section %d: %d pairs summarized, %d kept (%d -> %d bytes)",
        section_index,
        len(summarize),
        len(keep),
        size,
        ast.sections[section_index].size,
    )
