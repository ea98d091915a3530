# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Section collapsing.

Every section except the last few is reduced to its header plus a single
summary pair. Sections are summarized concurrently; all of them run to
completion and their failures are reported together.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List

from chainsum.chain.ast import ChainAST, ChainSection, contains_summarized_content
from chainsum.errors import SectionsSummarizationError
from chainsum.services.summarization.summary import (
    SummarizeHandler,
    build_summary_pair,
    determine_summarized_type,
    flatten_pairs,
    generate_summary,
    section_context,
)

logger = logging.getLogger(__name__)


def _needs_collapse(section: ChainSection) -> bool:
    if len(section.body) == 1 and contains_summarized_content(section.body[0]):
        return False
    return bool(flatten_pairs(section.body))


async def summarize_sections(
    ast: ChainAST,
    handler: SummarizeHandler,
    keep_last: int,
    tool_call_id_template: str,
) -> int:
    """Collapse every section before the last *keep_last* ones.

    Args:
        ast (ChainAST): Chain to modify in place.
        handler (SummarizeHandler): Summarization handler.
        keep_last (int): Trailing sections left untouched. Values below 1
            collapse every section.
        tool_call_id_template (str): Template for synthetic call IDs.

    Returns:
        int: Number of sections collapsed.

    Raises:
        SectionsSummarizationError: If any section failed. Sections that
            succeeded keep their new body.
    """
    limit = len(ast.sections) - max(keep_last, 0)
    indices: List[int] = [idx for idx in range(max(limit, 0)) if _needs_collapse(ast.sections[idx])]
    if not indices:
        return 0

    lock = asyncio.Lock()
    failures: Dict[int, Exception] = {}
    collapsed = 0

    async def _collapse(idx: int) -> None:
        nonlocal collapsed
        section = ast.sections[idx]
        try:
            summary = await generate_summary(handler, section_context(section), flatten_pairs(section.body))
            summary_pair = build_summary_pair(
                determine_summarized_type(section.body), summary, tool_call_id_template
            )
        except Exception as e:
            async with lock:
                failures[idx] = e
            return

        async with lock:
            ast.sections[idx] = ChainSection(header=section.header, body=[summary_pair])
            collapsed += 1

    await asyncio.gather(*(_collapse(idx) for idx in indices))

    if collapsed:
        logger.info("Collapsed %d section(s) into summaries", collapsed)
    if failures:
        raise SectionsSummarizationError(failures)
    return collapsed
