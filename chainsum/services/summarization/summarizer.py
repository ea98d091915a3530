# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Chain summarization entry point.

Phases (each one sees the effects of the previous):

  0. Section collapsing  (sections.py)
      All sections but the last ``keep_qa_sections`` become one summary pair.

  1. Active window rotation  (rotation.py, oversized.py)
      The last ``keep_qa_sections`` sections are kept under
      ``last_sec_bytes``, newest first.

  2. QA reduction  (qa.py)
      Oldest sections are folded into one leading section when the chain
      exceeds ``max_qa_sections`` or ``max_qa_bytes``.

Usage:

    summarizer = Summarizer(SummarizerConfig(use_qa=True))
    messages = await summarizer.summarize_chain(handler, messages)

The input list and its messages are never modified; on failure the caller
keeps using what it passed in.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from chainsum.chain.ast import ChainAST
from chainsum.errors import SummaryGenerationError
from chainsum.models import Message
from chainsum.services.summarization.qa import summarize_qa_pairs
from chainsum.services.summarization.rotation import summarize_last_section
from chainsum.services.summarization.sections import summarize_sections
from chainsum.services.summarization.settings import SummarizerConfig
from chainsum.services.summarization.summary import SummarizeHandler

logger = logging.getLogger(__name__)


class Summarizer:
    """Compacts message chains according to one ``SummarizerConfig``.

    Holds only configuration, so one instance may serve concurrent calls.

    Attributes:
        config (SummarizerConfig): Normalized configuration.
    """

    def __init__(self, config: Optional[SummarizerConfig] = None):
        self.config = (config or SummarizerConfig()).normalized()

    async def summarize_chain(self, handler: SummarizeHandler, chain: Sequence[Message]) -> List[Message]:
        """Compact *chain* and return the new message list.

        Args:
            handler (SummarizeHandler): Async callable turning a prompt into
                a summary.
            chain (Sequence[Message]): Flat message chain.

        Returns:
            List[Message]: The compacted chain. An empty chain is returned
                as is.

        Raises:
            ChainParseError: If the chain is malformed.
            SectionsSummarizationError: If section collapsing failed.
            SummaryGenerationError: If rotation or QA reduction failed.
        """
        if not chain:
            return list(chain)

        cfg = self.config
        ast = ChainAST.parse(chain, force=cfg.force_parse)
        size_before = ast.size

        await summarize_sections(ast, handler, cfg.keep_qa_sections, cfg.tool_call_id_template)

        if cfg.preserve_last:
            last = len(ast.sections) - 1
            first = len(ast.sections) - cfg.keep_qa_sections
            for sdx in range(last, max(first, 0) - 1, -1):
                try:
                    await summarize_last_section(
                        ast,
                        handler,
                        sdx,
                        cfg.last_sec_bytes,
                        cfg.max_bp_bytes,
                        cfg.reserve_percent,
                        cfg.tool_call_id_template,
                    )
                except SummaryGenerationError as e:
                    raise SummaryGenerationError(f"failed to summarize last section {sdx}: {e}") from e

        if cfg.use_qa:
            try:
                await summarize_qa_pairs(
                    ast,
                    handler,
                    cfg.max_qa_sections,
                    cfg.max_qa_bytes,
                    cfg.summ_human_in_qa,
                    cfg.tool_call_id_template,
                )
            except SummaryGenerationError as e:
                raise SummaryGenerationError(f"failed to summarize QA pairs: {e}") from e

        messages = ast.messages()
        size_after = ast.size
        if size_after != size_before:
            logger.info(
                "Chain summarized: %d -> %d messages, %d -> %d bytes",
                len(chain),
                len(messages),
                size_before,
                size_after,
            )
        return messages


async def summarize_chain(
    handler: SummarizeHandler,
    chain: Sequence[Message],
    config: Optional[SummarizerConfig] = None,
) -> List[Message]:
    """Compact *chain* with a one-off ``Summarizer``."""
    return await Summarizer(config).summarize_chain(handler, chain)
