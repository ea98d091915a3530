# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Chain summarization module.

Compacts a message chain so it fits a context budget while keeping the
information the agent needs to continue:

  Oversized pairs     (oversized.py, reasoning.py)
      Summarize single body pairs above a byte ceiling, keeping the
      reasoning providers validate.

  Active window       (rotation.py)
      Keep the last sections under a byte budget by folding older pairs.

  Section collapsing  (sections.py)
      Reduce older sections to a single summary pair each.

  QA reduction        (qa.py)
      Fold the oldest sections into one leading section.

Usage:

    config = SummarizerConfig(use_qa=True, max_qa_sections=7)
    messages = await summarize_chain(handler, messages, config)
"""

from chainsum.services.summarization.oversized import summarize_oversized_body_pairs
from chainsum.services.summarization.qa import (
    determine_recent_sections_to_keep,
    exceeds_qa_section_limits,
    prepare_qa_sections_for_summarization,
    summarize_qa_pairs,
)
from chainsum.services.summarization.reasoning import build_oversized_replacement, collect_reasoning
from chainsum.services.summarization.rotation import determine_last_section_pairs, summarize_last_section
from chainsum.services.summarization.sections import summarize_sections
from chainsum.services.summarization.settings import SummarizerConfig
from chainsum.services.summarization.summarizer import Summarizer, summarize_chain
from chainsum.services.summarization.summary import (
    SummarizeHandler,
    determine_summarized_type,
    generate_summary,
    messages_to_prompt,
)

__all__ = [
    "SummarizerConfig",
    "Summarizer",
    "SummarizeHandler",
    "summarize_chain",
    "summarize_sections",
    "summarize_last_section",
    "determine_last_section_pairs",
    "summarize_oversized_body_pairs",
    "summarize_qa_pairs",
    "exceeds_qa_section_limits",
    "determine_recent_sections_to_keep",
    "prepare_qa_sections_for_summarization",
    "collect_reasoning",
    "build_oversized_replacement",
    "generate_summary",
    "messages_to_prompt",
    "determine_summarized_type",
]
