# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Summarizer settings.

Byte thresholds are measured with ``Message.size`` (UTF-8 bytes plus role
overhead), not tokens.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from chainsum.chain.tool_ids import DEFAULT_TOOL_CALL_ID_TEMPLATE

PRESERVE_ALL_LAST_SECTION_PAIRS = True
MAX_LAST_SECTION_BYTES = 50 * 1024
MAX_SINGLE_BODY_PAIR_BYTES = 16 * 1024
USE_QA_PAIR_SUMMARIZATION = False
MAX_QA_PAIR_SECTIONS = 10
MAX_QA_PAIR_BYTES = 64 * 1024
SUMMARIZE_HUMAN_MESSAGES_IN_QA_PAIRS = False
LAST_SECTION_RESERVE_PERCENTAGE = 25
KEEP_MIN_LAST_QA_SECTIONS = 1


@dataclass(frozen=True)
class SummarizerConfig:
    """Configuration of one ``Summarizer``.

    Phases (applied in order):
      0. Section collapsing  — every section but the last ``keep_qa_sections``
      1. Active window       — rotate the last sections (``preserve_last``)
      2. QA reduction        — fold the oldest sections (``use_qa``)

    Attributes:
        preserve_last (bool): Rotate the last sections under
            ``last_sec_bytes`` instead of leaving them untouched.
        last_sec_bytes (int): Byte budget of a rotated section.
        max_bp_bytes (int): Byte ceiling of a single body pair.
        use_qa (bool): Enable QA reduction.
        max_qa_sections (int): Section count cap for QA reduction.
        max_qa_bytes (int): Byte cap for QA reduction.
        summ_human_in_qa (bool): Summarize folded human messages instead of
            concatenating them verbatim.
        keep_qa_sections (int): Trailing sections exempt from collapsing.
        reserve_percent (int): Share of ``last_sec_bytes`` left free after a
            rotation.
        tool_call_id_template (str): Template for synthetic tool call IDs.
        force_parse (bool): Repair malformed chains instead of failing.
            Strict parsing rejects a chain that ends in a tool call with no
            response yet; with ``force_parse=True`` the call is answered
            with a fallback response and the chain is summarized.
    """

    preserve_last: bool = PRESERVE_ALL_LAST_SECTION_PAIRS
    last_sec_bytes: int = MAX_LAST_SECTION_BYTES
    max_bp_bytes: int = MAX_SINGLE_BODY_PAIR_BYTES
    use_qa: bool = USE_QA_PAIR_SUMMARIZATION
    max_qa_sections: int = MAX_QA_PAIR_SECTIONS
    max_qa_bytes: int = MAX_QA_PAIR_BYTES
    summ_human_in_qa: bool = SUMMARIZE_HUMAN_MESSAGES_IN_QA_PAIRS
    keep_qa_sections: int = KEEP_MIN_LAST_QA_SECTIONS
    reserve_percent: int = LAST_SECTION_RESERVE_PERCENTAGE
    tool_call_id_template: str = DEFAULT_TOOL_CALL_ID_TEMPLATE
    force_parse: bool = False

    def normalized(self) -> "SummarizerConfig":
        """Copy with defaults in place of non-positive or out-of-range values.

        Returns:
            SummarizerConfig: The normalized configuration.
        """
        return replace(
            self,
            last_sec_bytes=self.last_sec_bytes if self.last_sec_bytes > 0 else MAX_LAST_SECTION_BYTES,
            max_bp_bytes=self.max_bp_bytes if self.max_bp_bytes > 0 else MAX_SINGLE_BODY_PAIR_BYTES,
            max_qa_sections=self.max_qa_sections if self.max_qa_sections > 0 else MAX_QA_PAIR_SECTIONS,
            max_qa_bytes=self.max_qa_bytes if self.max_qa_bytes > 0 else MAX_QA_PAIR_BYTES,
            keep_qa_sections=self.keep_qa_sections if self.keep_qa_sections > 0 else KEEP_MIN_LAST_QA_SECTIONS,
            reserve_percent=(
                self.reserve_percent if 0 < self.reserve_percent < 100 else LAST_SECTION_RESERVE_PERCENTAGE
            ),
            tool_call_id_template=self.tool_call_id_template or DEFAULT_TOOL_CALL_ID_TEMPLATE,
        )
