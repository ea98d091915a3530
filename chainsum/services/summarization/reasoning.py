# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Reasoning preservation for pairs replaced by the oversized-pair compactor.

Providers validate the reasoning of the current turn in different places:

  text part     thought text travels with the visible text (Kimi, DeepSeek);
                the original part is kept verbatim in front of the summary.
  tool call     an opaque signature is bound to the call (Gemini); the
                original cannot be reused, so the synthetic call carries
                ``FAKE_REASONING_SIGNATURE_GEMINI`` instead.

Which rule applies is decided by the type of part the reasoning is found on,
not by provider name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Type

from chainsum.chain.ast import (
    FAKE_REASONING_SIGNATURE_GEMINI,
    SUMMARIZED_CONTENT_PREFIX,
    BodyPair,
    BodyPairType,
)
from chainsum.models import Message, TextContent, ToolCall


@dataclass
class ReasoningCarry:
    """Reasoning found on a pair that must survive its replacement.

    Attributes:
        text_part (Optional[TextContent]): First text part carrying
            reasoning, copied as-is.
        tool_call_signed (bool): Some tool call carried reasoning, so the
            synthetic call needs the fake signature.
    """

    text_part: Optional[TextContent] = None
    tool_call_signed: bool = False

    @property
    def signature(self) -> Optional[bytes]:
        return FAKE_REASONING_SIGNATURE_GEMINI if self.tool_call_signed else None


def _keep_text_part(part: TextContent, carry: ReasoningCarry) -> None:
    if carry.text_part is None:
        carry.text_part = part


def _sign_tool_call(part: ToolCall, carry: ReasoningCarry) -> None:
    carry.tool_call_signed = True


_STRATEGIES: Dict[Type, Callable] = {
    TextContent: _keep_text_part,
    ToolCall: _sign_tool_call,
}


def collect_reasoning(ai_message: Message) -> ReasoningCarry:
    """Scan *ai_message* for reasoning that must be carried over."""
    carry = ReasoningCarry()
    for part in ai_message.parts:
        reasoning = getattr(part, "reasoning", None)
        if reasoning is None or reasoning.is_empty():
            continue
        strategy = _STRATEGIES.get(type(part))
        if strategy is not None:
            strategy(part, carry)
    return carry


def build_oversized_replacement(pair: BodyPair, summary: str, tool_call_id_template: str) -> BodyPair:
    """Build the pair replacing an oversized *pair*.

    Request/response pairs become SUMMARIZATION pairs, everything else a
    prefixed COMPLETION. Reasoning is carried over as described in the
    module docstring; for completions it is attached to the summary text so
    the marker prefix stays first.

    Args:
        pair (BodyPair): The pair being replaced.
        summary (str): Summary of the pair.
        tool_call_id_template (str): Template for the synthetic call ID.

    Returns:
        BodyPair: The replacement pair.
    """
    carry = collect_reasoning(pair.ai_message)

    if pair.type == BodyPairType.REQUEST_RESPONSE:
        return BodyPair.from_summarization(
            summary,
            tool_call_id_template,
            reasoning_part=carry.text_part,
            signature=carry.signature,
        )

    reasoning = carry.text_part.reasoning if carry.text_part is not None else None
    return BodyPair.from_completion(SUMMARIZED_CONTENT_PREFIX + summary, reasoning=reasoning)
