# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Tests for oversized body pair compaction and reasoning preservation."""

import asyncio
import logging

import pytest
from chainsum.chain.ast import (
    FAKE_REASONING_SIGNATURE_GEMINI,
    SUMMARIZATION_TOOL_NAME,
    SUMMARIZED_CONTENT_PREFIX,
    BodyPair,
    BodyPairType,
    ChainAST,
)
from chainsum.chain.tool_ids import DEFAULT_TOOL_CALL_ID_TEMPLATE
from chainsum.models import ChatMessageType, ContentReasoning, Message, TextContent, ToolCall
from chainsum.services.summarization.oversized import (
    find_oversized_body_pairs,
    summarize_oversized_body_pairs,
)
from chainsum.services.summarization.reasoning import build_oversized_replacement, collect_reasoning

MAX_BP = 16 * 1024
BIG = "x" * (20 * 1024)


def _section(*messages):
    return ChainAST.parse(list(messages)).sections[0]


def _thinking_call(call_id: str) -> Message:
    """AI message with reasoning on its text part and a plain tool call."""
    return Message(
        role=ChatMessageType.AI,
        parts=[
            TextContent(text="let me look", reasoning=ContentReasoning(content="step by step")),
            ToolCall(id=call_id, name="search", arguments="{}"),
        ],
    )


# ===========================================================================
# Reasoning strategies
# ===========================================================================


class TestCollectReasoning:
    """Tests for collect_reasoning."""

    def test_no_reasoning(self, ai_call):
        """Verify plain messages carry nothing over."""
        carry = collect_reasoning(ai_call("c1", text="hi"))
        assert carry.text_part is None
        assert carry.signature is None

    def test_text_reasoning(self):
        """Verify the text part holding reasoning is kept verbatim."""
        msg = _thinking_call("c1")
        carry = collect_reasoning(msg)
        assert carry.text_part is msg.parts[0]
        assert carry.signature is None

    def test_tool_call_signature(self, ai_call):
        """Verify a signed tool call asks for the fake signature."""
        carry = collect_reasoning(ai_call("c1", signature=b"real"))
        assert carry.signature == FAKE_REASONING_SIGNATURE_GEMINI

    def test_empty_reasoning_ignored(self):
        """Verify empty reasoning objects are not carried over."""
        msg = Message(
            role=ChatMessageType.AI,
            parts=[ToolCall(id="c1", name="search", reasoning=ContentReasoning())],
        )
        assert collect_reasoning(msg).signature is None


class TestBuildOversizedReplacement:
    """Tests for build_oversized_replacement."""

    def test_request_response_with_signature(self, ai_call, tool):
        """Verify a signed call is replaced with a fake-signed summarization."""
        pair = BodyPair.build(ai_call("c1", signature=b"real-signature"), [tool("c1")])
        replacement = build_oversized_replacement(pair, "summary", DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert replacement.type == BodyPairType.SUMMARIZATION
        call = next(replacement.ai_message.tool_calls())
        assert call.reasoning.signature == FAKE_REASONING_SIGNATURE_GEMINI
        assert replacement.is_valid()

    def test_request_response_with_text_reasoning(self, tool):
        """Verify the reasoning text part is copied in front of the call."""
        msg = _thinking_call("c1")
        pair = BodyPair.build(msg, [tool("c1")])
        replacement = build_oversized_replacement(pair, "summary", DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert replacement.ai_message.parts[0] == msg.parts[0]
        call = replacement.ai_message.parts[1]
        assert call.name == SUMMARIZATION_TOOL_NAME
        assert call.reasoning is None

    def test_completion(self, ai):
        """Verify completions become marked completions keeping their reasoning."""
        thinking = ContentReasoning(content="deep thought")
        pair = BodyPair.build(ai("long answer", reasoning=thinking))
        replacement = build_oversized_replacement(pair, "summary", DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert replacement.type == BodyPairType.COMPLETION
        part = replacement.ai_message.parts[0]
        assert part.text == SUMMARIZED_CONTENT_PREFIX + "summary"
        assert part.reasoning == thinking


# ===========================================================================
# Oversized pass
# ===========================================================================


class TestSummarizeOversizedBodyPairs:
    """Tests for summarize_oversized_body_pairs."""

    @pytest.mark.asyncio
    async def test_signed_tool_call_gets_fake_signature(self, handler, human, ai, ai_call, tool):
        """Verify a 20 KB signed pair becomes a summarization with the fake signature."""
        section = _section(
            human("analyze logs"),
            ai_call("c1", signature=b"original-signature"),
            tool("c1", content=BIG),
            ai("done"),
        )
        replaced = await summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE)

        assert replaced == 1
        pair = section.body[0]
        assert pair.type == BodyPairType.SUMMARIZATION
        call = next(pair.ai_message.tool_calls())
        assert call.reasoning.signature == FAKE_REASONING_SIGNATURE_GEMINI
        assert call.reasoning.signature != b"original-signature"
        assert pair.tool_messages[0].parts[0].content == "summary text"
        assert section.body[1].ai_message.parts[0].text == "done"

    @pytest.mark.asyncio
    async def test_prompt_has_section_context(self, handler, human, ai, ai_call, tool):
        """Verify the human message is passed as context with the pair."""
        section = _section(human("analyze logs"), ai_call("c1"), tool("c1", content=BIG), ai("done"))
        await summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE)
        prompt = handler.await_args.args[0]
        assert "analyze logs" in prompt
        assert "<messages>" in prompt

    @pytest.mark.asyncio
    async def test_last_pair_never_summarized(self, handler, human, ai_call, tool):
        """Verify an oversized last pair is left alone, signature included."""
        section = _section(human(), ai_call("c1", signature=b"last-signature"), tool("c1", content=BIG))
        original = section.body[0].messages()
        replaced = await summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert replaced == 0
        handler.assert_not_awaited()
        assert section.body[0].type == BodyPairType.REQUEST_RESPONSE
        assert section.body[0].messages() == original
        assert next(section.body[0].ai_message.tool_calls()).reasoning.signature == b"last-signature"

    @pytest.mark.asyncio
    async def test_oversized_last_of_several(self, handler, human, ai, ai_call, tool):
        """Verify only pairs before the last are candidates."""
        section = _section(human(), ai("short"), ai_call("c1"), tool("c1", content=BIG))
        assert find_oversized_body_pairs(section, MAX_BP) == []
        assert await summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE) == 0

    @pytest.mark.asyncio
    async def test_small_pairs_untouched(self, handler, human, ai):
        """Verify pairs under the ceiling are not summarized."""
        section = _section(human(), ai("a"), ai("b"), ai("c"))
        assert await summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE) == 0
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_summarized_pairs_skipped(self, handler, human, ai):
        """Verify existing summaries are not summarized again."""
        summary = BodyPair.from_summarization(BIG, DEFAULT_TOOL_CALL_ID_TEMPLATE)
        section = _section(human(), *summary.messages(), ai("done"))
        assert find_oversized_body_pairs(section, MAX_BP) == []

    @pytest.mark.asyncio
    async def test_several_pairs(self, handler, human, ai, ai_call, tool):
        """Verify every oversized pair is replaced, completions included."""
        section = _section(
            human(),
            ai_call("c1"),
            tool("c1", content=BIG),
            ai(BIG),
            ai("done"),
        )
        replaced = await summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert replaced == 2
        assert handler.await_count == 2
        assert [p.type for p in section.body] == [
            BodyPairType.SUMMARIZATION,
            BodyPairType.COMPLETION,
            BodyPairType.COMPLETION,
        ]
        assert section.body[1].ai_message.parts[0].text.startswith(SUMMARIZED_CONTENT_PREFIX)
        assert section.size < MAX_BP

    @pytest.mark.asyncio
    async def test_pairs_summarized_concurrently(self, concurrent_handler, human, ai, ai_call, tool):
        """Verify oversized pair summaries are requested before any of them returns."""
        handler = concurrent_handler(2)
        section = _section(human(), ai_call("c1"), tool("c1", content=BIG), ai(BIG), ai("done"))

        replaced = await asyncio.wait_for(
            summarize_oversized_body_pairs(section, handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE), 1
        )

        assert replaced == 2
        assert handler.state["peak"] == 2
        assert [p.type for p in section.body] == [
            BodyPairType.SUMMARIZATION,
            BodyPairType.COMPLETION,
            BodyPairType.COMPLETION,
        ]

    @pytest.mark.asyncio
    async def test_failure_leaves_pair(self, failing_handler, human, ai, ai_call, tool, caplog):
        """Verify a failed summary keeps the original pair and logs a warning."""
        section = _section(human(), ai_call("c1"), tool("c1", content=BIG), ai("done"))
        original = section.body[0]
        with caplog.at_level(logging.WARNING):
            replaced = await summarize_oversized_body_pairs(
                section, failing_handler, MAX_BP, DEFAULT_TOOL_CALL_ID_TEMPLATE
            )
        assert replaced == 0
        assert section.body[0] is original
        assert "not summarized" in caplog.text
