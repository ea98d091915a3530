# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Tests for prompt building and summary generation."""

import pytest
from chainsum.chain.ast import SUMMARIZED_CONTENT_PREFIX, BodyPair, BodyPairType
from chainsum.chain.tool_ids import DEFAULT_TOOL_CALL_ID_TEMPLATE
from chainsum.errors import SummaryGenerationError
from chainsum.models import BinaryContent, ChatMessageType, ImageURLContent, Message, TextContent
from chainsum.services.prompts.base import (
    CONTEXTUAL_SUMMARY_INSTRUCTIONS,
    NOTHING_TO_SUMMARIZE,
    STANDALONE_SUMMARY_INSTRUCTIONS,
    TASKS_SUMMARY_INSTRUCTIONS,
)
from chainsum.services.summarization.summary import (
    ai_messages_to_text,
    build_summary_pair,
    determine_summarized_type,
    generate_summary,
    human_messages_to_text,
    messages_to_prompt,
)

# ===========================================================================
# Prompt building
# ===========================================================================


class TestMessagesToText:
    """Tests for the XML rendering of messages."""

    def test_human_messages(self, human, ai):
        """Verify human messages render as tasks and other roles are skipped."""
        text = human_messages_to_text([human("fix the bug"), ai("ignored")])
        assert text.startswith("<tasks>\n")
        assert '<task id="0">\nfix the bug\n</task>\n' in text
        assert "ignored" not in text
        assert text.endswith("</tasks>\n")

    def test_human_image(self):
        """Verify image parts render with their URL and detail."""
        msg = Message(
            role=ChatMessageType.HUMAN,
            parts=[ImageURLContent(url="https://example.com/a.png", detail="high")],
        )
        text = human_messages_to_text([msg])
        assert '<image url="https://example.com/a.png">\nhigh\n</image>\n' in text

    def test_binary_hex_preview(self):
        """Verify binary parts render the first 100 bytes as hex."""
        msg = Message(
            role=ChatMessageType.HUMAN,
            parts=[BinaryContent(mime_type="application/pdf", data=bytes(range(200)))],
        )
        text = human_messages_to_text([msg])
        assert '<binary mime="application/pdf">' in text
        assert f"first 100 bytes in hex: {bytes(range(100)).hex()}\n" in text
        assert bytes(range(101)).hex() not in text

    def test_ai_messages(self, ai_call, tool):
        """Verify tool calls and responses render with names and part indices."""
        text = ai_messages_to_text([ai_call("c1", text="checking"), tool("c1", content="42")])
        assert '<message id="0" role="ai">' in text
        assert '<content part="0">\nchecking\n</content>' in text
        assert '<tool_call name="search" part="1">\n{"query": "x"}\n</tool_call>' in text
        assert '<message id="1" role="tool">' in text
        assert '<tool_call_response name="search" part="0">\n42\n</tool_call_response>' in text
        assert text.endswith("</messages>")


class TestMessagesToPrompt:
    """Tests for messages_to_prompt instruction selection."""

    def test_contextual(self, human, ai):
        """Verify human + AI messages use the contextual instructions."""
        prompt = messages_to_prompt([human()], [ai()])
        assert prompt.startswith(f"<instructions>{CONTEXTUAL_SUMMARY_INSTRUCTIONS}</instructions>\n\n")
        assert "<tasks>" in prompt
        assert "<messages>" in prompt

    def test_standalone(self, ai):
        """Verify AI-only input uses the standalone instructions."""
        prompt = messages_to_prompt([], [ai()])
        assert STANDALONE_SUMMARY_INSTRUCTIONS in prompt
        assert "<task id=" not in prompt

    def test_tasks(self, human):
        """Verify human-only input summarizes the tasks."""
        prompt = messages_to_prompt([human()], [])
        assert TASKS_SUMMARY_INSTRUCTIONS in prompt
        assert "<message id=" not in prompt

    def test_nothing(self):
        """Verify empty input yields the placeholder prompt."""
        assert messages_to_prompt([], []) == NOTHING_TO_SUMMARIZE


# ===========================================================================
# Summary generation
# ===========================================================================


class TestGenerateSummary:
    """Tests for generate_summary."""

    @pytest.mark.asyncio
    async def test_returns_handler_output(self, handler, human, ai):
        """Verify the handler receives the prompt and its output is returned."""
        result = await generate_summary(handler, [human("q")], [ai("a")])
        assert result == "summary text"
        handler.assert_awaited_once()
        prompt = handler.await_args.args[0]
        assert prompt == messages_to_prompt([human("q")], [ai("a")])

    @pytest.mark.asyncio
    async def test_empty_input(self, handler):
        """Verify empty input fails without calling the handler."""
        with pytest.raises(SummaryGenerationError, match="cannot summarize empty message list"):
            await generate_summary(handler, [], [])
        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_handler(self, ai):
        """Verify a None handler is rejected."""
        with pytest.raises(SummaryGenerationError, match="handler cannot be None"):
            await generate_summary(None, [], [ai()])

    @pytest.mark.asyncio
    async def test_handler_error_wrapped(self, failing_handler, ai):
        """Verify handler exceptions are wrapped with their cause."""
        with pytest.raises(SummaryGenerationError, match="summarization failed: llm unavailable") as exc_info:
            await generate_summary(failing_handler, [], [ai()])
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestSummaryPairs:
    """Tests for choosing and building summary pairs."""

    def test_type_for_completions(self):
        """Verify completions only summarize to a completion."""
        pairs = [BodyPair.from_completion("a"), BodyPair.from_completion("b")]
        assert determine_summarized_type(pairs) == BodyPairType.COMPLETION

    def test_type_with_tool_activity(self, ai_call, tool):
        """Verify any request/response pair summarizes to a summarization."""
        pairs = [BodyPair.from_completion("a"), BodyPair.build(ai_call("c1"), [tool("c1")])]
        assert determine_summarized_type(pairs) == BodyPairType.SUMMARIZATION

    def test_build_completion_pair(self):
        """Verify completion summaries carry the summarized content marker."""
        pair = build_summary_pair(BodyPairType.COMPLETION, "done", DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert pair.type == BodyPairType.COMPLETION
        part = pair.ai_message.parts[0]
        assert isinstance(part, TextContent)
        assert part.text == SUMMARIZED_CONTENT_PREFIX + "done"

    def test_build_summarization_pair(self):
        """Verify summarization summaries are wrapped as a tool response."""
        pair = build_summary_pair(BodyPairType.SUMMARIZATION, "done", DEFAULT_TOOL_CALL_ID_TEMPLATE)
        assert pair.type == BodyPairType.SUMMARIZATION
        assert pair.tool_messages[0].parts[0].content == "done"

    def test_build_invalid_type(self):
        """Verify request/response is not a valid summary type."""
        with pytest.raises(ValueError):
            build_summary_pair(BodyPairType.REQUEST_RESPONSE, "done", DEFAULT_TOOL_CALL_ID_TEMPLATE)
