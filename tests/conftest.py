# Copyright (c) 2026 Heureum AI. All rights reserved.

"""Shared test fixtures for the chainsum test suite."""

import asyncio
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from chainsum.models import (
    ChatMessageType,
    ContentReasoning,
    Message,
    TextContent,
    ToolCall,
    ToolCallResponse,
)


# ---------------------------------------------------------------------------
# Message factories
# ---------------------------------------------------------------------------


@pytest.fixture
def human():
    """Factory fixture for human messages."""

    def _factory(text: str = "question") -> Message:
        return Message.text(ChatMessageType.HUMAN, text)

    return _factory


@pytest.fixture
def ai():
    """Factory fixture for plain AI completions."""

    def _factory(text: str = "answer", reasoning: Optional[ContentReasoning] = None) -> Message:
        return Message(role=ChatMessageType.AI, parts=[TextContent(text=text, reasoning=reasoning)])

    return _factory


@pytest.fixture
def ai_call():
    """Factory fixture for AI messages requesting tool calls."""

    def _factory(
        *call_ids: str,
        name: str = "search",
        arguments: str = '{"query": "x"}',
        text: Optional[str] = None,
        signature: Optional[bytes] = None,
    ) -> Message:
        parts: list = [TextContent(text=text)] if text is not None else []
        for call_id in call_ids:
            reasoning = ContentReasoning(signature=signature) if signature is not None else None
            parts.append(ToolCall(id=call_id, name=name, arguments=arguments, reasoning=reasoning))
        return Message(role=ChatMessageType.AI, parts=parts)

    return _factory


@pytest.fixture
def tool():
    """Factory fixture for tool messages answering one call."""

    def _factory(call_id: str, content: str = "result", name: str = "search") -> Message:
        return Message(
            role=ChatMessageType.TOOL,
            parts=[ToolCallResponse(tool_call_id=call_id, name=name, content=content)],
        )

    return _factory


@pytest.fixture
def system():
    """Factory fixture for system messages."""

    def _factory(text: str = "You are a helpful assistant.") -> Message:
        return Message.text(ChatMessageType.SYSTEM, text)

    return _factory


# ---------------------------------------------------------------------------
# Summarization handler mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def handler():
    """Async summarization handler returning a fixed summary."""
    return AsyncMock(return_value="summary text")


@pytest.fixture
def failing_handler():
    """Async summarization handler that always fails."""
    return AsyncMock(side_effect=RuntimeError("llm unavailable"))


@pytest.fixture
def mock_llm():
    """Factory fixture for mock chat models returning the given text."""

    def _factory(text: str = "Summary of conversation.") -> AsyncMock:
        llm = AsyncMock()
        result = MagicMock()
        result.content = text
        llm.ainvoke.return_value = result
        return llm

    return _factory


@pytest.fixture
def concurrent_handler():
    """Factory fixture for handlers that return only once *expected* calls overlap.

    Calls made one after another never reach the count and hang, so the
    caller is expected to bound the run with ``asyncio.wait_for``.
    """

    def _factory(expected: int, text: str = "summary text") -> AsyncMock:
        state = {"in_flight": 0, "peak": 0, "release": None}

        async def _summarize(prompt: str) -> str:
            if state["release"] is None:
                state["release"] = asyncio.Event()
            state["in_flight"] += 1
            state["peak"] = max(state["peak"], state["in_flight"])
            if state["in_flight"] >= expected:
                state["release"].set()
            await state["release"].wait()
            state["in_flight"] -= 1
            return text

        handler = AsyncMock(side_effect=_summarize)
        handler.state = state
        return handler

    return _factory
