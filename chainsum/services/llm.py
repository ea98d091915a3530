# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Summarization handler backed by a LangChain chat model.

Usage:

    llm = create_summarizer_llm()
    handler = build_summarize_handler(llm)
    messages = await summarize_langchain_messages(handler, lc_messages)
"""

import logging
import os
from typing import List, Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from chainsum.config import Settings, settings
from chainsum.errors import SummaryGenerationError
from chainsum.services.convert import extract_text, from_langchain_messages, to_langchain_messages
from chainsum.services.prompts.base import SUMMARIZER_SYSTEM_PROMPT
from chainsum.services.summarization import SummarizeHandler, SummarizerConfig, summarize_chain

logger = logging.getLogger(__name__)


def create_summarizer_llm(config: Optional[Settings] = None) -> BaseChatModel:
    """Create the chat model used to write summaries.

    Gemini routing:
      - GOOGLE_API_KEY set → Google AI Studio (simple API key auth)
      - Otherwise → Vertex AI (GCP service account / ADC)

    Args:
        config (Optional[Settings]): Settings to read. Defaults to the
            module-level settings.

    Returns:
        BaseChatModel: The configured chat model.
    """
    config = config or settings
    model = config.SUMMARIZER_MODEL
    if model.startswith("gemini"):
        if config.GOOGLE_API_KEY:
            return ChatGoogleGenerativeAI(
                model=model,
                google_api_key=config.GOOGLE_API_KEY,
                temperature=config.SUMMARIZER_TEMPERATURE,
                max_output_tokens=config.SUMMARIZER_MAX_TOKENS,
            )
        # google.auth.default() only reads os.environ, not the .env file.
        if config.GOOGLE_APPLICATION_CREDENTIALS:
            os.environ.setdefault(
                "GOOGLE_APPLICATION_CREDENTIALS",
                config.GOOGLE_APPLICATION_CREDENTIALS,
            )
        return ChatGoogleGenerativeAI(
            model=model,
            vertexai=True,
            project=config.GOOGLE_CLOUD_PROJECT,
            location=config.GOOGLE_CLOUD_LOCATION,
            temperature=config.SUMMARIZER_TEMPERATURE,
            max_output_tokens=config.SUMMARIZER_MAX_TOKENS,
        )
    return ChatOpenAI(
        api_key=SecretStr(config.OPENAI_API_KEY),
        model=model,
        temperature=config.SUMMARIZER_TEMPERATURE,
        max_completion_tokens=config.SUMMARIZER_MAX_TOKENS,
    )


def build_summarize_handler(llm: BaseChatModel) -> SummarizeHandler:
    """Wrap *llm* as a summarization handler.

    Args:
        llm (BaseChatModel): Chat model writing the summaries.

    Returns:
        SummarizeHandler: Async callable returning the summary text.
    """

    async def handler(prompt: str) -> str:
        response = await llm.ainvoke(
            [
                SystemMessage(content=SUMMARIZER_SYSTEM_PROMPT),
                HumanMessage(content=prompt),
            ]
        )
        summary = extract_text(response.content).strip()
        if not summary:
            raise SummaryGenerationError("summarization model returned an empty response")
        return summary

    return handler


async def summarize_langchain_messages(
    handler: SummarizeHandler,
    messages: Sequence[BaseMessage],
    config: Optional[SummarizerConfig] = None,
) -> List[BaseMessage]:
    """Compact a LangChain message history.

    Args:
        handler (SummarizeHandler): Summarization handler.
        messages (Sequence[BaseMessage]): History to compact.
        config (Optional[SummarizerConfig]): Summarizer configuration.
            Defaults to ``settings.summarizer_config()``.

    Returns:
        List[BaseMessage]: The compacted history.
    """
    chain = from_langchain_messages(messages)
    result = await summarize_chain(handler, chain, config or settings.summarizer_config())
    logger.debug("LangChain history: %d -> %d messages", len(chain), len(result))
    return to_langchain_messages(result)
