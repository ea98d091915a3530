# Copyright (c) 2026 Heureum AI. All rights reserved.

"""
Application configuration using pydantic-settings.
"""

import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from chainsum.chain.tool_ids import DEFAULT_TOOL_CALL_ID_TEMPLATE
from chainsum.services.summarization.settings import SummarizerConfig

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Application settings.

    Attributes:
        DEBUG (bool): Whether to enable debug logging.
        LOG_LEVEL (str): Log level used by ``configure_logging``.
        SUMMARIZER_PRESERVE_LAST (bool): Rotate the last sections.
        SUMMARIZER_USE_QA (bool): Enable QA reduction.
        SUMMARIZER_SUM_MSG_HUMAN_IN_QA (bool): Summarize folded human
            messages.
        SUMMARIZER_LAST_SEC_BYTES (int): Byte budget of a rotated section.
        SUMMARIZER_MAX_BP_BYTES (int): Byte ceiling of a single body pair.
        SUMMARIZER_MAX_QA_SECTIONS (int): Section count cap.
        SUMMARIZER_MAX_QA_BYTES (int): Byte cap for QA reduction.
        SUMMARIZER_KEEP_QA_SECTIONS (int): Sections exempt from collapsing.
        ASSISTANT_SUMMARIZER_* : Same settings for the assistant profile.
        TOOL_CALL_ID_TEMPLATE (str): Template for synthetic tool call IDs.
        SUMMARIZER_MODEL (str): Model used to write summaries.
        SUMMARIZER_TEMPERATURE (float): Sampling temperature for summaries.
        SUMMARIZER_MAX_TOKENS (int): Maximum summary length in tokens.
        OPENAI_API_KEY (str): OpenAI API key.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Agent chains
    SUMMARIZER_PRESERVE_LAST: bool = True
    SUMMARIZER_USE_QA: bool = True
    SUMMARIZER_SUM_MSG_HUMAN_IN_QA: bool = False
    SUMMARIZER_LAST_SEC_BYTES: int = 51_200
    SUMMARIZER_MAX_BP_BYTES: int = 16_384
    SUMMARIZER_MAX_QA_SECTIONS: int = 10
    SUMMARIZER_MAX_QA_BYTES: int = 65_536
    SUMMARIZER_KEEP_QA_SECTIONS: int = 1

    # Assistant chains (longer interactive conversations)
    ASSISTANT_SUMMARIZER_PRESERVE_LAST: bool = True
    ASSISTANT_SUMMARIZER_LAST_SEC_BYTES: int = 76_800
    ASSISTANT_SUMMARIZER_MAX_BP_BYTES: int = 16_384
    ASSISTANT_SUMMARIZER_MAX_QA_SECTIONS: int = 7
    ASSISTANT_SUMMARIZER_MAX_QA_BYTES: int = 76_800
    ASSISTANT_SUMMARIZER_KEEP_QA_SECTIONS: int = 3

    TOOL_CALL_ID_TEMPLATE: str = DEFAULT_TOOL_CALL_ID_TEMPLATE

    # Summarization LLM
    SUMMARIZER_MODEL: str = "gemini-3-flash-preview"
    SUMMARIZER_TEMPERATURE: float = 0.2
    SUMMARIZER_MAX_TOKENS: int = 4000
    OPENAI_API_KEY: str = ""

    # Google Gemini
    GOOGLE_API_KEY: str = ""  # Google AI Studio (simple)

    # Google Cloud / Vertex AI (alternative to GOOGLE_API_KEY)
    GOOGLE_CLOUD_PROJECT: str = ""
    GOOGLE_CLOUD_LOCATION: str = ""
    GOOGLE_APPLICATION_CREDENTIALS: str = ""

    def summarizer_config(self) -> SummarizerConfig:
        """Summarizer configuration for agent chains.

        Returns:
            SummarizerConfig: Configuration built from ``SUMMARIZER_*``.
        """
        return SummarizerConfig(
            preserve_last=self.SUMMARIZER_PRESERVE_LAST,
            last_sec_bytes=self.SUMMARIZER_LAST_SEC_BYTES,
            max_bp_bytes=self.SUMMARIZER_MAX_BP_BYTES,
            use_qa=self.SUMMARIZER_USE_QA,
            max_qa_sections=self.SUMMARIZER_MAX_QA_SECTIONS,
            max_qa_bytes=self.SUMMARIZER_MAX_QA_BYTES,
            summ_human_in_qa=self.SUMMARIZER_SUM_MSG_HUMAN_IN_QA,
            keep_qa_sections=self.SUMMARIZER_KEEP_QA_SECTIONS,
            tool_call_id_template=self.TOOL_CALL_ID_TEMPLATE,
        )

    def assistant_summarizer_config(self) -> SummarizerConfig:
        """Summarizer configuration for assistant chains.

        QA reduction is always on and human messages are always kept
        verbatim.
        """
        return SummarizerConfig(
            preserve_last=self.ASSISTANT_SUMMARIZER_PRESERVE_LAST,
            last_sec_bytes=self.ASSISTANT_SUMMARIZER_LAST_SEC_BYTES,
            max_bp_bytes=self.ASSISTANT_SUMMARIZER_MAX_BP_BYTES,
            use_qa=True,
            max_qa_sections=self.ASSISTANT_SUMMARIZER_MAX_QA_SECTIONS,
            max_qa_bytes=self.ASSISTANT_SUMMARIZER_MAX_QA_BYTES,
            summ_human_in_qa=False,
            keep_qa_sections=self.ASSISTANT_SUMMARIZER_KEEP_QA_SECTIONS,
            tool_call_id_template=self.TOOL_CALL_ID_TEMPLATE,
        )

    def log_level(self) -> int:
        """Numeric log level; ``DEBUG`` forces ``logging.DEBUG``."""
        if self.DEBUG:
            return logging.DEBUG
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


def configure_logging(config: Optional[Settings] = None) -> None:
    """Configure root logging for applications embedding chainsum.

    The library itself never installs handlers.
    """
    config = config or settings
    logging.basicConfig(level=config.log_level(), format=_LOG_FORMAT)


settings = Settings()
