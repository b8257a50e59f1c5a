"""Summarizer collaborator backed by an LLM provider."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from booksummarizer.infra.providers.base import LLMProvider
from booksummarizer.models.errors import GenerationFailure
from booksummarizer.models.history import (
    SummaryFocus,
    SummaryLength,
    SummaryOptions,
    SummaryStyle,
)
from booksummarizer.models.provider import LLMConfig, LLMMessage

logger = logging.getLogger(__name__)

_LENGTH_GUIDANCE = {
    SummaryLength.SHORT: "provide a brief overview with just the essential points",
    SummaryLength.MEDIUM: "provide a balanced summary with key details",
    SummaryLength.LONG: (
        "provide a comprehensive, detailed summary that captures most of the "
        "important information from the original document"
    ),
}

_STYLE_GUIDANCE = {
    SummaryStyle.PARAGRAPH: "Write in paragraph form",
    SummaryStyle.BULLET: "Use bullet points",
}

_FOCUS_GUIDANCE = {
    SummaryFocus.GENERAL: "general overview",
    SummaryFocus.ACADEMIC: "academic analysis",
    SummaryFocus.TECHNICAL: "technical details",
}

SYSTEM_PROMPT = "You are a document summarization assistant."


@runtime_checkable
class Summarizer(Protocol):
    """Produces a plain-text summary honoring the given options."""

    async def summarize(self, text: str, options: SummaryOptions) -> str:
        """Return the summary. Raises GenerationFailure."""
        ...


def build_summary_prompt(text: str, options: SummaryOptions) -> str:
    """Instructions block followed by the content to summarize."""
    return (
        "Create a summary of the following content.\n\n"
        "Instructions (do not include these in your response):\n"
        f"- Length: {options.length.value} ({_LENGTH_GUIDANCE[options.length]})\n"
        f"- Style: {_STYLE_GUIDANCE[options.style]}\n"
        f"- Focus: {options.focus.value} (emphasize {_FOCUS_GUIDANCE[options.focus]})\n"
        '- Do not include headers like "Summary" or "Key Points" unless specifically requested\n'
        "- Do not center-align text or use HTML/markdown formatting for alignment\n"
        "- Start directly with the summary content\n\n"
        f"Content to summarize:\n{text}"
    )


class LLMSummarizer:
    """Summarizer that sends one completion request per document."""

    def __init__(self, provider: LLMProvider, llm_config: LLMConfig | None = None) -> None:
        self._provider = provider
        self._llm_config = llm_config or LLMConfig(max_tokens=2048, temperature=0.3)

    async def summarize(self, text: str, options: SummaryOptions) -> str:
        messages = [
            LLMMessage(role="system", content=SYSTEM_PROMPT),
            LLMMessage(role="user", content=build_summary_prompt(text, options)),
        ]
        try:
            response = await self._provider.complete(messages, self._llm_config)
        except Exception as e:
            logger.error("Summary generation failed: %s", e)
            raise GenerationFailure(f"Summary generation failed: {e}") from e

        content = response.content.strip()
        if not content:
            raise GenerationFailure("Summarizer returned an empty response")
        logger.debug(
            "Summary generated (%d chars, model=%s, usage=%s)",
            len(content), response.model, response.usage,
        )
        return content
