"""LLM provider protocol definition."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from booksummarizer.models.provider import LLMConfig, LLMMessage, LLMResponse


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol for LLM providers."""

    async def complete(
        self,
        messages: list[LLMMessage],
        config: LLMConfig | None = None,
    ) -> LLMResponse:
        """Generate a completion from the model."""
        ...
