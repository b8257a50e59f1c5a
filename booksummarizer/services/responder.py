"""Responder collaborator: answers questions about one summarized document."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from booksummarizer.infra.providers.base import LLMProvider
from booksummarizer.models.chat import ChatContext
from booksummarizer.models.errors import GenerationFailure
from booksummarizer.models.provider import LLMConfig, LLMMessage

logger = logging.getLogger(__name__)


@runtime_checkable
class Responder(Protocol):
    """Answers a question using only the bound item's context."""

    async def respond(self, context: ChatContext, question: str) -> str:
        """Return the answer text. Raises GenerationFailure."""
        ...


def build_chat_prompt(context: ChatContext, question: str) -> str:
    options = context.options
    return (
        f'You are an AI assistant helping with questions about the book "{context.title}".\n\n'
        "Here's what we know about the book from its summary:\n"
        f"{context.body}\n\n"
        "The summary was generated with these options:\n"
        f"- Length: {options.length.value}\n"
        f"- Style: {options.style.value}\n"
        f"- Focus: {options.focus.value}\n\n"
        "Please answer the following question about this book in a helpful, "
        "conversational way. Base your answer ONLY on the content of the book summary "
        "provided above. If you don't know the answer based on the available "
        "information, be honest about it and don't make up information.\n\n"
        f"User question: {question}"
    )


class LLMResponder:
    """Responder that issues one completion per question."""

    def __init__(self, provider: LLMProvider, llm_config: LLMConfig | None = None) -> None:
        self._provider = provider
        self._llm_config = llm_config or LLMConfig(max_tokens=1024, temperature=0.7)

    async def respond(self, context: ChatContext, question: str) -> str:
        messages = [LLMMessage(role="user", content=build_chat_prompt(context, question))]
        try:
            response = await self._provider.complete(messages, self._llm_config)
        except Exception as e:
            logger.error("Chat response failed for '%s': %s", context.title, e)
            raise GenerationFailure(f"Chat response failed: {e}") from e

        content = response.content.strip()
        if not content:
            raise GenerationFailure("Responder returned an empty response")
        return content
