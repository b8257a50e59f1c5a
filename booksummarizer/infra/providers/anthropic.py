"""Anthropic LLM provider using the anthropic SDK."""

from __future__ import annotations

import logging

import anthropic

from booksummarizer.models.provider import LLMConfig, LLMMessage, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicProvider:
    """LLM provider using the Anthropic API."""

    def __init__(self, api_key: str = "", model: str = "") -> None:
        self._client = anthropic.AsyncAnthropic(api_key=api_key or None)
        self._default_model = model or DEFAULT_MODEL

    @staticmethod
    def _split_system(messages: list[LLMMessage]) -> tuple[str | None, list[dict]]:
        """Pull the system prompt out; Anthropic takes it as a separate field."""
        system_prompt = None
        converted = []
        for msg in messages:
            if msg.role == "system":
                system_prompt = msg.content
            else:
                converted.append(msg.to_dict())
        return system_prompt, converted

    async def complete(
        self,
        messages: list[LLMMessage],
        config: LLMConfig | None = None,
    ) -> LLMResponse:
        """Generate a completion using the Anthropic API."""
        config = config or LLMConfig()
        model = config.model or self._default_model
        system_prompt, converted = self._split_system(messages)

        kwargs: dict = {
            "model": model,
            "max_tokens": config.max_tokens,
            "messages": converted,
        }
        if system_prompt:
            kwargs["system"] = system_prompt
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.stop_sequences:
            kwargs["stop_sequences"] = config.stop_sequences

        logger.debug("Sending request to Anthropic with model: %s", model)
        response = await self._client.messages.create(**kwargs)

        content_text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        return LLMResponse(
            content=content_text,
            model=response.model,
            finish_reason=response.stop_reason or "",
            usage={
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
            },
        )
