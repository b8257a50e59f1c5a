"""LLM provider domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ProviderType(str, Enum):
    ANTHROPIC = "anthropic"
    OPENROUTER = "openrouter"


@dataclass(frozen=True)
class LLMMessage:
    """A single message in a completion request."""

    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for an LLM completion request."""

    model: str = ""
    max_tokens: int = 2048
    temperature: float = 0.7
    stop_sequences: list[str] | None = None


@dataclass(frozen=True)
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str = ""
    finish_reason: str = ""
    usage: dict = field(default_factory=dict)
