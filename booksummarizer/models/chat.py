"""Chat domain models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from booksummarizer.models.history import HistoryItem, SummaryOptions


class ChatSender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ChatMessage:
    """A single message in a chat transcript."""

    content: str
    sender: ChatSender
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def from_user(self) -> bool:
        return self.sender == ChatSender.USER


@dataclass(frozen=True)
class ChatContext:
    """Bounded view of one history item handed to the Responder."""

    title: str
    body: str
    options: SummaryOptions

    @classmethod
    def from_item(cls, item: HistoryItem, max_chars: int = 6000) -> ChatContext:
        body = item.body
        if max_chars and len(body) > max_chars:
            body = body[:max_chars]
        return cls(title=item.title, body=body, options=item.options)
