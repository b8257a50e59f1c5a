"""Tests for chat models."""

import pytest

from booksummarizer.models.chat import ChatContext, ChatMessage, ChatSender
from booksummarizer.models.history import HistoryItem, SummaryOptions, SummaryStyle


class TestChatMessage:
    def test_create(self):
        msg = ChatMessage(content="hello", sender=ChatSender.USER)
        assert msg.from_user
        assert msg.id
        assert msg.timestamp is not None

    def test_ids_unique(self):
        a = ChatMessage(content="a", sender=ChatSender.USER)
        b = ChatMessage(content="a", sender=ChatSender.USER)
        assert a.id != b.id

    def test_frozen(self):
        msg = ChatMessage(content="a", sender=ChatSender.ASSISTANT)
        with pytest.raises(AttributeError):
            msg.content = "b"  # type: ignore


class TestChatContext:
    def test_from_item_uses_summary(self):
        opts = SummaryOptions(style=SummaryStyle.BULLET)
        item = HistoryItem(id="1", title="Dune", preview="p...", summary="full", options=opts)
        ctx = ChatContext.from_item(item)
        assert ctx.title == "Dune"
        assert ctx.body == "full"
        assert ctx.options == opts

    def test_from_item_falls_back_to_preview(self):
        item = HistoryItem(id="1", title="Dune", preview="p...")
        assert ChatContext.from_item(item).body == "p..."

    def test_body_is_bounded(self):
        item = HistoryItem(id="1", title="Dune", preview="p", summary="x" * 100)
        assert len(ChatContext.from_item(item, max_chars=10).body) == 10
