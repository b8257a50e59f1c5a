"""Chat session bound to a single history item."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from booksummarizer.models.chat import ChatContext, ChatMessage, ChatSender
from booksummarizer.models.history import HistoryItem
from booksummarizer.services.responder import Responder

logger = logging.getLogger(__name__)

ChatListener = Callable[[list[ChatMessage]], None]

ERROR_NOTICE = "Sorry, I encountered an error while generating a response. Please try again."


def intro_message(title: str) -> str:
    return (
        f'I\'m your AI assistant for "{title}". Ask me any questions about this book '
        "based on its summary! I'll answer based solely on the content that's been summarized."
    )


class ChatSession:
    """Conversation about one summarized document.

    Sends are single-flight. `bind` advances an epoch so a reply that arrives
    after the bound item changed is discarded instead of landing in the new
    transcript.
    """

    def __init__(
        self,
        responder: Responder,
        context_chars: int = 6000,
        timeout: float | None = None,
    ) -> None:
        self._responder = responder
        self._context_chars = context_chars
        self._timeout = timeout
        self._item: HistoryItem | None = None
        self._messages: list[ChatMessage] = []
        self._busy = False
        self._epoch = 0
        self._listeners: list[ChatListener] = []

    @property
    def bound_item(self) -> HistoryItem | None:
        return self._item

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def is_busy(self) -> bool:
        return self._busy

    def subscribe(self, listener: ChatListener) -> Callable[[], None]:
        """Register a transcript-change callback. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _append(self, message: ChatMessage) -> None:
        self._messages.append(message)
        self._notify()

    def _notify(self) -> None:
        snapshot = self.messages
        for listener in list(self._listeners):
            listener(snapshot)

    def bind(self, item: HistoryItem | None) -> None:
        """Switch to a new item, resetting the transcript."""
        self._epoch += 1
        self._item = item
        self._busy = False
        if item is None:
            self._messages = []
            logger.debug("Chat unbound")
        else:
            self._messages = [
                ChatMessage(content=intro_message(item.title), sender=ChatSender.ASSISTANT)
            ]
            logger.info("Chat bound to %s (%s)", item.id, item.title)
        self._notify()

    async def send(self, text: str) -> ChatMessage | None:
        """Ask a question about the bound item.

        Returns the assistant reply, or None when the send is rejected (empty
        text, nothing bound, a reply still pending) or the reply went stale.
        """
        if not text or not text.strip():
            logger.debug("Ignoring empty chat message")
            return None
        if self._item is None:
            logger.warning("Chat send rejected: no item bound")
            return None
        if self._busy:
            logger.warning("Chat send rejected: a reply is still pending")
            return None

        epoch = self._epoch
        item = self._item
        self._busy = True
        self._append(ChatMessage(content=text, sender=ChatSender.USER))
        context = ChatContext.from_item(item, self._context_chars)

        try:
            call = self._responder.respond(context, text)
            if self._timeout:
                answer = await asyncio.wait_for(call, self._timeout)
            else:
                answer = await call
        except Exception as e:
            logger.error("Chat reply failed for %s: %s", item.id, e)
            answer = ERROR_NOTICE
        finally:
            if epoch == self._epoch:
                self._busy = False

        if epoch != self._epoch:
            logger.info("Discarding stale chat reply for %s", item.id)
            return None
        reply = ChatMessage(content=answer, sender=ChatSender.ASSISTANT)
        self._append(reply)
        return reply
