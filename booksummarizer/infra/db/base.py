"""Durable history store protocol and shared record decoding."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from booksummarizer.models.errors import StoreFailure
from booksummarizer.models.history import HistoryItem

logger = logging.getLogger(__name__)


@runtime_checkable
class HistoryStore(Protocol):
    """Whole-collection storage for the history ledger."""

    async def load(self) -> list[HistoryItem]:
        """Read every stored item, newest first."""
        ...

    async def save(self, items: list[HistoryItem]) -> None:
        """Replace the stored collection. Raises StoreFailure on fault."""
        ...


def decode_items(raw) -> list[HistoryItem]:
    """Decode a stored item list, skipping records that fail to parse."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise StoreFailure(f"Stored history is not a list: {type(raw).__name__}")

    items = []
    for doc in raw:
        try:
            items.append(HistoryItem.from_doc(doc))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed history record: %s", e)
    return items


def encode_items(items: list[HistoryItem]) -> list[dict]:
    return [item.to_doc() for item in items]
