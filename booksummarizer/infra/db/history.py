"""History repository - whole-collection MongoDB storage under one key."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pymongo.errors import PyMongoError

from booksummarizer.infra.db.base import decode_items, encode_items
from booksummarizer.models.errors import StoreFailure
from booksummarizer.models.history import HistoryItem

logger = logging.getLogger(__name__)


class MongoHistoryStore:
    """Stores the ledger as a single document keyed by the history namespace."""

    COLLECTION = "history"

    def __init__(self, db, key: str = "bookSummaryHistory") -> None:
        self._col = db[self.COLLECTION]
        self._key = key

    async def load(self) -> list[HistoryItem]:
        try:
            doc = await self._col.find_one({"_id": self._key})
        except PyMongoError as e:
            raise StoreFailure(f"Failed to read history '{self._key}': {e}") from e
        if not doc:
            logger.debug("No stored history under '%s'", self._key)
            return []
        return decode_items(doc.get("items"))

    async def save(self, items: list[HistoryItem]) -> None:
        doc = {
            "_id": self._key,
            "items": encode_items(items),
            "updated_at": datetime.now(timezone.utc),
        }
        try:
            await self._col.replace_one({"_id": self._key}, doc, upsert=True)
        except PyMongoError as e:
            raise StoreFailure(f"Failed to write history '{self._key}': {e}") from e
        logger.debug("Saved %d history items under '%s'", len(items), self._key)
