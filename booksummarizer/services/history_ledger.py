"""History ledger: ordered in-memory record of past summaries, mirrored to a store."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable

from booksummarizer.infra.db.base import HistoryStore
from booksummarizer.models.errors import StoreFailure
from booksummarizer.models.history import HistoryItem

logger = logging.getLogger(__name__)

LedgerListener = Callable[[list[HistoryItem]], None]


class HistoryLedger:
    """Newest-first collection of HistoryItems.

    The in-memory list is the working set; every append/remove is followed by
    a whole-collection flush to the store. A failed flush is logged and kept in
    `last_store_error` but never rolls back the in-memory change.
    """

    def __init__(self, store: HistoryStore | None = None) -> None:
        self._store = store
        self._items: deque[HistoryItem] = deque()
        self._ids: set[str] = set()
        self._listeners: list[LedgerListener] = []
        self._persist_lock = asyncio.Lock()
        self.last_store_error: StoreFailure | None = None

    def __len__(self) -> int:
        return len(self._items)

    def subscribe(self, listener: LedgerListener) -> Callable[[], None]:
        """Register a change callback. Returns an unsubscribe function."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.list()
        for listener in list(self._listeners):
            listener(snapshot)

    def list(self) -> list[HistoryItem]:
        """Snapshot of every item, newest first."""
        return list(self._items)

    def get(self, item_id: str) -> HistoryItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    async def load_from_store(self) -> list[HistoryItem]:
        """Hydrate from the store; an unreadable store yields an empty ledger."""
        if self._store is None:
            return self.list()
        try:
            items = await self._store.load()
        except StoreFailure as e:
            logger.error("History store unreadable, starting empty: %s", e)
            self.last_store_error = e
            items = []
        self._items = deque()
        self._ids = set()
        for item in items:
            if item.id in self._ids:
                logger.warning("Dropping duplicate stored history id %s", item.id)
                continue
            self._items.append(item)
            self._ids.add(item.id)
        logger.info("Loaded %d history items", len(self._items))
        self._notify()
        return self.list()

    async def persist(self) -> None:
        """Flush the working set to the store. Raises StoreFailure."""
        if self._store is None:
            return
        async with self._persist_lock:
            # Snapshot under the lock so the last writer always flushes the latest state
            await self._store.save(self.list())
        self.last_store_error = None

    async def _sync(self) -> bool:
        try:
            await self.persist()
        except StoreFailure as e:
            logger.error("Failed to persist history: %s", e)
            self.last_store_error = e
            return False
        return True

    async def append(self, item: HistoryItem) -> bool:
        """Insert at the head. Returns False if the flush to the store failed."""
        if item.id in self._ids:
            raise ValueError(f"History item '{item.id}' already exists")
        self._items.appendleft(item)
        self._ids.add(item.id)
        logger.info("Added history item %s (%s)", item.id, item.title)
        self._notify()
        return await self._sync()

    async def remove(self, item_id: str) -> bool:
        """Delete by id. Absent ids are a no-op. Returns True if an item was removed."""
        if item_id not in self._ids:
            logger.debug("History item %s not found, nothing to remove", item_id)
            return False
        self._items = deque(item for item in self._items if item.id != item_id)
        self._ids.discard(item_id)
        logger.info("Removed history item %s", item_id)
        self._notify()
        await self._sync()
        return True
