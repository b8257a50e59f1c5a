"""AppContext: wires config, storage, collaborators, and services together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pymongo.errors import PyMongoError

from booksummarizer.config import AppConfig, load_config
from booksummarizer.infra.db.client import MongoClient
from booksummarizer.models.errors import StoreFailure

if TYPE_CHECKING:
    from pathlib import Path

    from booksummarizer.infra.db.base import HistoryStore
    from booksummarizer.infra.extractor import Extractor
    from booksummarizer.services.chat_service import ChatSession
    from booksummarizer.services.history_ledger import HistoryLedger
    from booksummarizer.services.responder import Responder
    from booksummarizer.services.session_service import SessionStateMachine
    from booksummarizer.services.statistics_service import StatisticsService
    from booksummarizer.services.summarizer import Summarizer

logger = logging.getLogger(__name__)


class AppContext:
    """Central wiring for all application dependencies.

    Lazily builds services on first access. Call `initialize()` to open the
    store and hydrate the ledger.
    """

    def __init__(self, config: AppConfig | None = None, config_path: Path | None = None) -> None:
        self.config = config or load_config(config_path)
        self._mongo: MongoClient | None = None
        self._store: HistoryStore | None = None
        self._ledger: HistoryLedger | None = None
        self._extractor: Extractor | None = None
        self._summarizer: Summarizer | None = None
        self._responder: Responder | None = None
        self._session: SessionStateMachine | None = None
        self._statistics: StatisticsService | None = None

    async def initialize(self) -> None:
        """Open storage and load the history ledger."""
        await self.ledger.load_from_store()
        logger.info("AppContext initialized (%s storage)", self.config.storage.backend)

    async def close(self) -> None:
        """Close all connections."""
        if self._mongo:
            self._mongo.close()
        logger.info("AppContext closed")

    @property
    def store(self) -> HistoryStore:
        if self._store is None:
            backend = self.config.storage.backend
            if backend == "file":
                from booksummarizer.infra.db.file_store import JsonFileHistoryStore

                self._store = JsonFileHistoryStore(self.config.storage.resolved_path)
            elif backend == "mongodb":
                from booksummarizer.infra.db.history import MongoHistoryStore

                try:
                    self._mongo = MongoClient(
                        uri=self.config.mongodb.uri,
                        database=self.config.mongodb.database,
                    )
                except PyMongoError as e:
                    raise StoreFailure(
                        f"Cannot open MongoDB at {self.config.mongodb.uri}: {e}"
                    ) from e
                self._store = MongoHistoryStore(self._mongo.db, self.config.general.history_key)
            else:
                raise ValueError(f"Unknown storage backend: {backend}")
        return self._store

    @property
    def ledger(self) -> HistoryLedger:
        if self._ledger is None:
            from booksummarizer.services.history_ledger import HistoryLedger

            try:
                self._ledger = HistoryLedger(self.store)
            except StoreFailure as e:
                logger.error("History store unavailable, history will not be saved: %s", e)
                self._ledger = HistoryLedger()
                self._ledger.last_store_error = e
        return self._ledger

    @property
    def extractor(self) -> Extractor:
        if self._extractor is None:
            from booksummarizer.infra.extractor import SimulatedExtractor

            self._extractor = SimulatedExtractor()
        return self._extractor

    @property
    def summarizer(self) -> Summarizer:
        if self._summarizer is None:
            from booksummarizer.infra.providers.registry import get_provider_with_fallback
            from booksummarizer.models.provider import LLMConfig
            from booksummarizer.services.summarizer import LLMSummarizer

            cfg = self.config.summarizer
            self._summarizer = LLMSummarizer(
                get_provider_with_fallback(self.config, cfg.provider),
                LLMConfig(model=cfg.model, max_tokens=cfg.max_tokens, temperature=cfg.temperature),
            )
        return self._summarizer

    @property
    def responder(self) -> Responder:
        if self._responder is None:
            from booksummarizer.infra.providers.registry import get_provider_with_fallback
            from booksummarizer.models.provider import LLMConfig
            from booksummarizer.services.responder import LLMResponder

            cfg = self.config.chat
            self._responder = LLMResponder(
                get_provider_with_fallback(self.config, cfg.provider),
                LLMConfig(model=cfg.model, max_tokens=cfg.max_tokens, temperature=cfg.temperature),
            )
        return self._responder

    @property
    def session(self) -> SessionStateMachine:
        if self._session is None:
            from booksummarizer.services.session_service import SessionStateMachine

            general = self.config.general
            self._session = SessionStateMachine(
                ledger=self.ledger,
                extractor=self.extractor,
                summarizer=self.summarizer,
                accepted_types=general.accepted_types,
                max_upload_bytes=general.max_upload_bytes,
                preview_length=general.preview_length,
                timeout=general.collaborator_timeout,
            )
        return self._session

    @property
    def statistics(self) -> StatisticsService:
        if self._statistics is None:
            from booksummarizer.services.statistics_service import StatisticsService

            self._statistics = StatisticsService(self.ledger)
        return self._statistics

    def new_chat(self) -> ChatSession:
        """A fresh chat session; transcripts live only as long as the object."""
        from booksummarizer.services.chat_service import ChatSession

        return ChatSession(
            self.responder,
            context_chars=self.config.chat.context_chars,
            timeout=self.config.general.collaborator_timeout,
        )
