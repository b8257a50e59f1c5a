"""Tests for AppContext wiring."""

import pytest

from booksummarizer.config import AppConfig, ProviderConfig, StorageConfig
from booksummarizer.context import AppContext
from booksummarizer.infra.db.file_store import JsonFileHistoryStore
from booksummarizer.models.errors import StoreFailure
from booksummarizer.models.history import HistoryItem, SummaryOptions


def _config(tmp_path, backend: str = "file") -> AppConfig:
    return AppConfig(
        storage=StorageConfig(backend=backend, path=str(tmp_path / "history.json")),
        providers={"anthropic": ProviderConfig(api_key="test-key")},
    )


class TestAppContext:
    def test_file_backend(self, tmp_path):
        ctx = AppContext(_config(tmp_path))
        assert isinstance(ctx.store, JsonFileHistoryStore)

    def test_unknown_backend(self, tmp_path):
        ctx = AppContext(_config(tmp_path, backend="redis"))
        with pytest.raises(ValueError, match="Unknown storage backend"):
            ctx.store

    def test_malformed_mongo_uri_raises_store_failure(self, tmp_path):
        config = _config(tmp_path, backend="mongodb")
        config.mongodb.uri = "not-a-mongo-uri"
        with pytest.raises(StoreFailure):
            AppContext(config).store

    @pytest.mark.asyncio
    async def test_malformed_mongo_uri_gives_empty_ledger(self, tmp_path):
        config = _config(tmp_path, backend="mongodb")
        config.mongodb.uri = "not-a-mongo-uri"
        ctx = AppContext(config)
        await ctx.initialize()
        assert ctx.ledger.list() == []
        assert isinstance(ctx.ledger.last_store_error, StoreFailure)
        await ctx.close()

    @pytest.mark.asyncio
    async def test_ledger_persists_across_contexts(self, tmp_path):
        ctx = AppContext(_config(tmp_path))
        await ctx.initialize()
        await ctx.ledger.append(HistoryItem.create("Dune", SummaryOptions(), "summary"))
        await ctx.close()

        reopened = AppContext(_config(tmp_path))
        await reopened.initialize()
        assert [i.title for i in reopened.ledger.list()] == ["Dune"]
        assert reopened.statistics.report().total == 1

    def test_session_shares_ledger(self, tmp_path):
        ctx = AppContext(_config(tmp_path))
        assert ctx.session is ctx.session
        assert ctx.statistics is ctx.statistics
        chat = ctx.new_chat()
        assert chat.bound_item is None
        assert chat is not ctx.new_chat()
