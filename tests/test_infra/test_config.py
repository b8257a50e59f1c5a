"""Tests for config loading."""

from pathlib import Path

from booksummarizer.config import AppConfig, StorageConfig, init_config, load_config


class TestConfig:
    def test_load_defaults(self):
        """Loading with no file should return defaults."""
        config = load_config(Path("/nonexistent/config.toml"))
        assert config.mongodb.uri == "mongodb://localhost:27017"
        assert config.mongodb.database == "booksummarizer"
        assert config.general.history_key == "bookSummaryHistory"
        assert config.general.preview_length == 150
        assert config.general.accepted_types == ["application/pdf"]
        assert config.summarizer.temperature == 0.3
        assert config.chat.max_tokens == 1024

    def test_max_upload_bytes(self):
        config = AppConfig()
        assert config.general.max_upload_bytes == 20 * 1024 * 1024

    def test_resolved_storage_path(self):
        storage = StorageConfig(path="~/history.json")
        assert str(storage.resolved_path).startswith("/")
        assert "~" not in str(storage.resolved_path)

    def test_init_config(self, tmp_path):
        path = tmp_path / "config.toml"
        result = init_config(path)
        assert result == path
        assert path.exists()
        # Should be loadable
        config = load_config(path)
        assert config.mongodb.database == "booksummarizer"
        assert set(config.providers) == {"anthropic", "openrouter"}

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[storage]\nbackend = "file"\n\n[chat]\ntemperature = 0.2\n')
        config = load_config(path)
        assert config.storage.backend == "file"
        assert config.chat.temperature == 0.2
        assert config.chat.max_tokens == 1024
        assert config.general.max_upload_mb == 20

    def test_api_key_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TEST_BOOKSUM_KEY", "sk-test")
        path = tmp_path / "config.toml"
        path.write_text('[providers.anthropic]\napi_key_env = "TEST_BOOKSUM_KEY"\n')
        config = load_config(path)
        assert config.providers["anthropic"].api_key == "sk-test"
