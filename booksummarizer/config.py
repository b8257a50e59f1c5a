"""Configuration loading: TOML file + environment variable overlay."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "booksummarizer"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"

DEFAULT_CONFIG_TOML = """\
[general]
history_key = "bookSummaryHistory"
preview_length = 150
max_upload_mb = 20
accepted_types = ["application/pdf"]
collaborator_timeout = 120

[storage]
backend = "mongodb"
path = "~/.local/share/booksummarizer/history.json"

[mongodb]
uri = "mongodb://localhost:27017"
database = "booksummarizer"

[providers.anthropic]
api_key_env = "ANTHROPIC_API_KEY"
default_model = "claude-sonnet-4-20250514"

[providers.openrouter]
api_key_env = "OPENROUTER_API_KEY"
default_model = "anthropic/claude-sonnet-4"

[summarizer]
provider = "anthropic"
model = ""
max_tokens = 2048
temperature = 0.3

[chat]
provider = "anthropic"
model = ""
max_tokens = 1024
temperature = 0.7
context_chars = 6000

[statistics]
default_range = "all"
demo = false
"""


@dataclass
class GeneralConfig:
    history_key: str = "bookSummaryHistory"
    preview_length: int = 150
    max_upload_mb: int = 20
    accepted_types: list[str] = field(default_factory=lambda: ["application/pdf"])
    collaborator_timeout: float = 120.0

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@dataclass
class StorageConfig:
    backend: str = "mongodb"  # mongodb, file
    path: str = "~/.local/share/booksummarizer/history.json"

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser().resolve()


@dataclass
class MongoConfig:
    uri: str = "mongodb://localhost:27017"
    database: str = "booksummarizer"


@dataclass
class ProviderConfig:
    api_key_env: str = ""
    api_key: str = ""
    default_model: str = ""
    base_url: str = ""


@dataclass
class GenerationConfig:
    """Provider selection and sampling settings for one collaborator."""

    provider: str = "anthropic"
    model: str = ""
    max_tokens: int = 2048
    temperature: float = 0.7
    context_chars: int = 6000


@dataclass
class StatisticsConfig:
    default_range: str = "all"
    demo: bool = False


@dataclass
class AppConfig:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    mongodb: MongoConfig = field(default_factory=MongoConfig)
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    summarizer: GenerationConfig = field(
        default_factory=lambda: GenerationConfig(max_tokens=2048, temperature=0.3)
    )
    chat: GenerationConfig = field(
        default_factory=lambda: GenerationConfig(max_tokens=1024, temperature=0.7)
    )
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    config_path: Path | None = None


def _env_overlay(config: AppConfig) -> None:
    """Resolve API keys from the environment variables named in the config."""
    for prov in config.providers.values():
        if prov.api_key_env:
            prov.api_key = os.environ.get(prov.api_key_env, "")


def _parse_provider(data: dict) -> ProviderConfig:
    return ProviderConfig(
        api_key_env=data.get("api_key_env", ""),
        default_model=data.get("default_model", ""),
        base_url=data.get("base_url", ""),
    )


def _parse_generation(data: dict, max_tokens: int, temperature: float) -> GenerationConfig:
    return GenerationConfig(
        provider=data.get("provider", "anthropic"),
        model=data.get("model", ""),
        max_tokens=data.get("max_tokens", max_tokens),
        temperature=data.get("temperature", temperature),
        context_chars=data.get("context_chars", 6000),
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overlay."""
    path = config_path or DEFAULT_CONFIG_PATH

    if path.exists():
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    else:
        raw = tomllib.loads(DEFAULT_CONFIG_TOML)

    general = raw.get("general", {})
    storage_raw = raw.get("storage", {})
    mongo_raw = raw.get("mongodb", {})
    providers_raw = raw.get("providers", {})
    statistics_raw = raw.get("statistics", {})

    config = AppConfig(
        general=GeneralConfig(
            history_key=general.get("history_key", "bookSummaryHistory"),
            preview_length=general.get("preview_length", 150),
            max_upload_mb=general.get("max_upload_mb", 20),
            accepted_types=general.get("accepted_types", ["application/pdf"]),
            collaborator_timeout=general.get("collaborator_timeout", 120.0),
        ),
        storage=StorageConfig(
            backend=storage_raw.get("backend", "mongodb"),
            path=storage_raw.get("path", "~/.local/share/booksummarizer/history.json"),
        ),
        mongodb=MongoConfig(
            uri=mongo_raw.get("uri", "mongodb://localhost:27017"),
            database=mongo_raw.get("database", "booksummarizer"),
        ),
        providers={name: _parse_provider(data) for name, data in providers_raw.items()},
        summarizer=_parse_generation(raw.get("summarizer", {}), 2048, 0.3),
        chat=_parse_generation(raw.get("chat", {}), 1024, 0.7),
        statistics=StatisticsConfig(
            default_range=statistics_raw.get("default_range", "all"),
            demo=statistics_raw.get("demo", False),
        ),
        config_path=path,
    )

    _env_overlay(config)
    return config


def init_config(config_path: Path | None = None) -> Path:
    """Create default config file."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_TOML)
    return path
