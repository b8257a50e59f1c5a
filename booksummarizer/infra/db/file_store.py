"""History store backed by a local JSON file."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from booksummarizer.infra.db.base import decode_items, encode_items
from booksummarizer.models.errors import StoreFailure
from booksummarizer.models.history import HistoryItem

logger = logging.getLogger(__name__)


class JsonFileHistoryStore:
    """Keeps the ledger as a JSON array in one file, replaced atomically."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> list[HistoryItem]:
        return await asyncio.to_thread(self._read)

    async def save(self, items: list[HistoryItem]) -> None:
        await asyncio.to_thread(self._write, encode_items(items))
        logger.debug("Saved %d history items to %s", len(items), self._path)

    def _read(self) -> list[HistoryItem]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StoreFailure(f"Failed to read {self._path}: {e}") from e
        return decode_items(raw)

    def _write(self, docs: list[dict]) -> None:
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(docs, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StoreFailure(f"Failed to write {self._path}: {e}") from e
