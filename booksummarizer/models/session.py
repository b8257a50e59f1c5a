"""Summarization session domain model."""

from __future__ import annotations

import mimetypes
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from booksummarizer.models.history import SummaryOptions

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class SessionPhase(str, Enum):
    IDLE = "idle"
    DOCUMENT_SELECTED = "document_selected"
    TEXT_EXTRACTED = "text_extracted"
    SUMMARIZING = "summarizing"
    SUMMARIZED = "summarized"
    ERROR = "error"

    @property
    def accepts_document(self) -> bool:
        return self in (
            SessionPhase.IDLE,
            SessionPhase.SUMMARIZED,
            SessionPhase.ERROR,
        )


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    EXTRACTION = "extraction"
    GENERATION = "generation"
    STORE = "store"


@dataclass(frozen=True)
class Document:
    """An uploaded document awaiting extraction."""

    name: str
    content_type: str
    size: int
    data: bytes = b""

    @property
    def title(self) -> str:
        """File name with its extension stripped."""
        return _EXTENSION_RE.sub("", self.name)

    @classmethod
    def from_path(cls, path: Path) -> Document:
        path = Path(path).expanduser()
        data = path.read_bytes()
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content_type=content_type or "application/octet-stream",
            size=len(data),
            data=data,
        )


@dataclass(frozen=True)
class SessionState:
    """Snapshot of one upload-to-summary cycle."""

    phase: SessionPhase = SessionPhase.IDLE
    document: Document | None = None
    title: str = ""
    extracted_text: str | None = None
    options: SummaryOptions = field(default_factory=SummaryOptions)
    summary: str | None = None
    error: str = ""
    error_kind: ErrorKind | None = None
    notice: str = ""
    item_id: str | None = None

    @property
    def can_summarize(self) -> bool:
        return bool(self.extracted_text) and self.phase in (
            SessionPhase.TEXT_EXTRACTED,
            SessionPhase.SUMMARIZED,
            SessionPhase.ERROR,
        )
