"""History domain model: summary options and persisted summary records."""

from __future__ import annotations

import unicodedata
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

PREVIEW_LENGTH = 150
ELLIPSIS = "..."


class SummaryLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class SummaryStyle(str, Enum):
    PARAGRAPH = "paragraph"
    BULLET = "bullet"


class SummaryFocus(str, Enum):
    GENERAL = "general"
    ACADEMIC = "academic"
    TECHNICAL = "technical"


@dataclass(frozen=True)
class SummaryOptions:
    """Configuration used to produce a summary."""

    length: SummaryLength = SummaryLength.MEDIUM
    style: SummaryStyle = SummaryStyle.PARAGRAPH
    focus: SummaryFocus = SummaryFocus.GENERAL

    def to_doc(self) -> dict:
        return {
            "length": self.length.value,
            "style": self.style.value,
            "focus": self.focus.value,
        }

    @classmethod
    def from_doc(cls, doc: dict) -> SummaryOptions:
        if not doc:
            return cls()
        return cls(
            length=SummaryLength(doc.get("length", SummaryLength.MEDIUM.value)),
            style=SummaryStyle(doc.get("style", SummaryStyle.PARAGRAPH.value)),
            focus=SummaryFocus(doc.get("focus", SummaryFocus.GENERAL.value)),
        )


def make_preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    """Truncate text to at most `limit` code points plus an ellipsis.

    A cut that lands between a base character and its combining marks drops
    the partial cluster, so accents are never orphaned from their letters.
    """
    if len(text) <= limit:
        return text
    cut = text[:limit]
    while cut and unicodedata.combining(cut[-1]):
        cut = cut[:-1]
    if cut and unicodedata.combining(text[len(cut)]):
        cut = cut[:-1]
    return cut.rstrip() + ELLIPSIS


def _parse_date(value) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        # Browser-written records use a trailing Z
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported date value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class HistoryItem:
    """One persisted record of a completed summarization."""

    id: str
    title: str
    options: SummaryOptions = field(default_factory=SummaryOptions)
    preview: str = ""
    summary: str | None = None
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("HistoryItem must have an id")

    @classmethod
    def create(
        cls,
        title: str,
        options: SummaryOptions,
        summary: str,
        preview_length: int = PREVIEW_LENGTH,
    ) -> HistoryItem:
        """Build a new record for a freshly generated summary."""
        return cls(
            id=uuid.uuid4().hex,
            title=title or "Untitled Book",
            options=options,
            preview=make_preview(summary, preview_length),
            summary=summary,
        )

    @property
    def body(self) -> str:
        """Full summary when available, otherwise the preview."""
        return self.summary or self.preview

    def to_doc(self) -> dict:
        doc: dict = {
            "id": self.id,
            "title": self.title,
            "date": self.date.isoformat(),
            "options": self.options.to_doc(),
            "preview": self.preview,
        }
        if self.summary is not None:
            doc["summary"] = self.summary
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> HistoryItem:
        return cls(
            id=str(doc["id"]),
            title=doc.get("title", "Untitled Book"),
            date=_parse_date(doc["date"]),
            options=SummaryOptions.from_doc(doc.get("options", {})),
            preview=doc.get("preview", ""),
            summary=doc.get("summary"),
        )
