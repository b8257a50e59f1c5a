"""Statistics domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from booksummarizer.models.history import SummaryFocus, SummaryLength, SummaryStyle


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class Granularity(str, Enum):
    DAY = "day"
    MONTH = "month"


class Dimension(str, Enum):
    LENGTH = "length"
    STYLE = "style"
    FOCUS = "focus"

    @property
    def values(self) -> tuple[str, ...]:
        """Enumerated option values in declaration order."""
        enum_cls = {
            Dimension.LENGTH: SummaryLength,
            Dimension.STYLE: SummaryStyle,
            Dimension.FOCUS: SummaryFocus,
        }[self]
        return tuple(member.value for member in enum_cls)


@dataclass(frozen=True)
class StatisticsReport:
    """Distributions and timeline computed over a ledger snapshot.

    Real and synthetic reports share the same shape: every enumerated option
    value is a key in its distribution and the timeline holds one entry per
    bucket, oldest first.
    """

    time_range: TimeRange
    granularity: Granularity
    by_length: dict[str, int] = field(default_factory=dict)
    by_style: dict[str, int] = field(default_factory=dict)
    by_focus: dict[str, int] = field(default_factory=dict)
    timeline: dict[str, int] = field(default_factory=dict)
    synthetic: bool = False

    @property
    def total(self) -> int:
        return sum(self.by_length.values())

    def distribution(self, dimension: Dimension | str) -> dict[str, int]:
        dimension = Dimension(dimension)
        if dimension == Dimension.LENGTH:
            return self.by_length
        if dimension == Dimension.STYLE:
            return self.by_style
        return self.by_focus

    def most_popular(self, dimension: Dimension | str) -> str:
        """Value with the highest count; ties go to the first enumerated value."""
        dimension = Dimension(dimension)
        counts = self.distribution(dimension)
        return max(dimension.values, key=lambda value: counts.get(value, 0))

    def timeline_labels(self) -> list[str]:
        labels = []
        for key in self.timeline:
            if self.granularity == Granularity.MONTH:
                year, month = key.split("-")
                day = date(int(year), int(month), 1)
                labels.append(f"{day:%b} {day.year}")
            else:
                day = date.fromisoformat(key)
                labels.append(f"{day:%b} {day.day}")
        return labels
