"""Statistics engine: distributions and timelines over a ledger snapshot."""

from __future__ import annotations

import calendar
import logging
import random
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone

from booksummarizer.models.history import HistoryItem
from booksummarizer.models.statistics import Dimension, Granularity, StatisticsReport, TimeRange
from booksummarizer.services.history_ledger import HistoryLedger

logger = logging.getLogger(__name__)

WEEK_BUCKETS = 7
MONTH_BUCKETS = 30
YEAR_BUCKETS = 12
# "all" over an empty ledger, and the synthetic timeline, span 8 days
DEFAULT_DAILY_BUCKETS = 8
# Longer "all" spans switch from daily to monthly buckets
MAX_DAILY_SPAN_DAYS = 90

SYNTHETIC_RANGES: dict[Dimension, dict[str, tuple[int, int]]] = {
    Dimension.LENGTH: {"short": (5, 19), "medium": (10, 29), "long": (15, 39)},
    Dimension.STYLE: {"paragraph": (15, 44), "bullet": (10, 34)},
    Dimension.FOCUS: {"general": (15, 39), "academic": (10, 29), "technical": (5, 19)},
}
SYNTHETIC_TIMELINE_RANGE = (1, 10)


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move by whole calendar months, clamping the day to the target month."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def range_cutoff(time_range: TimeRange, now: datetime) -> datetime | None:
    """Earliest date retained by the range, or None for `all`."""
    if time_range == TimeRange.WEEK:
        return now - timedelta(days=7)
    if time_range == TimeRange.MONTH:
        return _shift_months(now, -1)
    if time_range == TimeRange.YEAR:
        return _shift_months(now, -12)
    return None


def filter_by_range(
    items: Iterable[HistoryItem], time_range: TimeRange, now: datetime
) -> list[HistoryItem]:
    cutoff = range_cutoff(time_range, now)
    if cutoff is None:
        return list(items)
    return [item for item in items if _as_utc(item.date) >= cutoff]


def count_distribution(items: list[HistoryItem], dimension: Dimension) -> dict[str, int]:
    """Counts per enumerated value; absent values appear with 0."""
    counts = {value: 0 for value in dimension.values}
    for item in items:
        value = getattr(item.options, dimension.value).value
        counts[value] += 1
    return counts


def _day_key(day: date) -> str:
    return day.isoformat()


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _daily_keys(end: date, count: int) -> list[str]:
    return [_day_key(end - timedelta(days=offset)) for offset in range(count - 1, -1, -1)]


def _monthly_keys(end: date, count: int) -> list[str]:
    keys = []
    for offset in range(count - 1, -1, -1):
        index = end.year * 12 + (end.month - 1) - offset
        year, month = divmod(index, 12)
        keys.append(f"{year:04d}-{month + 1:02d}")
    return keys


def timeline_buckets(
    time_range: TimeRange, now: datetime, items: list[HistoryItem] | None = None
) -> tuple[Granularity, list[str]]:
    """Bucket granularity and the ordered bucket keys for a range.

    `all` spans from the oldest item to today: daily up to
    MAX_DAILY_SPAN_DAYS, monthly beyond that.
    """
    today = now.date()
    if time_range == TimeRange.WEEK:
        return Granularity.DAY, _daily_keys(today, WEEK_BUCKETS)
    if time_range == TimeRange.MONTH:
        return Granularity.DAY, _daily_keys(today, MONTH_BUCKETS)
    if time_range == TimeRange.YEAR:
        return Granularity.MONTH, _monthly_keys(today, YEAR_BUCKETS)

    if not items:
        return Granularity.DAY, _daily_keys(today, DEFAULT_DAILY_BUCKETS)
    oldest = min(_as_utc(item.date).date() for item in items)
    span_days = (today - oldest).days + 1
    if span_days <= MAX_DAILY_SPAN_DAYS:
        return Granularity.DAY, _daily_keys(today, max(span_days, DEFAULT_DAILY_BUCKETS))
    months = (today.year - oldest.year) * 12 + (today.month - oldest.month) + 1
    return Granularity.MONTH, _monthly_keys(today, months)


def build_timeline(
    items: list[HistoryItem], time_range: TimeRange, now: datetime
) -> tuple[Granularity, dict[str, int]]:
    """Zero-filled counts per bucket; items outside the window are dropped."""
    granularity, keys = timeline_buckets(time_range, now, items)
    timeline = {key: 0 for key in keys}
    key_for = _month_key if granularity == Granularity.MONTH else _day_key
    for item in items:
        key = key_for(_as_utc(item.date).date())
        if key in timeline:
            timeline[key] += 1
    return granularity, timeline


def synthetic_report(
    time_range: TimeRange, now: datetime, rng: random.Random | None = None
) -> StatisticsReport:
    """Random demo statistics shaped exactly like a real report for the range."""
    rng = rng or random.Random()
    distributions = {
        dimension: {value: rng.randint(low, high) for value, (low, high) in ranges.items()}
        for dimension, ranges in SYNTHETIC_RANGES.items()
    }
    granularity, keys = timeline_buckets(time_range, now)
    low, high = SYNTHETIC_TIMELINE_RANGE
    return StatisticsReport(
        time_range=time_range,
        granularity=granularity,
        by_length=distributions[Dimension.LENGTH],
        by_style=distributions[Dimension.STYLE],
        by_focus=distributions[Dimension.FOCUS],
        timeline={key: rng.randint(low, high) for key in keys},
        synthetic=True,
    )


def compute_statistics(
    items: Iterable[HistoryItem],
    time_range: TimeRange | str = TimeRange.ALL,
    use_synthetic: bool = False,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> StatisticsReport:
    """Filter, count, and bucket a snapshot of history items.

    With `use_synthetic` the snapshot is never read; random demo data is
    returned instead.
    """
    time_range = TimeRange(time_range)
    now = _as_utc(now or datetime.now(timezone.utc))
    if use_synthetic:
        return synthetic_report(time_range, now, rng)

    filtered = filter_by_range(items, time_range, now)
    granularity, timeline = build_timeline(filtered, time_range, now)
    return StatisticsReport(
        time_range=time_range,
        granularity=granularity,
        by_length=count_distribution(filtered, Dimension.LENGTH),
        by_style=count_distribution(filtered, Dimension.STYLE),
        by_focus=count_distribution(filtered, Dimension.FOCUS),
        timeline=timeline,
    )


class StatisticsService:
    """Computes reports over the ledger's current snapshot."""

    def __init__(self, ledger: HistoryLedger) -> None:
        self._ledger = ledger

    def report(
        self,
        time_range: TimeRange | str = TimeRange.ALL,
        use_synthetic: bool = False,
    ) -> StatisticsReport:
        if use_synthetic:
            return compute_statistics((), time_range, use_synthetic=True)
        items = self._ledger.list()
        report = compute_statistics(items, time_range)
        logger.debug(
            "Statistics for %s: %d of %d items", report.time_range.value, report.total, len(items),
        )
        return report
