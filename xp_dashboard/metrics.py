"""
metrics.py — Aggregate normalized records into chart series.

    aggregate_monthly    → [MonthlyXpPoint]   XP summed per calendar month
    aggregate_categories → [CategoryBucket]   pass/fail counts per category

Both functions are pure and return an empty list for empty input.
Category extraction and display filtering are injected callables so the
same aggregation serves every track layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from functools import partial
from itertools import accumulate
from typing import Callable, Iterable, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from .config import (
    DEFAULT_CHECKPOINT_MARKER,
    DEFAULT_EXCLUDED_CATEGORIES,
    DEFAULT_LANGUAGE_MARKER,
    DEFAULT_TIMEZONE,
)
from .errors import DashboardError, MalformedRecordError
from .records import ProgressEntry, Transaction

logger = logging.getLogger(__name__)

CategoryOf = Callable[[str | None], str | None]
Include    = Callable[[str], bool]

FALLBACK_CATEGORY = "Other"


# ---------------------------------------------------------------------------
# Output types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthlyXpPoint:
    period: str          # "M/YYYY"
    xp:     int | float


@dataclass(frozen=True)
class CategoryBucket:
    label:      str
    pass_count: int
    fail_count: int
    pass_rate:  float    # 0..100

    @property
    def total(self) -> int:
        return self.pass_count + self.fail_count


# ---------------------------------------------------------------------------
# Time zone policy
# ---------------------------------------------------------------------------

def resolve_zone(name: str):
    if name.upper() == "UTC":
        return dt_timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise DashboardError(f"Unknown time zone: {name!r}") from exc


def to_zone(moment: datetime, timezone: str = DEFAULT_TIMEZONE) -> datetime:
    """
    Express a timestamp in the bucketing zone.

    "local" follows the viewer's machine. Naive timestamps are read as
    wall-clock time in the target zone; aware ones are converted.
    """
    if timezone == "local":
        return moment.astimezone()
    zone = resolve_zone(timezone)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def _py(value):
    return value.item() if hasattr(value, "item") else value


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------

def aggregate_monthly(
    transactions: Sequence[Transaction] | None,
    *,
    timezone: str = DEFAULT_TIMEZONE,
) -> list[MonthlyXpPoint]:
    """Sum XP per calendar month, in chronological order of first occurrence."""
    if not transactions:
        return []

    moments = [to_zone(tx.created_at, timezone) for tx in transactions]
    frame = pd.DataFrame({
        "order":  [moment.timestamp() for moment in moments],
        "period": [f"{moment.month}/{moment.year}" for moment in moments],
        "amount": [tx.amount for tx in transactions],
    })
    frame = frame.sort_values("order", kind="stable")

    # sort=False keeps first-appearance order, which is chronological here
    totals = frame.groupby("period", sort=False)["amount"].sum()
    return [MonthlyXpPoint(period=str(period), xp=_py(xp)) for period, xp in totals.items()]


def cumulative_xp(points: Iterable[MonthlyXpPoint]) -> list[int | float]:
    return list(accumulate(point.xp for point in points))


# ---------------------------------------------------------------------------
# Category strategies
# ---------------------------------------------------------------------------

def checkpoint_category(
    path: str | None,
    *,
    checkpoint_marker: str = DEFAULT_CHECKPOINT_MARKER,
    language_marker: str = DEFAULT_LANGUAGE_MARKER,
) -> str | None:
    """
    Final path segment of a checkpoint exercise for the given language.
    Paths without both markers are not part of any category.
    """
    if not isinstance(path, str):
        raise MalformedRecordError(f"Progress entry without a path: {path!r}")
    if checkpoint_marker not in path or language_marker not in path:
        return None
    parts = path.split("/")
    return parts[-1] if len(parts) > 1 else FALLBACK_CATEGORY


def make_checkpoint_category(checkpoint_marker: str, language_marker: str) -> CategoryOf:
    return partial(
        checkpoint_category,
        checkpoint_marker=checkpoint_marker,
        language_marker=language_marker,
    )


def make_include(excluded: Iterable[str]) -> Include:
    hidden = frozenset(excluded)

    def include(category: str) -> bool:
        return category not in hidden

    return include


default_include = make_include(DEFAULT_EXCLUDED_CATEGORIES)


# ---------------------------------------------------------------------------
# Category aggregation
# ---------------------------------------------------------------------------

def aggregate_categories(
    progress: Sequence[ProgressEntry] | None,
    category_of: CategoryOf = checkpoint_category,
    include: Include = default_include,
) -> list[CategoryBucket]:
    """
    Count passes (grade 1) and fails (grade 0) per derived category.

    Entries whose category is None are skipped, other grades are not counted,
    and `include` hides categories only after counting. A category with no
    graded entry is never emitted.
    """
    if not progress:
        return []

    rows = []
    for entry in progress:
        category = category_of(entry.path)
        if category is None:
            continue
        rows.append({
            "category": category,
            "passed":   entry.grade == 1,
            "failed":   entry.grade == 0,
        })
    logger.debug("Categorized %d of %d progress entries", len(rows), len(progress))
    if not rows:
        return []

    counts = pd.DataFrame(rows).groupby("category", sort=False)[["passed", "failed"]].sum()

    buckets: list[CategoryBucket] = []
    for label, row in counts.iterrows():
        if not include(label):
            continue
        passed = int(row["passed"])
        failed = int(row["failed"])
        total  = passed + failed
        if total == 0:
            continue
        buckets.append(CategoryBucket(
            label=str(label),
            pass_count=passed,
            fail_count=failed,
            pass_rate=passed / total * 100,
        ))
    return buckets
