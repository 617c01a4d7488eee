"""
stats.py — Numeric summaries for the stats and profile panels.

These functions never draw; callers write the formatted lines into
whatever label target they own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from .config import DEFAULT_TIMEZONE
from .errors import MalformedRecordError
from .metrics import to_zone
from .records import ProgressEntry, ResultEntry, Transaction, UserProfile

XpFormatter = Callable[[float], str]

UNKNOWN          = "Unknown"
NO_USER          = "User data not available"
NO_PROGRESS      = "No progress data"


# ---------------------------------------------------------------------------
# XP unit formatting
# ---------------------------------------------------------------------------

def format_xp_size(value: float) -> str:
    """XP is measured in bytes on the platform: show it as B / kB / MB."""
    if abs(value) >= 1_000_000:
        return f"{value / 1_000_000:.2f} MB"
    if abs(value) >= 1_000:
        return f"{value / 1_000:.2f} kB"
    return f"{value:.2f} B"


def format_compact(value: float) -> str:
    if abs(value) >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if abs(value) >= 1_000:
        return f"{value / 1_000:.0f}K"
    return f"{value:.0f}"


def format_raw(value: float) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


XP_UNIT_FORMATTERS: dict[str, XpFormatter] = {
    "size":    format_xp_size,
    "compact": format_compact,
    "raw":     format_raw,
}


# ---------------------------------------------------------------------------
# Stats panel
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DashboardStats:
    tx_count:      int
    project_count: int
    pass_count:    int
    fail_count:    int
    pass_rate_pct: float

    def as_dict(self) -> dict:
        return {
            "txCount":      self.tx_count,
            "projectCount": self.project_count,
            "passCount":    self.pass_count,
            "failCount":    self.fail_count,
            "passRatePct":  self.pass_rate_pct,
        }


def summarize(
    transactions: Sequence[Transaction] | None,
    progress: Sequence[ProgressEntry] | None,
    results: Sequence[ResultEntry] | None = None,
) -> DashboardStats:
    # results are part of the contract but not counted yet
    transactions = transactions or ()
    progress     = progress or ()

    pass_count = sum(1 for entry in progress if entry.grade == 1)
    fail_count = sum(1 for entry in progress if entry.grade == 0)
    graded     = pass_count + fail_count

    return DashboardStats(
        tx_count=len(transactions),
        project_count=len(progress),
        pass_count=pass_count,
        fail_count=fail_count,
        pass_rate_pct=(pass_count / graded * 100) if graded else 0.0,
    )


def format_stats(stats: DashboardStats) -> list[str]:
    return [
        f"Total XP Entries: {stats.tx_count}",
        f"Total Projects Attempted: {stats.project_count}",
        f"Pass Rate: {stats.pass_rate_pct:.1f}%",
        f"PASS: {stats.pass_count} | FAIL: {stats.fail_count}",
    ]


# ---------------------------------------------------------------------------
# Profile panel
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProfileSummary:
    name:             str
    email:            str
    contact:          str
    total_xp:         str
    current_progress: str

    def as_dict(self) -> dict:
        return {
            "name":            self.name,
            "email":           self.email,
            "contact":         self.contact,
            "totalXp":         self.total_xp,
            "currentProgress": self.current_progress,
        }


def _last_segment(path: str | None) -> str:
    if not path:
        return ""
    return path.split("/")[-1]


def current_progress(transactions: Sequence[Transaction]) -> str:
    if not transactions:
        return NO_PROGRESS
    latest = max(transactions, key=lambda tx: tx.created_at.timestamp())
    return _last_segment(latest.path) or UNKNOWN


def summarize_profile(
    user: UserProfile | None,
    transactions: Sequence[Transaction] | None,
    *,
    xp_formatter: XpFormatter = format_xp_size,
) -> ProfileSummary:
    transactions = transactions or ()
    total_xp     = xp_formatter(sum(tx.amount for tx in transactions))
    progress     = current_progress(transactions)

    if user is None:
        return ProfileSummary(NO_USER, UNKNOWN, UNKNOWN, total_xp, progress)

    return ProfileSummary(
        name=user.login or UNKNOWN,
        email=user.email or UNKNOWN,
        contact=str(user.attrs.get("phone") or UNKNOWN),
        total_xp=total_xp,
        current_progress=progress,
    )


# ---------------------------------------------------------------------------
# Pending projects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PendingProject:
    name:    str
    started: str

    def as_dict(self) -> dict:
        return {"name": self.name, "started": self.started}


def pending_projects(
    pending: Sequence[ProgressEntry] | None,
    *,
    timezone: str = DEFAULT_TIMEZONE,
) -> list[PendingProject]:
    items = []
    for entry in pending or ():
        if not isinstance(entry.path, str):
            raise MalformedRecordError(f"Pending entry without a path: {entry!r}")
        name = _last_segment(entry.path).replace("-", " ")
        if entry.created_at is None:
            started = UNKNOWN
        else:
            moment  = to_zone(entry.created_at, timezone)
            started = f"{moment:%b} {moment.day}, {moment.year}"
        items.append(PendingProject(name=name, started=started))
    return items


def format_profile(profile: ProfileSummary) -> list[str]:
    return [
        f"Login: {profile.name}",
        f"Email: {profile.email}",
        f"Contact: {profile.contact}",
        f"Total XP: {profile.total_xp}",
        f"Current Progress: {profile.current_progress}",
    ]


def format_pending(projects: Sequence[PendingProject]) -> list[str]:
    return [f"{project.name} (Started: {project.started})" for project in projects]
