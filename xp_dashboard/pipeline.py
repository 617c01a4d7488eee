"""
pipeline.py — Orchestrate one dashboard load.

Sequence:
    1. records.normalize_records      → RecordSet
    2. metrics.aggregate_monthly      → monthly XP points
       metrics.aggregate_categories   → per-category pass rates
    3. charts.geometry                → line / bar geometry (or placeholders)
    4. stats.summarize / profile      → panel data
    5. charts.render                  → drawing into the caller's surfaces

Steps 1-4 are pure (`build_dashboard`). `run_dashboard` adds the drawing
step and the single user-visible error path: on a DashboardError both
chart surfaces are cleared and one message is written to the stats panel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .charts.geometry import (
    BAR_MARGINS,
    DEFAULT_BAR_SIZE,
    DEFAULT_LINE_SIZE,
    LINE_MARGINS,
    ChartGeometry,
    TickFormatter,
    build_bar_geometry,
    build_line_geometry,
    resolve_canvas,
)
from .charts.render import render
from .charts.surface import DrawingSurface, LabelTarget
from .config import DashboardSettings
from .errors import DashboardError
from .metrics import (
    CategoryBucket,
    CategoryOf,
    Include,
    MonthlyXpPoint,
    aggregate_categories,
    aggregate_monthly,
    make_checkpoint_category,
    make_include,
)
from .records import RecordSet, normalize_records
from .stats import (
    XP_UNIT_FORMATTERS,
    DashboardStats,
    XpFormatter,
    PendingProject,
    ProfileSummary,
    format_pending,
    format_profile,
    format_stats,
    pending_projects,
    summarize,
    summarize_profile,
)

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error loading data"


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------

@dataclass
class DashboardResult:
    monthly:       list[MonthlyXpPoint] = field(default_factory=list)
    categories:    list[CategoryBucket] = field(default_factory=list)
    stats:         DashboardStats | None = None
    profile:       ProfileSummary | None = None
    pending:       list[PendingProject] = field(default_factory=list)
    line_geometry: ChartGeometry | None = None
    bar_geometry:  ChartGeometry | None = None
    error:         str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict:
        return {
            "error":      self.error,
            "stats":      self.stats.as_dict() if self.stats else None,
            "statsLines": format_stats(self.stats) if self.stats else [],
            "profile":    self.profile.as_dict() if self.profile else None,
            "pending":    [item.as_dict() for item in self.pending],
            "monthlyXp":  [{"period": p.period, "xp": p.xp} for p in self.monthly],
            "categories": [
                {
                    "label":    b.label,
                    "pass":     b.pass_count,
                    "fail":     b.fail_count,
                    "passRate": b.pass_rate,
                }
                for b in self.categories
            ],
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_dashboard(
    records: RecordSet,
    settings: DashboardSettings | None = None,
    *,
    line_size: tuple[float, float] | None = None,
    bar_size: tuple[float, float] | None = None,
    cumulative: bool = False,
    tick_formatter: TickFormatter = str,
    category_of: CategoryOf | None = None,
    include: Include | None = None,
    xp_formatter: XpFormatter | None = None,
) -> DashboardResult:
    """
    Aggregate records and lay out both charts without drawing anything.

    `category_of`, `include` and `xp_formatter` replace the strategies
    derived from `settings` when given.
    """
    settings     = settings or DashboardSettings()
    category_of  = category_of or make_checkpoint_category(
        settings.checkpoint_marker, settings.language_marker
    )
    include      = include or make_include(settings.excluded_categories)
    xp_formatter = xp_formatter or _unit_formatter(settings.xp_unit)

    # ── Aggregate ────────────────────────────────────────────────────────────
    monthly = aggregate_monthly(records.transactions, timezone=settings.timezone)
    categories = aggregate_categories(
        records.progress,
        category_of=category_of,
        include=include,
    )

    # ── Geometry ─────────────────────────────────────────────────────────────
    line_geometry = build_line_geometry(
        monthly,
        resolve_canvas(line_size, DEFAULT_LINE_SIZE, LINE_MARGINS),
        cumulative=cumulative,
        divisions=settings.tick_divisions,
        max_labels=settings.max_x_labels,
        tick_formatter=tick_formatter,
    )
    bar_geometry = build_bar_geometry(
        categories,
        resolve_canvas(bar_size, DEFAULT_BAR_SIZE, BAR_MARGINS),
        divisions=settings.tick_divisions,
        rotation_threshold=settings.rotation_threshold,
    )

    # ── Panels ───────────────────────────────────────────────────────────────
    stats   = summarize(records.transactions, records.progress, records.results)
    profile = summarize_profile(
        records.user,
        records.transactions,
        xp_formatter=xp_formatter,
    )
    pending = pending_projects(records.pending, timezone=settings.timezone)

    return DashboardResult(
        monthly=monthly,
        categories=categories,
        stats=stats,
        profile=profile,
        pending=pending,
        line_geometry=line_geometry,
        bar_geometry=bar_geometry,
    )


def _unit_formatter(unit: str) -> XpFormatter:
    try:
        return XP_UNIT_FORMATTERS[unit]
    except KeyError as exc:
        raise DashboardError(f"Unknown XP unit: {unit!r}") from exc


def _write_lines(panel: LabelTarget | None, lines: list[str]) -> None:
    if panel is None:
        return
    panel.clear()
    for line in lines:
        panel.write(line)


def run_dashboard(
    payload: Any,
    *,
    line_surface: DrawingSurface,
    bar_surface: DrawingSurface,
    stats_panel: LabelTarget,
    profile_panel: LabelTarget | None = None,
    pending_panel: LabelTarget | None = None,
    settings: DashboardSettings | None = None,
    cumulative: bool = False,
    tick_formatter: TickFormatter = str,
    category_of: CategoryOf | None = None,
    include: Include | None = None,
    xp_formatter: XpFormatter | None = None,
) -> DashboardResult:
    """
    Load a raw payload into the given surfaces and panels.

    Surfaces and panels must not be shared with a concurrent call: nothing
    here serializes access to them.
    """
    try:
        records = normalize_records(payload)
        result  = build_dashboard(
            records,
            settings,
            line_size=line_surface.size(),
            bar_size=bar_surface.size(),
            cumulative=cumulative,
            tick_formatter=tick_formatter,
            category_of=category_of,
            include=include,
            xp_formatter=xp_formatter,
        )
    except DashboardError as exc:
        message = f"{ERROR_PREFIX}: {exc}"
        logger.warning("Dashboard load failed | %s", exc)
        line_surface.clear()
        bar_surface.clear()
        _write_lines(profile_panel, [])
        _write_lines(pending_panel, [])
        _write_lines(stats_panel, [message])
        return DashboardResult(error=message)

    render(result.line_geometry, line_surface)
    render(result.bar_geometry, bar_surface)
    _write_lines(stats_panel, format_stats(result.stats))
    _write_lines(profile_panel, format_profile(result.profile))
    _write_lines(pending_panel, format_pending(result.pending))

    logger.info(
        "Dashboard loaded | months=%d categories=%d tx=%d pass=%d fail=%d",
        len(result.monthly), len(result.categories),
        result.stats.tx_count, result.stats.pass_count, result.stats.fail_count,
    )
    return result
