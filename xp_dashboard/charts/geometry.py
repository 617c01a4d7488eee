"""
geometry.py — Map aggregated series to pixel-space chart geometry.

Coordinates of marks, ticks and category labels are relative to the plot
area (the canvas minus its margins): x grows right from 0 to inner_width,
y grows down from 0 to inner_height. The renderer translates them by the
left/top margins. Titles and placeholders use absolute canvas coordinates.

Geometry objects are frozen and built fresh on every call: the same input
and canvas always produce equal geometry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from ..metrics import CategoryBucket, MonthlyXpPoint, cumulative_xp

TickFormatter = Callable[[int], str]


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Margins:
    top:    float
    right:  float
    bottom: float
    left:   float


LINE_MARGINS = Margins(top=50, right=50, bottom=50, left=90)
BAR_MARGINS  = Margins(top=50, right=40, bottom=80, left=60)

DEFAULT_LINE_SIZE = (700, 300)
DEFAULT_BAR_SIZE  = (600, 300)

LINE_TITLE        = "XP Earned Over Time"
LINE_X_TITLE      = "Time (Month/Year)"
LINE_Y_TITLE      = "XP Earned"
LINE_EMPTY        = "No XP data available"
BAR_TITLE         = "Project Success Rates by Category"
BAR_LEGEND        = "Pass Rate"
BAR_EMPTY         = "No grade data available"

TICK_DIVISIONS     = 5
MAX_X_LABELS       = 5
ROTATION_THRESHOLD = 4
ROTATED_ANGLE      = 45
BAR_FILL_RATIO     = 0.7
CATEGORY_LABEL_GAP = 20


@dataclass(frozen=True)
class Canvas:
    width:   float
    height:  float
    margins: Margins

    @property
    def inner_width(self) -> float:
        return max(0.0, self.width - self.margins.left - self.margins.right)

    @property
    def inner_height(self) -> float:
        return max(0.0, self.height - self.margins.top - self.margins.bottom)


def resolve_canvas(
    observed: tuple[float, float] | None,
    default: tuple[float, float],
    margins: Margins,
) -> Canvas:
    """Use the surface's reported size; any non-positive dimension falls back to the default."""
    width, height = observed or (0, 0)
    return Canvas(
        width=width if width and width > 0 else default[0],
        height=height if height and height > 0 else default[1],
        margins=margins,
    )


# ---------------------------------------------------------------------------
# Scales and ticks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LinearScale:
    domain: tuple[float, float]
    range:  tuple[float, float]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        if d1 == d0:
            return float(self.range[0])
        return self.at_fraction((value - d0) / (d1 - d0))

    def at_fraction(self, fraction: float) -> float:
        r0, r1 = self.range
        return r0 + fraction * (r1 - r0)


@dataclass(frozen=True)
class Tick:
    value:    int
    position: float
    label:    str


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def axis_ticks(
    max_value: float,
    scale: LinearScale,
    *,
    divisions: int = TICK_DIVISIONS,
    percent: bool = False,
    formatter: TickFormatter = str,
) -> tuple[Tick, ...]:
    """
    Evenly spaced ticks from 0 to the top of the axis.

    Percentage axes always run 0..100; absolute axes label each division
    with the rounded share of `max_value`.
    """
    ticks = []
    for i in range(divisions + 1):
        fraction = i / divisions
        if percent:
            value = round_half_up(fraction * 100)
            label = f"{value}%"
        else:
            value = round_half_up(fraction * max_value)
            label = formatter(value)
        ticks.append(Tick(value=value, position=scale.at_fraction(fraction), label=label))
    return tuple(ticks)


def thin_labels(n: int, *, max_labels: int = MAX_X_LABELS) -> tuple[int, ...]:
    """Indices that get an x label: every ceil(n/max_labels)-th one plus the last."""
    if n <= 0:
        return ()
    step = math.ceil(n / max_labels)
    return tuple(i for i in range(n) if i % step == 0 or i == n - 1)


@dataclass(frozen=True)
class LabelLayout:
    rotation: int
    anchor:   str


def label_rotation(n: int, *, threshold: int = ROTATION_THRESHOLD) -> LabelLayout:
    # count heuristic, not a bounding-box overlap test
    if n > threshold:
        return LabelLayout(rotation=ROTATED_ANGLE, anchor="start")
    return LabelLayout(rotation=0, anchor="middle")


# ---------------------------------------------------------------------------
# Geometry types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EmptyChartGeometry:
    canvas:  Canvas
    message: str


@dataclass(frozen=True)
class LinePoint:
    x:       float
    y:       float
    label:   str
    value:   int | float
    tooltip: str


@dataclass(frozen=True)
class LineChartGeometry:
    canvas:  Canvas
    title:   str
    x_title: str
    y_title: str
    x_scale: LinearScale
    y_scale: LinearScale
    points:  tuple[LinePoint, ...]
    x_ticks: tuple[Tick, ...]
    y_ticks: tuple[Tick, ...]

    @property
    def vertices(self) -> list[tuple[float, float]]:
        return [(point.x, point.y) for point in self.points]


@dataclass(frozen=True)
class Bar:
    x:       float
    y:       float
    width:   float
    height:  float
    label:   str
    value:   float
    tooltip: str


@dataclass(frozen=True)
class CategoryLabel:
    x:        float
    y:        float
    text:     str
    anchor:   str
    rotation: int


@dataclass(frozen=True)
class BarChartGeometry:
    canvas:       Canvas
    title:        str
    legend_label: str
    y_scale:      LinearScale
    bars:         tuple[Bar, ...]
    labels:       tuple[CategoryLabel, ...]
    y_ticks:      tuple[Tick, ...]
    layout:       LabelLayout


ChartGeometry = LineChartGeometry | BarChartGeometry | EmptyChartGeometry


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _xp_tooltip(period: str, xp: int | float, total: int | float | None) -> str:
    if total is None:
        return f"{period}: {xp} XP"
    return f"{period}: {xp} XP (total {total} XP)"


def build_line_geometry(
    points: Sequence[MonthlyXpPoint],
    canvas: Canvas,
    *,
    cumulative: bool = False,
    divisions: int = TICK_DIVISIONS,
    max_labels: int = MAX_X_LABELS,
    tick_formatter: TickFormatter = str,
) -> LineChartGeometry | EmptyChartGeometry:
    """
    Line chart of monthly XP. With `cumulative` the line follows the running
    total instead of the per-month amount.
    """
    if not points:
        return EmptyChartGeometry(canvas=canvas, message=LINE_EMPTY)

    n       = len(points)
    totals  = cumulative_xp(points)
    values  = totals if cumulative else [point.xp for point in points]
    max_xp  = max(values)
    x_scale = LinearScale(domain=(0, n - 1), range=(0, canvas.inner_width))
    y_scale = LinearScale(domain=(0, max_xp), range=(canvas.inner_height, 0))

    marks = tuple(
        LinePoint(
            x=x_scale(i),
            y=y_scale(value),
            label=point.period,
            value=value,
            tooltip=_xp_tooltip(point.period, point.xp, total if cumulative else None),
        )
        for i, (point, value, total) in enumerate(zip(points, values, totals))
    )
    x_ticks = tuple(
        Tick(value=i, position=marks[i].x, label=marks[i].label)
        for i in thin_labels(n, max_labels=max_labels)
    )
    y_ticks = axis_ticks(max_xp, y_scale, divisions=divisions, formatter=tick_formatter)

    return LineChartGeometry(
        canvas=canvas,
        title=LINE_TITLE,
        x_title=LINE_X_TITLE,
        y_title=LINE_Y_TITLE,
        x_scale=x_scale,
        y_scale=y_scale,
        points=marks,
        x_ticks=x_ticks,
        y_ticks=y_ticks,
    )


def build_bar_geometry(
    buckets: Sequence[CategoryBucket],
    canvas: Canvas,
    *,
    divisions: int = TICK_DIVISIONS,
    rotation_threshold: int = ROTATION_THRESHOLD,
) -> BarChartGeometry | EmptyChartGeometry:
    """Pass-rate bars, one per category, each centred in an equal band."""
    if not buckets:
        return EmptyChartGeometry(canvas=canvas, message=BAR_EMPTY)

    n         = len(buckets)
    band      = canvas.inner_width / n
    bar_width = band * BAR_FILL_RATIO
    y_scale   = LinearScale(domain=(0, 100), range=(canvas.inner_height, 0))
    layout    = label_rotation(n, threshold=rotation_threshold)
    lefts     = (np.arange(n) * band + (band - bar_width) / 2).tolist()

    bars   = []
    labels = []
    for left, bucket in zip(lefts, buckets):
        top = y_scale(bucket.pass_rate)
        bars.append(Bar(
            x=left,
            y=top,
            width=bar_width,
            height=canvas.inner_height - top,
            label=bucket.label,
            value=bucket.pass_rate,
            tooltip=(
                f"{bucket.label}: {bucket.pass_rate:.1f}% "
                f"({bucket.pass_count}/{bucket.total})"
            ),
        ))
        labels.append(CategoryLabel(
            x=left + bar_width / 2,
            y=canvas.inner_height + CATEGORY_LABEL_GAP,
            text=bucket.label,
            anchor=layout.anchor,
            rotation=layout.rotation,
        ))

    return BarChartGeometry(
        canvas=canvas,
        title=BAR_TITLE,
        legend_label=BAR_LEGEND,
        y_scale=y_scale,
        bars=tuple(bars),
        labels=tuple(labels),
        y_ticks=axis_ticks(100, y_scale, divisions=divisions, percent=True),
        layout=layout,
    )
