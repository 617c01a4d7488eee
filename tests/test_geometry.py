"""Tests for scales, ticks and chart geometry builders."""

from __future__ import annotations

import pytest

from xp_dashboard.charts.geometry import (
    BAR_EMPTY,
    BAR_MARGINS,
    DEFAULT_BAR_SIZE,
    DEFAULT_LINE_SIZE,
    LINE_EMPTY,
    LINE_MARGINS,
    BarChartGeometry,
    Canvas,
    EmptyChartGeometry,
    LineChartGeometry,
    LinearScale,
    axis_ticks,
    build_bar_geometry,
    build_line_geometry,
    label_rotation,
    resolve_canvas,
    round_half_up,
    thin_labels,
)
from xp_dashboard.metrics import CategoryBucket, MonthlyXpPoint

pytestmark = pytest.mark.unit

LINE_CANVAS = Canvas(700, 300, LINE_MARGINS)   # plot area 560 x 200
BAR_CANVAS  = Canvas(600, 300, BAR_MARGINS)    # plot area 500 x 170


def _buckets(n: int) -> list[CategoryBucket]:
    return [CategoryBucket(f"cat-{i}", pass_count=i, fail_count=1, pass_rate=i / (i + 1) * 100) for i in range(n)]


# ---------------------------------------------------------------------------
# Canvas, scales, ticks
# ---------------------------------------------------------------------------

def test_resolve_canvas_falls_back_per_dimension() -> None:
    """Zero or missing dimensions take the default size."""

    assert resolve_canvas((0, 0), DEFAULT_LINE_SIZE, LINE_MARGINS) == Canvas(700, 300, LINE_MARGINS)
    assert resolve_canvas((800, 0), DEFAULT_LINE_SIZE, LINE_MARGINS) == Canvas(800, 300, LINE_MARGINS)
    assert resolve_canvas(None, DEFAULT_BAR_SIZE, BAR_MARGINS) == Canvas(600, 300, BAR_MARGINS)


def test_canvas_inner_size_never_negative() -> None:
    """A canvas smaller than its margins has an empty plot area."""

    canvas = Canvas(100, 60, LINE_MARGINS)

    assert canvas.inner_width == 0.0
    assert canvas.inner_height == 0.0


def test_linear_scale_maps_and_guards_zero_domain() -> None:
    """Values map linearly; a degenerate domain maps to the range start."""

    scale = LinearScale(domain=(0, 200), range=(200, 0))

    assert scale(0) == 200
    assert scale(150) == pytest.approx(50)
    assert scale(200) == pytest.approx(0)
    assert LinearScale(domain=(0, 0), range=(0, 560))(0) == 0.0


def test_round_half_up() -> None:
    """Halves round away from zero instead of to even."""

    assert [round_half_up(v) for v in (0.5, 1.5, 2.5, 2.4)] == [1, 2, 3, 2]


def test_axis_ticks_absolute() -> None:
    """Five divisions of 150 give six rounded tick values."""

    ticks = axis_ticks(150, LinearScale((0, 150), (200, 0)))

    assert [tick.value for tick in ticks] == [0, 30, 60, 90, 120, 150]
    assert [tick.label for tick in ticks] == ["0", "30", "60", "90", "120", "150"]
    assert [tick.position for tick in ticks] == pytest.approx([200, 160, 120, 80, 40, 0])


def test_axis_ticks_percent_and_formatter() -> None:
    """Percent axes label with a % suffix; absolute axes use the formatter."""

    percent = axis_ticks(100, LinearScale((0, 100), (170, 0)), percent=True)
    custom  = axis_ticks(1000, LinearScale((0, 1000), (200, 0)), formatter=lambda v: f"{v} XP")

    assert [tick.label for tick in percent] == ["0%", "20%", "40%", "60%", "80%", "100%"]
    assert custom[-1].label == "1000 XP"


@pytest.mark.parametrize(
    ("n", "expected"),
    [
        (0, ()),
        (1, (0,)),
        (5, (0, 1, 2, 3, 4)),
        (12, (0, 3, 6, 9, 11)),
    ],
)
def test_thin_labels(n: int, expected: tuple[int, ...]) -> None:
    """At most every ceil(n/5)-th label is kept, plus the last one."""

    assert thin_labels(n) == expected


def test_label_rotation_threshold() -> None:
    """More than four categories rotate their labels."""

    assert (label_rotation(5).rotation, label_rotation(5).anchor) == (45, "start")
    assert (label_rotation(4).rotation, label_rotation(4).anchor) == (0, "middle")


# ---------------------------------------------------------------------------
# Line geometry
# ---------------------------------------------------------------------------

def test_line_geometry_two_months() -> None:
    """Points span the plot width and the highest month touches the top."""

    geometry = build_line_geometry(
        [MonthlyXpPoint("1/2024", 150), MonthlyXpPoint("2/2024", 200)], LINE_CANVAS
    )

    assert isinstance(geometry, LineChartGeometry)
    assert geometry.vertices == [(0.0, 50.0), (560.0, 0.0)]
    assert [point.tooltip for point in geometry.points] == ["1/2024: 150 XP", "2/2024: 200 XP"]
    assert [tick.label for tick in geometry.x_ticks] == ["1/2024", "2/2024"]
    assert geometry.y_ticks[-1].label == "200"


def test_line_geometry_single_point() -> None:
    """One point sits at the left edge without dividing by zero."""

    geometry = build_line_geometry([MonthlyXpPoint("3/2024", 80)], LINE_CANVAS)

    assert geometry.vertices == [(0.0, 0.0)]
    assert len(geometry.x_ticks) == 1


def test_line_geometry_all_zero_xp() -> None:
    """A flat zero series stays on the baseline."""

    geometry = build_line_geometry(
        [MonthlyXpPoint("1/2024", 0), MonthlyXpPoint("2/2024", 0)], LINE_CANVAS
    )

    assert [y for _, y in geometry.vertices] == [200.0, 200.0]
    assert {tick.label for tick in geometry.y_ticks} == {"0"}


def test_line_geometry_cumulative() -> None:
    """The cumulative line follows running totals and says so in tooltips."""

    geometry = build_line_geometry(
        [MonthlyXpPoint("1/2024", 150), MonthlyXpPoint("2/2024", 200)], LINE_CANVAS, cumulative=True
    )

    assert [point.value for point in geometry.points] == [150, 350]
    assert geometry.points[1].tooltip == "2/2024: 200 XP (total 350 XP)"
    assert geometry.y_ticks[-1].value == 350


def test_line_geometry_empty() -> None:
    """No points give the XP placeholder."""

    geometry = build_line_geometry([], LINE_CANVAS)

    assert geometry == EmptyChartGeometry(canvas=LINE_CANVAS, message=LINE_EMPTY)


def test_line_geometry_is_deterministic() -> None:
    """Equal input and canvas give equal geometry."""

    points = [MonthlyXpPoint(f"{m}/2024", m * 37) for m in range(1, 13)]

    assert build_line_geometry(points, LINE_CANVAS) == build_line_geometry(list(points), LINE_CANVAS)


# ---------------------------------------------------------------------------
# Bar geometry
# ---------------------------------------------------------------------------

def test_bar_geometry_two_categories() -> None:
    """Bars are centred in equal bands and scaled to 0..100."""

    geometry = build_bar_geometry(
        [
            CategoryBucket("x", pass_count=1, fail_count=1, pass_rate=50.0),
            CategoryBucket("y", pass_count=1, fail_count=0, pass_rate=100.0),
        ],
        BAR_CANVAS,
    )

    assert isinstance(geometry, BarChartGeometry)
    assert [bar.x for bar in geometry.bars] == pytest.approx([37.5, 287.5])
    assert [bar.width for bar in geometry.bars] == pytest.approx([175, 175])
    assert [bar.height for bar in geometry.bars] == pytest.approx([85, 170])
    assert [bar.tooltip for bar in geometry.bars] == ["x: 50.0% (1/2)", "y: 100.0% (1/1)"]
    assert [label.x for label in geometry.labels] == pytest.approx([125, 375])
    assert geometry.legend_label == "Pass Rate"
    assert [tick.label for tick in geometry.y_ticks][-1] == "100%"


def test_bar_geometry_rotates_many_labels() -> None:
    """Five categories rotate their labels, four do not."""

    five = build_bar_geometry(_buckets(5), BAR_CANVAS)
    four = build_bar_geometry(_buckets(4), BAR_CANVAS)

    assert {(label.rotation, label.anchor) for label in five.labels} == {(45, "start")}
    assert {(label.rotation, label.anchor) for label in four.labels} == {(0, "middle")}


def test_bar_geometry_stays_inside_plot_area() -> None:
    """Every bar fits within the plot area."""

    geometry = build_bar_geometry(_buckets(7), BAR_CANVAS)

    for bar in geometry.bars:
        assert 0 <= bar.x and bar.x + bar.width <= BAR_CANVAS.inner_width + 1e-9
        assert 0 <= bar.y and bar.y + bar.height == pytest.approx(BAR_CANVAS.inner_height)


def test_bar_geometry_empty() -> None:
    """No buckets give the grade placeholder."""

    assert build_bar_geometry([], BAR_CANVAS) == EmptyChartGeometry(canvas=BAR_CANVAS, message=BAR_EMPTY)
