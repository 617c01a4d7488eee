"""
render.py — Draw chart geometry into a drawing surface.

The surface is cleared before anything is drawn, then receives the full
chart (or the "no data" placeholder). Nothing is read back from it.
"""

from __future__ import annotations

import logging

from .geometry import (
    BarChartGeometry,
    ChartGeometry,
    EmptyChartGeometry,
    LineChartGeometry,
)
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

# ── Design tokens ─────────────────────────────────────────────────────────────
ACCENT      = "#007bff"
AXIS        = "#000000"
GRID        = "#e0e0e0"
TEXT        = "#000000"
MUTED       = "#555555"
TICK_FONT   = 12
TICK_LENGTH = 5
POINT_R     = 5
BAR_RADIUS  = 4
LEGEND_BOX  = 15


def render(geometry: ChartGeometry, surface: DrawingSurface) -> None:
    surface.clear()
    canvas = geometry.canvas
    surface.set_viewbox(canvas.width, canvas.height)

    if isinstance(geometry, EmptyChartGeometry):
        render_placeholder(geometry, surface)
    elif isinstance(geometry, LineChartGeometry):
        render_line_chart(geometry, surface)
    elif isinstance(geometry, BarChartGeometry):
        render_bar_chart(geometry, surface)
    else:
        raise TypeError(f"Unsupported geometry: {type(geometry).__name__}")


def render_placeholder(geometry: EmptyChartGeometry, surface: DrawingSurface) -> None:
    canvas = geometry.canvas
    surface.text(canvas.width / 2, canvas.height / 2, geometry.message,
                 anchor="middle", fill=MUTED, css_class="placeholder")
    logger.debug("Rendered placeholder: %s", geometry.message)


def render_line_chart(geometry: LineChartGeometry, surface: DrawingSurface) -> None:
    canvas  = geometry.canvas
    margins = canvas.margins
    inner_w = canvas.inner_width
    inner_h = canvas.inner_height

    surface.text(canvas.width / 2, 20, geometry.title,
                 anchor="middle", font_weight="bold", fill=TEXT, css_class="chart-title")
    surface.text(canvas.width / 2, canvas.height - 10, geometry.x_title,
                 anchor="middle", fill=TEXT, css_class="axis-title")
    surface.text(25, canvas.height / 2, geometry.y_title,
                 anchor="middle", rotate=-90, fill=TEXT, css_class="axis-title")

    with surface.group(translate=(margins.left, margins.top)):
        surface.line(0, inner_h, inner_w, inner_h, stroke=AXIS, stroke_width=2, css_class="axis-line")
        surface.line(0, 0, 0, inner_h, stroke=AXIS, stroke_width=2, css_class="axis-line")

        for tick in geometry.y_ticks:
            surface.line(0, tick.position, inner_w, tick.position,
                         stroke=GRID, dash="5,5", css_class="grid-line")
            surface.line(-TICK_LENGTH, tick.position, 0, tick.position,
                         stroke=AXIS, css_class="tick-line")
            surface.text(-10, tick.position + 5, tick.label,
                         anchor="end", font_size=TICK_FONT, fill=TEXT, css_class="tick-label")

        for tick in geometry.x_ticks:
            surface.line(tick.position, inner_h, tick.position, inner_h + TICK_LENGTH,
                         stroke=AXIS, css_class="tick-line")
            surface.text(tick.position, inner_h + 20, tick.label,
                         anchor="middle", font_size=TICK_FONT, fill=TEXT, css_class="tick-label")

        surface.path(geometry.vertices, stroke=ACCENT, stroke_width=3)
        for point in geometry.points:
            surface.circle(point.x, point.y, POINT_R, fill=ACCENT, tooltip=point.tooltip)

    logger.debug("Rendered line chart with %d points", len(geometry.points))


def render_bar_chart(geometry: BarChartGeometry, surface: DrawingSurface) -> None:
    canvas  = geometry.canvas
    margins = canvas.margins
    inner_w = canvas.inner_width
    inner_h = canvas.inner_height

    surface.text(canvas.width / 2, margins.top / 2, geometry.title,
                 anchor="middle", font_weight="bold", fill=TEXT, css_class="chart-title")

    with surface.group(translate=(margins.left, margins.top)):
        surface.line(0, inner_h, inner_w, inner_h, stroke=AXIS, stroke_width=2, css_class="axis-line")
        surface.line(0, 0, 0, inner_h, stroke=AXIS, stroke_width=2, css_class="axis-line")

        for tick in geometry.y_ticks:
            surface.line(0, tick.position, inner_w, tick.position,
                         stroke=GRID, dash="5,5", css_class="grid-line")
            surface.text(-10, tick.position + 4, tick.label,
                         anchor="end", font_size=TICK_FONT, fill=TEXT, css_class="tick-label")
            surface.line(-TICK_LENGTH, tick.position, 0, tick.position,
                         stroke=AXIS, css_class="tick-line")

        for bar, label in zip(geometry.bars, geometry.labels):
            surface.rect(bar.x, bar.y, bar.width, bar.height,
                         fill=ACCENT, radius=BAR_RADIUS, tooltip=bar.tooltip, css_class="bar")
            surface.text(label.x, label.y, label.text,
                         anchor=label.anchor, rotate=label.rotation or None,
                         fill=TEXT, css_class="category-label")

        legend_x = inner_w - 80
        legend_y = -margins.top / 2 + 10
        surface.rect(legend_x, legend_y, LEGEND_BOX, LEGEND_BOX, fill=ACCENT, css_class="legend-box")
        surface.text(legend_x + 20, legend_y + 12, geometry.legend_label,
                     fill=TEXT, css_class="legend-text")

    logger.debug("Rendered bar chart with %d bars", len(geometry.bars))
