"""
surface.py — Drawing targets the renderer draws into.

    SvgSurface        → SVG document (ElementTree), tooltips as <title>
    MatplotlibSurface → matplotlib figure in pixel coordinates (PNG / SVG export)
    TextPanel         → plain list of lines for stats and profile panels

All drawing surfaces use SVG conventions: origin top-left, y grows down,
positive rotation is clockwise, text anchors are start / middle / end.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, FancyBboxPatch, Rectangle

SVG_NS = "http://www.w3.org/2000/svg"

Point = tuple[float, float]


def fmt_number(value: float) -> str:
    if isinstance(value, int):
        return str(value)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _positive(value: float | None) -> float | None:
    # non-positive sizes count as unknown
    return value if value and value > 0 else None


class DrawingSurface(Protocol):
    def size(self) -> tuple[float, float]: ...

    def clear(self) -> None: ...

    def set_viewbox(self, width: float, height: float) -> None: ...

    def group(self, translate: Point = (0, 0)): ...

    def line(self, x1: float, y1: float, x2: float, y2: float, *,
             stroke: str, stroke_width: float = 1, dash: str | None = None,
             css_class: str | None = None) -> None: ...

    def rect(self, x: float, y: float, width: float, height: float, *,
             fill: str, radius: float = 0, tooltip: str | None = None,
             css_class: str | None = None) -> None: ...

    def path(self, points: Sequence[Point], *, stroke: str,
             stroke_width: float = 1) -> None: ...

    def circle(self, cx: float, cy: float, r: float, *, fill: str,
               tooltip: str | None = None) -> None: ...

    def text(self, x: float, y: float, content: str, *, anchor: str = "start",
             font_size: float | None = None, font_weight: str | None = None,
             rotate: float | None = None, fill: str | None = None,
             css_class: str | None = None) -> None: ...


class LabelTarget(Protocol):
    def clear(self) -> None: ...

    def write(self, line: str) -> None: ...


# ---------------------------------------------------------------------------
# SVG
# ---------------------------------------------------------------------------

class SvgSurface:
    """
    In-memory SVG document. `width`/`height` play the role of the observed
    element size; leave them unset to let the renderer pick its defaults.
    """

    def __init__(self, width: float | None = None, height: float | None = None):
        self._width  = _positive(width)
        self._height = _positive(height)
        self.root    = ET.Element("svg", {"xmlns": SVG_NS})
        if self._width and self._height:
            self.root.set("width", fmt_number(self._width))
            self.root.set("height", fmt_number(self._height))
        self._stack = [self.root]

    @property
    def _current(self) -> ET.Element:
        return self._stack[-1]

    def size(self) -> tuple[float, float]:
        return (self._width or 0, self._height or 0)

    def clear(self) -> None:
        for child in list(self.root):
            self.root.remove(child)
        self._stack = [self.root]

    def set_viewbox(self, width: float, height: float) -> None:
        self.root.set("viewBox", f"0 0 {fmt_number(width)} {fmt_number(height)}")
        self.root.set("preserveAspectRatio", "xMinYMin meet")
        if "width" not in self.root.attrib:
            self.root.set("width", fmt_number(width))
            self.root.set("height", fmt_number(height))

    @contextmanager
    def group(self, translate: Point = (0, 0)) -> Iterator[ET.Element]:
        x, y = translate
        element = ET.SubElement(
            self._current, "g", {"transform": f"translate({fmt_number(x)},{fmt_number(y)})"}
        )
        self._stack.append(element)
        try:
            yield element
        finally:
            self._stack.pop()

    def _add(self, tag: str, attrs: dict, tooltip: str | None = None) -> ET.Element:
        element = ET.SubElement(
            self._current,
            tag,
            {key: value for key, value in attrs.items() if value is not None},
        )
        if tooltip is not None:
            ET.SubElement(element, "title").text = tooltip
        return element

    def line(self, x1, y1, x2, y2, *, stroke, stroke_width=1, dash=None, css_class=None):
        self._add("line", {
            "x1": fmt_number(x1), "y1": fmt_number(y1),
            "x2": fmt_number(x2), "y2": fmt_number(y2),
            "stroke": stroke,
            "stroke-width": fmt_number(stroke_width),
            "stroke-dasharray": dash,
            "class": css_class,
        })

    def rect(self, x, y, width, height, *, fill, radius=0, tooltip=None, css_class=None):
        attrs = {
            "x": fmt_number(x), "y": fmt_number(y),
            "width": fmt_number(width), "height": fmt_number(height),
            "fill": fill,
            "class": css_class,
        }
        if radius:
            attrs["rx"] = attrs["ry"] = fmt_number(radius)
        self._add("rect", attrs, tooltip)

    def path(self, points, *, stroke, stroke_width=1):
        commands = [
            f"{'M' if i == 0 else 'L'} {fmt_number(x)} {fmt_number(y)}"
            for i, (x, y) in enumerate(points)
        ]
        self._add("path", {
            "d": " ".join(commands),
            "stroke": stroke,
            "stroke-width": fmt_number(stroke_width),
            "fill": "none",
        })

    def circle(self, cx, cy, r, *, fill, tooltip=None):
        self._add("circle", {
            "cx": fmt_number(cx), "cy": fmt_number(cy), "r": fmt_number(r), "fill": fill,
        }, tooltip)

    def text(self, x, y, content, *, anchor="start", font_size=None, font_weight=None,
             rotate=None, fill=None, css_class=None):
        transform = None
        if rotate:
            transform = f"rotate({fmt_number(rotate)},{fmt_number(x)},{fmt_number(y)})"
        element = self._add("text", {
            "x": fmt_number(x), "y": fmt_number(y),
            "text-anchor": anchor,
            "font-size": None if font_size is None else fmt_number(font_size),
            "font-weight": font_weight,
            "fill": fill,
            "transform": transform,
            "class": css_class,
        })
        element.text = content

    def tooltips(self) -> list[str]:
        return [title.text or "" for title in self.root.iter("title")]

    def to_string(self) -> str:
        return ET.tostring(self.root, encoding="unicode")

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.write_text(self.to_string(), encoding="utf-8")
        return path


# ---------------------------------------------------------------------------
# matplotlib
# ---------------------------------------------------------------------------

_HA = {"start": "left", "middle": "center", "end": "right"}
_FALLBACK_SIZE = (700, 300)


class MatplotlibSurface:
    """
    Figure whose axes span the whole canvas with one data unit per pixel,
    y inverted, so SVG-style coordinates can be drawn as-is.
    """

    DPI = 100

    def __init__(self, width: float | None = None, height: float | None = None):
        self._width   = _positive(width)
        self._height  = _positive(height)
        self.fig      = None
        self.ax       = None
        self._offsets: list[Point] = [(0, 0)]
        self.tooltips: list[str] = []

    def size(self) -> tuple[float, float]:
        return (self._width or 0, self._height or 0)

    def clear(self) -> None:
        self.close()
        self._offsets = [(0, 0)]
        self.tooltips = []

    def close(self) -> None:
        if self.fig is not None:
            plt.close(self.fig)
        self.fig = None
        self.ax  = None

    def set_viewbox(self, width: float, height: float) -> None:
        self.close()
        self.fig = plt.figure(figsize=(width / self.DPI, height / self.DPI), dpi=self.DPI)
        self.ax  = self.fig.add_axes([0, 0, 1, 1])
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.axis("off")

    def _axes(self):
        if self.ax is None:
            width, height = self.size()
            self.set_viewbox(width or _FALLBACK_SIZE[0], height or _FALLBACK_SIZE[1])
        return self.ax

    def _shift(self, x: float, y: float) -> Point:
        dx, dy = self._offsets[-1]
        return x + dx, y + dy

    def _tag(self, artist, tooltip: str | None) -> None:
        if tooltip is not None:
            artist.set_gid(tooltip)
            self.tooltips.append(tooltip)

    @contextmanager
    def group(self, translate: Point = (0, 0)) -> Iterator[None]:
        self._offsets.append(self._shift(*translate))
        try:
            yield None
        finally:
            self._offsets.pop()

    def line(self, x1, y1, x2, y2, *, stroke, stroke_width=1, dash=None, css_class=None):
        (ax1, ay1), (ax2, ay2) = self._shift(x1, y1), self._shift(x2, y2)
        self._axes().add_line(Line2D(
            [ax1, ax2], [ay1, ay2],
            color=stroke, linewidth=stroke_width,
            linestyle="--" if dash else "-",
        ))

    def rect(self, x, y, width, height, *, fill, radius=0, tooltip=None, css_class=None):
        x, y = self._shift(x, y)
        if radius and width > 2 * radius and height > 2 * radius:
            patch = FancyBboxPatch(
                (x, y), width, height,
                boxstyle=f"round,pad=0,rounding_size={radius}",
                facecolor=fill, edgecolor="none",
            )
        else:
            patch = Rectangle((x, y), width, height, facecolor=fill, edgecolor="none")
        self._axes().add_patch(patch)
        self._tag(patch, tooltip)

    def path(self, points, *, stroke, stroke_width=1):
        shifted = [self._shift(x, y) for x, y in points]
        self._axes().add_line(Line2D(
            [x for x, _ in shifted], [y for _, y in shifted],
            color=stroke, linewidth=stroke_width,
        ))

    def circle(self, cx, cy, r, *, fill, tooltip=None):
        patch = Circle(self._shift(cx, cy), r, facecolor=fill, edgecolor="none", zorder=3)
        self._axes().add_patch(patch)
        self._tag(patch, tooltip)

    def text(self, x, y, content, *, anchor="start", font_size=None, font_weight=None,
             rotate=None, fill=None, css_class=None):
        x, y = self._shift(x, y)
        self._axes().text(
            x, y, content,
            ha=_HA.get(anchor, "left"),
            va="baseline",
            fontsize=(font_size or 12) * 72 / self.DPI,
            fontweight=font_weight or "normal",
            color=fill or "black",
            rotation=-(rotate or 0),
            rotation_mode="anchor",
        )

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        self._axes()
        self.fig.savefig(path, dpi=self.DPI, facecolor="white")
        return path


# ---------------------------------------------------------------------------
# Text panels
# ---------------------------------------------------------------------------

class TextPanel:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def clear(self) -> None:
        self.lines.clear()

    def write(self, line: str) -> None:
        self.lines.append(line)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
