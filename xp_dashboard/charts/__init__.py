"""Chart geometry, rendering and drawing surfaces."""

from .geometry import (
    BAR_MARGINS,
    DEFAULT_BAR_SIZE,
    DEFAULT_LINE_SIZE,
    LINE_MARGINS,
    build_bar_geometry,
    build_line_geometry,
    resolve_canvas,
)
from .render import render
from .surface import MatplotlibSurface, SvgSurface, TextPanel

__all__ = [
    "BAR_MARGINS",
    "DEFAULT_BAR_SIZE",
    "DEFAULT_LINE_SIZE",
    "LINE_MARGINS",
    "MatplotlibSurface",
    "SvgSurface",
    "TextPanel",
    "build_bar_geometry",
    "build_line_geometry",
    "render",
    "resolve_canvas",
]
