"""
cli.py — Build the dashboard charts from a saved record payload.

Usage:
    xp-dashboard \
        --data       ./profile_payload.json \
        --output-dir ./dashboard \
        --format     svg \
        --timezone   Europe/Paris \
        --xp-unit    size

Output:
    <output-dir>/xp_over_time.<fmt>
    <output-dir>/pass_rates.<fmt>
    <output-dir>/dashboard.json    stats, profile, pending projects,
                                   aggregated series and the chart manifest
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .charts.geometry import BAR_TITLE, LINE_TITLE, EmptyChartGeometry
from .charts.surface import MatplotlibSurface, SvgSurface, TextPanel
from .config import XP_UNITS, load_settings, resolve_xp_unit
from .errors import DataSourceError
from .pipeline import run_dashboard
from .records import load_payload

PROG           = "xp-dashboard"
FORMATS        = ("svg", "png")
LINE_CHART_ID  = "xp_over_time"
BAR_CHART_ID   = "pass_rates"
RESULT_FILE    = "dashboard.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description="Build XP dashboard charts from a record payload.")
    parser.add_argument("--data",       required=True, help="JSON payload from the graph-query endpoint")
    parser.add_argument("--output-dir", required=True)
    parser.add_argument("--format",     choices=FORMATS, default="svg")
    parser.add_argument("--timezone",   default=None, help="month bucketing zone (default: local)")
    parser.add_argument("--xp-unit",    choices=XP_UNITS, default=None)
    parser.add_argument("--cumulative", action="store_true", help="plot the running XP total")
    parser.add_argument("--width",      type=float, default=None)
    parser.add_argument("--height",     type=float, default=None)
    parser.add_argument("--env-file",   default=None)
    parser.add_argument("--verbose",    action="store_true")
    return parser


def _chart_entry(chart_id: str, title: str, chart_type: str, path: Path, geometry) -> dict:
    return {
        "id":    chart_id,
        "title": title,
        "type":  chart_type,
        "path":  str(path),
        "empty": isinstance(geometry, EmptyChartGeometry),
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(args.env_file)
    if args.timezone:
        settings = replace(settings, timezone=args.timezone)
    if args.xp_unit:
        settings = replace(settings, xp_unit=resolve_xp_unit(args.xp_unit))

    try:
        payload = load_payload(args.data)
    except DataSourceError as exc:
        print(f"[{PROG}] ERROR: {exc}", file=sys.stderr)
        return 1

    surface_cls   = SvgSurface if args.format == "svg" else MatplotlibSurface
    line_surface  = surface_cls(args.width, args.height)
    bar_surface   = surface_cls(args.width, args.height)
    stats_panel   = TextPanel()
    profile_panel = TextPanel()
    pending_panel = TextPanel()

    result = run_dashboard(
        payload,
        line_surface=line_surface,
        bar_surface=bar_surface,
        stats_panel=stats_panel,
        profile_panel=profile_panel,
        pending_panel=pending_panel,
        settings=settings,
        cumulative=args.cumulative,
    )
    if not result.ok:
        print(f"[{PROG}] ERROR: {stats_panel.text}", file=sys.stderr)
        return 1

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    line_path = line_surface.save(output_dir / f"{LINE_CHART_ID}.{args.format}")
    bar_path  = bar_surface.save(output_dir / f"{BAR_CHART_ID}.{args.format}")
    if isinstance(line_surface, MatplotlibSurface):
        line_surface.close()
        bar_surface.close()

    document = result.as_dict()
    document["charts"] = {
        "generated": [
            _chart_entry(LINE_CHART_ID, LINE_TITLE, "line", line_path, result.line_geometry),
            _chart_entry(BAR_CHART_ID, BAR_TITLE, "bar", bar_path, result.bar_geometry),
        ],
    }
    result_path = output_dir / RESULT_FILE
    with result_path.open("w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)

    for path in (line_path, bar_path, result_path):
        print(f"[{PROG}] saved: {path}")
    for line in stats_panel.lines:
        print(f"  {line}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
