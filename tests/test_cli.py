"""Tests for the xp-dashboard command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from xp_dashboard.cli import main

pytestmark = pytest.mark.integration


def _write_payload(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _args(tmp_path: Path, data: Path, *extra: str) -> list[str]:
    return [
        "--data", str(data),
        "--output-dir", str(tmp_path / "out"),
        "--env-file", str(tmp_path / "absent.env"),
        "--timezone", "UTC",
        *extra,
    ]


def test_cli_writes_svg_charts_and_document(tmp_path: Path, raw_payload: dict, capsys) -> None:
    """A valid payload produces both charts and the dashboard document."""

    data = _write_payload(tmp_path, raw_payload)

    assert main(_args(tmp_path, data)) == 0

    out = tmp_path / "out"
    line_svg = (out / "xp_over_time.svg").read_text(encoding="utf-8")
    assert "<title>1/2024: 150 XP</title>" in line_svg
    assert (out / "pass_rates.svg").exists()

    document = json.loads((out / "dashboard.json").read_text(encoding="utf-8"))
    assert document["stats"]["passCount"] == 3
    assert [chart["id"] for chart in document["charts"]["generated"]] == ["xp_over_time", "pass_rates"]
    assert not any(chart["empty"] for chart in document["charts"]["generated"])

    printed = capsys.readouterr().out
    assert "[xp-dashboard] saved:" in printed
    assert "Pass Rate: 75.0%" in printed


def test_cli_png_and_cumulative(tmp_path: Path, raw_payload: dict) -> None:
    """The png format goes through matplotlib."""

    data = _write_payload(tmp_path, raw_payload)

    assert main(_args(tmp_path, data, "--format", "png", "--cumulative", "--xp-unit", "raw")) == 0

    out = tmp_path / "out"
    assert (out / "xp_over_time.png").stat().st_size > 0
    document = json.loads((out / "dashboard.json").read_text(encoding="utf-8"))
    assert document["profile"]["totalXp"] == "350"


def test_cli_marks_empty_charts(tmp_path: Path) -> None:
    """Empty collections produce placeholder charts flagged in the manifest."""

    data = _write_payload(tmp_path, {"data": {"transaction": [], "progress": []}})

    assert main(_args(tmp_path, data)) == 0

    document = json.loads((tmp_path / "out" / "dashboard.json").read_text(encoding="utf-8"))
    assert all(chart["empty"] for chart in document["charts"]["generated"])


def test_cli_missing_file(tmp_path: Path, capsys) -> None:
    """A missing payload exits with status 1."""

    assert main(_args(tmp_path, tmp_path / "nope.json")) == 1
    assert "ERROR: Payload file missing" in capsys.readouterr().err


def test_cli_upstream_error(tmp_path: Path, capsys) -> None:
    """Query errors are reported and nothing is written."""

    data = _write_payload(tmp_path, {"errors": [{"message": "JWT expired"}]})

    assert main(_args(tmp_path, data)) == 1
    assert "Error loading data: JWT expired" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_cli_negative_size_falls_back_to_defaults(tmp_path: Path, raw_payload: dict) -> None:
    """Non-positive --width/--height leave no unusable size on the SVG root."""

    data = _write_payload(tmp_path, raw_payload)

    assert main(_args(tmp_path, data, "--width", "-5", "--height", "-5")) == 0

    line_svg = (tmp_path / "out" / "xp_over_time.svg").read_text(encoding="utf-8")
    assert 'width="-5"' not in line_svg
    assert 'width="700" height="300"' in line_svg
    assert 'viewBox="0 0 700 300"' in line_svg
