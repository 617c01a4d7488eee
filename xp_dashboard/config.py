"""
config.py — Dashboard settings resolved from the environment.

Values are read from the process environment after an optional `.env`
file has been loaded (existing variables win). Any value that is missing
or cannot be parsed falls back to its default.

    XP_DASHBOARD_TIMEZONE               local | UTC | Europe/Paris | ...
    XP_DASHBOARD_CHECKPOINT_MARKER      checkpoint
    XP_DASHBOARD_LANGUAGE_MARKER        rust
    XP_DASHBOARD_EXCLUDED_CATEGORIES    "Other,"   (empty item hides "")
    XP_DASHBOARD_ROTATION_THRESHOLD     4
    XP_DASHBOARD_MAX_X_LABELS           5
    XP_DASHBOARD_TICK_DIVISIONS         5
    XP_DASHBOARD_XP_UNIT                size | compact | raw
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_PREFIX = "XP_DASHBOARD_"

DEFAULT_TIMEZONE            = "local"
DEFAULT_CHECKPOINT_MARKER   = "checkpoint"
DEFAULT_LANGUAGE_MARKER     = "rust"
DEFAULT_EXCLUDED_CATEGORIES = frozenset({"Other", ""})
DEFAULT_ROTATION_THRESHOLD  = 4
DEFAULT_MAX_X_LABELS        = 5
DEFAULT_TICK_DIVISIONS      = 5
DEFAULT_XP_UNIT             = "size"
XP_UNITS                    = ("size", "compact", "raw")


@dataclass(frozen=True)
class DashboardSettings:
    timezone:            str = DEFAULT_TIMEZONE
    checkpoint_marker:   str = DEFAULT_CHECKPOINT_MARKER
    language_marker:     str = DEFAULT_LANGUAGE_MARKER
    excluded_categories: frozenset[str] = DEFAULT_EXCLUDED_CATEGORIES
    rotation_threshold:  int = DEFAULT_ROTATION_THRESHOLD
    max_x_labels:        int = DEFAULT_MAX_X_LABELS
    tick_divisions:      int = DEFAULT_TICK_DIVISIONS
    xp_unit:             str = DEFAULT_XP_UNIT


def _env(name: str) -> str:
    return (os.getenv(ENV_PREFIX + name) or "").strip()


def _positive_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s%s=%r: not an integer", ENV_PREFIX, name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s%s=%r: must be positive", ENV_PREFIX, name, raw)
        return default
    return value


def _excluded_categories() -> frozenset[str]:
    raw = os.getenv(ENV_PREFIX + "EXCLUDED_CATEGORIES")
    if raw is None:
        return DEFAULT_EXCLUDED_CATEGORIES
    return frozenset(item.strip() for item in raw.split(","))


def resolve_xp_unit(value: str | None = None) -> str:
    unit = (value or _env("XP_UNIT") or DEFAULT_XP_UNIT).strip().lower()
    if unit not in XP_UNITS:
        logger.warning("Unknown XP unit %r, using %r", unit, DEFAULT_XP_UNIT)
        return DEFAULT_XP_UNIT
    return unit


def load_settings(env_file: str | Path | None = None) -> DashboardSettings:
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    return DashboardSettings(
        timezone=_env("TIMEZONE") or DEFAULT_TIMEZONE,
        checkpoint_marker=_env("CHECKPOINT_MARKER") or DEFAULT_CHECKPOINT_MARKER,
        language_marker=_env("LANGUAGE_MARKER") or DEFAULT_LANGUAGE_MARKER,
        excluded_categories=_excluded_categories(),
        rotation_threshold=_positive_int("ROTATION_THRESHOLD", DEFAULT_ROTATION_THRESHOLD),
        max_x_labels=_positive_int("MAX_X_LABELS", DEFAULT_MAX_X_LABELS),
        tick_divisions=_positive_int("TICK_DIVISIONS", DEFAULT_TICK_DIVISIONS),
        xp_unit=resolve_xp_unit(),
    )
