"""
records.py — Load and normalize the raw record payload.

The payload is the body returned by the platform's graph-query endpoint,
either bare or wrapped in its `data` envelope:

    {
      "user":            [{"id": 1, "login": "...", "email": "...", "attrs": {...}}],
      "transaction":     [{"amount": 100, "createdAt": "...", "path": "...", "type": "xp"}],
      "progress":        [{"id": 7, "grade": 1, "createdAt": "...", "path": "..."}],
      "result":          [{"id": 9, "grade": 1.0, "createdAt": "...", "path": "..."}],
      "pendingProgress": [{"createdAt": "...", "path": "..."}]
    }

Missing or null arrays become empty tuples. Paths are kept as given (None
included): a record without a usable path fails later, when a category is
derived from it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from .errors import DataSourceError, MalformedRecordError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Record types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Transaction:
    amount:     int | float
    created_at: datetime
    path:       str | None = None
    type:       str = "xp"


@dataclass(frozen=True)
class ProgressEntry:
    id:         int | None
    grade:      int | float | None
    created_at: datetime | None
    path:       str | None


@dataclass(frozen=True)
class ResultEntry:
    id:         int | None
    grade:      float | None
    created_at: datetime | None
    path:       str | None


@dataclass(frozen=True)
class UserProfile:
    id:    int | None
    login: str | None
    email: str | None
    attrs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RecordSet:
    user:         UserProfile | None = None
    transactions: tuple[Transaction, ...] = ()
    progress:     tuple[ProgressEntry, ...] = ()
    results:      tuple[ResultEntry, ...] = ()
    pending:      tuple[ProgressEntry, ...] = ()


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-like timestamp or epoch milliseconds. Returns None for
    missing values and raises MalformedRecordError when the value is present
    but unparseable.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        raise MalformedRecordError(f"Invalid timestamp: {value!r}")
    try:
        if isinstance(value, (int, float)):
            parsed = pd.Timestamp(value, unit="ms")
        else:
            parsed = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(f"Invalid timestamp: {value!r}") from exc
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _as_number(value: Any) -> int | float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else number


def _as_int(value: Any) -> int | None:
    number = _as_number(value)
    if number is None:
        return None
    return int(number)


def _rows(payload: dict, key: str) -> list[dict]:
    rows = payload.get(key)
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise MalformedRecordError(f"'{key}' must be a list, got {type(rows).__name__}")
    for row in rows:
        if not isinstance(row, dict):
            raise MalformedRecordError(f"'{key}' entries must be objects, got {row!r}")
    return rows


# ---------------------------------------------------------------------------
# Per-record normalization
# ---------------------------------------------------------------------------

def normalize_transaction(row: dict) -> Transaction:
    amount = _as_number(row.get("amount"))
    if amount is None:
        raise MalformedRecordError(f"Transaction without a numeric amount: {row!r}")
    created_at = parse_timestamp(row.get("createdAt"))
    if created_at is None:
        raise MalformedRecordError(f"Transaction without createdAt: {row!r}")
    return Transaction(
        amount=amount,
        created_at=created_at,
        path=row.get("path"),
        type=str(row.get("type") or "xp"),
    )


def normalize_progress(row: dict) -> ProgressEntry:
    return ProgressEntry(
        id=_as_int(row.get("id")),
        grade=_as_number(row.get("grade")),
        created_at=parse_timestamp(row.get("createdAt")),
        path=row.get("path"),
    )


def normalize_result(row: dict) -> ResultEntry:
    grade = _as_number(row.get("grade"))
    return ResultEntry(
        id=_as_int(row.get("id")),
        grade=None if grade is None else float(grade),
        created_at=parse_timestamp(row.get("createdAt")),
        path=row.get("path"),
    )


def normalize_user(value: Any) -> UserProfile | None:
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, dict):
        return None
    attrs = value.get("attrs")
    return UserProfile(
        id=_as_int(value.get("id")),
        login=value.get("login"),
        email=value.get("email"),
        attrs=attrs if isinstance(attrs, dict) else {},
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def unwrap_payload(payload: Any) -> dict:
    """Strip the `data` envelope and surface upstream query errors."""
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise DataSourceError(f"Payload must be a JSON object, got {type(payload).__name__}")

    errors = payload.get("errors")
    if errors:
        messages = [
            str(err.get("message", err)) if isinstance(err, dict) else str(err)
            for err in errors
        ]
        raise DataSourceError(", ".join(messages))

    if "data" in payload:
        data = payload["data"]
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DataSourceError("Payload 'data' must be a JSON object.")
        return data
    return payload


def normalize_records(payload: Any) -> RecordSet:
    data = unwrap_payload(payload)
    records = RecordSet(
        user=normalize_user(data.get("user")),
        transactions=tuple(normalize_transaction(r) for r in _rows(data, "transaction")),
        progress=tuple(normalize_progress(r) for r in _rows(data, "progress")),
        results=tuple(normalize_result(r) for r in _rows(data, "result")),
        pending=tuple(normalize_progress(r) for r in _rows(data, "pendingProgress")),
    )
    logger.debug(
        "Normalized %d transactions, %d progress, %d results, %d pending",
        len(records.transactions), len(records.progress),
        len(records.results), len(records.pending),
    )
    return records


def load_payload(path: str | Path) -> dict:
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        raise DataSourceError(f"Payload file missing: {path}") from exc
    except json.JSONDecodeError as exc:
        raise DataSourceError(f"Payload file is not valid JSON: {path}") from exc
