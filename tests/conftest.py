"""Shared record fixtures for the dashboard tests."""

from __future__ import annotations

from datetime import datetime

import pytest

from xp_dashboard.records import ProgressEntry, Transaction


def make_tx(amount: int | float, created_at: str, path: str = "/kisumu/module/go-reloaded") -> Transaction:
    return Transaction(amount=amount, created_at=datetime.fromisoformat(created_at), path=path)


def make_progress(path: str | None, grade: int | None, created_at: str = "2024-01-10") -> ProgressEntry:
    return ProgressEntry(id=None, grade=grade, created_at=datetime.fromisoformat(created_at), path=path)


@pytest.fixture(autouse=True)
def _clean_dashboard_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep XP_DASHBOARD_* variables from the host out of every test."""

    import os

    for name in list(os.environ):
        if name.startswith("XP_DASHBOARD_"):
            monkeypatch.delenv(name)


@pytest.fixture
def scenario_a_transactions() -> list[Transaction]:
    return [
        make_tx(100, "2024-01-15"),
        make_tx(50, "2024-01-20"),
        make_tx(200, "2024-02-01"),
    ]


@pytest.fixture
def scenario_b_progress() -> list[ProgressEntry]:
    return [
        make_progress("a/checkpoint/rust/x", 1),
        make_progress("a/checkpoint/rust/x", 0),
        make_progress("a/checkpoint/rust/y", 1),
    ]


@pytest.fixture
def raw_payload() -> dict:
    """A graph-query response body as the platform returns it."""

    return {
        "data": {
            "user": [
                {"id": 42, "login": "jdoe", "email": "jdoe@example.com", "attrs": {"phone": "+254700000000"}},
            ],
            "transaction": [
                {"amount": 100, "createdAt": "2024-01-15T09:00:00", "path": "/kisumu/module/go-reloaded", "type": "xp"},
                {"amount": 50, "createdAt": "2024-01-20T09:00:00", "path": "/kisumu/module/ascii-art", "type": "xp"},
                {"amount": 200, "createdAt": "2024-02-01T09:00:00", "path": "/kisumu/module/checkpoint-rust/x", "type": "xp"},
            ],
            "progress": [
                {"id": 1, "grade": 1, "createdAt": "2024-01-10T09:00:00", "path": "a/checkpoint/rust/x"},
                {"id": 2, "grade": 0, "createdAt": "2024-01-11T09:00:00", "path": "a/checkpoint/rust/x"},
                {"id": 3, "grade": 1, "createdAt": "2024-01-12T09:00:00", "path": "a/checkpoint/rust/y"},
                {"id": 4, "grade": 1, "createdAt": "2024-01-13T09:00:00", "path": "/kisumu/module/go-reloaded"},
            ],
            "result": [
                {"id": 9, "grade": 1, "createdAt": "2024-01-10T09:00:00", "path": "a/checkpoint/rust/x"},
            ],
            "pendingProgress": [
                {"createdAt": "2024-03-05T10:00:00", "path": "/kisumu/module/math-skills"},
            ],
        }
    }
