from __future__ import annotations


class DashboardError(RuntimeError):
    pass


class DataSourceError(DashboardError):
    """The fetched payload could not be used (missing file, bad JSON, upstream errors)."""


class MalformedRecordError(DashboardError):
    """A single record is missing a field the pipeline needs."""
