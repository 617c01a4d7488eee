"""
xp_dashboard — XP and pass-rate charts from learning-platform records.

Pipeline:
    records.normalize_records   → RecordSet
    metrics.aggregate_monthly   → monthly XP points
    metrics.aggregate_categories → per-category pass rates
    charts.geometry             → pixel-space chart geometry
    charts.render               → SVG / matplotlib drawing
    stats.summarize             → numeric stats panel
"""

from .pipeline import DashboardResult, run_dashboard

__all__ = ["DashboardResult", "run_dashboard"]
