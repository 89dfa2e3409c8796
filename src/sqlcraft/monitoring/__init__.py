"""Execution metrics."""

from .performance import (
    Count,
    Duration,
    Flag,
    Metric,
    MetricKind,
    Note,
    PerformanceRecord,
    collapse_placeholders,
    format_duration,
)

__all__ = [
    "Count",
    "Duration",
    "Flag",
    "Metric",
    "MetricKind",
    "Note",
    "PerformanceRecord",
    "collapse_placeholders",
    "format_duration",
]
