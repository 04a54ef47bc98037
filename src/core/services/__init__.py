"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports.
"""

from src.core.services.dashboard_aggregator import (
    DashboardAggregator,
    in_window,
    local_midnight,
    local_to_utc,
    window_start,
)

__all__ = [
    "DashboardAggregator",
    "in_window",
    "local_midnight",
    "local_to_utc",
    "window_start",
]
