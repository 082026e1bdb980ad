"""Monitoring for backtest runs."""

from .metrics import (
    BacktestMetricsService,
    MetricsConfig,
    get_metrics,
    init_metrics,
    reset_metrics,
)

__all__ = [
    "BacktestMetricsService",
    "MetricsConfig",
    "get_metrics",
    "init_metrics",
    "reset_metrics",
]
