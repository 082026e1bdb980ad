"""Backtest execution loop, result accumulator, and reporting."""

from .engine import BacktestOutcome, BacktestOutput, run_backtest, run_backtest_or_raise
from .report import comprehensive_summary, save_report, to_dict, to_json
from .result import Result

__all__ = [
    "BacktestOutcome",
    "BacktestOutput",
    "Result",
    "comprehensive_summary",
    "run_backtest",
    "run_backtest_or_raise",
    "save_report",
    "to_dict",
    "to_json",
]
