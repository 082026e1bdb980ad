"""Backtesting engine: strategy replay, trade pairing and performance statistics."""

from .backtest import (
    BacktestOutcome,
    BacktestOutput,
    Result,
    comprehensive_summary,
    run_backtest,
    run_backtest_or_raise,
)
from .config import BacktestConfig, load_config
from .errors import (
    BacktestError,
    DataValidationError,
    InputContractError,
    PairingError,
    ResultFrozenError,
    StrategyInitError,
)
from .models import Action, Bar, DataPoint, Position
from .strategies import Strategy, StrategyContext

__version__ = "0.1.0"

__all__ = [
    "Action",
    "BacktestConfig",
    "BacktestError",
    "BacktestOutcome",
    "BacktestOutput",
    "Bar",
    "DataPoint",
    "DataValidationError",
    "InputContractError",
    "PairingError",
    "Position",
    "Result",
    "ResultFrozenError",
    "Strategy",
    "StrategyContext",
    "StrategyInitError",
    "comprehensive_summary",
    "load_config",
    "run_backtest",
    "run_backtest_or_raise",
]
