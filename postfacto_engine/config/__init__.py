"""Configuration package for the backtest engine."""

from .loader import coerce_config, load_config
from .models import BacktestConfig

__all__ = [
    "BacktestConfig",
    "coerce_config",
    "load_config",
]
