"""Strategy shapes, adapters, and the per-run execution context."""

from .context import StrategyContext
from .examples import AlternatingLongStrategy, BuyAndHold, buy_buy_buy, noop, sell_sell_sell
from .interface import (
    ResolvedStrategy,
    StatefulAdapter,
    StatefulStrategy,
    StatelessAdapter,
    StatelessStrategy,
    Strategy,
    resolve_strategy,
    strategy_name,
)

__all__ = [
    "AlternatingLongStrategy",
    "BuyAndHold",
    "ResolvedStrategy",
    "StatefulAdapter",
    "StatefulStrategy",
    "StatelessAdapter",
    "StatelessStrategy",
    "Strategy",
    "StrategyContext",
    "buy_buy_buy",
    "noop",
    "resolve_strategy",
    "sell_sell_sell",
    "strategy_name",
]
