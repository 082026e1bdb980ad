"""Bundled example strategies."""

from typing import Any

from postfacto_engine.backtest.result import Result
from postfacto_engine.models import Action, Bar, Position
from postfacto_engine.strategies.context import StrategyContext
from postfacto_engine.strategies.interface import Strategy


def buy_buy_buy(bar: Bar, result: Result) -> Action:
    """Always buy."""
    return Action.BUY


def sell_sell_sell(bar: Bar, result: Result) -> Action:
    """Always sell."""
    return Action.SELL


def noop(bar: Bar, result: Result) -> None:
    """Never act."""
    return None


class BuyAndHold(Strategy):
    """Enter long on the first bar and never exit."""

    def init(self, options: dict[str, Any]) -> dict[str, Any]:
        return {"entered": False}

    def next(self, state: dict[str, Any], context: StrategyContext) -> dict[str, Any]:
        if not state["entered"] and context.position is Position.NONE:
            context.buy()
            return {"entered": True}
        return state


class AlternatingLongStrategy(Strategy):
    """Open a long, close it on the next bar, and repeat.

    Options:
        max_trades: Stop entering after this many entries (default unlimited).
    """

    def init(self, options: dict[str, Any]) -> dict[str, Any]:
        max_trades = options.get("max_trades")
        if max_trades is not None and max_trades < 0:
            raise ValueError("max_trades must be non-negative")
        return {"entries": 0, "max_trades": max_trades}

    def next(self, state: dict[str, Any], context: StrategyContext) -> dict[str, Any]:
        if context.position is Position.LONG:
            context.close_buy()
            return state

        max_trades = state["max_trades"]
        if max_trades is None or state["entries"] < max_trades:
            context.buy()
            return {**state, "entries": state["entries"] + 1}
        return state
