"""Per-run execution context for stateful strategies."""

from typing import Any

from postfacto_engine.backtest.result import Result
from postfacto_engine.models import Action, Bar, Position


class StrategyContext:
    """Single-writer view of one backtest run.

    The execution loop sets ``data`` to the bar being decided on and reads the
    pending action after each ``next`` call. A strategy reads ``data``,
    ``position`` and ``equity`` and emits at most one action per bar.

    One context is created per backtest and torn down when the run ends, so
    concurrent backtests never share one.

    Example:
        >>> with StrategyContext(result) as context:
        ...     context.data = bar
        ...     context.buy()
        ...     context.pop_action()
        <Action.BUY: 'buy'>
    """

    def __init__(self, result: Result, options: dict[str, Any] | None = None):
        self.result = result
        self.options: dict[str, Any] = dict(options or {})
        self.data: Bar | None = None
        self._pending_action: Action | None = None
        self._closed = False

    def __enter__(self) -> "StrategyContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def position(self) -> Position:
        return self.result.position

    @property
    def is_position_open(self) -> bool:
        return self.result.is_position_open

    @property
    def equity(self) -> float:
        """Starting balance plus P&L of the trades closed so far."""
        return self.result.equity

    def take_action(self, action: Action | str) -> None:
        """Queue ``action`` for the next bar; a later call in the same bar wins.

        Raises:
            ValueError: If ``action`` is not a recognized action.
            RuntimeError: If the context has been torn down.
        """
        if self._closed:
            raise RuntimeError("strategy context is closed")
        parsed = Action.parse(action)
        if parsed is None:
            raise ValueError(f"unknown action: {action!r}")
        self._pending_action = parsed

    def buy(self) -> None:
        self.take_action(Action.BUY)

    def sell(self) -> None:
        self.take_action(Action.SELL)

    def close_buy(self) -> None:
        self.take_action(Action.CLOSE_BUY)

    def close_sell(self) -> None:
        self.take_action(Action.CLOSE_SELL)

    def close_position(self) -> None:
        """Emit the exit matching the open position, if any."""
        if self.position is Position.LONG:
            self.close_buy()
        elif self.position is Position.SHORT:
            self.close_sell()

    def pop_action(self) -> Action | None:
        """Return and clear the pending action."""
        action = self._pending_action
        self._pending_action = None
        return action

    def teardown(self) -> None:
        self._pending_action = None
        self.data = None
        self._closed = True
