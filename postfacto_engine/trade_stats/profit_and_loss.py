"""Realized profit and loss of a matched entry/exit.

Both legs fill at their bar's open price:

- buy -> close_buy:   pl = exit.open - enter.open
- sell -> close_sell: pl = enter.open - exit.open
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING

from postfacto_engine.errors import PairingError
from postfacto_engine.models.action import Action
from postfacto_engine.models.data_point import DataPoint

if TYPE_CHECKING:
    from postfacto_engine.trade_stats.trade_pair import TradePair


def trade_delta(enter_point: DataPoint, exit_point: DataPoint) -> float:
    """Realized P&L of one entry/exit pair.

    Raises:
        PairingError: If the actions are not buy/close_buy or sell/close_sell.
    """
    enter_action = enter_point.action
    exit_action = exit_point.action

    if enter_action is Action.BUY and exit_action is Action.CLOSE_BUY:
        return exit_point.datum.open - enter_point.datum.open
    if enter_action is Action.SELL and exit_action is Action.CLOSE_SELL:
        return enter_point.datum.open - exit_point.datum.open

    raise PairingError(
        f"Unknown action combination: {exit_action.value} and {enter_action.value}",
        enter_point=enter_point,
        exit_point=exit_point,
    )


def total_profit_and_loss(trade_pairs: Iterable["TradePair"]) -> float:
    """Sum of per-pair deltas; 0.0 without trades."""
    return sum((pair.result_value for pair in trade_pairs), 0.0)
