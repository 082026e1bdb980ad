"""Profit-related metrics.

- Profit Factor: gross profit / |gross loss|
- Expectancy: average P&L per trade
- Expectancy %: expectancy as a percentage of the starting balance
"""

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfacto_engine.backtest.result import Result


def _trade_results(result: "Result") -> list[float]:
    return [pair.result_value for pair in result.trade_pairs]


def gross_profit_and_loss(result: "Result") -> tuple[float, float]:
    """(gross_profit, gross_loss); gross_loss is zero or negative."""
    gross_profit = 0.0
    gross_loss = 0.0
    for value in _trade_results(result):
        if value > 0:
            gross_profit += value
        else:
            gross_loss += value
    return gross_profit, gross_loss


def profit_factor(result: "Result") -> float:
    """
    Gross profit / |gross loss|.

    A value > 1.0 indicates a profitable strategy. Returns 0.0 with neither
    profit nor loss and ``math.inf`` with profit but no loss.
    """
    gross_profit, gross_loss = gross_profit_and_loss(result)

    if gross_loss == 0.0 and gross_profit == 0.0:
        return 0.0
    if gross_loss == 0.0:
        return math.inf
    return gross_profit / abs(gross_loss)


def expectancy(result: "Result") -> float:
    if result.trades_count == 0:
        return 0.0
    return result.total_profit_and_loss / result.trades_count


def expectancy_percentage(result: "Result") -> float:
    if result.starting_balance == 0:
        return 0.0
    return expectancy(result) / result.starting_balance * 100.0


def average_winning_trade(result: "Result") -> float:
    wins = [value for value in _trade_results(result) if value > 0]
    return sum(wins) / len(wins) if wins else 0.0


def average_losing_trade(result: "Result") -> float:
    """Average of losing trades (a negative number, or 0.0)."""
    losses = [value for value in _trade_results(result) if value < 0]
    return sum(losses) / len(losses) if losses else 0.0


def largest_winning_trade(result: "Result") -> float:
    wins = [value for value in _trade_results(result) if value > 0]
    return max(wins) if wins else 0.0


def largest_losing_trade(result: "Result") -> float:
    losses = [value for value in _trade_results(result) if value < 0]
    return min(losses) if losses else 0.0
