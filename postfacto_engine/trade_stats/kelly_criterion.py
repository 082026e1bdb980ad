"""Kelly criterion position sizing.

Kelly % = (b * p - q) / b

Where:
- b = odds (average win / |average loss|)
- p = win rate as a decimal
- q = 1 - p

A positive value suggests an edge; 0.25 is a common sizing target and values
above 0.40 are usually too aggressive.
"""

import math
from typing import TYPE_CHECKING

from postfacto_engine.trade_stats.profit_metrics import (
    average_losing_trade,
    average_winning_trade,
)

if TYPE_CHECKING:
    from postfacto_engine.backtest.result import Result


def kelly_criterion(result: "Result") -> float:
    """Optimal fraction of capital to risk per trade (0.25 = 25%).

    Returns 0.0 without trades, without wins, without losses, or with a
    100% win rate.
    """
    if result.trades_count == 0:
        return 0.0

    win_rate = result.win_rate / 100
    loss_rate = 1 - win_rate
    average_win = average_winning_trade(result)
    average_loss = abs(average_losing_trade(result))

    if average_win == 0 or average_loss == 0 or loss_rate == 0:
        return 0.0

    odds = average_win / average_loss
    return (odds * win_rate - loss_rate) / odds


def fractional_kelly(result: "Result", fraction: float = 0.25) -> float:
    return kelly_criterion(result) * fraction


def kelly_interpretation(kelly: float) -> str:
    if kelly <= 0.0:
        return "No edge - avoid this strategy"
    if kelly <= 0.10:
        return "Weak edge - use small position sizes"
    if kelly <= 0.25:
        return "Moderate edge - reasonable strategy"
    if kelly <= 0.40:
        return "Strong edge - good strategy"
    return "Very strong edge - potentially too aggressive"


def optimal_position_size(
    result: "Result", current_capital: float, fraction: float = 0.25
) -> float:
    """Capital to commit per trade under fractional Kelly."""
    return current_capital * fractional_kelly(result, fraction)


def geometric_mean_return(result: "Result") -> float:
    """Per-trade compound growth rate in percent."""
    if result.trades_count == 0:
        return 0.0

    growth = 1.0
    for pair in result.trade_pairs:
        growth *= 1 + pair.result_percentage / 100

    if growth <= 0:
        return -100.0
    return (math.pow(growth, 1 / result.trades_count) - 1) * 100


def risk_of_ruin(result: "Result", drawdown_limit: float = 0.20) -> float:
    """Simplified probability of ruin, from 0.0 to 1.0.

    No edge means certain ruin. Otherwise the ratio of worst to best trade
    percentage, raised to the win rate and scaled by the drawdown limit.
    """
    if kelly_criterion(result) <= 0.0:
        return 1.0

    best_pct = result.best_trade_by_percentage
    worst_pct = abs(result.worst_trade_by_percentage)

    if best_pct == 0:
        return 1.0
    if worst_pct == 0:
        return 0.0

    base_risk = math.pow(worst_pct / best_pct, result.win_rate / 100)
    return min(base_risk / (1 - drawdown_limit), 1.0)
