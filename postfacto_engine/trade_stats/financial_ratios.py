"""Return and risk-adjusted return ratios.

- Sharpe Ratio: (annual return - risk-free rate) / annual volatility
- Sortino Ratio: (annual return - risk-free rate) / downside volatility
- Calmar Ratio: annual return / |max drawdown|

Volatility is a simplified per-trade estimate: the sample standard deviation
of trade return percentages, scaled by sqrt(trades per year).
"""

import math
import statistics
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfacto_engine.backtest.result import Result

DAYS_PER_YEAR = 365.25


def _trade_return_percentages(result: "Result") -> list[float]:
    return [pair.result_percentage for pair in result.trade_pairs]


def _trades_per_year(result: "Result", trade_count: int) -> float:
    if not result.duration:
        return 1.0
    return trade_count / (result.duration / DAYS_PER_YEAR)


def total_return_percentage(result: "Result") -> float:
    if result.starting_balance == 0:
        return 0.0
    return result.total_profit_and_loss / result.starting_balance * 100.0


def annual_return_percentage(result: "Result") -> float:
    """
    Compound annual growth rate in percent.

    ((final / initial) ^ (365.25 / days) - 1) * 100. Returns 0.0 without a
    starting balance or a duration, -100.0 if the balance was wiped out, and
    inf if the compounding overflows.
    """
    if result.starting_balance == 0 or not result.duration:
        return 0.0

    final_value = result.starting_balance + result.total_profit_and_loss
    if final_value <= 0:
        return -100.0

    years = result.duration / DAYS_PER_YEAR
    try:
        return (math.pow(final_value / result.starting_balance, 1 / years) - 1) * 100.0
    except OverflowError:
        return math.inf


def annual_volatility(result: "Result") -> float:
    returns = _trade_return_percentages(result)
    if len(returns) < 2:
        return 0.0
    return statistics.stdev(returns) * math.sqrt(_trades_per_year(result, len(returns)))


def downside_volatility(result: "Result") -> float:
    """Annualized volatility of the losing trade returns only."""
    returns = _trade_return_percentages(result)
    negative = [value for value in returns if value < 0]
    if len(negative) < 2:
        return 0.0
    return statistics.stdev(negative) * math.sqrt(_trades_per_year(result, len(returns)))


def sharpe_ratio(result: "Result", risk_free_rate: float = 0.02) -> float:
    volatility = annual_volatility(result)
    if volatility == 0:
        return 0.0
    return (annual_return_percentage(result) - risk_free_rate * 100) / volatility


def sortino_ratio(result: "Result", risk_free_rate: float = 0.02) -> float:
    volatility = downside_volatility(result)
    if volatility == 0:
        return 0.0
    return (annual_return_percentage(result) - risk_free_rate * 100) / volatility


def calmar_ratio(result: "Result") -> float:
    max_drawdown = abs(result.max_draw_down_percentage)
    if max_drawdown == 0:
        return 0.0
    return annual_return_percentage(result) / max_drawdown
