"""Simplified market risk estimates.

Without a benchmark return series these are approximations built from the
strategy's own trade volatility and an assumed market volatility:

- Beta: estimated correlation * strategy volatility / market volatility
- Alpha: strategy return - (rf + beta * (benchmark - rf))
- Tracking Error: strategy volatility * sqrt(2 * (1 - correlation))
- Information Ratio: alpha / tracking error
"""

from typing import TYPE_CHECKING

from postfacto_engine.trade_stats.financial_ratios import (
    annual_return_percentage,
    annual_volatility,
)

if TYPE_CHECKING:
    from postfacto_engine.backtest.result import Result

# Long-run equity index volatility, in percent.
ESTIMATED_MARKET_VOLATILITY = 18.0


def market_correlation(result: "Result") -> float:
    """Correlation guess by volatility band: calmer strategies look market-neutral."""
    volatility = annual_volatility(result)
    if volatility < 10.0:
        return 0.3
    if volatility < 20.0:
        return 0.6
    if volatility < 30.0:
        return 0.8
    return 0.9


def beta(result: "Result") -> float:
    volatility = annual_volatility(result)
    if volatility == 0:
        return 0.0
    return market_correlation(result) * volatility / ESTIMATED_MARKET_VOLATILITY


def alpha(result: "Result", benchmark_return: float, risk_free_rate: float = 0.02) -> float:
    """Excess annual return over the beta-implied return, in percent.

    Args:
        result: Compiled backtest result
        benchmark_return: Benchmark annual return in percent
        risk_free_rate: Annual risk-free rate as a decimal
    """
    strategy_return = annual_return_percentage(result) / 100
    expected_return = risk_free_rate + beta(result) * (benchmark_return / 100 - risk_free_rate)
    return (strategy_return - expected_return) * 100


def tracking_error(result: "Result") -> float:
    return annual_volatility(result) * (2 * (1 - market_correlation(result))) ** 0.5


def information_ratio(
    result: "Result", benchmark_return: float, risk_free_rate: float = 0.02
) -> float:
    error = tracking_error(result)
    if error == 0:
        return 0.0
    return alpha(result, benchmark_return, risk_free_rate) / error


def relative_drawdown(result: "Result", benchmark_max_drawdown: float) -> float:
    return result.max_draw_down_percentage - benchmark_max_drawdown
