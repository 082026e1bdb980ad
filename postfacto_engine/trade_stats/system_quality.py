"""System Quality Number (SQN), after Van Tharp.

SQN = (mean trade P&L / stdev trade P&L) * sqrt(number of trades)

Interpretation:
- Below 1.6: Poor system
- 1.6 to 1.9: Below average but tradeable
- 2.0 to 2.4: Average system
- 2.5 to 2.9: Good system
- 3.0 to 4.9: Excellent system
- 5.0 to 6.9: Superb system
- 7.0 and above: Too good to be true (likely curve-fitted)
"""

import math
import statistics
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postfacto_engine.backtest.result import Result

_INTERPRETATIONS: tuple[tuple[float, str], ...] = (
    (1.6, "Poor system"),
    (2.0, "Below average but tradeable"),
    (2.5, "Average system"),
    (3.0, "Good system"),
    (5.0, "Excellent system"),
    (7.0, "Superb system"),
)


def system_quality_number(result: "Result") -> float:
    """SQN of the trade P&L distribution; 0.0 below two trades or with zero spread."""
    trade_results = [pair.result_value for pair in result.trade_pairs]
    if len(trade_results) < 2:
        return 0.0

    std_deviation = statistics.stdev(trade_results)
    if std_deviation == 0:
        return 0.0
    return statistics.mean(trade_results) / std_deviation * math.sqrt(len(trade_results))


def sqn_interpretation(sqn: float) -> str:
    for upper_bound, label in _INTERPRETATIONS:
        if sqn < upper_bound:
            return label
    return "Too good to be true (likely curve-fitted)"


def confidence_level(result: "Result") -> float:
    """Rough reliability of the SQN; 0.0 below 30 trades, scaled up to 100 trades."""
    if result.trades_count < 30:
        return 0.0

    sqn = system_quality_number(result)
    if sqn >= 2.0:
        base_confidence = 0.95
    elif sqn >= 1.6:
        base_confidence = 0.80
    elif sqn >= 1.0:
        base_confidence = 0.60
    else:
        base_confidence = 0.30

    return base_confidence * min(result.trades_count / 100, 1.0)
