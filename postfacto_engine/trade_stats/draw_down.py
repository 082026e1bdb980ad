"""Peak-to-trough balance decline over the trade pair sequence.

Example report lines:
    Max. Drawdown [%]                 33.08
    Avg. Drawdown [%]                  5.58
    Max. Drawdown Duration        688 days
    Avg. Drawdown Duration         41 days
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from postfacto_engine.trade_stats.duration import days_between
from postfacto_engine.trade_stats.trade_pair import TradePair


@dataclass(frozen=True)
class DrawDown:
    """Drawdown statistics.

    Attributes:
        peak: Highest balance reached
        peak_time: Exit timestamp of the pair that set the peak
        max_percentage: Largest (peak - balance) / peak * 100 seen
        average_percentage: Mean drawdown % over pairs below the peak
        max_duration: Longest days from peak time to an exit below the peak
        average_duration: Mean of those durations over pairs below the peak
        drawdown_count: Number of pairs that closed below the peak
    """

    peak: float = 0.0
    peak_time: Any = None
    max_percentage: float = 0.0
    average_percentage: float = 0.0
    max_duration: float = 0.0
    average_duration: float = 0.0
    drawdown_count: int = 0


def draw_down(trade_pairs: Sequence[TradePair]) -> DrawDown:
    """
    Compute drawdown statistics from chronologically ordered pairs.

    The first pair seeds the peak. A later pair sets a new peak only when its
    balance exceeds the current one. Averages cover only pairs that closed
    below the peak.
    """
    if not trade_pairs:
        return DrawDown()

    peak = trade_pairs[0].balance
    peak_time = trade_pairs[0].exit_point.datum.timestamp
    max_percentage = 0.0
    percentage_sum = 0.0
    drawdown_count = 0
    max_duration = 0.0
    total_duration = 0.0

    for pair in trade_pairs[1:]:
        balance = pair.balance
        timestamp = pair.exit_point.datum.timestamp

        if balance > peak:
            peak = balance
            peak_time = timestamp
            continue

        if balance == peak or peak <= 0:
            continue

        percentage = (peak - balance) / peak * 100.0
        duration = days_between(peak_time, timestamp) or 0.0

        max_percentage = max(max_percentage, percentage)
        percentage_sum += percentage
        drawdown_count += 1
        max_duration = max(max_duration, duration)
        total_duration += duration

    return DrawDown(
        peak=peak,
        peak_time=peak_time,
        max_percentage=max_percentage,
        average_percentage=percentage_sum / drawdown_count if drawdown_count else 0.0,
        max_duration=max_duration,
        average_duration=total_duration / drawdown_count if drawdown_count else 0.0,
        drawdown_count=drawdown_count,
    )
