"""Win rate over completed trades."""

from typing import TYPE_CHECKING

from postfacto_engine.trade_stats.trade_pair import TradeOutcome

if TYPE_CHECKING:
    from postfacto_engine.backtest.result import Result


def win_rate(result: "Result") -> float:
    """Winning trades / trades_count * 100; 0.0 without trades.

    A trade wins when its open-to-open delta is positive; break-even trades
    count as non-wins.
    """
    if result.trades_count == 0:
        return 0.0

    wins = sum(1 for pair in result.trade_pairs if pair.outcome is TradeOutcome.WIN)
    return wins / result.trades_count * 100.0
