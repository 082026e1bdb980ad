"""Max/average holding time of completed trades, in days."""

from collections.abc import Sequence

from postfacto_engine.trade_stats.trade_pair import TradePair


def max_trade_duration(trade_pairs: Sequence[TradePair]) -> float:
    if not trade_pairs:
        return 0.0
    return max(pair.duration for pair in trade_pairs)


def average_trade_duration(trade_pairs: Sequence[TradePair]) -> float:
    if not trade_pairs:
        return 0.0
    return sum(pair.duration for pair in trade_pairs) / len(trade_pairs)
