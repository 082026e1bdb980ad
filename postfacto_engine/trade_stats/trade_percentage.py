"""Best/worst trade by percentage of the balance before the trade."""

from collections.abc import Sequence

from postfacto_engine.trade_stats.trade_pair import TradePair


def best_trade_by_percentage(trade_pairs: Sequence[TradePair]) -> float:
    if not trade_pairs:
        return 0.0
    return max(pair.result_percentage for pair in trade_pairs)


def worst_trade_by_percentage(trade_pairs: Sequence[TradePair]) -> float:
    if not trade_pairs:
        return 0.0
    return min(pair.result_percentage for pair in trade_pairs)
