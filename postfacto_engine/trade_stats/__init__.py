"""Trade pairing and performance statistics."""

from .compile_pairs import compile_pairs, flatten_pairs, match_entries_and_exits
from .draw_down import DrawDown, draw_down
from .duration import days_between
from .profit_and_loss import total_profit_and_loss, trade_delta
from .trade_pair import TradeOutcome, TradePair

__all__ = [
    "DrawDown",
    "TradeOutcome",
    "TradePair",
    "compile_pairs",
    "days_between",
    "draw_down",
    "flatten_pairs",
    "match_entries_and_exits",
    "total_profit_and_loss",
    "trade_delta",
]
