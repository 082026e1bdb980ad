"""Completed round-trip trade model."""

from dataclasses import dataclass
from enum import Enum

from postfacto_engine.models.data_point import DataPoint
from postfacto_engine.trade_stats.duration import days_between
from postfacto_engine.trade_stats.profit_and_loss import trade_delta


class TradeOutcome(str, Enum):
    """Classification of a completed trade by its open-to-open delta."""

    WIN = "win"
    LOSS = "loss"
    BREAK_EVEN = "break_even"


@dataclass(frozen=True)
class TradePair:
    """Matched entry and exit with the balance before and after the trade."""

    exit_point: DataPoint
    enter_point: DataPoint
    balance: float
    previous_balance: float

    @classmethod
    def new(
        cls, enter_point: DataPoint, exit_point: DataPoint, previous_balance: float
    ) -> "TradePair":
        """Build a pair, computing ``balance = previous_balance + delta``.

        Raises:
            PairingError: If the entry and exit actions do not correspond.
        """
        return cls(
            exit_point=exit_point,
            enter_point=enter_point,
            balance=previous_balance + trade_delta(enter_point, exit_point),
            previous_balance=previous_balance,
        )

    @property
    def result_value(self) -> float:
        """Realized P&L of this trade."""
        return trade_delta(self.enter_point, self.exit_point)

    @property
    def result_percentage(self) -> float:
        """P&L as a percentage of the balance before the trade."""
        if self.previous_balance == 0:
            return 0.0
        return 100.0 * self.result_value / self.previous_balance

    @property
    def outcome(self) -> TradeOutcome:
        value = self.result_value
        if value > 0:
            return TradeOutcome.WIN
        if value < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAK_EVEN

    @property
    def duration(self) -> float:
        """Days from entry to exit; 0.0 when timestamps are missing."""
        days = days_between(
            self.enter_point.datum.timestamp, self.exit_point.datum.timestamp
        )
        return days if days is not None else 0.0
