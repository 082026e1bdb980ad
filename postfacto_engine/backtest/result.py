"""Backtest result accumulator.

A Result is mutable while the execution loop replays bars and records
actions. ``compile`` pairs the action stream, computes every statistic and
freezes the object; after that any assignment raises ResultFrozenError.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from postfacto_engine.config import BacktestConfig
from postfacto_engine.errors import PairingError, ResultFrozenError
from postfacto_engine.models import Action, Bar, DataPoint, Position
from postfacto_engine.trade_stats import (
    TradePair,
    compile_pairs,
    days_between,
    draw_down,
    total_profit_and_loss,
    trade_delta,
)
from postfacto_engine.trade_stats import (
    financial_ratios,
    kelly_criterion,
    market_risk,
    profit_metrics,
    system_quality,
)
from postfacto_engine.trade_stats.trade_duration import (
    average_trade_duration,
    max_trade_duration,
)
from postfacto_engine.trade_stats.trade_percentage import (
    best_trade_by_percentage,
    worst_trade_by_percentage,
)
from postfacto_engine.trade_stats.win_rate import win_rate

logger = logging.getLogger(__name__)


@dataclass
class Result:
    """Backtest state during replay and every derived statistic after compile.

    ``data_points`` and ``trade_pairs`` are in chronological order.

    Attributes:
        starting_balance: Balance before the first trade
        start_date: Timestamp of the first bar
        end_date: Timestamp of the last bar
        data_points: Action-tagged bars recorded during replay
        is_position_open: Whether an entry is waiting for its close
        realized_profit_and_loss: Running P&L of closed trades during replay
        compiled: Set once ``compile`` has run
    """

    starting_balance: float = 10000.0
    start_date: Any = None
    end_date: Any = None
    data_points: list[DataPoint] = field(default_factory=list)
    is_position_open: bool = False
    realized_profit_and_loss: float = 0.0

    # Filled by compile()
    trade_pairs: tuple[TradePair, ...] = ()
    trades_count: int = 0
    total_profit_and_loss: float = 0.0
    final_balance: float = 0.0
    duration: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    expectancy: float = 0.0
    expectancy_percentage: float = 0.0
    average_winning_trade: float = 0.0
    average_losing_trade: float = 0.0
    largest_winning_trade: float = 0.0
    largest_losing_trade: float = 0.0
    best_trade_by_percentage: float = 0.0
    worst_trade_by_percentage: float = 0.0
    max_trade_duration: float = 0.0
    average_trade_duration: float = 0.0
    max_draw_down_percentage: float = 0.0
    average_draw_down_percentage: float = 0.0
    max_draw_down_duration: float = 0.0
    average_draw_down_duration: float = 0.0
    total_return_percentage: float = 0.0
    annual_return_percentage: float = 0.0
    annual_volatility: float = 0.0
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    calmar_ratio: float = 0.0
    system_quality_number: float = 0.0
    sqn_interpretation: str = ""
    confidence_level: float = 0.0
    kelly_criterion: float = 0.0
    fractional_kelly: float = 0.0
    kelly_interpretation: str = ""
    optimal_position_size: float = 0.0
    geometric_mean_return: float = 0.0
    risk_of_ruin: float = 0.0
    market_correlation: float = 0.0
    beta: float = 0.0
    alpha: float = 0.0
    tracking_error: float = 0.0
    information_ratio: float = 0.0
    compiled: bool = field(default=False, init=False)

    _open_entry: DataPoint | None = field(default=None, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if self.__dict__.get("compiled", False):
            raise ResultFrozenError(f"cannot set {name!r}: result is compiled")
        super().__setattr__(name, value)

    @property
    def position(self) -> Position:
        """Directional exposure implied by the recorded actions."""
        if self._open_entry is None:
            return Position.NONE
        return Position.LONG if self._open_entry.action is Action.BUY else Position.SHORT

    @property
    def equity(self) -> float:
        """Starting balance plus realized P&L so far."""
        return self.starting_balance + self.realized_profit_and_loss

    def add_data_point(self, index: int, datum: Bar, action: Action) -> DataPoint:
        """Record an action on the bar at ``index``.

        Tracks the open entry so ``position`` and ``equity`` stay current.
        A close that does not match the open entry is still recorded; pairing
        reports it when the result is compiled.

        Raises:
            ResultFrozenError: If the result is already compiled.
        """
        if self.compiled:
            raise ResultFrozenError("cannot record actions: result is compiled")
        point = DataPoint(datum=datum, action=action, index=index)
        self.data_points.append(point)

        if point.action.is_entry:
            self._open_entry = point
            self.is_position_open = True
        elif self._open_entry is not None and point.action is self._open_entry.action.closing_action:
            self.realized_profit_and_loss += trade_delta(self._open_entry, point)
            self._open_entry = None
            self.is_position_open = False

        return point

    def compile(self, config: BacktestConfig | None = None) -> "Result":
        """Pair the action stream, compute statistics and freeze.

        Args:
            config: Ratio parameters (risk-free rate, Kelly fraction,
                drawdown limit, benchmark return). Defaults when None.

        Returns:
            This result, now read-only.

        Raises:
            PairingError: If the action stream cannot be paired.
            ResultFrozenError: If the result was already compiled.
        """
        if self.compiled:
            raise ResultFrozenError("result is already compiled")
        config = config or BacktestConfig.model_construct(starting_balance=self.starting_balance)

        pairs = compile_pairs(self.data_points, self.starting_balance)
        if isinstance(pairs, PairingError):
            raise pairs

        self.data_points = tuple(self.data_points)
        self.trade_pairs = tuple(pairs)
        self.trades_count = len(self.trade_pairs)
        self.total_profit_and_loss = total_profit_and_loss(self.trade_pairs)
        self.final_balance = self.starting_balance + self.total_profit_and_loss
        self.duration = days_between(self.start_date, self.end_date) or 0.0

        self.win_rate = win_rate(self)
        self.profit_factor = profit_metrics.profit_factor(self)
        self.gross_profit, self.gross_loss = profit_metrics.gross_profit_and_loss(self)
        self.expectancy = profit_metrics.expectancy(self)
        self.expectancy_percentage = profit_metrics.expectancy_percentage(self)
        self.average_winning_trade = profit_metrics.average_winning_trade(self)
        self.average_losing_trade = profit_metrics.average_losing_trade(self)
        self.largest_winning_trade = profit_metrics.largest_winning_trade(self)
        self.largest_losing_trade = profit_metrics.largest_losing_trade(self)
        self.best_trade_by_percentage = best_trade_by_percentage(self.trade_pairs)
        self.worst_trade_by_percentage = worst_trade_by_percentage(self.trade_pairs)
        self.max_trade_duration = max_trade_duration(self.trade_pairs)
        self.average_trade_duration = average_trade_duration(self.trade_pairs)

        drawdown = draw_down(self.trade_pairs)
        self.max_draw_down_percentage = drawdown.max_percentage
        self.average_draw_down_percentage = drawdown.average_percentage
        self.max_draw_down_duration = drawdown.max_duration
        self.average_draw_down_duration = drawdown.average_duration

        self.total_return_percentage = financial_ratios.total_return_percentage(self)
        self.annual_return_percentage = financial_ratios.annual_return_percentage(self)
        self.annual_volatility = financial_ratios.annual_volatility(self)
        self.sharpe_ratio = financial_ratios.sharpe_ratio(self, config.risk_free_rate)
        self.sortino_ratio = financial_ratios.sortino_ratio(self, config.risk_free_rate)
        self.calmar_ratio = financial_ratios.calmar_ratio(self)

        self.system_quality_number = system_quality.system_quality_number(self)
        self.sqn_interpretation = system_quality.sqn_interpretation(self.system_quality_number)
        self.confidence_level = system_quality.confidence_level(self)

        self.kelly_criterion = kelly_criterion.kelly_criterion(self)
        self.fractional_kelly = kelly_criterion.fractional_kelly(self, config.kelly_fraction)
        self.kelly_interpretation = kelly_criterion.kelly_interpretation(self.kelly_criterion)
        self.optimal_position_size = kelly_criterion.optimal_position_size(
            self, self.final_balance, config.kelly_fraction
        )
        self.geometric_mean_return = kelly_criterion.geometric_mean_return(self)
        self.risk_of_ruin = kelly_criterion.risk_of_ruin(self, config.drawdown_limit)

        self.market_correlation = market_risk.market_correlation(self)
        self.beta = market_risk.beta(self)
        self.alpha = market_risk.alpha(
            self, config.benchmark_return_pct, config.risk_free_rate
        )
        self.tracking_error = market_risk.tracking_error(self)
        self.information_ratio = market_risk.information_ratio(
            self, config.benchmark_return_pct, config.risk_free_rate
        )

        self.compiled = True
        logger.debug(
            f"Compiled result: {self.trades_count} trades, P&L {self.total_profit_and_loss:.4f}"
        )
        return self
