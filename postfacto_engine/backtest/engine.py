"""Backtest execution loop.

Replays a strategy over consecutive bar pairs. The decision made on bar ``i``
is recorded against bar ``i + 1``, so a signal never acts on the bar that
produced it.
"""

import itertools
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from postfacto_engine.backtest.result import Result
from postfacto_engine.config import BacktestConfig, coerce_config
from postfacto_engine.errors import (
    BacktestError,
    DataValidationError,
    InputContractError,
    PairingError,
    StrategyInitError,
)
from postfacto_engine.models import Bar, normalize_bar
from postfacto_engine.monitoring.metrics import BacktestMetricsService, get_metrics
from postfacto_engine.strategies import StrategyContext, resolve_strategy, strategy_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestOutput:
    """A completed backtest.

    Attributes:
        data: Normalized bars the strategy was replayed over
        strategy: Strategy name
        result: Compiled, read-only Result
    """

    data: tuple[Bar, ...]
    strategy: str
    result: Result


@dataclass(frozen=True)
class BacktestOutcome:
    """Either an output or the error that stopped the backtest."""

    output: BacktestOutput | None = None
    error: BacktestError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> BacktestOutput:
        """Return the output or raise the error."""
        if self.error is not None:
            raise self.error
        return self.output


def _error_status(error: BacktestError) -> str:
    if isinstance(error, DataValidationError):
        return "data_validation"
    if isinstance(error, InputContractError):
        return "input_contract"
    if isinstance(error, StrategyInitError):
        return "strategy_init"
    if isinstance(error, PairingError):
        return "pairing"
    return "error"


def _normalize_bars(data: list[Any], validate: bool) -> tuple[Bar, ...]:
    bars = []
    for position, raw in enumerate(data):
        try:
            bars.append(normalize_bar(raw, validate=validate))
        except (TypeError, ValueError) as e:
            raise DataValidationError(f"data point {position}: {e}") from e
    return tuple(bars)


def _materialize(data: Any) -> list[Any]:
    if data is None:
        raise InputContractError("data cannot be nil")
    if isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
        raise InputContractError("data must be a sequence of bars")
    bars = list(data)
    if not bars:
        raise InputContractError("data cannot be empty")
    return bars


def _execute(
    data: Any,
    strategy: Any,
    config: BacktestConfig,
    strategy_options: dict[str, Any] | None,
    metrics: BacktestMetricsService | None,
) -> BacktestOutput:
    raw_bars = _materialize(data)
    adapter = resolve_strategy(strategy)
    bars = _normalize_bars(raw_bars, config.validate_data)

    logger.info(f"Starting backtest: strategy={adapter.name} bars={len(bars)}")

    result = Result(
        starting_balance=config.starting_balance,
        start_date=bars[0].timestamp,
        end_date=bars[-1].timestamp,
    )

    with StrategyContext(result, strategy_options) as context:
        adapter.start(context)

        for (index, bar), (next_index, next_bar) in itertools.pairwise(enumerate(bars)):
            try:
                action = adapter.decide(bar, context)
            except Exception as e:
                logger.warning(
                    f"Strategy {adapter.name} failed on bar {index}, treating as no action: {e}"
                )
                if metrics is not None:
                    metrics.record_strategy_error(adapter.name)
                continue

            if action is not None:
                result.add_data_point(next_index, next_bar, action)

    result.compile(config)

    logger.info(
        f"Backtest complete: strategy={adapter.name} actions={len(result.data_points)} "
        f"trades={result.trades_count} pnl={result.total_profit_and_loss:.4f}"
    )
    if metrics is not None:
        metrics.record_trades_paired(adapter.name, result.trades_count)

    return BacktestOutput(data=bars, strategy=adapter.name, result=result)


def run_backtest(
    data: Iterable[Any],
    strategy: Any,
    config: BacktestConfig | dict[str, Any] | None = None,
    *,
    strategy_options: dict[str, Any] | None = None,
    metrics: BacktestMetricsService | None = None,
) -> BacktestOutcome:
    """
    Run a strategy over historical bars.

    Args:
        data: Bars as Bar instances, mappings or OHLC objects, oldest first.
        strategy: A ``(bar, result) -> action`` callable, or a stateful
            strategy object or class with ``init`` and ``next``.
        config: BacktestConfig, a mapping of its fields, or None for defaults.
        strategy_options: Passed to a stateful strategy's ``init``.
        metrics: Metrics service; the global one from ``init_metrics`` if None.

    Returns:
        BacktestOutcome holding the output, or the BacktestError that stopped
        the run. Per-bar strategy failures are not errors.
    """
    started = time.perf_counter()
    metrics = metrics or get_metrics()
    name = strategy_name(strategy) if strategy is not None else "none"

    try:
        try:
            backtest_config = coerce_config(config)
        except ValidationError as e:
            raise InputContractError(f"invalid config: {e}") from e
        output = _execute(data, strategy, backtest_config, strategy_options, metrics)
    except BacktestError as e:
        logger.error(f"Backtest failed: strategy={name} error={e.message}")
        if metrics is not None:
            metrics.record_backtest(name, _error_status(e), time.perf_counter() - started)
        return BacktestOutcome(error=e)

    if metrics is not None:
        metrics.record_backtest(output.strategy, "ok", time.perf_counter() - started)
    return BacktestOutcome(output=output)


def run_backtest_or_raise(
    data: Iterable[Any],
    strategy: Any,
    config: BacktestConfig | dict[str, Any] | None = None,
    *,
    strategy_options: dict[str, Any] | None = None,
    metrics: BacktestMetricsService | None = None,
) -> BacktestOutput:
    """Like ``run_backtest`` but raises the BacktestError instead of returning it."""
    return run_backtest(
        data,
        strategy,
        config,
        strategy_options=strategy_options,
        metrics=metrics,
    ).unwrap()
