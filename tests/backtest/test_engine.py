"""Tests for the backtest execution loop."""

import logging
from typing import Any
from unittest.mock import ANY, MagicMock

import pytest

from postfacto_engine import (
    Action,
    BacktestConfig,
    DataValidationError,
    InputContractError,
    PairingError,
    Position,
    ResultFrozenError,
    StrategyContext,
    StrategyInitError,
    run_backtest,
    run_backtest_or_raise,
)
from postfacto_engine.monitoring.metrics import init_metrics
from postfacto_engine.strategies import (
    AlternatingLongStrategy,
    BuyAndHold,
    buy_buy_buy,
    noop,
    sell_sell_sell,
)


def _bars(*opens: float) -> list[dict[str, Any]]:
    return [
        {
            "open": price,
            "high": price,
            "low": price,
            "close": price,
            "timestamp": f"2024-01-{day:02d}",
        }
        for day, price in enumerate(opens, start=1)
    ]


def toggle_long(bar: Any, result: Any) -> Action:
    """Buy when flat, close when long."""
    return Action.CLOSE_BUY if result.is_position_open else Action.BUY


class TestInputContract:
    """Test suite for input validation before replay."""

    def test_nil_data(self) -> None:
        """Test None data is rejected."""
        outcome = run_backtest(None, noop)

        assert not outcome.ok
        assert isinstance(outcome.error, InputContractError)
        assert outcome.error.message == "data cannot be nil"

    def test_empty_data(self) -> None:
        """Test an empty series is rejected."""
        outcome = run_backtest([], noop)

        assert outcome.output is None
        assert outcome.error.message == "data cannot be empty"

    def test_nil_strategy(self) -> None:
        """Test None strategy is rejected."""
        outcome = run_backtest(_bars(1.0), None)
        assert outcome.error.message == "strategy cannot be nil"

    def test_invalid_strategy(self) -> None:
        """Test a non-callable strategy is rejected."""
        outcome = run_backtest(_bars(1.0), 42)

        assert isinstance(outcome.error, InputContractError)
        assert outcome.error.message == "invalid strategy format"

    def test_invalid_bar(self) -> None:
        """Test bars missing OHLC fields are rejected with their position."""
        outcome = run_backtest([*_bars(1.0), {"open": 1.0}], noop)

        assert isinstance(outcome.error, DataValidationError)
        assert outcome.error.message == "data point 1: missing required OHLC fields"

    def test_inconsistent_bar(self) -> None:
        """Test OHLC relationships are validated."""
        outcome = run_backtest([{"open": 5, "high": 4, "low": 6, "close": 5}], noop)

        assert isinstance(outcome.error, DataValidationError)
        assert "high (4) must be >= low (6)" in outcome.error.message

    def test_validation_disabled(self) -> None:
        """Test validate_data=False accepts inconsistent bars."""
        outcome = run_backtest(
            [{"open": 5, "high": 4, "low": 6, "close": 5}], noop, {"validate_data": False}
        )
        assert outcome.ok

    @pytest.mark.parametrize("bad_price", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_price(self, bad_price: float) -> None:
        """Test NaN and infinite prices are rejected instead of reaching P&L."""
        bars = _bars(10.0, 11.0, 12.0)
        bars[1]["open"] = bad_price

        outcome = run_backtest(bars, toggle_long)

        assert isinstance(outcome.error, DataValidationError)
        assert outcome.error.message == "data point 1: OHLC values must be finite"

    @pytest.mark.parametrize("bad_price", ["10", float("nan")])
    def test_prices_checked_with_validation_disabled(self, bad_price: Any) -> None:
        """Test validate_data=False still requires finite numeric prices."""
        bars = _bars(10.0, 11.0, 12.0)
        bars[2]["open"] = bad_price

        outcome = run_backtest(bars, toggle_long, {"validate_data": False})

        assert isinstance(outcome.error, DataValidationError)
        assert outcome.error.message.startswith("data point 2: OHLC values must be")

    def test_invalid_config(self) -> None:
        """Test config values are validated."""
        outcome = run_backtest(_bars(1.0), noop, {"starting_balance": -1})

        assert isinstance(outcome.error, InputContractError)
        assert outcome.error.message.startswith("invalid config")

    def test_or_raise_variant(self) -> None:
        """Test run_backtest_or_raise raises the typed error."""
        with pytest.raises(InputContractError, match="data cannot be empty"):
            run_backtest_or_raise([], noop)


class TestExecutionLoop:
    """Test suite for replay behavior."""

    def test_single_bar(self) -> None:
        """Test one bar gives zero trades and zero P&L."""
        result = run_backtest_or_raise(_bars(10.0), buy_buy_buy).result

        assert result.data_points == ()
        assert result.trades_count == 0
        assert result.total_profit_and_loss == 0.0

    def test_buy_then_close(self) -> None:
        """Test buy at 10, close at 12 yields one trade of +2."""
        output = run_backtest_or_raise(_bars(10.0, 10.0, 12.0), toggle_long)
        result = output.result

        assert result.trades_count == 1
        pair = result.trade_pairs[0]
        assert pair.result_value == 2.0
        assert pair.balance == 10002.0
        assert result.total_profit_and_loss == 2.0
        assert result.final_balance == 10002.0

    def test_action_recorded_on_next_bar(self) -> None:
        """Test the decision on bar i is attributed to bar i + 1."""
        result = run_backtest_or_raise(_bars(10.0, 11.0, 12.0), toggle_long).result

        assert [point.index for point in result.data_points] == [1, 2]
        assert result.data_points[0].datum.open == 11.0

    def test_trailing_entry(self) -> None:
        """Test buying until the data ends gives no completed trades."""
        result = run_backtest_or_raise(_bars(10.0, 11.0, 12.0), buy_buy_buy).result

        assert len(result.data_points) == 2
        assert result.trades_count == 0
        assert result.total_profit_and_loss == 0.0

    @pytest.mark.parametrize("bar_count", [1, 2, 5, 20])
    def test_emitted_points_bounded(self, bar_count: int) -> None:
        """Test at most n - 1 actions are recorded."""
        result = run_backtest_or_raise(_bars(*([10.0] * bar_count)), sell_sell_sell).result
        assert len(result.data_points) == bar_count - 1

    def test_unknown_decision_is_no_action(self) -> None:
        """Test unrecognized return values are not recorded."""
        result = run_backtest_or_raise(_bars(1.0, 2.0, 3.0), lambda bar, result: "hold").result
        assert result.data_points == ()

    def test_string_actions(self) -> None:
        """Test decisions may be action strings."""
        def strategy(bar: Any, result: Any) -> str:
            return "close_sell" if result.is_position_open else "SELL"

        result = run_backtest_or_raise(_bars(12.0, 12.0, 10.0), strategy).result

        assert result.trades_count == 1
        assert result.total_profit_and_loss == 2.0

    def test_per_bar_failure_is_swallowed(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a failing decision is logged and treated as no action."""
        calls = {"count": 0}

        def flaky(bar: Any, result: Any) -> Action:
            calls["count"] += 1
            if calls["count"] == 1:
                raise RuntimeError("indicator not ready")
            return toggle_long(bar, result)

        with caplog.at_level(logging.WARNING):
            outcome = run_backtest(_bars(10.0, 10.0, 11.0, 13.0), flaky)

        assert outcome.ok
        assert [point.index for point in outcome.output.result.data_points] == [2, 3]
        assert outcome.output.result.total_profit_and_loss == 2.0
        assert "indicator not ready" in caplog.text

    def test_pairing_error(self) -> None:
        """Test a mismatched close fails the backtest."""
        def strategy(bar: Any, result: Any) -> Action:
            return Action.CLOSE_SELL if result.is_position_open else Action.BUY

        outcome = run_backtest(_bars(10.0, 11.0, 12.0), strategy)

        assert isinstance(outcome.error, PairingError)
        with pytest.raises(PairingError):
            outcome.unwrap()

    def test_config_mapping(self) -> None:
        """Test starting balance from a config mapping."""
        result = run_backtest_or_raise(
            _bars(10.0, 10.0, 12.0), toggle_long, {"starting_balance": 500.0}
        ).result

        assert result.starting_balance == 500.0
        assert result.trade_pairs[0].previous_balance == 500.0

    def test_dates_and_duration(self) -> None:
        """Test start/end dates come from the first and last bars."""
        result = run_backtest_or_raise(_bars(1.0, 2.0, 3.0, 4.0), noop).result

        assert result.start_date == "2024-01-01"
        assert result.end_date == "2024-01-04"
        assert result.duration == 3.0

    def test_result_is_frozen(self) -> None:
        """Test the returned result is read-only."""
        result = run_backtest_or_raise(_bars(10.0, 10.0, 12.0), toggle_long).result

        with pytest.raises(ResultFrozenError):
            result.trades_count = 5
        with pytest.raises(ResultFrozenError):
            result.compile(BacktestConfig())

    def test_output_carries_bars_and_strategy(self) -> None:
        """Test output exposes normalized data and the strategy name."""
        output = run_backtest_or_raise(_bars(1.0, 2.0), noop)

        assert output.strategy == "noop"
        assert [bar.open for bar in output.data] == [1.0, 2.0]


class TestStatefulStrategies:
    """Test suite for init/next strategies."""

    def test_alternating_long(self) -> None:
        """Test position is visible between bars."""
        result = run_backtest_or_raise(
            _bars(10.0, 11.0, 12.0, 13.0, 14.0), AlternatingLongStrategy()
        ).result

        assert [point.action for point in result.data_points] == [
            Action.BUY,
            Action.CLOSE_BUY,
            Action.BUY,
            Action.CLOSE_BUY,
        ]
        assert result.trades_count == 2
        assert result.total_profit_and_loss == 2.0

    def test_strategy_class(self) -> None:
        """Test strategy classes are instantiated."""
        output = run_backtest_or_raise(_bars(10.0, 11.0, 12.0), BuyAndHold)
        result = output.result

        assert output.strategy == "BuyAndHold"
        assert len(result.data_points) == 1
        assert result.trades_count == 0
        assert result.is_position_open is True
        assert result.position is Position.LONG

    def test_strategy_options(self) -> None:
        """Test options reach init."""
        result = run_backtest_or_raise(
            _bars(10.0, 11.0, 12.0, 13.0, 14.0),
            AlternatingLongStrategy,
            strategy_options={"max_trades": 1},
        ).result

        assert result.trades_count == 1

    def test_init_failure_aborts(self) -> None:
        """Test init errors abort the backtest."""
        outcome = run_backtest(
            _bars(1.0, 2.0), AlternatingLongStrategy, strategy_options={"max_trades": -1}
        )

        assert isinstance(outcome.error, StrategyInitError)
        assert outcome.error.message == (
            "strategy initialization failed: max_trades must be non-negative"
        )

    def test_missing_next(self) -> None:
        """Test a stateful strategy must define both init and next."""

        class InitOnly:
            def init(self, options: dict[str, Any]) -> None:
                return None

        outcome = run_backtest(_bars(1.0, 2.0), InitOnly())

        assert isinstance(outcome.error, StrategyInitError)
        assert "does not define next" in outcome.error.message

    def test_equity_tracks_closed_trades(self) -> None:
        """Test equity seen by the strategy includes realized P&L."""
        seen: list[float] = []

        class Recorder(AlternatingLongStrategy):
            def next(self, state: dict[str, Any], context: StrategyContext) -> dict[str, Any]:
                seen.append(context.equity)
                return super().next(state, context)

        run_backtest_or_raise(_bars(10.0, 10.0, 12.0, 12.0), Recorder(), {"starting_balance": 100.0})

        assert seen == [100.0, 100.0, 102.0]

    def test_context_torn_down(self) -> None:
        """Test the per-run context is closed after the backtest."""
        contexts: list[StrategyContext] = []

        class Capture(BuyAndHold):
            def next(self, state: dict[str, Any], context: StrategyContext) -> dict[str, Any]:
                contexts.append(context)
                return super().next(state, context)

        run_backtest_or_raise(_bars(1.0, 2.0, 3.0), Capture())

        assert contexts
        assert contexts[0].closed
        assert contexts[0].data is None

    def test_runs_use_separate_contexts(self) -> None:
        """Test consecutive backtests do not share a context."""
        contexts: list[StrategyContext] = []

        class Capture(BuyAndHold):
            def next(self, state: dict[str, Any], context: StrategyContext) -> dict[str, Any]:
                contexts.append(context)
                return super().next(state, context)

        run_backtest_or_raise(_bars(1.0, 2.0), Capture())
        run_backtest_or_raise(_bars(1.0, 2.0), Capture())

        assert contexts[0] is not contexts[1]

    def test_next_failure_is_swallowed(self) -> None:
        """Test a failing next() is treated as no action."""

        class Fails(AlternatingLongStrategy):
            def next(self, state: dict[str, Any], context: StrategyContext) -> dict[str, Any]:
                context.buy()
                raise ValueError("boom")

        outcome = run_backtest(_bars(1.0, 2.0, 3.0), Fails())

        assert outcome.ok
        assert outcome.output.result.data_points == ()


class TestMetricsReporting:
    """Test suite for metrics reported by run_backtest."""

    def test_success_reported(self) -> None:
        """Test a successful run is recorded with its trade count."""
        metrics = MagicMock()

        run_backtest(_bars(10.0, 10.0, 12.0), toggle_long, metrics=metrics)

        metrics.record_backtest.assert_called_once_with("toggle_long", "ok", ANY)
        metrics.record_trades_paired.assert_called_once_with("toggle_long", 1)

    def test_failure_reported(self) -> None:
        """Test a failed run is recorded with its error kind."""
        metrics = MagicMock()

        run_backtest([], noop, metrics=metrics)

        metrics.record_backtest.assert_called_once_with("noop", "input_contract", ANY)

    def test_strategy_errors_reported(self) -> None:
        """Test swallowed per-bar failures are counted."""
        metrics = MagicMock()

        def broken(bar: Any, result: Any) -> None:
            raise RuntimeError("nope")

        run_backtest(_bars(1.0, 2.0, 3.0), broken, metrics=metrics)

        assert metrics.record_strategy_error.call_count == 2

    def test_global_service_used(self) -> None:
        """Test the global service from init_metrics is used by default."""
        service = init_metrics()

        run_backtest(_bars(10.0, 10.0, 12.0), toggle_long)

        assert service.registry.get_sample_value(
            "postfacto_backtests_total", {"strategy": "toggle_long", "status": "ok"}
        ) == 1.0
