import os
from collections.abc import Callable
from typing import Any, Generator

import pytest

from postfacto_engine.backtest.result import Result
from postfacto_engine.config import BacktestConfig
from postfacto_engine.models import Action, Bar, DataPoint
from postfacto_engine.monitoring.metrics import reset_metrics


@pytest.fixture(autouse=True)
def clean_config_env() -> Generator[None, None, None]:
    """Ensure POSTFACTO_* env vars do not interfere with tests unless explicitly set."""
    original_env = {}
    keys_to_clear = [
        "POSTFACTO_CONFIG_PATH",
        "POSTFACTO_STARTING_BALANCE",
        "POSTFACTO_RISK_FREE_RATE",
        "POSTFACTO_BENCHMARK_RETURN_PCT",
        "POSTFACTO_KELLY_FRACTION",
    ]

    for key in keys_to_clear:
        if key in os.environ:
            original_env[key] = os.environ[key]
            os.environ.pop(key, None)

    yield

    for key, value in original_env.items():
        os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_global_metrics() -> Generator[None, None, None]:
    """Keep the global metrics service from leaking between tests."""
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture
def make_bar() -> Callable[..., Bar]:
    """Factory for flat bars where open == high == low == close."""

    def _make(price: float, timestamp: Any = None, volume: float | None = None) -> Bar:
        return Bar(
            open=price,
            high=price,
            low=price,
            close=price,
            volume=volume,
            timestamp=timestamp,
        )

    return _make


@pytest.fixture
def make_point(make_bar: Callable[..., Bar]) -> Callable[..., DataPoint]:
    """Factory for action-tagged data points."""

    def _make(index: int, action: str, price: float, timestamp: Any = None) -> DataPoint:
        return DataPoint(datum=make_bar(price, timestamp), action=Action(action), index=index)

    return _make


@pytest.fixture
def build_result(make_bar: Callable[..., Bar]) -> Callable[..., Result]:
    """Factory compiling a Result from (entry_action, enter_price, exit_price) trades."""

    def _build(
        trades: list[tuple[str, float, float]],
        starting_balance: float = 10000.0,
        start_date: Any = None,
        end_date: Any = None,
        config: BacktestConfig | None = None,
    ) -> Result:
        result = Result(
            starting_balance=starting_balance,
            start_date=start_date,
            end_date=end_date,
        )
        index = 1
        for entry, enter_price, exit_price in trades:
            action = Action(entry)
            result.add_data_point(index, make_bar(enter_price), action)
            result.add_data_point(index + 1, make_bar(exit_price), action.closing_action)
            index += 2
        return result.compile(config)

    return _build
