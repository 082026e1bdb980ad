"""Strategy interface definitions and shape resolution.

Two strategy shapes are supported:

- StatelessStrategy: a callable ``(bar, result) -> action | None``
- StatefulStrategy: an object with ``init(options) -> state`` and
  ``next(state, context) -> state``; actions are emitted through the
  StrategyContext

``resolve_strategy`` inspects the value once, before replay starts, and
returns the matching adapter.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from postfacto_engine.backtest.result import Result
from postfacto_engine.errors import InputContractError, StrategyInitError
from postfacto_engine.models import Action, Bar
from postfacto_engine.strategies.context import StrategyContext


@runtime_checkable
class StatelessStrategy(Protocol):
    """Decision function invoked once per bar pair."""

    def __call__(self, bar: Bar, result: Result) -> Action | str | None:
        """
        Decide the action for the bar after ``bar``.

        Args:
            bar: Current bar.
            result: Result accumulated so far (read-only by convention).

        Returns:
            An Action (or its string value) to record, or None.
        """
        ...


@runtime_checkable
class StatefulStrategy(Protocol):
    """Strategy object carrying state across bars."""

    def init(self, options: dict[str, Any]) -> Any:
        """Build the initial state. Raise to abort the backtest."""
        ...

    def next(self, state: Any, context: StrategyContext) -> Any:
        """Read ``context.data``, optionally emit an action, return the new state."""
        ...


class Strategy(ABC):
    """Convenience base class for stateful strategies.

    ``init`` returns a copy of the options as the state; subclasses must
    implement ``next``.
    """

    def init(self, options: dict[str, Any]) -> Any:
        return dict(options)

    @abstractmethod
    def next(self, state: Any, context: StrategyContext) -> Any:
        """Read ``context.data``, optionally emit an action, return the new state."""


@dataclass
class StatelessAdapter:
    """Runs a StatelessStrategy."""

    strategy: StatelessStrategy
    name: str

    def start(self, context: StrategyContext) -> None:
        pass

    def decide(self, bar: Bar, context: StrategyContext) -> Action | None:
        return Action.parse(self.strategy(bar, context.result))


@dataclass
class StatefulAdapter:
    """Runs a StatefulStrategy and threads its state between bars."""

    strategy: StatefulStrategy
    name: str
    state: Any = field(default=None, repr=False)

    def start(self, context: StrategyContext) -> None:
        """Call ``init`` with the run options.

        Raises:
            StrategyInitError: If ``init`` raises.
        """
        try:
            self.state = self.strategy.init(dict(context.options))
        except Exception as e:
            raise StrategyInitError(f"strategy initialization failed: {e}") from e

    def decide(self, bar: Bar, context: StrategyContext) -> Action | None:
        context.pop_action()
        context.data = bar
        self.state = self.strategy.next(self.state, context)
        return context.pop_action()


ResolvedStrategy = StatelessAdapter | StatefulAdapter


def strategy_name(strategy: Any) -> str:
    """Display name used in logs and metrics."""
    return getattr(strategy, "__name__", None) or type(strategy).__name__


def resolve_strategy(strategy: Any) -> ResolvedStrategy:
    """
    Resolve a strategy value into its adapter.

    Classes are instantiated without arguments first. Objects exposing
    ``init`` or ``next`` are stateful and must expose both; other callables
    are stateless.

    Raises:
        InputContractError: If the strategy is None or not a recognized shape.
        StrategyInitError: If a strategy class cannot be instantiated or a
            stateful strategy lacks ``init`` or ``next``.
    """
    if strategy is None:
        raise InputContractError("strategy cannot be nil")

    name = strategy_name(strategy)

    if isinstance(strategy, type):
        try:
            strategy = strategy()
        except Exception as e:
            raise StrategyInitError(f"strategy initialization failed: {e}") from e

    has_init = callable(getattr(strategy, "init", None))
    has_next = callable(getattr(strategy, "next", None))

    if has_init and has_next:
        return StatefulAdapter(strategy=strategy, name=name)
    if has_init or has_next:
        missing = "next" if has_init else "init"
        raise StrategyInitError(
            f"strategy initialization failed: {name} does not define {missing}"
        )
    if callable(strategy):
        return StatelessAdapter(strategy=strategy, name=name)

    raise InputContractError("invalid strategy format")
