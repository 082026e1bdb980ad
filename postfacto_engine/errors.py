"""Exception hierarchy for backtest failures."""


class BacktestError(Exception):
    """Base class for every fatal backtest failure."""

    def __init__(self, message: str = "unable to run backtest") -> None:
        super().__init__(message)
        self.message = message


class InputContractError(BacktestError):
    """Data or strategy rejected before replay begins."""


class DataValidationError(InputContractError):
    """A bar could not be normalized."""


class StrategyInitError(BacktestError):
    """A stateful strategy could not be initialized."""


class PairingError(BacktestError):
    """The action stream cannot be reconciled into trade pairs."""

    def __init__(self, message: str, enter_point=None, exit_point=None) -> None:
        super().__init__(message)
        self.enter_point = enter_point
        self.exit_point = exit_point


class ResultFrozenError(AttributeError):
    """Raised when a compiled Result is modified."""
