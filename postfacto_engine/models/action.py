"""Strategy action and position models."""

from enum import Enum
from typing import Any


class Action(str, Enum):
    """Trading actions a strategy can emit."""

    BUY = "buy"  # Enter long
    SELL = "sell"  # Enter short
    CLOSE_BUY = "close_buy"  # Exit long
    CLOSE_SELL = "close_sell"  # Exit short

    @property
    def is_entry(self) -> bool:
        return self in (Action.BUY, Action.SELL)

    @property
    def is_exit(self) -> bool:
        return not self.is_entry

    @property
    def closing_action(self) -> "Action":
        """The exit action that closes this entry."""
        if self is Action.BUY:
            return Action.CLOSE_BUY
        if self is Action.SELL:
            return Action.CLOSE_SELL
        raise ValueError(f"{self.value} is not an entry action")

    @classmethod
    def parse(cls, value: Any) -> "Action | None":
        """Coerce a strategy decision into an Action.

        Accepts Action members and their string values. Anything else,
        including None, is "no action".
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                return None
        return None


class Position(str, Enum):
    """Directional exposure visible to stateful strategies."""

    LONG = "long"
    SHORT = "short"
    NONE = "none"
