"""Action-tagged bar recorded by the execution loop."""

from dataclasses import dataclass

from postfacto_engine.models.action import Action
from postfacto_engine.models.bar import Bar


@dataclass(frozen=True)
class DataPoint:
    """A bar the strategy acted on, with the action and the bar's position index."""

    datum: Bar
    action: Action
    index: int

    def __post_init__(self) -> None:
        """Validate data point fields."""
        if self.index < 0:
            raise ValueError("Index must be non-negative")
        if not isinstance(self.action, Action):
            object.__setattr__(self, "action", Action(self.action))
