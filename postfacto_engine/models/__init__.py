"""Data models for bars, actions, and action-tagged data points."""

from .action import Action, Position
from .bar import Bar, normalize_bar
from .data_point import DataPoint

__all__ = [
    "Action",
    "Bar",
    "DataPoint",
    "Position",
    "normalize_bar",
]
