"""Bar loaders for files and DataFrames."""

from .csv_loader import load_bars_csv
from .frame import bars_from_frame

__all__ = [
    "bars_from_frame",
    "load_bars_csv",
]
