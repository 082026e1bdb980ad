"""Convert pandas DataFrames to bars."""

import pandas as pd

from postfacto_engine.models import Bar

_PRICE_COLUMNS = ("open", "high", "low", "close")


def bars_from_frame(df: pd.DataFrame, timestamp_column: str | None = "timestamp") -> list[Bar]:
    """
    Build bars from a DataFrame with OHLC(V) columns.

    Column names are matched case-insensitively. The timestamp comes from
    ``timestamp_column`` when the frame has it, otherwise from a
    DatetimeIndex. Pandas timestamps become ``datetime`` values.

    Args:
        df: Frame with open/high/low/close and optionally volume columns.
        timestamp_column: Column holding bar timestamps.

    Returns:
        Bars in row order.

    Raises:
        ValueError: If a price column is missing
    """
    frame = df.rename(columns=lambda name: str(name).strip().lower())
    missing = [name for name in _PRICE_COLUMNS if name not in frame.columns]
    if missing:
        raise ValueError(f"missing required columns: {', '.join(missing)}")

    if timestamp_column is not None and timestamp_column in frame.columns:
        timestamps = list(frame[timestamp_column])
    elif isinstance(frame.index, pd.DatetimeIndex):
        timestamps = list(frame.index)
    else:
        timestamps = [None] * len(frame)

    volumes = list(frame["volume"]) if "volume" in frame.columns else [None] * len(frame)

    bars = []
    for row, timestamp, volume in zip(
        frame[list(_PRICE_COLUMNS)].itertuples(index=False), timestamps, volumes
    ):
        if isinstance(timestamp, pd.Timestamp):
            timestamp = timestamp.to_pydatetime()
        bars.append(
            Bar(
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=None if volume is None or pd.isna(volume) else float(volume),
                timestamp=None if timestamp is None or pd.isna(timestamp) else timestamp,
            )
        )
    return bars
