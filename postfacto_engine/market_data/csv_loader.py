"""Load bars from OHLCV CSV files."""

import csv
import logging
from pathlib import Path

from postfacto_engine.models import Bar

logger = logging.getLogger(__name__)

# header (lowercased) -> Bar field
_HEADER_ALIASES: dict[str, str] = {
    "timestamp": "timestamp",
    "date": "timestamp",
    "time": "timestamp",
    "datetime": "timestamp",
    "open": "open",
    "high": "high",
    "low": "low",
    "close": "close",
    "adj close": "adj_close",
    "adj_close": "adj_close",
    "volume": "volume",
}
_REQUIRED = ("open", "high", "low", "close")


def _parse_float(value: str | None, column: str, line: int) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"line {line}: {column} is not a number: {value!r}") from None


def load_bars_csv(path: str | Path) -> list[Bar]:
    """
    Read bars from a CSV file with a header row.

    Headers are matched case-insensitively; ``date``, ``time`` and
    ``datetime`` map to the timestamp, and an ``Adj Close`` column is used
    in place of ``Close`` when present. Timestamps are kept as the file's
    strings. Rows are returned in file order.

    Args:
        path: CSV file path.

    Returns:
        Bars, unvalidated; ``run_backtest`` validates them.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If a required column is missing or a price is not numeric
    """
    data_file = Path(path)
    if not data_file.exists():
        raise FileNotFoundError(f"Data file not found: {data_file}")

    bars: list[Bar] = []
    with open(data_file, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        columns = {
            _HEADER_ALIASES[name.strip().lower()]: name
            for name in reader.fieldnames or []
            if name.strip().lower() in _HEADER_ALIASES
        }
        missing = [field for field in _REQUIRED if field not in columns]
        if missing:
            raise ValueError(f"missing required columns: {', '.join(missing)}")

        close_column = columns.get("adj_close", columns["close"])

        for line, row in enumerate(reader, start=2):
            timestamp = row.get(columns["timestamp"]) if "timestamp" in columns else None
            bars.append(
                Bar(
                    open=_parse_float(row[columns["open"]], "open", line),
                    high=_parse_float(row[columns["high"]], "high", line),
                    low=_parse_float(row[columns["low"]], "low", line),
                    close=_parse_float(row[close_column], "close", line),
                    volume=(
                        _parse_float(row[columns["volume"]], "volume", line)
                        if "volume" in columns
                        else None
                    ),
                    timestamp=timestamp.strip() if timestamp else None,
                )
            )

    logger.info(f"Loaded {len(bars)} bars from {data_file.name}")
    return bars
