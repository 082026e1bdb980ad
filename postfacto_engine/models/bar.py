"""Normalized OHLCV bar model."""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from numbers import Real
from typing import Any

Timestamp = datetime | date | str | None

# (canonical field, short alias)
_FIELD_ALIASES: tuple[tuple[str, str], ...] = (
    ("open", "o"),
    ("high", "h"),
    ("low", "l"),
    ("close", "c"),
    ("volume", "v"),
    ("timestamp", "t"),
)
_KNOWN_KEYS = {name for pair in _FIELD_ALIASES for name in pair} | {"other"}


@dataclass(frozen=True)
class Bar:
    """One OHLC(V) observation at a point in time."""

    open: float
    high: float
    low: float
    close: float
    volume: float | None = None
    timestamp: Timestamp = None
    other: dict[str, Any] | None = None

    def check_prices(self) -> None:
        """Check the four prices are finite real numbers.

        Raises:
            ValueError: If a price is missing, non-numeric, NaN or infinite.
        """
        prices = (self.open, self.high, self.low, self.close)
        if any(value is None for value in prices):
            raise ValueError("OHLC values cannot be nil")
        if any(isinstance(value, bool) or not isinstance(value, Real) for value in prices):
            raise ValueError("OHLC values must be numeric")
        if not all(math.isfinite(value) for value in prices):
            raise ValueError("OHLC values must be finite")

    def validate(self) -> None:
        """Check price fields, volume and the OHLC relationship.

        Raises:
            ValueError: If a price is missing, non-numeric, non-finite,
                negative, or the bar's high/low do not bound its open and close.
        """
        self.check_prices()
        prices = (self.open, self.high, self.low, self.close)
        if any(value < 0 for value in prices):
            raise ValueError("OHLC values must be non-negative")
        if self.high < self.low:
            raise ValueError(
                f"invalid OHLC data: high ({self.high}) must be >= low ({self.low})"
            )
        if self.open > self.high:
            raise ValueError(
                f"invalid OHLC data: open ({self.open}) must be <= high ({self.high})"
            )
        if self.open < self.low:
            raise ValueError(
                f"invalid OHLC data: open ({self.open}) must be >= low ({self.low})"
            )
        if self.close > self.high:
            raise ValueError(
                f"invalid OHLC data: close ({self.close}) must be <= high ({self.high})"
            )
        if self.close < self.low:
            raise ValueError(
                f"invalid OHLC data: close ({self.close}) must be >= low ({self.low})"
            )
        if self.volume is not None:
            if isinstance(self.volume, bool) or not isinstance(self.volume, Real):
                raise ValueError("Volume must be numeric")
            if not math.isfinite(self.volume):
                raise ValueError("Volume must be finite")
            if self.volume < 0:
                raise ValueError("Volume must be non-negative")


def _lookup(raw: Mapping[str, Any], name: str, alias: str) -> Any:
    value = raw.get(name)
    return raw.get(alias) if value is None else value


def normalize_bar(raw: Any, validate: bool = True) -> Bar:
    """Build a Bar from a Bar, a mapping, or an object with OHLC attributes.

    Mappings may use long keys (``open``, ``high``, ...) or the short aliases
    (``o``, ``h``, ``l``, ``c``, ``v``, ``t``). Unrecognized mapping keys are
    kept under ``Bar.other``.

    Args:
        raw: Source record.
        validate: Run ``Bar.validate`` on the result. Prices are always
            checked as finite numbers; this adds the range, volume and OHLC
            relationship checks.

    Returns:
        Normalized Bar.

    Raises:
        ValueError: If required OHLC fields are missing or invalid.
    """
    if isinstance(raw, Bar):
        bar = raw
    elif isinstance(raw, Mapping):
        if not all(name in raw or alias in raw for name, alias in _FIELD_ALIASES[:4]):
            raise ValueError("missing required OHLC fields")

        values = {name: _lookup(raw, name, alias) for name, alias in _FIELD_ALIASES}
        extra = {key: value for key, value in raw.items() if key not in _KNOWN_KEYS}
        other = raw.get("other")
        if extra:
            other = {**(other or {}), **extra}
        bar = Bar(other=other, **values)
    elif all(hasattr(raw, name) for name, _ in _FIELD_ALIASES[:4]):
        bar = Bar(
            open=raw.open,
            high=raw.high,
            low=raw.low,
            close=raw.close,
            volume=getattr(raw, "volume", None),
            timestamp=getattr(raw, "timestamp", None),
        )
    else:
        raise ValueError("data point must be a mapping or OHLC record")

    if validate:
        bar.validate()
    else:
        bar.check_prices()
    return bar
