"""Reconstruct round-trip trades from the chronological action stream."""

import logging
from collections.abc import Sequence

from postfacto_engine.errors import PairingError
from postfacto_engine.models.data_point import DataPoint
from postfacto_engine.trade_stats.trade_pair import TradePair

logger = logging.getLogger(__name__)


def match_entries_and_exits(
    data_points: Sequence[DataPoint],
) -> list[tuple[DataPoint, DataPoint]] | PairingError:
    """Match each close with the most recent still-open entry.

    Scans the stream holding at most one open entry:

    - an entry replaces any entry still open (the older one is discarded)
    - a close matching the open entry's direction completes a pair
    - a close with nothing open is discarded
    - a close of the opposite direction is a PairingError
    - an entry left open at the end is discarded

    Returns:
        (enter_point, exit_point) tuples in chronological order, or a
        PairingError describing the first irreconcilable point.
    """
    matched: list[tuple[DataPoint, DataPoint]] = []
    open_entry: DataPoint | None = None
    previous_index = -1

    for point in data_points:
        if point.index <= previous_index:
            return PairingError(
                f"data point indices must increase: {point.index} after {previous_index}",
                exit_point=point,
            )
        previous_index = point.index

        if point.action.is_entry:
            if open_entry is not None:
                logger.debug(
                    f"Discarding unmatched {open_entry.action.value} at index {open_entry.index}"
                )
            open_entry = point
            continue

        if open_entry is None:
            logger.debug(f"Discarding {point.action.value} at index {point.index}: no open entry")
            continue

        if point.action is not open_entry.action.closing_action:
            return PairingError(
                f"Unknown action combination: {point.action.value} and {open_entry.action.value}",
                enter_point=open_entry,
                exit_point=point,
            )

        matched.append((open_entry, point))
        open_entry = None

    if open_entry is not None:
        logger.debug(
            f"Discarding trailing {open_entry.action.value} at index {open_entry.index}"
        )

    return matched


def compile_pairs(
    data_points: Sequence[DataPoint],
    starting_balance: float,
) -> list[TradePair] | PairingError:
    """
    Build TradePairs with a running balance from the action stream.

    The first pair's previous_balance is ``starting_balance``; each later pair
    starts from the balance of the pair before it.

    Args:
        data_points: Action-tagged points in chronological order.
        starting_balance: Balance before the first trade.

    Returns:
        Chronologically ordered TradePairs, or a PairingError.
    """
    if len(data_points) < 2:
        return []

    matched = match_entries_and_exits(data_points)
    if isinstance(matched, PairingError):
        return matched

    trade_pairs: list[TradePair] = []
    balance = starting_balance
    for enter_point, exit_point in matched:
        try:
            pair = TradePair.new(enter_point, exit_point, balance)
        except PairingError as e:
            return e
        trade_pairs.append(pair)
        balance = pair.balance

    return trade_pairs


def flatten_pairs(trade_pairs: Sequence[TradePair]) -> list[DataPoint]:
    """Action stream that reproduces ``trade_pairs`` when paired again."""
    points: list[DataPoint] = []
    for pair in trade_pairs:
        points.append(pair.enter_point)
        points.append(pair.exit_point)
    return points
