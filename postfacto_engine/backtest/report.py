"""Backtest result serialization and persistence."""

import json
from dataclasses import asdict, fields
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from postfacto_engine.backtest.engine import BacktestOutput
from postfacto_engine.backtest.result import Result
from postfacto_engine.models import DataPoint
from postfacto_engine.trade_stats import TradePair

# Excluded from the summary: raw series and replay-only state
_SUMMARY_EXCLUDED = {"data_points", "trade_pairs", "is_position_open", "compiled"}


def _serialize(obj: Any) -> Any:
    """JSON serializer for objects not serializable by default."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Path):
        return str(obj)
    return str(obj)


def _data_point_to_dict(point: DataPoint) -> dict[str, Any]:
    return {
        "index": point.index,
        "action": point.action.value,
        "datum": asdict(point.datum),
    }


def _trade_pair_to_dict(pair: TradePair) -> dict[str, Any]:
    return {
        "enter_point": _data_point_to_dict(pair.enter_point),
        "exit_point": _data_point_to_dict(pair.exit_point),
        "previous_balance": round(pair.previous_balance, 2),
        "balance": round(pair.balance, 2),
        "result_value": round(pair.result_value, 4),
        "result_percentage": round(pair.result_percentage, 4),
        "outcome": pair.outcome.value,
        "duration": pair.duration,
    }


def _round(value: Any) -> Any:
    if isinstance(value, float):
        return round(value, 4)
    return value


def to_dict(result: Result) -> dict[str, Any]:
    """Every public Result field, with data points and trade pairs expanded."""
    data: dict[str, Any] = {}
    for result_field in fields(result):
        name = result_field.name
        if name.startswith("_"):
            continue
        value = getattr(result, name)
        if name == "data_points":
            value = [_data_point_to_dict(point) for point in value]
        elif name == "trade_pairs":
            value = [_trade_pair_to_dict(pair) for pair in value]
        data[name] = _round(value)
    return data


def comprehensive_summary(result: Result) -> dict[str, Any]:
    """All metrics of a compiled result, without the raw series.

    Raises:
        ValueError: If the result has not been compiled.
    """
    if not result.compiled:
        raise ValueError("result must be compiled before summarizing")
    return {
        name: value
        for name, value in to_dict(result).items()
        if name not in _SUMMARY_EXCLUDED
    }


def to_json(result: Result, indent: int = 2) -> str:
    """Convert the full result to a JSON string."""
    return json.dumps(to_dict(result), indent=indent, default=_serialize)


def save_report(output: BacktestOutput, output_dir: str | Path) -> Path:
    """Save a backtest summary and its trades to JSON.

    Args:
        output: Completed backtest.
        output_dir: Directory to save the report in; created if missing.

    Returns:
        Path to the saved JSON file.
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    run_id = f"backtest_{output.strategy}_{ts}"

    report: dict[str, Any] = {
        "run_id": run_id,
        "strategy": output.strategy,
        "bars": len(output.data),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "summary": comprehensive_summary(output.result),
        "trades": [_trade_pair_to_dict(pair) for pair in output.result.trade_pairs],
    }

    filepath = out / f"{run_id}.json"
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, default=_serialize)

    return filepath
