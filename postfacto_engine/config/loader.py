"""Configuration loader with JSON file and environment variable support."""

import json
import os
from pathlib import Path
from typing import Any

from .models import BacktestConfig

# env var -> config field
_ENV_OVERRIDES: dict[str, str] = {
    "POSTFACTO_STARTING_BALANCE": "starting_balance",
    "POSTFACTO_RISK_FREE_RATE": "risk_free_rate",
    "POSTFACTO_BENCHMARK_RETURN_PCT": "benchmark_return_pct",
    "POSTFACTO_KELLY_FRACTION": "kelly_fraction",
}


def load_config(config_path: str | Path | None = None) -> BacktestConfig:
    """
    Load configuration from JSON file with environment variable overrides.

    Priority: env vars > config file > defaults

    Args:
        config_path: Path to JSON config file. If None, uses POSTFACTO_CONFIG_PATH.
                     With neither set, only defaults and env vars apply.

    Returns:
        Validated BacktestConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        json.JSONDecodeError: If config file has invalid JSON
        pydantic.ValidationError: If config values are invalid
    """
    if config_path is None:
        config_path = os.environ.get("POSTFACTO_CONFIG_PATH")

    config_data: dict[str, Any] = {}
    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        with open(config_file) as f:
            config_data = json.load(f)

    for env_name, field_name in _ENV_OVERRIDES.items():
        if (value := os.environ.get(env_name)) is not None:
            config_data[field_name] = float(value)

    return BacktestConfig(**config_data)


def coerce_config(config: BacktestConfig | dict[str, Any] | None) -> BacktestConfig:
    """Accept a BacktestConfig, a plain mapping of fields, or None for defaults."""
    if config is None:
        return BacktestConfig()
    if isinstance(config, BacktestConfig):
        return config
    return BacktestConfig(**config)
