"""Pydantic configuration models with type safety and validation."""

from pydantic import BaseModel, Field


class BacktestConfig(BaseModel):
    """Backtest run configuration."""

    starting_balance: float = Field(
        default=10000.0,
        ge=0.0,
        description="Account balance before the first trade",
    )
    risk_free_rate: float = Field(
        default=0.02,
        ge=0.0,
        le=1.0,
        description="Annual risk-free rate as a decimal (0.02 = 2%) for Sharpe/Sortino",
    )
    benchmark_return_pct: float = Field(
        default=0.0,
        description="Annual benchmark return in percent, used by alpha and tracking error",
    )
    kelly_fraction: float = Field(
        default=0.25,
        gt=0.0,
        le=1.0,
        description="Fraction of full Kelly used for fractional Kelly (0.25 = quarter-Kelly)",
    )
    drawdown_limit: float = Field(
        default=0.20,
        ge=0.0,
        lt=1.0,
        description="Tolerated drawdown as a decimal, used by the risk of ruin estimate",
    )
    validate_data: bool = Field(
        default=True,
        description="Validate OHLC values and relationships while normalizing bars",
    )
