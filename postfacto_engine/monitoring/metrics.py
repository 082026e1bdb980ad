"""Prometheus metrics for backtest runs.

Example:
    >>> from postfacto_engine.monitoring.metrics import init_metrics
    >>>
    >>> # Initialize once; run_backtest reports to the global service
    >>> metrics = init_metrics()
    >>> metrics.start_server()
    >>>
    >>> # Or pass a service explicitly
    >>> run_backtest(bars, strategy, metrics=metrics)
"""

import logging
import threading
from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Module-level singleton
_metrics: "BacktestMetricsService | None" = None


@dataclass(frozen=True)
class MetricsConfig:
    """Configuration for the metrics service.

    Attributes:
        enabled: Whether metrics collection is enabled
        port: HTTP server port for Prometheus scraping
        prefix: Metric name prefix
    """

    enabled: bool = True
    port: int = 9090
    prefix: str = "postfacto"


class BacktestMetricsService:
    """Prometheus metrics for backtest execution.

    Exposes:
    - Backtest runs by strategy and status
    - Trade pairs compiled per strategy
    - Swallowed per-bar strategy errors
    - Run duration histogram

    Each service owns a CollectorRegistry, so several services can coexist
    in one process (one per optimizer worker, for example).
    """

    def __init__(self, config: MetricsConfig | None = None) -> None:
        """Initialize metrics service.

        Args:
            config: Metrics configuration (uses defaults if not provided)
        """
        self.config = config or MetricsConfig()
        self.registry = CollectorRegistry()
        self._server_started = False
        self._lock = threading.Lock()

        self._backtests_total: Counter | None = None
        self._trades_paired: Counter | None = None
        self._strategy_errors: Counter | None = None
        self._backtest_duration: Histogram | None = None

        if self.config.enabled:
            self._initialize_metrics()

    def _initialize_metrics(self) -> None:
        """Initialize Prometheus metrics objects."""
        prefix = self.config.prefix

        self._backtests_total = Counter(
            f"{prefix}_backtests_total",
            "Total number of backtests run",
            ["strategy", "status"],
            registry=self.registry,
        )

        self._trades_paired = Counter(
            f"{prefix}_trades_paired_total",
            "Total number of completed trades compiled from action streams",
            ["strategy"],
            registry=self.registry,
        )

        self._strategy_errors = Counter(
            f"{prefix}_strategy_errors_total",
            "Per-bar strategy failures treated as no action",
            ["strategy"],
            registry=self.registry,
        )

        self._backtest_duration = Histogram(
            f"{prefix}_backtest_duration_seconds",
            "Wall-clock duration of a backtest run",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30],
            registry=self.registry,
        )

        logger.info("Prometheus backtest metrics initialized")

    def start_server(self) -> bool:
        """Start the Prometheus HTTP server for this registry.

        Returns:
            True if server started successfully, False otherwise
        """
        if not self.config.enabled:
            logger.info("Metrics disabled, server not started")
            return False

        with self._lock:
            if self._server_started:
                logger.warning("Metrics server already started")
                return True

            try:
                start_http_server(self.config.port, registry=self.registry)
                self._server_started = True
                logger.info(f"Prometheus metrics server started on port {self.config.port}")
                return True
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")
                return False

    @property
    def is_enabled(self) -> bool:
        """Check if metrics collection is enabled."""
        return self.config.enabled

    def record_backtest(self, strategy: str, status: str, duration_seconds: float) -> None:
        """Record a finished backtest.

        Args:
            strategy: Strategy name
            status: "ok" or the error kind ("input_contract", "pairing", ...)
            duration_seconds: Wall-clock run time
        """
        if not self.config.enabled or self._backtests_total is None:
            return
        self._backtests_total.labels(strategy=strategy, status=status).inc()
        if self._backtest_duration is not None:
            self._backtest_duration.observe(duration_seconds)

    def record_trades_paired(self, strategy: str, count: int) -> None:
        if not self.config.enabled or self._trades_paired is None or count <= 0:
            return
        self._trades_paired.labels(strategy=strategy).inc(count)

    def record_strategy_error(self, strategy: str) -> None:
        if not self.config.enabled or self._strategy_errors is None:
            return
        self._strategy_errors.labels(strategy=strategy).inc()


def init_metrics(config: MetricsConfig | None = None) -> BacktestMetricsService:
    """Initialize the global metrics service.

    Args:
        config: Metrics configuration

    Returns:
        Initialized BacktestMetricsService
    """
    global _metrics
    _metrics = BacktestMetricsService(config)
    return _metrics


def get_metrics() -> BacktestMetricsService | None:
    """Get the global metrics service instance.

    Returns:
        BacktestMetricsService if initialized, None otherwise
    """
    return _metrics


def reset_metrics() -> None:
    """Drop the global metrics service."""
    global _metrics
    _metrics = None
