"""Core layer providing the infrastructure shared by every SmartHub component.

Depends only on ``smarthub.models``; repositories, services, the RPC
layer, and the server depend on it.

Attributes:
    Pool: Async PostgreSQL connection pool with retry/backoff and a
        reachability probe. See [Pool][smarthub.core.pool.Pool].
    BaseService: Abstract generic base class with lifecycle management
        and Prometheus metrics integration.
    Logger: Structured logger supporting key=value and JSON output modes.
        See [Logger][smarthub.core.logger.Logger].
    MetricsServer: Prometheus ``/metrics`` HTTP endpoint.
    apply_migrations: Versioned schema migration runner.
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
"""

from .base_service import (
    BaseService,
    BaseServiceConfig,
    ConfigT,
)
from .logger import Logger, StructuredFormatter, format_kv_pairs, setup_logging
from .metrics import (
    CYCLE_DURATION_SECONDS,
    RPC_DURATION_SECONDS,
    RPC_REQUESTS_TOTAL,
    SERVICE_COUNTER,
    SERVICE_GAUGE,
    SERVICE_INFO,
    MetricsConfig,
    MetricsServer,
    start_metrics_server,
)
from .migrations import Migration, apply_migrations, load_migrations
from .pool import (
    DatabaseConfig,
    Pool,
    PoolConfig,
    PoolLimitsConfig,
    PoolRetryConfig,
    PoolTimeoutsConfig,
    ServerSettingsConfig,
)
from .yaml import load_yaml


__all__ = [
    "CYCLE_DURATION_SECONDS",
    "RPC_DURATION_SECONDS",
    "RPC_REQUESTS_TOTAL",
    "SERVICE_COUNTER",
    "SERVICE_GAUGE",
    "SERVICE_INFO",
    "BaseService",
    "BaseServiceConfig",
    "ConfigT",
    "DatabaseConfig",
    "Logger",
    "MetricsConfig",
    "MetricsServer",
    "Migration",
    "Pool",
    "PoolConfig",
    "PoolLimitsConfig",
    "PoolRetryConfig",
    "PoolTimeoutsConfig",
    "ServerSettingsConfig",
    "StructuredFormatter",
    "apply_migrations",
    "format_kv_pairs",
    "load_migrations",
    "load_yaml",
    "setup_logging",
    "start_metrics_server",
]
