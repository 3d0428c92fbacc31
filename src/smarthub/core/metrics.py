"""
Prometheus metrics collection and HTTP exposition.

Module-level metric objects are process-wide singletons:

- ``SERVICE_INFO``: static metadata set once at startup.
- ``SERVICE_GAUGE`` / ``SERVICE_COUNTER``: generic labelled values used by
  [BaseService][smarthub.core.base_service.BaseService] through
  ``set_gauge()`` and ``inc_counter()``.
- ``CYCLE_DURATION_SECONDS``: duration of each ``run()`` cycle.
- ``RPC_REQUESTS_TOTAL``: RPC calls by method and resulting status code.
- ``RPC_DURATION_SECONDS``: RPC latency by method.

[MetricsServer][smarthub.core.metrics.MetricsServer] exposes them over an
aiohttp endpoint for scraping, configured through
[MetricsConfig][smarthub.core.metrics.MetricsConfig].
"""

from __future__ import annotations

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class MetricsConfig(BaseModel):
    """Configuration for the Prometheus metrics endpoint.

    The endpoint is only started when ``enabled`` is True. Bind ``host``
    to ``"0.0.0.0"`` in containers so the scraper can reach it.
    """

    enabled: bool = Field(default=False, description="Enable metrics collection")
    port: int = Field(default=8000, ge=1024, le=65535, description="Metrics HTTP port")
    host: str = Field(default="127.0.0.1", description="Metrics HTTP bind address")
    path: str = Field(default="/metrics", description="Metrics endpoint path")


# ---------------------------------------------------------------------------
# Service lifecycle metrics
# ---------------------------------------------------------------------------

SERVICE_INFO = Info(
    "service",
    "Service information and metadata",
)

CYCLE_DURATION_SECONDS = Histogram(
    "cycle_duration_seconds",
    "Duration of service cycle in seconds",
    ["service"],
    buckets=(0.01, 0.1, 1, 5, 10, 30, 60, 300),
)

SERVICE_GAUGE = Gauge(
    "service_gauge",
    "Service gauge values (point-in-time state)",
    ["service", "name"],
)

SERVICE_COUNTER = Counter(
    "service_counter",
    "Service counter values (cumulative totals)",
    ["service", "name"],
)


# ---------------------------------------------------------------------------
# RPC metrics
# ---------------------------------------------------------------------------

RPC_REQUESTS_TOTAL = Counter(
    "rpc_requests_total",
    "RPC calls handled, by method and status code",
    ["method", "code"],
)

RPC_DURATION_SECONDS = Histogram(
    "rpc_duration_seconds",
    "RPC handling latency in seconds",
    ["method"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30),
)


# ---------------------------------------------------------------------------
# HTTP Server
# ---------------------------------------------------------------------------


class MetricsServer:
    """Async HTTP server exposing the Prometheus exposition endpoint.

    Example:
        server = MetricsServer(MetricsConfig(enabled=True, port=8001))
        await server.start()
        # ... service runs ...
        await server.stop()
    """

    def __init__(self, config: MetricsConfig) -> None:
        self._config = config
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Bind the endpoint. No-op when metrics are disabled.

        Raises:
            OSError: If the port is already in use or binding fails.
        """
        if not self._config.enabled:
            return

        app = web.Application()
        app.router.add_get(self._config.path, self._handle_metrics)

        self._runner = web.AppRunner(app, access_log=None)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()

    async def stop(self) -> None:
        """Release the bound port. Safe to call when never started."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    @staticmethod
    async def _handle_metrics(_request: web.Request) -> web.Response:
        return web.Response(
            body=generate_latest(),
            headers={"Content-Type": CONTENT_TYPE_LATEST},
        )


async def start_metrics_server(config: MetricsConfig | None = None) -> MetricsServer:
    """Create and start a metrics server; the caller must ``stop()`` it."""
    server = MetricsServer(config or MetricsConfig())
    await server.start()
    return server
