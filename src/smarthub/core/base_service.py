"""
Abstract base class for long-running SmartHub services.

``BaseService[ConfigT]`` owns the process-level lifecycle shared by every
long-running component: a graceful shutdown flag, an interval loop
([run_forever()][smarthub.core.base_service.BaseService.run_forever]) with
a consecutive failure limit, and Prometheus bookkeeping for every cycle.

The RPC server is the concrete service: it serves requests on a
background task and uses the cycle to publish request statistics and to
detect a crashed HTTP server.

See Also:
    [Server][smarthub.server.service.Server]: The RPC server built on
        this class.
    [BaseServiceConfig][smarthub.core.base_service.BaseServiceConfig]: Base
        configuration model for all services.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar, cast

from pydantic import BaseModel, Field

from .logger import Logger
from .metrics import (
    CYCLE_DURATION_SECONDS,
    SERVICE_COUNTER,
    SERVICE_GAUGE,
    SERVICE_INFO,
    MetricsConfig,
)


if TYPE_CHECKING:
    from types import TracebackType

    from .pool import Pool


# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class BaseServiceConfig(BaseModel):
    """Base configuration shared by all services that run in a loop.

    Attributes:
        interval: Seconds between ``run()`` cycles.
        max_consecutive_failures: Stop after this many failed cycles in a
            row (``0`` = never stop).
        metrics: Prometheus endpoint settings.
    """

    interval: float = Field(
        default=60.0,
        ge=1.0,
        description="Seconds between run cycles",
    )
    max_consecutive_failures: int = Field(
        default=5,
        ge=0,
        description="Stop after this many consecutive errors (0 = unlimited)",
    )
    metrics: MetricsConfig = Field(
        default_factory=MetricsConfig,
        description="Prometheus metrics configuration",
    )


ConfigT = TypeVar("ConfigT", bound=BaseServiceConfig)


class BaseService(ABC, Generic[ConfigT]):
    """Abstract base class for all SmartHub services.

    Subclasses set ``SERVICE_NAME`` and ``CONFIG_CLASS`` and implement
    [run()][smarthub.core.base_service.BaseService.run].

    Attributes:
        SERVICE_NAME: Identifier used in logging and metric labels.
        CONFIG_CLASS: Pydantic model used by the factory methods.

    Note:
        The lifecycle is ``async with pool:`` then ``async with service:``
        then [run_forever()][smarthub.core.base_service.BaseService.run_forever]
        (or a single ``run()`` with ``--once``).
    """

    SERVICE_NAME: ClassVar[str]
    CONFIG_CLASS: ClassVar[type[BaseModel]]

    def __init__(
        self,
        pool: Pool,
        config: ConfigT | None = None,
        *,
        logger: Logger | None = None,
    ) -> None:
        self._pool = pool
        self._config: ConfigT = (
            config if config is not None else cast("ConfigT", self.CONFIG_CLASS())
        )
        self._logger = logger or Logger(self.SERVICE_NAME)
        self._shutdown_event = asyncio.Event()

    @property
    def config(self) -> ConfigT:
        """The typed service configuration (read-only)."""
        return self._config

    @abstractmethod
    async def run(self) -> None:
        """Execute one bounded cycle of the service's work."""
        ...

    def request_shutdown(self) -> None:
        """Ask the loop to stop; safe to call from a signal handler."""
        self._shutdown_event.set()

    @property
    def is_running(self) -> bool:
        """Whether the service is still active (shutdown not yet requested)."""
        return not self._shutdown_event.is_set()

    async def wait(self, timeout: float) -> bool:  # noqa: ASYNC109
        """Sleep up to ``timeout`` seconds; return True if shutdown was requested."""
        try:
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=timeout)
            return True
        except TimeoutError:
            return False

    async def run_forever(self) -> None:
        """Call ``run()`` every ``config.interval`` seconds until shutdown.

        Exits on [request_shutdown()][smarthub.core.base_service.BaseService.request_shutdown]
        or after ``config.max_consecutive_failures`` failed cycles in a row.
        Each cycle updates ``cycles_success`` / ``cycles_failed`` /
        ``errors_{ExceptionType}`` counters, the ``consecutive_failures``
        and ``last_cycle_timestamp`` gauges, and the cycle duration
        histogram. ``CancelledError``, ``KeyboardInterrupt`` and
        ``SystemExit`` always propagate.
        """
        interval = self._config.interval
        max_consecutive_failures = self._config.max_consecutive_failures
        metrics_enabled = self._config.metrics.enabled

        if metrics_enabled:
            SERVICE_INFO.info({"service": self.SERVICE_NAME})

        self._logger.info(
            "run_forever_started",
            interval=interval,
            max_consecutive_failures=max_consecutive_failures,
        )

        consecutive_failures = 0

        while self.is_running:
            cycle_start = time.monotonic()

            try:
                await self.run()

                if metrics_enabled:
                    CYCLE_DURATION_SECONDS.labels(service=self.SERVICE_NAME).observe(
                        time.monotonic() - cycle_start
                    )
                self.inc_counter("cycles_success")
                self.set_gauge("last_cycle_timestamp", time.time())
                self.set_gauge("consecutive_failures", 0)
                consecutive_failures = 0

            except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
                raise

            except Exception as e:  # Intentionally broad: top-level error boundary for run_forever
                consecutive_failures += 1

                self.inc_counter("cycles_failed")
                self.set_gauge("consecutive_failures", consecutive_failures)
                self.inc_counter(f"errors_{type(e).__name__}")

                self._logger.error(
                    "run_cycle_error",
                    error=str(e),
                    consecutive_failures=consecutive_failures,
                )

                if 0 < max_consecutive_failures <= consecutive_failures:
                    self._logger.critical(
                        "max_consecutive_failures_reached",
                        failures=consecutive_failures,
                        limit=max_consecutive_failures,
                    )
                    break

            if await self.wait(interval):
                break

        self._logger.info("run_forever_stopped")

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], pool: Pool, **kwargs: Any) -> Self:
        """Create a service, parsing ``data`` into ``CONFIG_CLASS``."""
        config = cast("ConfigT", cls.CONFIG_CLASS.model_validate(data))
        return cls(pool, config, **kwargs)

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> Self:
        self._shutdown_event.clear()
        self._logger.info("service_started")
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        self._shutdown_event.set()
        self._logger.info("service_stopped")

    # -------------------------------------------------------------------------
    # Custom Metrics
    # -------------------------------------------------------------------------

    def set_gauge(self, name: str, value: float) -> None:
        """Set a named gauge for this service (no-op with metrics disabled)."""
        if not self._config.metrics.enabled:
            return
        SERVICE_GAUGE.labels(service=self.SERVICE_NAME, name=name).set(value)

    def inc_counter(self, name: str, value: float = 1) -> None:
        """Increment a named counter for this service (no-op with metrics disabled)."""
        if not self._config.metrics.enabled:
            return
        SERVICE_COUNTER.labels(service=self.SERVICE_NAME, name=name).inc(value)
