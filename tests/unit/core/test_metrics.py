"""
Unit tests for core.metrics module.

Tests:
- MetricsConfig initialization and validation
- MetricsServer start/stop lifecycle
- Metrics endpoint response format
- RPC metric families and their labels
"""

import pytest
from aiohttp import ClientSession, web
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY
from pydantic import ValidationError

from smarthub.core.metrics import (
    RPC_DURATION_SECONDS,
    RPC_REQUESTS_TOTAL,
    MetricsConfig,
    MetricsServer,
    start_metrics_server,
)


# ============================================================================
# MetricsConfig Tests
# ============================================================================


class TestMetricsConfig:
    """MetricsConfig Pydantic model."""

    def test_defaults(self) -> None:
        config = MetricsConfig()
        assert config.enabled is False
        assert config.port == 8000
        assert config.host == "127.0.0.1"
        assert config.path == "/metrics"

    @pytest.mark.parametrize("port", [80, 1023, 65536])
    def test_port_out_of_range(self, port: int) -> None:
        with pytest.raises(ValidationError):
            MetricsConfig(port=port)


# ============================================================================
# MetricsServer Tests
# ============================================================================


class TestMetricsServerLifecycle:
    """MetricsServer start/stop."""

    async def test_start_disabled_is_noop(self) -> None:
        server = MetricsServer(MetricsConfig(enabled=False))
        await server.start()
        assert server._runner is None

    async def test_stop_without_start_is_safe(self) -> None:
        await MetricsServer(MetricsConfig()).stop()

    async def test_start_metrics_server_disabled(self) -> None:
        server = await start_metrics_server(MetricsConfig(enabled=False))
        assert isinstance(server, MetricsServer)
        await server.stop()


class TestMetricsServerEndpoint:
    """MetricsServer HTTP endpoint."""

    async def test_handle_metrics_returns_exposition(self) -> None:
        response = await MetricsServer._handle_metrics(None)  # type: ignore[arg-type]
        assert isinstance(response, web.Response)
        assert response.headers["Content-Type"] == CONTENT_TYPE_LATEST

    async def test_endpoint_serves_rpc_metrics(self) -> None:
        RPC_REQUESTS_TOTAL.labels(method="GetSmartModel", code="OK").inc()
        config = MetricsConfig(enabled=True, port=19881, host="127.0.0.1")
        server = MetricsServer(config)

        try:
            await server.start()
            async with (
                ClientSession() as session,
                session.get(f"http://127.0.0.1:{config.port}/metrics") as resp,
            ):
                assert resp.status == 200
                body = await resp.text()
                assert "rpc_requests_total" in body
        finally:
            await server.stop()


# ============================================================================
# RPC Metric Families
# ============================================================================


class TestRpcMetrics:
    """Module-level RPC metric objects."""

    def test_requests_counter_labels(self) -> None:
        before = (
            REGISTRY.get_sample_value(
                "rpc_requests_total", {"method": "DeleteSmartModel", "code": "NOT_FOUND"}
            )
            or 0.0
        )
        RPC_REQUESTS_TOTAL.labels(method="DeleteSmartModel", code="NOT_FOUND").inc()
        after = REGISTRY.get_sample_value(
            "rpc_requests_total", {"method": "DeleteSmartModel", "code": "NOT_FOUND"}
        )
        assert after == before + 1

    def test_duration_histogram_observes(self) -> None:
        RPC_DURATION_SECONDS.labels(method="ListSmartModels").observe(0.02)
        count = REGISTRY.get_sample_value(
            "rpc_duration_seconds_count", {"method": "ListSmartModels"}
        )
        assert count is not None
        assert count >= 1
