"""Shared fixtures for the server test package."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from smarthub.core.pool import Pool
from smarthub.rpc import (
    HealthHandler,
    SmartFeatureHandler,
    SmartFeatureMapper,
    SmartModelHandler,
    SmartModelMapper,
)
from smarthub.server import Server, ServerConfig
from smarthub.services import SmartFeatureService, SmartModelService
from smarthub.validation import Validator


@pytest.fixture
def server_config() -> ServerConfig:
    """Server config with a short deadline and no startup migrations."""
    return ServerConfig(
        interval=60.0,
        host="127.0.0.1",
        port=50999,
        request_timeout=0.2,
        apply_migrations=False,
    )


@pytest.fixture
def model_service() -> AsyncMock:
    return AsyncMock(spec=SmartModelService)


@pytest.fixture
def feature_service() -> AsyncMock:
    return AsyncMock(spec=SmartFeatureService)


@pytest.fixture
def server(
    mock_pool: Pool,
    server_config: ServerConfig,
    model_service: AsyncMock,
    feature_service: AsyncMock,
) -> Server:
    """Server whose handlers sit on mocked services."""
    validator = Validator()
    return Server(
        mock_pool,
        server_config,
        model_handler=SmartModelHandler(model_service, SmartModelMapper(), validator),
        feature_handler=SmartFeatureHandler(feature_service, SmartFeatureMapper(), validator),
        health_handler=HealthHandler(mock_pool, server_config.service_name),
    )


@pytest.fixture
def test_client(server: Server) -> TestClient:
    """FastAPI TestClient from the server."""
    return TestClient(server._build_app())
