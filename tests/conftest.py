"""
Pytest configuration and shared fixtures for SmartHub tests.

Provides:
- Mock fixtures for Pool and asyncpg
- Sample configuration dictionaries
- Sample smart model / smart feature entities and database rows
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from smarthub.core.pool import DatabaseConfig, Pool, PoolConfig
from smarthub.models import (
    ModelCategory,
    ModelType,
    ProtocolType,
    SmartFeature,
    SmartModel,
)


MODEL_ID = UUID("6f1c2a5e-8d3b-4c1e-9a7f-2b4d6e8f0a1c")
FEATURE_ID = UUID("0b9e7d5c-3a1f-4e2d-8c6b-4a2f0e9d7c5b")
FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_connection() -> MagicMock:
    """Create a mock asyncpg connection."""
    conn = MagicMock()
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetchval = AsyncMock(return_value=1)
    conn.execute = AsyncMock(return_value="OK")

    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=conn)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    conn.transaction = MagicMock(return_value=mock_transaction)

    return conn


@pytest.fixture
def mock_asyncpg_pool(mock_connection: MagicMock) -> MagicMock:
    """Create a mock asyncpg pool."""
    pool = MagicMock()
    pool.close = AsyncMock()

    mock_acquire = MagicMock()
    mock_acquire.__aenter__ = AsyncMock(return_value=mock_connection)
    mock_acquire.__aexit__ = AsyncMock(return_value=None)
    pool.acquire = MagicMock(return_value=mock_acquire)

    return pool


@pytest.fixture
def mock_pool(
    mock_asyncpg_pool: MagicMock, mock_connection: MagicMock, monkeypatch: pytest.MonkeyPatch
) -> Pool:
    """Create a Pool with mocked internals."""
    monkeypatch.setenv("DB_PASSWORD", "test_password")

    config = PoolConfig(
        database=DatabaseConfig(
            host="localhost",
            port=5432,
            database="test_db",
            user="test_user",
        )
    )
    pool = Pool(config=config)
    pool._pool = mock_asyncpg_pool
    pool._is_connected = True

    pool._mock_connection = mock_connection  # type: ignore[attr-defined]

    return pool


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def pool_config_dict() -> dict[str, Any]:
    """Sample pool configuration dictionary."""
    return {
        "database": {
            "host": "localhost",
            "port": 5432,
            "database": "test_db",
            "user": "test_user",
        },
        "limits": {
            "min_size": 2,
            "max_size": 10,
            "max_queries": 1000,
            "max_inactive_connection_lifetime": 60.0,
        },
        "timeouts": {
            "acquisition": 5.0,
            "query": 15.0,
        },
        "retry": {
            "max_attempts": 2,
            "initial_delay": 0.5,
            "max_delay": 2.0,
            "exponential_backoff": True,
        },
        "server_settings": {
            "application_name": "test_app",
            "timezone": "UTC",
        },
    }


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_model() -> SmartModel:
    """A valid smart model with every optional field populated."""
    return SmartModel(
        id=MODEL_ID,
        name="Thermostat",
        description="Smart thermostat",
        type=ModelType.DEVICE,
        category=ModelCategory.WEATHER,
        manufacturer="Acme",
        model_number="T1000",
        metadata={"zones": 2, "tags": ["indoor", "hvac"], "eco": True},
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


@pytest.fixture
def sample_feature() -> SmartFeature:
    """A valid smart feature owned by ``sample_model``."""
    return SmartFeature(
        id=FEATURE_ID,
        model_id=MODEL_ID,
        name="SetTemp",
        description="Set target temperature",
        protocol=ProtocolType.REST,
        interface_path="/temp",
        parameters={"unit": "celsius", "min": 5, "max": 30.5},
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


@pytest.fixture
def model_row(sample_model: SmartModel) -> dict[str, Any]:
    """Database row equivalent of ``sample_model``."""
    return sample_model.to_db_params()._asdict()


@pytest.fixture
def feature_row(sample_feature: SmartFeature) -> dict[str, Any]:
    """Database row equivalent of ``sample_feature``."""
    return sample_feature.to_db_params()._asdict()
