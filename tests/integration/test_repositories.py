"""Integration tests for the PostgreSQL repositories."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import asyncpg
import pytest

from smarthub.core.exceptions import NotFoundError
from smarthub.models import (
    ModelCategory,
    ModelType,
    ProtocolType,
    SmartFeature,
    SmartModel,
)
from smarthub.repositories import PgSmartFeatureRepository, PgSmartModelRepository


pytestmark = pytest.mark.integration


def _model(model_type: ModelType = ModelType.DEVICE, **overrides) -> SmartModel:
    now = datetime.now(UTC)
    fields = {
        "id": uuid4(),
        "name": "Thermostat",
        "description": "Smart thermostat",
        "type": model_type,
        "category": ModelCategory.WEATHER,
        "manufacturer": "Acme",
        "model_number": "T1000",
        "metadata": {"zones": 2, "tags": ["indoor"], "eco": True, "ratio": 0.5},
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return SmartModel(**fields)


def _feature(model_id, **overrides) -> SmartFeature:
    now = datetime.now(UTC)
    fields = {
        "id": uuid4(),
        "model_id": model_id,
        "name": "SetTemp",
        "description": "Set target temperature",
        "protocol": ProtocolType.REST,
        "interface_path": "/temp",
        "parameters": {"unit": "celsius", "max": 30.5},
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return SmartFeature(**fields)


@pytest.fixture
def models(pool) -> PgSmartModelRepository:
    return PgSmartModelRepository(pool)


@pytest.fixture
def features(pool) -> PgSmartFeatureRepository:
    return PgSmartFeatureRepository(pool)


class TestSmartModelRepository:
    """PgSmartModelRepository against PostgreSQL."""

    async def test_create_and_get(self, models) -> None:
        model = _model()
        created = await models.create(model)
        assert created == model
        assert await models.get_by_id(model.id) == model

    async def test_get_missing(self, models) -> None:
        with pytest.raises(NotFoundError):
            await models.get_by_id(uuid4())

    async def test_duplicate_id(self, models) -> None:
        model = _model()
        await models.create(model)
        with pytest.raises(asyncpg.UniqueViolationError):
            await models.create(model)

    async def test_get_by_type_and_all(self, models) -> None:
        device = await models.create(_model(ModelType.DEVICE))
        service = await models.create(_model(ModelType.SERVICE, name="Forecast"))

        assert [m.id for m in await models.get_by_type(ModelType.SERVICE)] == [service.id]
        assert [m.id for m in await models.get_by_type(ModelType.DEVICE)] == [device.id]
        assert {m.id for m in await models.get_all()} == {device.id, service.id}

    async def test_empty_table(self, models) -> None:
        assert await models.get_all() == []

    async def test_update_keeps_created_at(self, models) -> None:
        model = await models.create(_model())
        later = model.updated_at + timedelta(minutes=5)
        change = replace(
            model, name="Thermostat Pro", metadata={}, created_at=later, updated_at=later
        )

        updated = await models.update(change)

        assert updated.name == "Thermostat Pro"
        assert updated.metadata == {}
        assert updated.created_at == model.created_at
        assert updated.updated_at == later
        assert await models.get_by_id(model.id) == updated

    async def test_update_missing(self, models) -> None:
        with pytest.raises(NotFoundError):
            await models.update(_model())

    async def test_delete_is_idempotent(self, models) -> None:
        model = await models.create(_model())
        await models.delete(model.id)
        await models.delete(model.id)
        with pytest.raises(NotFoundError):
            await models.get_by_id(model.id)


class TestSmartFeatureRepository:
    """PgSmartFeatureRepository against PostgreSQL."""

    async def test_create_requires_existing_model(self, features) -> None:
        with pytest.raises(asyncpg.ForeignKeyViolationError):
            await features.create(_feature(uuid4()))

    async def test_create_and_query(self, models, features) -> None:
        owner = await models.create(_model())
        other = await models.create(_model(name="Camera"))
        first = await features.create(_feature(owner.id))
        second = await features.create(_feature(owner.id, name="GetTemp"))
        await features.create(_feature(other.id))

        assert await features.get_by_id(first.id) == first
        owned = await features.get_by_model_id(owner.id)
        assert {f.id for f in owned} == {first.id, second.id}
        assert len(await features.get_all()) == 3
        assert await features.get_by_model_id(uuid4()) == []

    async def test_update_keeps_owner(self, models, features) -> None:
        owner = await models.create(_model())
        feature = await features.create(_feature(owner.id))
        later = feature.updated_at + timedelta(seconds=1)

        updated = await features.update(
            replace(
                feature,
                model_id=None,
                protocol=ProtocolType.MQTT,
                created_at=later,
                updated_at=later,
            )
        )

        assert updated.model_id == owner.id
        assert updated.protocol is ProtocolType.MQTT
        assert updated.created_at == feature.created_at

    async def test_update_missing(self, features) -> None:
        with pytest.raises(NotFoundError):
            await features.update(_feature(uuid4()))

    async def test_cascade_on_model_delete(self, models, features) -> None:
        owner = await models.create(_model())
        feature = await features.create(_feature(owner.id))

        await models.delete(owner.id)

        with pytest.raises(NotFoundError):
            await features.get_by_id(feature.id)
        assert await features.get_by_model_id(owner.id) == []
