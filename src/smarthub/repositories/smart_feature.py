"""Smart feature repository contract and its PostgreSQL implementation.

Same execution rules as the model repository: one statement per call,
errors propagate unchanged, zero-row keyed reads and updates raise
[NotFoundError][smarthub.core.exceptions.NotFoundError]. Creating a
feature whose ``model_id`` references no model fails with the driver's
``ForeignKeyViolationError``; the repository does not pre-check it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from smarthub.core.exceptions import NotFoundError
from smarthub.core.logger import Logger
from smarthub.models import SmartFeature


if TYPE_CHECKING:
    from uuid import UUID

    from smarthub.core.pool import Pool


_ENTITY = "smart feature"

_COLUMNS = (
    "id, model_id, name, description, protocol, interface_path, "
    "parameters, created_at, updated_at"
)

_INSERT = f"""
INSERT INTO smart_features ({_COLUMNS})
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
RETURNING {_COLUMNS}
"""

_SELECT_BY_ID = f"SELECT {_COLUMNS} FROM smart_features WHERE id = $1"

_SELECT_BY_MODEL_ID = f"SELECT {_COLUMNS} FROM smart_features WHERE model_id = $1"

_SELECT_ALL = f"SELECT {_COLUMNS} FROM smart_features"

# model_id is not updatable.
_UPDATE = f"""
UPDATE smart_features
SET name = $2, description = $3, protocol = $4, interface_path = $5,
    parameters = $6, updated_at = $7
WHERE id = $1
RETURNING {_COLUMNS}
"""

_DELETE = "DELETE FROM smart_features WHERE id = $1"


class SmartFeatureRepository(ABC):
    """Storage contract for [SmartFeature][smarthub.models.smart_feature.SmartFeature]."""

    @abstractmethod
    async def create(self, feature: SmartFeature) -> SmartFeature:
        """Insert a fully populated feature and return the row as persisted."""

    @abstractmethod
    async def get_by_id(self, feature_id: UUID) -> SmartFeature:
        """Return the feature with ``feature_id``; raise ``NotFoundError`` if absent."""

    @abstractmethod
    async def get_by_model_id(self, model_id: UUID) -> list[SmartFeature]:
        """Return every feature owned by ``model_id`` in storage order."""

    @abstractmethod
    async def get_all(self) -> list[SmartFeature]:
        """Return every feature in storage order."""

    @abstractmethod
    async def update(self, feature: SmartFeature) -> SmartFeature:
        """Replace the mutable fields of ``feature.id``; raise ``NotFoundError`` if absent."""

    @abstractmethod
    async def delete(self, feature_id: UUID) -> None:
        """Remove the feature. Succeeds whether or not the row existed."""


class PgSmartFeatureRepository(SmartFeatureRepository):
    """``smart_features`` table access through an asyncpg [Pool][smarthub.core.pool.Pool]."""

    def __init__(self, pool: Pool, *, logger: Logger | None = None) -> None:
        self._pool = pool
        self._logger = logger or Logger("smart_feature_repository")

    async def create(self, feature: SmartFeature) -> SmartFeature:
        row = await self._pool.fetchrow(_INSERT, *feature.to_db_params())
        if row is None:
            raise RuntimeError("INSERT ... RETURNING produced no row")
        return SmartFeature.from_db_row(row)

    async def get_by_id(self, feature_id: UUID) -> SmartFeature:
        row = await self._pool.fetchrow(_SELECT_BY_ID, feature_id)
        if row is None:
            raise NotFoundError(_ENTITY, feature_id)
        return SmartFeature.from_db_row(row)

    async def get_by_model_id(self, model_id: UUID) -> list[SmartFeature]:
        rows = await self._pool.fetch(_SELECT_BY_MODEL_ID, model_id)
        return [SmartFeature.from_db_row(row) for row in rows]

    async def get_all(self) -> list[SmartFeature]:
        rows = await self._pool.fetch(_SELECT_ALL)
        return [SmartFeature.from_db_row(row) for row in rows]

    async def update(self, feature: SmartFeature) -> SmartFeature:
        params = feature.to_db_params()
        row = await self._pool.fetchrow(
            _UPDATE,
            params.id,
            params.name,
            params.description,
            params.protocol,
            params.interface_path,
            params.parameters,
            params.updated_at,
        )
        if row is None:
            raise NotFoundError(_ENTITY, feature.id)
        return SmartFeature.from_db_row(row)

    async def delete(self, feature_id: UUID) -> None:
        status = await self._pool.execute(_DELETE, feature_id)
        self._logger.debug("feature_delete_executed", id=feature_id, status=status)
