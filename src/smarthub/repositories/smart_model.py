"""Smart model repository contract and its PostgreSQL implementation.

Every method is one parameterized statement executed through
[Pool][smarthub.core.pool.Pool]; nothing spans more than one round trip
and no transaction is opened. Driver and pool errors propagate unchanged.
A keyed lookup or update that matches no row raises
[NotFoundError][smarthub.core.exceptions.NotFoundError].
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from smarthub.core.exceptions import NotFoundError
from smarthub.core.logger import Logger
from smarthub.models import ModelType, SmartModel


if TYPE_CHECKING:
    from uuid import UUID

    from smarthub.core.pool import Pool


_ENTITY = "smart model"

_COLUMNS = (
    "id, name, description, type, category, manufacturer, model_number, "
    "metadata, created_at, updated_at"
)

_INSERT = f"""
INSERT INTO smart_models ({_COLUMNS})
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
RETURNING {_COLUMNS}
"""

_SELECT_BY_ID = f"SELECT {_COLUMNS} FROM smart_models WHERE id = $1"

_SELECT_BY_TYPE = f"SELECT {_COLUMNS} FROM smart_models WHERE type = $1"

_SELECT_ALL = f"SELECT {_COLUMNS} FROM smart_models"

_UPDATE = f"""
UPDATE smart_models
SET name = $2, description = $3, type = $4, category = $5,
    manufacturer = $6, model_number = $7, metadata = $8, updated_at = $9
WHERE id = $1
RETURNING {_COLUMNS}
"""

_DELETE = "DELETE FROM smart_models WHERE id = $1"


class SmartModelRepository(ABC):
    """Storage contract for [SmartModel][smarthub.models.smart_model.SmartModel]."""

    @abstractmethod
    async def create(self, model: SmartModel) -> SmartModel:
        """Insert a fully populated model and return the row as persisted."""

    @abstractmethod
    async def get_by_id(self, model_id: UUID) -> SmartModel:
        """Return the model with ``model_id``; raise ``NotFoundError`` if absent."""

    @abstractmethod
    async def get_by_type(self, model_type: ModelType) -> list[SmartModel]:
        """Return every model of ``model_type`` in storage order."""

    @abstractmethod
    async def get_all(self) -> list[SmartModel]:
        """Return every model in storage order."""

    @abstractmethod
    async def update(self, model: SmartModel) -> SmartModel:
        """Replace the mutable fields of ``model.id``; raise ``NotFoundError`` if absent."""

    @abstractmethod
    async def delete(self, model_id: UUID) -> None:
        """Remove the model. Succeeds whether or not the row existed."""


class PgSmartModelRepository(SmartModelRepository):
    """``smart_models`` table access through an asyncpg [Pool][smarthub.core.pool.Pool].

    The ``UPDATE`` statement never writes ``id`` or ``created_at``, so the
    returned row always carries the creation timestamp stored at insert.
    """

    def __init__(self, pool: Pool, *, logger: Logger | None = None) -> None:
        self._pool = pool
        self._logger = logger or Logger("smart_model_repository")

    async def create(self, model: SmartModel) -> SmartModel:
        row = await self._pool.fetchrow(_INSERT, *model.to_db_params())
        if row is None:
            raise RuntimeError("INSERT ... RETURNING produced no row")
        return SmartModel.from_db_row(row)

    async def get_by_id(self, model_id: UUID) -> SmartModel:
        row = await self._pool.fetchrow(_SELECT_BY_ID, model_id)
        if row is None:
            raise NotFoundError(_ENTITY, model_id)
        return SmartModel.from_db_row(row)

    async def get_by_type(self, model_type: ModelType) -> list[SmartModel]:
        rows = await self._pool.fetch(_SELECT_BY_TYPE, str(model_type))
        return [SmartModel.from_db_row(row) for row in rows]

    async def get_all(self) -> list[SmartModel]:
        rows = await self._pool.fetch(_SELECT_ALL)
        return [SmartModel.from_db_row(row) for row in rows]

    async def update(self, model: SmartModel) -> SmartModel:
        params = model.to_db_params()
        row = await self._pool.fetchrow(
            _UPDATE,
            params.id,
            params.name,
            params.description,
            params.type,
            params.category,
            params.manufacturer,
            params.model_number,
            params.metadata,
            params.updated_at,
        )
        if row is None:
            raise NotFoundError(_ENTITY, model.id)
        return SmartModel.from_db_row(row)

    async def delete(self, model_id: UUID) -> None:
        status = await self._pool.execute(_DELETE, model_id)
        self._logger.debug("model_delete_executed", id=model_id, status=status)
