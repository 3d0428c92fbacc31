"""Smart model service: orchestration between handlers and storage.

Each method logs its intent and delegates to the injected
[SmartModelRepository][smarthub.repositories.smart_model.SmartModelRepository].
Results and errors pass through unchanged; classifying failures for
callers is the handler's job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from smarthub.core.logger import Logger


if TYPE_CHECKING:
    from uuid import UUID

    from smarthub.models import ModelType, SmartModel
    from smarthub.repositories import SmartModelRepository


class SmartModelService:
    """Use cases over smart models.

    Args:
        repository: Storage contract implementation.
        logger: Structured logger; defaults to ``Logger("smart_model_service")``.
    """

    def __init__(self, repository: SmartModelRepository, *, logger: Logger | None = None) -> None:
        self._repository = repository
        self._logger = logger or Logger("smart_model_service")

    async def create(self, model: SmartModel) -> SmartModel:
        self._logger.debug("model_create", id=model.id, name=model.name)
        return await self._repository.create(model)

    async def get_by_id(self, model_id: UUID) -> SmartModel:
        self._logger.debug("model_get", id=model_id)
        return await self._repository.get_by_id(model_id)

    async def get_by_type(self, model_type: ModelType) -> list[SmartModel]:
        self._logger.debug("model_list_by_type", type=model_type)
        return await self._repository.get_by_type(model_type)

    async def get_all(self) -> list[SmartModel]:
        self._logger.debug("model_list")
        return await self._repository.get_all()

    async def update(self, model: SmartModel) -> SmartModel:
        self._logger.debug("model_update", id=model.id)
        return await self._repository.update(model)

    async def delete(self, model_id: UUID) -> None:
        self._logger.debug("model_delete", id=model_id)
        await self._repository.delete(model_id)
