"""Smart feature service: orchestration between handlers and storage."""

from __future__ import annotations

from typing import TYPE_CHECKING

from smarthub.core.logger import Logger


if TYPE_CHECKING:
    from uuid import UUID

    from smarthub.models import SmartFeature
    from smarthub.repositories import SmartFeatureRepository


class SmartFeatureService:
    """Use cases over smart features.

    Delegates every call to the injected
    [SmartFeatureRepository][smarthub.repositories.smart_feature.SmartFeatureRepository]
    and returns or raises exactly what it does.
    """

    def __init__(
        self, repository: SmartFeatureRepository, *, logger: Logger | None = None
    ) -> None:
        self._repository = repository
        self._logger = logger or Logger("smart_feature_service")

    async def create(self, feature: SmartFeature) -> SmartFeature:
        self._logger.debug(
            "feature_create", id=feature.id, model_id=feature.model_id, name=feature.name
        )
        return await self._repository.create(feature)

    async def get_by_id(self, feature_id: UUID) -> SmartFeature:
        self._logger.debug("feature_get", id=feature_id)
        return await self._repository.get_by_id(feature_id)

    async def get_by_model_id(self, model_id: UUID) -> list[SmartFeature]:
        self._logger.debug("feature_list_by_model", model_id=model_id)
        return await self._repository.get_by_model_id(model_id)

    async def get_all(self) -> list[SmartFeature]:
        self._logger.debug("feature_list")
        return await self._repository.get_all()

    async def update(self, feature: SmartFeature) -> SmartFeature:
        self._logger.debug("feature_update", id=feature.id)
        return await self._repository.update(feature)

    async def delete(self, feature_id: UUID) -> None:
        self._logger.debug("feature_delete", id=feature_id)
        await self._repository.delete(feature_id)
