"""Request handlers for the smart model and smart feature RPC services.

Each RPC runs the same pipeline and stops at the first failure:

1. **Decode**: validate bare identifiers, or map the request payload to a
   domain entity.
2. **Validate**: run the [Validator][smarthub.validation.validator.Validator]
   on every mutating call.
3. **Invoke**: call the service.
4. **Encode**: map the result back to a response message.

Every exception raised by a stage is classified once, by
[classify_error()][smarthub.rpc.status.classify_error], into an
[RpcError][smarthub.rpc.status.RpcError]. ``asyncio.CancelledError`` is
not an ``Exception`` and propagates untouched.

See Also:
    [Server][smarthub.server.service.Server]: Routes wire calls to these
        handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from smarthub.core.logger import Logger

from .messages import (
    CreateSmartFeatureRequest,
    CreateSmartFeatureResponse,
    CreateSmartModelRequest,
    CreateSmartModelResponse,
    DeleteSmartFeatureRequest,
    DeleteSmartFeatureResponse,
    DeleteSmartModelRequest,
    DeleteSmartModelResponse,
    GetFeaturesByModelIDRequest,
    GetFeaturesByModelIDResponse,
    GetSmartFeatureRequest,
    GetSmartFeatureResponse,
    GetSmartModelRequest,
    GetSmartModelResponse,
    ListSmartFeaturesRequest,
    ListSmartFeaturesResponse,
    ListSmartModelsRequest,
    ListSmartModelsResponse,
    UpdateSmartFeatureRequest,
    UpdateSmartFeatureResponse,
    UpdateSmartModelRequest,
    UpdateSmartModelResponse,
)
from .status import RpcError, classify_error


if TYPE_CHECKING:
    from smarthub.services import SmartFeatureService, SmartModelService
    from smarthub.validation import Validator

    from .mappers import SmartFeatureMapper, SmartModelMapper


class SmartModelHandler:
    """Implements ``smarthub.smart_model.v1.SmartModelService``.

    Args:
        service: Smart model use cases.
        mapper: Wire <-> domain conversion.
        validator: Field and identifier validation.
        logger: Structured logger; defaults to ``Logger("smart_model_handler")``.
    """

    def __init__(
        self,
        service: SmartModelService,
        mapper: SmartModelMapper,
        validator: Validator,
        *,
        logger: Logger | None = None,
    ) -> None:
        self._service = service
        self._mapper = mapper
        self._validator = validator
        self._logger = logger or Logger("smart_model_handler")

    def _fail(self, exc: Exception, action: str, entity: str = "smart model") -> RpcError:
        return classify_error(exc, action=action, entity=entity, logger=self._logger)

    async def create_smart_model(
        self, request: CreateSmartModelRequest
    ) -> CreateSmartModelResponse:
        try:
            model = self._mapper.to_domain(request)
            self._validator.validate_model(model)
            created = await self._service.create(model)
            return self._mapper.to_create_response(created)
        except Exception as e:
            raise self._fail(e, "create") from e

    async def get_smart_model(self, request: GetSmartModelRequest) -> GetSmartModelResponse:
        try:
            model_id = self._validator.validate_identifier(request.id)
            model = await self._service.get_by_id(model_id)
            return self._mapper.to_get_response(model)
        except Exception as e:
            raise self._fail(e, "get") from e

    async def list_smart_models(self, request: ListSmartModelsRequest) -> ListSmartModelsResponse:
        try:
            model_type = self._mapper.to_type_filter(request)
            if model_type is None:
                models = await self._service.get_all()
            else:
                models = await self._service.get_by_type(model_type)
            return self._mapper.to_list_response(models)
        except Exception as e:
            raise self._fail(e, "list", "smart models") from e

    async def update_smart_model(
        self, request: UpdateSmartModelRequest
    ) -> UpdateSmartModelResponse:
        try:
            model = self._mapper.to_domain_update(request)
            self._validator.validate_model(model)
            updated = await self._service.update(model)
            return self._mapper.to_update_response(updated)
        except Exception as e:
            raise self._fail(e, "update") from e

    async def delete_smart_model(
        self, request: DeleteSmartModelRequest
    ) -> DeleteSmartModelResponse:
        try:
            model_id = self._validator.validate_identifier(request.id)
            await self._service.delete(model_id)
            return DeleteSmartModelResponse()
        except Exception as e:
            raise self._fail(e, "delete") from e


class SmartFeatureHandler:
    """Implements ``smarthub.smart_feature.v1.SmartFeatureService``."""

    def __init__(
        self,
        service: SmartFeatureService,
        mapper: SmartFeatureMapper,
        validator: Validator,
        *,
        logger: Logger | None = None,
    ) -> None:
        self._service = service
        self._mapper = mapper
        self._validator = validator
        self._logger = logger or Logger("smart_feature_handler")

    def _fail(self, exc: Exception, action: str, entity: str = "smart feature") -> RpcError:
        return classify_error(exc, action=action, entity=entity, logger=self._logger)

    async def create_smart_feature(
        self, request: CreateSmartFeatureRequest
    ) -> CreateSmartFeatureResponse:
        try:
            feature = self._mapper.to_domain(request)
            self._validator.validate_feature(feature)
            created = await self._service.create(feature)
            return self._mapper.to_create_response(created)
        except Exception as e:
            raise self._fail(e, "create") from e

    async def get_smart_feature(self, request: GetSmartFeatureRequest) -> GetSmartFeatureResponse:
        try:
            feature_id = self._validator.validate_identifier(request.id)
            feature = await self._service.get_by_id(feature_id)
            return self._mapper.to_get_response(feature)
        except Exception as e:
            raise self._fail(e, "get") from e

    async def get_features_by_model_id(
        self, request: GetFeaturesByModelIDRequest
    ) -> GetFeaturesByModelIDResponse:
        try:
            model_id = self._validator.validate_identifier(request.model_id, "model_id")
            features = await self._service.get_by_model_id(model_id)
            return self._mapper.to_model_features_response(features)
        except Exception as e:
            raise self._fail(e, "get", "smart features") from e

    async def list_smart_features(
        self, request: ListSmartFeaturesRequest
    ) -> ListSmartFeaturesResponse:
        try:
            features = await self._service.get_all()
            return self._mapper.to_list_response(features)
        except Exception as e:
            raise self._fail(e, "list", "smart features") from e

    async def update_smart_feature(
        self, request: UpdateSmartFeatureRequest
    ) -> UpdateSmartFeatureResponse:
        try:
            feature = self._mapper.to_domain_update(request)
            self._validator.validate_feature(feature, for_update=True)
            updated = await self._service.update(feature)
            return self._mapper.to_update_response(updated)
        except Exception as e:
            raise self._fail(e, "update") from e

    async def delete_smart_feature(
        self, request: DeleteSmartFeatureRequest
    ) -> DeleteSmartFeatureResponse:
        try:
            feature_id = self._validator.validate_identifier(request.id)
            await self._service.delete(feature_id)
            return DeleteSmartFeatureResponse()
        except Exception as e:
            raise self._fail(e, "delete") from e
