"""Conversion between wire messages and catalog entities.

[SmartModelMapper][smarthub.rpc.mappers.SmartModelMapper] and
[SmartFeatureMapper][smarthub.rpc.mappers.SmartFeatureMapper] translate in
both directions:

* **Inbound** (``to_domain``, ``to_domain_update``): assign identifiers and
  timestamps, translate proto-style enum values to domain enums under the
  configured [EnumPolicy][smarthub.rpc.mappers.EnumPolicy] and copy
  structured value maps.
* **Outbound** (``to_wire`` and the ``to_*_response`` wrappers): build
  response messages, rejecting structured values that have no JSON
  representation with
  [ConversionError][smarthub.core.exceptions.ConversionError].

Mappers hold no state besides the enum policy and never touch storage.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import UTC, datetime
from enum import IntEnum, StrEnum
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from smarthub.core.exceptions import ConversionError, InvalidIdentifierError, InvalidRequestError
from smarthub.models import ModelCategory, ModelType, ProtocolType, SmartFeature, SmartModel

from .messages import (
    CreateSmartFeatureRequest,
    CreateSmartFeatureResponse,
    CreateSmartModelRequest,
    CreateSmartModelResponse,
    EnumValue,
    GetFeaturesByModelIDResponse,
    GetSmartFeatureResponse,
    GetSmartModelResponse,
    ListSmartFeaturesResponse,
    ListSmartModelsRequest,
    ListSmartModelsResponse,
    SmartFeatureMessage,
    SmartModelMessage,
    UpdateSmartFeatureRequest,
    UpdateSmartFeatureResponse,
    UpdateSmartModelRequest,
    UpdateSmartModelResponse,
    WireModelCategory,
    WireModelType,
    WireProtocolType,
)


if TYPE_CHECKING:
    from collections.abc import Iterable


class EnumPolicy(StrEnum):
    """Handling of wire enum values with no domain counterpart.

    Attributes:
        REJECT: Fail the request with
            [InvalidRequestError][smarthub.core.exceptions.InvalidRequestError].
        DEFAULT: Substitute the first domain variant.
    """

    REJECT = "reject"
    DEFAULT = "default"


def _enum_table(
    wire_cls: type[IntEnum], domain_cls: type[StrEnum], prefix: str
) -> dict[IntEnum, StrEnum]:
    return {wire_cls[f"{prefix}_{member.name}"]: member for member in domain_cls}


_MODEL_TYPES = _enum_table(WireModelType, ModelType, "MODEL_TYPE")
_MODEL_CATEGORIES = _enum_table(WireModelCategory, ModelCategory, "MODEL_CATEGORY")
_PROTOCOLS = _enum_table(WireProtocolType, ProtocolType, "PROTOCOL_TYPE")


def _parse_wire_enum(value: EnumValue, wire_cls: type[IntEnum]) -> IntEnum | None:
    """Resolve a value name or number; ``None`` when neither matches."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            return wire_cls(value)
        except ValueError:
            return None
    return wire_cls.__members__.get(value)


def _parse_id(value: str, field: str) -> UUID:
    if not value:
        raise InvalidIdentifierError(f"{field} is required")
    try:
        return UUID(value)
    except ValueError:
        raise InvalidIdentifierError(f"{field} must be a valid UUID, got {value!r}") from None


def to_wire_value(value: Any, path: str = "") -> Any:
    """Convert a structured value to its JSON representation.

    Accepts ``None``, ``bool``, ``int``, finite ``float``, ``str``, lists
    and tuples of those and string-keyed mappings of those.

    Raises:
        ConversionError: For any other value, naming the offending path.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ConversionError(f"{path or 'value'}: non-finite number {value!r}")
        return value
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ConversionError(f"{path or 'value'}: non-string key {key!r}")
            result[key] = to_wire_value(item, f"{path}.{key}" if path else key)
        return result
    if isinstance(value, (list, tuple)):
        return [to_wire_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
    raise ConversionError(f"{path or 'value'}: unsupported type {type(value).__name__}")


def _to_wire_struct(value: Any, field: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise ConversionError(f"{field}: expected a mapping, got {type(value).__name__}")
    return to_wire_value(value, field)


class _Mapper:
    def __init__(self, policy: EnumPolicy = EnumPolicy.REJECT) -> None:
        self._policy = EnumPolicy(policy)

    @property
    def policy(self) -> EnumPolicy:
        return self._policy

    def _enum_to_domain(
        self,
        value: EnumValue,
        wire_cls: type[IntEnum],
        table: dict[IntEnum, StrEnum],
        field: str,
    ) -> Any:
        wire = _parse_wire_enum(value, wire_cls)
        if wire is not None and wire in table:
            return table[wire]
        if self._policy is EnumPolicy.DEFAULT:
            return next(iter(table.values()))
        raise InvalidRequestError(f"invalid request: unknown {field} {value!r}")

    @staticmethod
    def _enum_to_wire(value: StrEnum, table: dict[IntEnum, StrEnum], field: str) -> str:
        for wire, domain in table.items():
            if domain == value:
                return wire.name
        raise ConversionError(f"{field}: no wire value for {value!r}")


class SmartModelMapper(_Mapper):
    """Wire <-> domain conversion for smart models."""

    def to_domain(self, request: CreateSmartModelRequest) -> SmartModel:
        """Build a new ``SmartModel`` from a create request.

        Raises:
            InvalidRequestError: If the payload is missing, or an enum value
                is unknown under the ``reject`` policy.
        """
        payload = request.model
        if payload is None:
            raise InvalidRequestError("invalid request: model is required")
        now = datetime.now(UTC)
        return SmartModel(
            id=uuid4(),
            name=payload.name,
            description=payload.description,
            type=self._enum_to_domain(payload.type, WireModelType, _MODEL_TYPES, "type"),
            category=self._enum_to_domain(
                payload.category, WireModelCategory, _MODEL_CATEGORIES, "category"
            ),
            manufacturer=payload.manufacturer,
            model_number=payload.model_number,
            metadata=dict(payload.metadata or {}),
            created_at=now,
            updated_at=now,
        )

    def to_domain_update(self, request: UpdateSmartModelRequest) -> SmartModel:
        """Build the replacement ``SmartModel`` for an update request.

        ``created_at`` is stamped alongside ``updated_at`` so the entity
        passes validation; the repository only writes ``updated_at``.

        Raises:
            InvalidIdentifierError: If ``id`` is missing or malformed.
            InvalidRequestError: As for [to_domain][smarthub.rpc.mappers.SmartModelMapper.to_domain].
        """
        payload = request.model
        if payload is None:
            raise InvalidRequestError("invalid request: model is required")
        model_id = _parse_id(payload.id, "id")
        now = datetime.now(UTC)
        return SmartModel(
            id=model_id,
            name=payload.name,
            description=payload.description,
            type=self._enum_to_domain(payload.type, WireModelType, _MODEL_TYPES, "type"),
            category=self._enum_to_domain(
                payload.category, WireModelCategory, _MODEL_CATEGORIES, "category"
            ),
            manufacturer=payload.manufacturer,
            model_number=payload.model_number,
            metadata=dict(payload.metadata or {}),
            created_at=now,
            updated_at=now,
        )

    def to_type_filter(self, request: ListSmartModelsRequest) -> ModelType | None:
        """Return the requested type, or ``None`` to list every model."""
        wire = _parse_wire_enum(request.type, WireModelType)
        if request.type == "" or wire is WireModelType.MODEL_TYPE_UNSPECIFIED:
            return None
        return self._enum_to_domain(request.type, WireModelType, _MODEL_TYPES, "type")

    def to_wire(self, model: SmartModel) -> SmartModelMessage:
        """Convert a ``SmartModel`` to its wire message.

        Raises:
            ConversionError: If ``metadata`` holds a non-JSON value.
        """
        return SmartModelMessage(
            id=str(model.id),
            name=model.name,
            description=model.description,
            type=self._enum_to_wire(model.type, _MODEL_TYPES, "type"),
            category=self._enum_to_wire(model.category, _MODEL_CATEGORIES, "category"),
            manufacturer=model.manufacturer,
            model_number=model.model_number,
            metadata=_to_wire_struct(model.metadata, "metadata"),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def to_create_response(self, model: SmartModel) -> CreateSmartModelResponse:
        return CreateSmartModelResponse(model=self.to_wire(model))

    def to_get_response(self, model: SmartModel) -> GetSmartModelResponse:
        return GetSmartModelResponse(model=self.to_wire(model))

    def to_update_response(self, model: SmartModel) -> UpdateSmartModelResponse:
        return UpdateSmartModelResponse(model=self.to_wire(model))

    def to_list_response(self, models: Iterable[SmartModel]) -> ListSmartModelsResponse:
        """Convert every model; the first ``ConversionError`` aborts the list."""
        return ListSmartModelsResponse(models=[self.to_wire(model) for model in models])


class SmartFeatureMapper(_Mapper):
    """Wire <-> domain conversion for smart features."""

    def to_domain(self, request: CreateSmartFeatureRequest) -> SmartFeature:
        """Build a new ``SmartFeature`` from a create request.

        Raises:
            InvalidRequestError: If the payload is missing, or the protocol is
                unknown under the ``reject`` policy.
            InvalidIdentifierError: If ``model_id`` is missing or malformed.
        """
        payload = request.feature
        if payload is None:
            raise InvalidRequestError("invalid request: feature is required")
        model_id = _parse_id(payload.model_id, "model_id")
        now = datetime.now(UTC)
        return SmartFeature(
            id=uuid4(),
            model_id=model_id,
            name=payload.name,
            description=payload.description,
            protocol=self._enum_to_domain(
                payload.protocol, WireProtocolType, _PROTOCOLS, "protocol"
            ),
            interface_path=payload.interface_path,
            parameters=dict(payload.parameters or {}),
            created_at=now,
            updated_at=now,
        )

    def to_domain_update(self, request: UpdateSmartFeatureRequest) -> SmartFeature:
        """Build the replacement ``SmartFeature`` for an update request.

        The result carries ``model_id=None``: ownership never changes.
        """
        payload = request.feature
        if payload is None:
            raise InvalidRequestError("invalid request: feature is required")
        feature_id = _parse_id(payload.id, "id")
        now = datetime.now(UTC)
        return SmartFeature(
            id=feature_id,
            model_id=None,
            name=payload.name,
            description=payload.description,
            protocol=self._enum_to_domain(
                payload.protocol, WireProtocolType, _PROTOCOLS, "protocol"
            ),
            interface_path=payload.interface_path,
            parameters=dict(payload.parameters or {}),
            created_at=now,
            updated_at=now,
        )

    def to_wire(self, feature: SmartFeature) -> SmartFeatureMessage:
        """Convert a ``SmartFeature`` to its wire message.

        Raises:
            ConversionError: If ``parameters`` holds a non-JSON value.
        """
        return SmartFeatureMessage(
            id=str(feature.id),
            model_id=str(feature.model_id) if feature.model_id is not None else "",
            name=feature.name,
            description=feature.description,
            protocol=self._enum_to_wire(feature.protocol, _PROTOCOLS, "protocol"),
            interface_path=feature.interface_path,
            parameters=_to_wire_struct(feature.parameters, "parameters"),
            created_at=feature.created_at,
            updated_at=feature.updated_at,
        )

    def to_create_response(self, feature: SmartFeature) -> CreateSmartFeatureResponse:
        return CreateSmartFeatureResponse(feature=self.to_wire(feature))

    def to_get_response(self, feature: SmartFeature) -> GetSmartFeatureResponse:
        return GetSmartFeatureResponse(feature=self.to_wire(feature))

    def to_update_response(self, feature: SmartFeature) -> UpdateSmartFeatureResponse:
        return UpdateSmartFeatureResponse(feature=self.to_wire(feature))

    def to_list_response(self, features: Iterable[SmartFeature]) -> ListSmartFeaturesResponse:
        """Convert every feature; the first ``ConversionError`` aborts the list."""
        return ListSmartFeaturesResponse(features=[self.to_wire(f) for f in features])

    def to_model_features_response(
        self, features: Iterable[SmartFeature]
    ) -> GetFeaturesByModelIDResponse:
        return GetFeaturesByModelIDResponse(features=[self.to_wire(f) for f in features])
