"""Wire request and response messages for the SmartHub RPC surface.

Pydantic models mirroring the ``smart_model.v1``, ``smart_feature.v1`` and
``health.v1`` message sets. They follow proto3 JSON conventions:

* scalar fields default to their zero value (``""``, ``0``) when omitted;
* enum fields accept the enum value name (``"MODEL_TYPE_DEVICE"``) or its
  number, and are emitted as names;
* structured maps (``metadata``, ``parameters``) are JSON objects;
* timestamps are RFC 3339 strings;
* unknown fields are rejected.

Decoding failures surface as ``pydantic.ValidationError`` and are
reported to callers as ``INVALID_ARGUMENT`` by the transport.
"""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WireMessage(BaseModel):
    """Base for every wire message."""

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class WireModelType(IntEnum):
    MODEL_TYPE_UNSPECIFIED = 0
    MODEL_TYPE_DEVICE = 1
    MODEL_TYPE_SERVICE = 2


class WireModelCategory(IntEnum):
    MODEL_CATEGORY_UNSPECIFIED = 0
    MODEL_CATEGORY_WEARABLE = 1
    MODEL_CATEGORY_CAMERA = 2
    MODEL_CATEGORY_WEATHER = 3
    MODEL_CATEGORY_ENTERTAINMENT = 4


class WireProtocolType(IntEnum):
    PROTOCOL_TYPE_UNSPECIFIED = 0
    PROTOCOL_TYPE_REST = 1
    PROTOCOL_TYPE_GRPC = 2
    PROTOCOL_TYPE_MQTT = 3
    PROTOCOL_TYPE_WEBSOCKET = 4


class ServingStatus(IntEnum):
    UNKNOWN = 0
    SERVING = 1
    NOT_SERVING = 2


# Raw enum value as received: a value name or its number.
EnumValue = int | str


# ---------------------------------------------------------------------------
# smart_model.v1
# ---------------------------------------------------------------------------


class SmartModelMessage(WireMessage):
    id: str
    name: str
    description: str
    type: str
    category: str
    manufacturer: str = ""
    model_number: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class CreateSmartModelInput(WireMessage):
    name: str = ""
    description: str = ""
    type: EnumValue = 0
    category: EnumValue = 0
    manufacturer: str = ""
    model_number: str = ""
    metadata: dict[str, Any] | None = None


class CreateSmartModelRequest(WireMessage):
    model: CreateSmartModelInput | None = None


class CreateSmartModelResponse(WireMessage):
    model: SmartModelMessage


class GetSmartModelRequest(WireMessage):
    id: str = ""


class GetSmartModelResponse(WireMessage):
    model: SmartModelMessage


class ListSmartModelsRequest(WireMessage):
    """List every model, or only those of ``type`` when it is specified."""

    type: EnumValue = 0


class ListSmartModelsResponse(WireMessage):
    models: list[SmartModelMessage] = Field(default_factory=list)


class UpdateSmartModelInput(WireMessage):
    id: str = ""
    name: str = ""
    description: str = ""
    type: EnumValue = 0
    category: EnumValue = 0
    manufacturer: str = ""
    model_number: str = ""
    metadata: dict[str, Any] | None = None


class UpdateSmartModelRequest(WireMessage):
    model: UpdateSmartModelInput | None = None


class UpdateSmartModelResponse(WireMessage):
    model: SmartModelMessage


class DeleteSmartModelRequest(WireMessage):
    id: str = ""


class DeleteSmartModelResponse(WireMessage):
    pass


# ---------------------------------------------------------------------------
# smart_feature.v1
# ---------------------------------------------------------------------------


class SmartFeatureMessage(WireMessage):
    id: str
    model_id: str
    name: str
    description: str
    protocol: str
    interface_path: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: datetime


class CreateSmartFeatureInput(WireMessage):
    model_id: str = ""
    name: str = ""
    description: str = ""
    protocol: EnumValue = 0
    interface_path: str = ""
    parameters: dict[str, Any] | None = None


class CreateSmartFeatureRequest(WireMessage):
    feature: CreateSmartFeatureInput | None = None


class CreateSmartFeatureResponse(WireMessage):
    feature: SmartFeatureMessage


class GetSmartFeatureRequest(WireMessage):
    id: str = ""


class GetSmartFeatureResponse(WireMessage):
    feature: SmartFeatureMessage


class GetFeaturesByModelIDRequest(WireMessage):
    model_id: str = ""


class GetFeaturesByModelIDResponse(WireMessage):
    features: list[SmartFeatureMessage] = Field(default_factory=list)


class ListSmartFeaturesRequest(WireMessage):
    pass


class ListSmartFeaturesResponse(WireMessage):
    features: list[SmartFeatureMessage] = Field(default_factory=list)


class UpdateSmartFeatureInput(WireMessage):
    id: str = ""
    name: str = ""
    description: str = ""
    protocol: EnumValue = 0
    interface_path: str = ""
    parameters: dict[str, Any] | None = None


class UpdateSmartFeatureRequest(WireMessage):
    feature: UpdateSmartFeatureInput | None = None


class UpdateSmartFeatureResponse(WireMessage):
    feature: SmartFeatureMessage


class DeleteSmartFeatureRequest(WireMessage):
    id: str = ""


class DeleteSmartFeatureResponse(WireMessage):
    pass


# ---------------------------------------------------------------------------
# health.v1
# ---------------------------------------------------------------------------


class HealthCheckRequest(WireMessage):
    service_name: str = ""


class HealthCheckResponse(WireMessage):
    status: str
