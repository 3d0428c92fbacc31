"""Shared enumerations for the catalog entities.

Values are the lowercase strings stored in the ``type``, ``category`` and
``protocol`` columns. The first member of each enum is the variant chosen
when an unknown wire value is mapped under the ``default`` enum policy.

See Also:
    [SmartModel][smarthub.models.smart_model.SmartModel]: Uses
        [ModelType][smarthub.models.constants.ModelType] and
        [ModelCategory][smarthub.models.constants.ModelCategory].
    [SmartFeature][smarthub.models.smart_feature.SmartFeature]: Uses
        [ProtocolType][smarthub.models.constants.ProtocolType].
    [EnumPolicy][smarthub.rpc.mappers.EnumPolicy]: Decides what happens to
        wire values outside these sets.
"""

from __future__ import annotations

from enum import StrEnum


class ModelType(StrEnum):
    """Kind of archetype a smart model describes.

    Attributes:
        DEVICE: A physical device class.
        SERVICE: A hosted service class.
    """

    DEVICE = "device"
    SERVICE = "service"


class ModelCategory(StrEnum):
    """Catalog category of a smart model."""

    WEARABLE = "wearable"
    CAMERA = "camera"
    WEATHER = "weather"
    ENTERTAINMENT = "entertainment"


class ProtocolType(StrEnum):
    """Network protocol through which a smart feature is exposed."""

    REST = "rest"
    GRPC = "grpc"
    MQTT = "mqtt"
    WEBSOCKET = "websocket"


NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000
MANUFACTURER_MAX_LENGTH = 255
MODEL_NUMBER_MAX_LENGTH = 50
