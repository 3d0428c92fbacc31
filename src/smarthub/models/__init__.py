"""Pure frozen dataclass models for the SmartHub catalog.

Bottom of the dependency DAG: zero I/O and no imports from other
``smarthub`` packages.

Attributes:
    SmartModel: Catalog archetype (device or service class).
        See [SmartModel][smarthub.models.smart_model.SmartModel].
    SmartFeature: Capability owned by a smart model.
        See [SmartFeature][smarthub.models.smart_feature.SmartFeature].
    ModelType, ModelCategory, ProtocolType: Enumerations stored as
        lowercase strings.
"""

from .constants import ModelCategory, ModelType, ProtocolType
from .smart_feature import SmartFeature, SmartFeatureDbParams
from .smart_model import SmartModel, SmartModelDbParams


__all__ = [
    "ModelCategory",
    "ModelType",
    "ProtocolType",
    "SmartFeature",
    "SmartFeatureDbParams",
    "SmartModel",
    "SmartModelDbParams",
]
