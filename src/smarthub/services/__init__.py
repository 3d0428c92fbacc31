"""Service layer: one orchestration class per catalog entity.

Attributes:
    SmartModelService: See [SmartModelService][smarthub.services.smart_model.SmartModelService].
    SmartFeatureService: See [SmartFeatureService][smarthub.services.smart_feature.SmartFeatureService].
"""

from .smart_feature import SmartFeatureService
from .smart_model import SmartModelService


__all__ = ["SmartFeatureService", "SmartModelService"]
