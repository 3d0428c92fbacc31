"""Repository contracts and their PostgreSQL implementations.

Attributes:
    SmartModelRepository: Abstract storage contract for smart models.
    PgSmartModelRepository: ``smart_models`` table implementation.
    SmartFeatureRepository: Abstract storage contract for smart features.
    PgSmartFeatureRepository: ``smart_features`` table implementation.
"""

from .smart_feature import PgSmartFeatureRepository, SmartFeatureRepository
from .smart_model import PgSmartModelRepository, SmartModelRepository


__all__ = [
    "PgSmartFeatureRepository",
    "PgSmartModelRepository",
    "SmartFeatureRepository",
    "SmartModelRepository",
]
