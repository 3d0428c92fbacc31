"""RPC layer: wire messages, mappers, handlers and status classification.

Attributes:
    SmartModelHandler, SmartFeatureHandler: Per-service request pipelines.
        See [handlers][smarthub.rpc.handlers].
    HealthHandler: Database-backed health check.
    SmartModelMapper, SmartFeatureMapper, EnumPolicy: Wire <-> domain
        conversion. See [mappers][smarthub.rpc.mappers].
    StatusCode, RpcError, classify_error: Caller-facing error taxonomy.
"""

from .handlers import SmartFeatureHandler, SmartModelHandler
from .health import HealthHandler
from .mappers import EnumPolicy, SmartFeatureMapper, SmartModelMapper, to_wire_value
from .status import RpcError, StatusCode, classify_error


__all__ = [
    "EnumPolicy",
    "HealthHandler",
    "RpcError",
    "SmartFeatureHandler",
    "SmartFeatureMapper",
    "SmartModelHandler",
    "SmartModelMapper",
    "StatusCode",
    "classify_error",
    "to_wire_value",
]
