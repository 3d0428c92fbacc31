r"""SmartHub -- catalog of smart device and service archetypes.

Stores smart models (device or service archetypes) and the smart features
they expose, in PostgreSQL, behind a typed RPC surface.

Imports flow strictly downward through the layers:

```text
              server           FastAPI transport, lifecycle
                |
               rpc             Wire messages, mappers, handlers
                |
             services          Use-case orchestration
            /       \
    repositories   validation  Storage contract, field rules
            \       /
               core            Pool, logging, config, metrics, errors
                |
              models           Pure frozen dataclasses (zero I/O)
```

Note:
    For lightweight usage, import directly from subpackages::

        from smarthub.models import SmartModel
        from smarthub.core import Pool

    Top-level imports (``from smarthub import SmartModel``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("smarthub")

__all__ = [
    "BaseService",
    "Logger",
    "ModelCategory",
    "ModelType",
    "Pool",
    "PoolConfig",
    "ProtocolType",
    "Server",
    "ServerConfig",
    "SmartFeature",
    "SmartModel",
    "Validator",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "BaseService": ("smarthub.core", "BaseService"),
    "Logger": ("smarthub.core", "Logger"),
    "Pool": ("smarthub.core", "Pool"),
    "PoolConfig": ("smarthub.core", "PoolConfig"),
    "ModelCategory": ("smarthub.models", "ModelCategory"),
    "ModelType": ("smarthub.models", "ModelType"),
    "ProtocolType": ("smarthub.models", "ProtocolType"),
    "SmartFeature": ("smarthub.models", "SmartFeature"),
    "SmartModel": ("smarthub.models", "SmartModel"),
    "Validator": ("smarthub.validation", "Validator"),
    "Server": ("smarthub.server", "Server"),
    "ServerConfig": ("smarthub.server", "ServerConfig"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'smarthub' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
