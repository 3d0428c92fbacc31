"""YAML configuration loading for SmartHub.

The process configuration is a single YAML document with a ``pool``
section (parsed into [PoolConfig][smarthub.core.pool.PoolConfig]) and a
``server`` section (parsed into
[ServerConfig][smarthub.server.configs.ServerConfig]).

Examples:
    ```python
    from smarthub.core.yaml import load_yaml

    config = load_yaml("config/smarthub.yaml")
    pool = Pool.from_dict(config.get("pool", {}))
    ```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError


def load_yaml(config_path: str | Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Uses ``yaml.safe_load``, which only builds standard YAML types and
    never instantiates Python objects from tags.

    Args:
        config_path: Path to the YAML file (absolute or relative).

    Returns:
        Parsed configuration as a nested dictionary. Returns an empty dict
        if the file exists but contains no data.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid YAML or its top level
            is not a mapping.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    return data
