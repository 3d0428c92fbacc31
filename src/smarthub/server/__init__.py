"""RPC server for the smart catalog.

See Also:
    [Server][smarthub.server.service.Server]: The service class.
    [ServerConfig][smarthub.server.configs.ServerConfig]: Service configuration.
"""

from .configs import ServerConfig
from .service import Server


__all__ = ["Server", "ServerConfig"]
