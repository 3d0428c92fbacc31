"""RPC server configuration models.

See Also:
    [Server][smarthub.server.service.Server]: The service class that
        consumes this configuration.
    [BaseServiceConfig][smarthub.core.base_service.BaseServiceConfig]:
        Base class providing ``interval``, ``max_consecutive_failures``,
        and ``metrics`` fields.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from smarthub.core.base_service import BaseServiceConfig
from smarthub.rpc.mappers import EnumPolicy


class ServerConfig(BaseServiceConfig):
    """Configuration for the RPC server.

    Attributes:
        service_name: Name reported by the health check.
        host: Bind address for the HTTP server.
        port: Port for the HTTP server.
        request_timeout: Per-call deadline in seconds; expiry cancels the
            call and answers ``DEADLINE_EXCEEDED``.
        unknown_enum: [EnumPolicy][smarthub.rpc.mappers.EnumPolicy] for
            wire enum values with no domain counterpart.
        apply_migrations: Apply pending schema migrations on startup.
    """

    service_name: str = Field(default="smarthub", min_length=1)
    host: str = Field(default="0.0.0.0", min_length=1, description="HTTP bind address")  # noqa: S104
    port: int = Field(default=50051, ge=1, le=65535, description="HTTP port")
    request_timeout: float = Field(default=30.0, gt=0.0, le=300.0)
    unknown_enum: EnumPolicy = Field(default=EnumPolicy.REJECT)
    apply_migrations: bool = Field(default=True)

    @field_validator("service_name")
    @classmethod
    def _strip_service_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "service_name must not be blank"
            raise ValueError(msg)
        return v
