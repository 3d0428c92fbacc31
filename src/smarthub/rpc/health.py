"""Health check RPC (``smarthub.health.v1.Health/Check``)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from smarthub.core.logger import Logger

from .messages import HealthCheckRequest, HealthCheckResponse, ServingStatus
from .status import RpcError, StatusCode


if TYPE_CHECKING:
    from smarthub.core.pool import Pool


class HealthHandler:
    """Reports whether the server can reach its database.

    An empty ``service_name`` or the configured one is answered with
    ``SERVING`` or ``NOT_SERVING`` depending on a ``SELECT 1`` probe; any
    other name is ``NOT_FOUND``.
    """

    def __init__(self, pool: Pool, service_name: str, *, logger: Logger | None = None) -> None:
        self._pool = pool
        self._service_name = service_name
        self._logger = logger or Logger("health")

    async def check(self, request: HealthCheckRequest) -> HealthCheckResponse:
        if request.service_name not in ("", self._service_name):
            raise RpcError(StatusCode.NOT_FOUND, f"unknown service: {request.service_name}")

        if await self._pool.ping():
            status = ServingStatus.SERVING
        else:
            status = ServingStatus.NOT_SERVING
            self._logger.warning("health_not_serving", service=self._service_name)
        return HealthCheckResponse(status=status.name)
