"""RPC server exposing the smart catalog over HTTP/JSON via FastAPI.

Every RPC is a ``POST`` to ``/<package>.<Service>/<Method>`` whose body is
the JSON request message. Successful calls answer ``200`` with the
response message; failures answer the HTTP status of their
[StatusCode][smarthub.rpc.status.StatusCode] with
``{"code": "<STATUS>", "message": "<reason>"}``.

The HTTP server runs as a background ``asyncio.Task`` alongside the
standard ``run_forever()`` cycle. Each ``run()`` cycle logs request
statistics, probes the database and updates Prometheus metrics.

See Also:
    [SmartModelHandler][smarthub.rpc.handlers.SmartModelHandler],
    [SmartFeatureHandler][smarthub.rpc.handlers.SmartFeatureHandler],
    [HealthHandler][smarthub.rpc.health.HealthHandler]: Targets of the
        route table.
    [BaseService][smarthub.core.base_service.BaseService]: Abstract
        base class providing lifecycle and metrics.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, ClassVar, NamedTuple

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from smarthub.core.base_service import BaseService
from smarthub.core.metrics import RPC_DURATION_SECONDS, RPC_REQUESTS_TOTAL
from smarthub.core.migrations import apply_migrations
from smarthub.repositories import PgSmartFeatureRepository, PgSmartModelRepository
from smarthub.rpc import (
    HealthHandler,
    RpcError,
    SmartFeatureHandler,
    SmartFeatureMapper,
    SmartModelHandler,
    SmartModelMapper,
    StatusCode,
)
from smarthub.rpc.messages import (
    CreateSmartFeatureRequest,
    CreateSmartModelRequest,
    DeleteSmartFeatureRequest,
    DeleteSmartModelRequest,
    GetFeaturesByModelIDRequest,
    GetSmartFeatureRequest,
    GetSmartModelRequest,
    HealthCheckRequest,
    ListSmartFeaturesRequest,
    ListSmartModelsRequest,
    UpdateSmartFeatureRequest,
    UpdateSmartModelRequest,
    WireMessage,
)
from smarthub.services import SmartFeatureService, SmartModelService
from smarthub.validation import Validator

from .configs import ServerConfig


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from smarthub.core.logger import Logger
    from smarthub.core.pool import Pool

_HTTP_ERROR_THRESHOLD = 400

SMART_MODEL_SERVICE = "smarthub.smart_model.v1.SmartModelService"
SMART_FEATURE_SERVICE = "smarthub.smart_feature.v1.SmartFeatureService"
HEALTH_SERVICE = "smarthub.health.v1.Health"


class Route(NamedTuple):
    """One RPC method: its full name, request type and handler coroutine."""

    service: str
    method: str
    request_cls: type[WireMessage]
    handler: Callable[[Any], Awaitable[WireMessage]]

    @property
    def path(self) -> str:
        return f"/{self.service}/{self.method}"


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "invalid request: " + "; ".join(parts)


class Server(BaseService[ServerConfig]):
    """RPC server for smart models and smart features.

    Lifecycle:
        1. ``__aenter__``: apply pending migrations (when enabled), build
           the FastAPI app, start uvicorn.
        2. ``run()``: log statistics, probe the database, update gauges.
        3. ``__aexit__``: cancel the HTTP server task.

    Handlers are wired from the pool unless passed explicitly.
    """

    SERVICE_NAME: ClassVar[str] = "server"
    CONFIG_CLASS: ClassVar[type[ServerConfig]] = ServerConfig

    def __init__(
        self,
        pool: Pool,
        config: ServerConfig | None = None,
        *,
        logger: Logger | None = None,
        model_handler: SmartModelHandler | None = None,
        feature_handler: SmartFeatureHandler | None = None,
        health_handler: HealthHandler | None = None,
    ) -> None:
        super().__init__(pool, config, logger=logger)
        validator = Validator()
        self._model_handler = model_handler or SmartModelHandler(
            SmartModelService(PgSmartModelRepository(pool)),
            SmartModelMapper(self._config.unknown_enum),
            validator,
        )
        self._feature_handler = feature_handler or SmartFeatureHandler(
            SmartFeatureService(PgSmartFeatureRepository(pool)),
            SmartFeatureMapper(self._config.unknown_enum),
            validator,
        )
        self._health_handler = health_handler or HealthHandler(pool, self._config.service_name)
        self._server_task: asyncio.Task[None] | None = None
        self._requests_total = 0
        self._requests_failed = 0

    @property
    def routes(self) -> list[Route]:
        """The RPC route table."""
        models = self._model_handler
        features = self._feature_handler
        return [
            Route(
                SMART_MODEL_SERVICE,
                "CreateSmartModel",
                CreateSmartModelRequest,
                models.create_smart_model,
            ),
            Route(
                SMART_MODEL_SERVICE,
                "GetSmartModel",
                GetSmartModelRequest,
                models.get_smart_model,
            ),
            Route(
                SMART_MODEL_SERVICE,
                "ListSmartModels",
                ListSmartModelsRequest,
                models.list_smart_models,
            ),
            Route(
                SMART_MODEL_SERVICE,
                "UpdateSmartModel",
                UpdateSmartModelRequest,
                models.update_smart_model,
            ),
            Route(
                SMART_MODEL_SERVICE,
                "DeleteSmartModel",
                DeleteSmartModelRequest,
                models.delete_smart_model,
            ),
            Route(
                SMART_FEATURE_SERVICE,
                "CreateSmartFeature",
                CreateSmartFeatureRequest,
                features.create_smart_feature,
            ),
            Route(
                SMART_FEATURE_SERVICE,
                "GetSmartFeature",
                GetSmartFeatureRequest,
                features.get_smart_feature,
            ),
            Route(
                SMART_FEATURE_SERVICE,
                "GetFeaturesByModelID",
                GetFeaturesByModelIDRequest,
                features.get_features_by_model_id,
            ),
            Route(
                SMART_FEATURE_SERVICE,
                "ListSmartFeatures",
                ListSmartFeaturesRequest,
                features.list_smart_features,
            ),
            Route(
                SMART_FEATURE_SERVICE,
                "UpdateSmartFeature",
                UpdateSmartFeatureRequest,
                features.update_smart_feature,
            ),
            Route(
                SMART_FEATURE_SERVICE,
                "DeleteSmartFeature",
                DeleteSmartFeatureRequest,
                features.delete_smart_feature,
            ),
            Route(HEALTH_SERVICE, "Check", HealthCheckRequest, self._health_handler.check),
        ]

    async def __aenter__(self) -> Server:
        await super().__aenter__()

        if self._config.apply_migrations:
            applied = await apply_migrations(self._pool, logger=self._logger)
            self._logger.info("migrations_checked", applied=len(applied))

        app = self._build_app()
        self._server_task = asyncio.create_task(self._run_server(app))
        self._logger.info(
            "rpc_server_started",
            host=self._config.host,
            port=self._config.port,
            service_name=self._config.service_name,
        )

        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        if self._server_task is not None:
            self._server_task.cancel()
            (outcome,) = await asyncio.gather(self._server_task, return_exceptions=True)
            if isinstance(outcome, Exception):
                self._logger.warning("rpc_server_task_failed", error=str(outcome))
            self._server_task = None
        self._logger.info("rpc_server_stopped")
        await super().__aexit__(_exc_type, _exc_val, _exc_tb)

    async def run(self) -> None:
        """Log request stats, probe the database and update Prometheus metrics."""
        if self._server_task is not None and self._server_task.done():
            exc = self._server_task.exception() if not self._server_task.cancelled() else None
            self._logger.error("rpc_server_crashed", error=str(exc) if exc else "cancelled")
            raise RuntimeError("RPC server task has stopped unexpectedly") from exc

        total = self._requests_total
        failed = self._requests_failed
        self._requests_total = 0
        self._requests_failed = 0

        database_reachable = await self._pool.ping()
        self._logger.info(
            "cycle_stats",
            requests_total=total,
            requests_failed=failed,
            database_reachable=database_reachable,
        )
        self.inc_counter("requests_total", total)
        self.inc_counter("requests_failed", failed)
        self.set_gauge("database_reachable", int(database_reachable))

    def _build_app(self) -> FastAPI:
        """Construct the FastAPI application with one ``POST`` route per RPC."""
        app = FastAPI(title="SmartHub RPC")

        @app.middleware("http")
        async def log_requests(request: Request, call_next: Any) -> Response:
            start = time.monotonic()
            try:
                response: Response = await call_next(request)
            except Exception as exc:  # HTTP request error boundary
                self._logger.error(
                    "unhandled_error",
                    error=str(exc),
                    path=request.url.path,
                )
                response = JSONResponse(
                    RpcError(StatusCode.INTERNAL, "internal error").to_dict(),
                    status_code=StatusCode.INTERNAL.http_status,
                )
            duration_ms = (time.monotonic() - start) * 1000
            self._requests_total += 1
            if response.status_code >= _HTTP_ERROR_THRESHOLD:
                self._requests_failed += 1
                self._logger.warning(
                    "request_failed",
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
            else:
                self._logger.debug(
                    "request_completed",
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
            return response

        @app.get("/health")
        async def health() -> dict[str, str]:
            return {"status": "ok"}

        for route in self.routes:
            self._register_route(app, route)

        return app

    def _register_route(self, app: FastAPI, route: Route) -> None:
        """Register the ``POST`` endpoint for a single RPC method."""

        @app.post(route.path, name=route.method)
        async def call(request: Request) -> Response:
            return await self._dispatch(route, await request.body())

    async def _dispatch(self, route: Route, body: bytes) -> Response:
        """Decode, invoke under the deadline, and encode one RPC call."""
        start = time.monotonic()
        try:
            message = route.request_cls.model_validate_json(body or b"{}")
            result = await asyncio.wait_for(
                route.handler(message), timeout=self._config.request_timeout
            )
        except ValidationError as e:
            error = RpcError(StatusCode.INVALID_ARGUMENT, _describe_validation_error(e))
        except TimeoutError:
            error = RpcError(StatusCode.DEADLINE_EXCEEDED, "deadline exceeded")
            self._logger.warning(
                "rpc_deadline_exceeded",
                method=route.method,
                timeout=self._config.request_timeout,
            )
        except RpcError as e:
            error = e
        else:
            self._observe(route, StatusCode.OK, start)
            return JSONResponse(result.model_dump(mode="json"))

        self._observe(route, error.code, start)
        return JSONResponse(error.to_dict(), status_code=error.code.http_status)

    def _observe(self, route: Route, code: StatusCode, start: float) -> None:
        if not self._config.metrics.enabled:
            return
        RPC_REQUESTS_TOTAL.labels(method=route.method, code=code.name).inc()
        RPC_DURATION_SECONDS.labels(method=route.method).observe(time.monotonic() - start)

    async def _run_server(self, app: FastAPI) -> None:
        """Run uvicorn as an asyncio server."""
        config = uvicorn.Config(
            app,
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        await server.serve()
