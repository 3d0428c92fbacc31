"""
Async PostgreSQL connection pool built on asyncpg.

The pool is the only shared mutable resource of a SmartHub process. Every
repository call borrows one connection for exactly one statement and
returns it, so the pool's own acquisition bound is the only backpressure in
the system.

Query methods ([fetch()][smarthub.core.pool.Pool.fetch],
[fetchrow()][smarthub.core.pool.Pool.fetchrow],
[fetchval()][smarthub.core.pool.Pool.fetchval],
[execute()][smarthub.core.pool.Pool.execute]) retry on transient
connection errors (``InterfaceError``, ``ConnectionDoesNotExistError``)
and raise [ConnectionPoolError][smarthub.core.exceptions.ConnectionPoolError]
once attempts are exhausted. Query-level errors (constraint violations,
syntax errors) propagate unchanged on the first attempt.

Examples:
    ```python
    pool = Pool.from_dict(load_yaml("config/smarthub.yaml")["pool"])

    async with pool:
        row = await pool.fetchrow("SELECT * FROM smart_models WHERE id = $1", model_id)

        async with pool.transaction() as conn:
            await conn.execute(migration_sql)
    ```

See Also:
    [PgSmartModelRepository][smarthub.repositories.smart_model.PgSmartModelRepository]:
        Repository issuing parameterized statements through this pool.
    [PoolConfig][smarthub.core.pool.PoolConfig]: Aggregate configuration
        grouping all pool-related settings.
"""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import AsyncIterator  # noqa: TC003
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Literal, cast

import asyncpg
from pydantic import BaseModel, Field, SecretStr, ValidationInfo, field_validator, model_validator

from .exceptions import ConnectionPoolError
from .logger import Logger


_DEFAULT_PASSWORD_ENV = "DB_PASSWORD"  # pragma: allowlist secret


async def _init_connection(conn: asyncpg.Connection[asyncpg.Record]) -> None:
    """Register JSON/JSONB codecs on a new connection.

    Structured value maps (``metadata``, ``parameters``) travel as plain
    dicts in both directions; callers never call ``json.dumps()`` or
    ``json.loads()`` themselves.
    """
    for type_name in ("jsonb", "json"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


# ---------------------------------------------------------------------------
# Configuration Models
# ---------------------------------------------------------------------------


class DatabaseConfig(BaseModel):
    """PostgreSQL connection parameters.

    The password is read from the environment variable named by
    ``password_env`` (default: ``DB_PASSWORD``) and is never taken from
    the YAML file.

    Warning:
        ``password`` is a ``SecretStr`` and never appears in string
        representations. Set the environment variable before building
        this model or validation fails.
    """

    host: str = Field(default="localhost", min_length=1, description="Database hostname")
    port: int = Field(default=5432, ge=1, le=65535, description="Database port")
    database: str = Field(default="smarthub", min_length=1, description="Database name")
    user: str = Field(default="postgres", min_length=1, description="Database user")
    password_env: str = Field(
        default=_DEFAULT_PASSWORD_ENV,
        min_length=1,
        description="Environment variable name for database password",
    )
    password: SecretStr = Field(description="Database password (loaded from password_env)")

    @model_validator(mode="before")
    @classmethod
    def resolve_password(cls, data: Any) -> Any:
        """Resolve the database password from the environment variable."""
        if isinstance(data, dict) and data.get("password") is None:
            env_var = data.get("password_env", _DEFAULT_PASSWORD_ENV)
            value = os.getenv(env_var)
            if not value:
                raise ValueError(f"{env_var} environment variable not set")
            data = {**data, "password": SecretStr(value)}
        return data


class PoolLimitsConfig(BaseModel):
    """Connection pool size and recycling limits."""

    min_size: int = Field(default=2, ge=1, le=100, description="Minimum connections")
    max_size: int = Field(default=10, ge=1, le=200, description="Maximum connections")
    max_queries: int = Field(default=50_000, ge=100, description="Queries before recycling")
    max_inactive_connection_lifetime: float = Field(
        default=300.0, ge=0.0, description="Idle timeout (seconds)"
    )

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: int, info: ValidationInfo) -> int:
        """Ensure max_size >= min_size."""
        min_size = info.data.get("min_size", 2)
        if v < min_size:
            raise ValueError(f"max_size ({v}) must be >= min_size ({min_size})")
        return v


class PoolTimeoutsConfig(BaseModel):
    """Timeout settings for pool operations (in seconds).

    Attributes:
        acquisition: Upper bound for opening a connection.
        query: Client-side timeout applied to every statement issued
            through the query methods (``None`` disables it).
    """

    acquisition: float = Field(default=10.0, ge=0.1, description="Connection acquisition timeout")
    query: float | None = Field(default=30.0, ge=0.1, description="Per-statement timeout")


class PoolRetryConfig(BaseModel):
    """Retry strategy for failed connection attempts.

    Note:
        Exponential backoff (the default) waits
        ``initial_delay * 2^attempt`` capped at ``max_delay``; linear
        backoff waits ``initial_delay * (attempt + 1)``.
    """

    max_attempts: int = Field(default=3, ge=1, le=10, description="Max retry attempts")
    initial_delay: float = Field(default=1.0, ge=0.1, description="Initial retry delay")
    max_delay: float = Field(default=10.0, ge=0.1, description="Maximum retry delay")
    exponential_backoff: bool = Field(default=True, description="Use exponential backoff")

    @field_validator("max_delay")
    @classmethod
    def validate_max_delay(cls, v: float, info: ValidationInfo) -> float:
        """Ensure max_delay >= initial_delay."""
        initial_delay = info.data.get("initial_delay", 1.0)
        if v < initial_delay:
            raise ValueError(f"max_delay ({v}) must be >= initial_delay ({initial_delay})")
        return v


class ServerSettingsConfig(BaseModel):
    """PostgreSQL session settings sent with every pooled connection.

    ``statement_timeout`` is in milliseconds (server-side, ``0`` disables
    it) and is independent from the client-side
    [PoolTimeoutsConfig.query][smarthub.core.pool.PoolTimeoutsConfig].
    """

    application_name: str = Field(default="smarthub", description="Application name")
    timezone: str = Field(default="UTC", description="Timezone")
    statement_timeout: int = Field(
        default=60_000, ge=0, description="Max query execution time in milliseconds (0=unlimited)"
    )


class PoolConfig(BaseModel):
    """Aggregate configuration for the connection pool.

    See Also:
        [DatabaseConfig][smarthub.core.pool.DatabaseConfig]: Credentials.
        [PoolLimitsConfig][smarthub.core.pool.PoolLimitsConfig]: Pool sizing.
        [PoolTimeoutsConfig][smarthub.core.pool.PoolTimeoutsConfig]: Timeouts.
        [PoolRetryConfig][smarthub.core.pool.PoolRetryConfig]: Backoff.
        [ServerSettingsConfig][smarthub.core.pool.ServerSettingsConfig]:
            Session settings.
    """

    database: DatabaseConfig = Field(default_factory=lambda: DatabaseConfig.model_validate({}))
    limits: PoolLimitsConfig = Field(default_factory=PoolLimitsConfig)
    timeouts: PoolTimeoutsConfig = Field(default_factory=PoolTimeoutsConfig)
    retry: PoolRetryConfig = Field(default_factory=PoolRetryConfig)
    server_settings: ServerSettingsConfig = Field(default_factory=ServerSettingsConfig)


# ---------------------------------------------------------------------------
# Pool Class
# ---------------------------------------------------------------------------


class Pool:
    """Async PostgreSQL connection pool manager.

    Wraps ``asyncpg.Pool`` with connect retry, per-statement retry on
    transient connection errors, a transactional context manager, and a
    reachability probe used by the health RPC.

    Examples:
        ```python
        pool = Pool(PoolConfig(), logger=Logger("pool"))

        async with pool:
            healthy = await pool.ping()
        ```
    """

    def __init__(self, config: PoolConfig | None = None, *, logger: Logger | None = None) -> None:
        """Initialize a disconnected pool.

        Args:
            config: Pool configuration. Defaults read ``DB_PASSWORD`` from
                the environment.
            logger: Structured logger; defaults to ``Logger("pool")``.
        """
        self._config = config or PoolConfig()
        self._pool: asyncpg.Pool[asyncpg.Record] | None = None
        self._is_connected: bool = False
        self._connection_lock = asyncio.Lock()
        self._logger = logger or Logger("pool")

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> Pool:
        """Create a Pool from a dictionary matching ``PoolConfig``."""
        return cls(config=PoolConfig.model_validate(config_dict))

    def _retry_delay(self, attempt: int) -> float:
        retry = self._config.retry
        if retry.exponential_backoff:
            delay = retry.initial_delay * (2**attempt)
        else:
            delay = retry.initial_delay * (attempt + 1)
        return float(min(delay, retry.max_delay))

    # -------------------------------------------------------------------------
    # Connection Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Create the asyncpg pool, retrying with backoff on failure.

        Guarded by an internal lock, so concurrent callers create the pool
        only once.

        Raises:
            ConnectionPoolError: If all retry attempts are exhausted.
        """
        async with self._connection_lock:
            if self._is_connected:
                return

            db = self._config.database
            settings = self._config.server_settings

            self._logger.info(
                "connection_starting",
                host=db.host,
                port=db.port,
                database=db.database,
            )

            for attempt in range(self._config.retry.max_attempts):
                try:
                    self._pool = await asyncpg.create_pool(
                        host=db.host,
                        port=db.port,
                        database=db.database,
                        user=db.user,
                        password=db.password.get_secret_value(),
                        min_size=self._config.limits.min_size,
                        max_size=self._config.limits.max_size,
                        max_queries=self._config.limits.max_queries,
                        max_inactive_connection_lifetime=self._config.limits.max_inactive_connection_lifetime,
                        timeout=self._config.timeouts.acquisition,
                        init=_init_connection,
                        server_settings={
                            "application_name": settings.application_name,
                            "timezone": settings.timezone,
                            "statement_timeout": str(settings.statement_timeout),
                        },
                    )
                    self._is_connected = True
                    self._logger.info("connection_established")
                    return

                except (asyncpg.PostgresError, OSError, ConnectionError) as e:
                    if attempt + 1 >= self._config.retry.max_attempts:
                        self._logger.error(
                            "connection_failed",
                            attempts=attempt + 1,
                            error=str(e),
                        )
                        raise ConnectionPoolError(
                            f"Failed to connect after {attempt + 1} attempts: {e}"
                        ) from e

                    delay = self._retry_delay(attempt)
                    self._logger.warning(
                        "connection_retry",
                        attempt=attempt + 1,
                        delay=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)

    async def close(self) -> None:
        """Close the pool and release all connections. Idempotent."""
        async with self._connection_lock:
            if self._pool is not None:
                try:
                    await self._pool.close()
                    self._logger.info("connection_closed")
                finally:
                    self._pool = None
                    self._is_connected = False

    # -------------------------------------------------------------------------
    # Connection Acquisition
    # -------------------------------------------------------------------------

    def acquire(self) -> AbstractAsyncContextManager[asyncpg.Connection[asyncpg.Record]]:
        """Borrow a connection; it returns to the pool when the context exits.

        Raises:
            RuntimeError: If the pool has not been connected yet.
        """
        if not self._is_connected or self._pool is None:
            raise RuntimeError("Pool not connected. Call connect() first.")
        return cast(
            "AbstractAsyncContextManager[asyncpg.Connection[asyncpg.Record]]",
            self._pool.acquire(),
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection[asyncpg.Record]]:
        """Borrow a connection inside a transaction.

        Commits on normal exit and rolls back if an exception escapes.
        Only schema migrations use this; catalog operations are single
        statements.
        """
        async with self.acquire() as conn, conn.transaction():
            yield conn

    # -------------------------------------------------------------------------
    # Query Methods (with retry for transient connection errors)
    # -------------------------------------------------------------------------

    async def _execute_with_retry(
        self,
        operation: Literal["fetch", "fetchrow", "fetchval", "execute"],
        query: str,
        args: tuple[Any, ...],
        timeout: float | None,  # noqa: ASYNC109
        **kwargs: Any,
    ) -> Any:
        """Run one asyncpg operation, retrying on broken connections.

        Each attempt borrows a fresh connection, so a socket that died
        mid-query is not reused.

        Raises:
            ConnectionPoolError: If every attempt hit a connection error.
        """
        max_attempts = self._config.retry.max_attempts
        if timeout is None:
            timeout = self._config.timeouts.query

        for attempt in range(max_attempts):
            try:
                async with self.acquire() as conn:
                    method = getattr(conn, operation)
                    return await method(query, *args, timeout=timeout, **kwargs)
            except (
                asyncpg.InterfaceError,
                asyncpg.ConnectionDoesNotExistError,
            ) as e:
                if attempt < max_attempts - 1:
                    delay = self._retry_delay(attempt)
                    self._logger.warning(
                        "query_retry",
                        operation=operation,
                        attempt=attempt + 1,
                        delay_s=delay,
                        error=str(e),
                    )
                    await asyncio.sleep(delay)
                    continue
                self._logger.error(
                    "query_failed",
                    operation=operation,
                    attempts=max_attempts,
                    error=str(e),
                )
                raise ConnectionPoolError(
                    f"{operation} failed after {max_attempts} attempts: {e}"
                ) from e

        raise RuntimeError("Unexpected state in _execute_with_retry")

    async def fetch(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> list[asyncpg.Record]:
        """Execute a query and return all matching rows (possibly empty)."""
        result = await self._execute_with_retry("fetch", query, args, timeout)
        return cast("list[asyncpg.Record]", result)

    async def fetchrow(
        self,
        query: str,
        *args: Any,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> asyncpg.Record | None:
        """Execute a query and return the first row, or None."""
        result = await self._execute_with_retry("fetchrow", query, args, timeout)
        return cast("asyncpg.Record | None", result)

    async def fetchval(
        self,
        query: str,
        *args: Any,
        column: int = 0,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> Any:
        """Execute a query and return one column of the first row, or None."""
        return await self._execute_with_retry("fetchval", query, args, timeout, column=column)

    async def execute(self, query: str, *args: Any, timeout: float | None = None) -> str:  # noqa: ASYNC109
        """Execute a statement and return its command tag (e.g. ``"DELETE 1"``)."""
        result = await self._execute_with_retry("execute", query, args, timeout)
        return cast("str", result)

    async def ping(self) -> bool:
        """Probe storage reachability with ``SELECT 1``.

        Returns:
            True if the database answered, False on any database or
            connection failure. Never raises for an unreachable server.
        """
        try:
            return await self.fetchval("SELECT 1") == 1
        except (asyncpg.PostgresError, ConnectionPoolError, RuntimeError, OSError, TimeoutError) as e:
            self._logger.warning("ping_failed", error=str(e))
            return False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        """Whether the pool has an active connection to the database."""
        return self._is_connected

    @property
    def config(self) -> PoolConfig:
        """The pool configuration (read-only)."""
        return self._config

    # -------------------------------------------------------------------------
    # Context Manager
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> Pool:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        await self.close()

    def __repr__(self) -> str:
        db = self._config.database
        return f"Pool(host={db.host}, database={db.database}, connected={self._is_connected})"
