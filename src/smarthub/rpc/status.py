"""RPC status codes and error classification.

[classify_error()][smarthub.rpc.status.classify_error] is the single place
where the [SmartHubError][smarthub.core.exceptions.SmartHubError] hierarchy
is translated into a caller-facing
[RpcError][smarthub.rpc.status.RpcError]. Caller input errors keep their
own message; storage and conversion failures are logged with their cause
and surfaced with a generic message only.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

from smarthub.core.exceptions import ConversionError, InvalidArgumentError, NotFoundError


if TYPE_CHECKING:
    from smarthub.core.logger import Logger


class StatusCode(IntEnum):
    """Canonical RPC status codes (gRPC numbering)."""

    OK = 0
    CANCELLED = 1
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    INTERNAL = 13
    UNAVAILABLE = 14

    @property
    def http_status(self) -> int:
        """HTTP status carrying this code on the JSON transport."""
        return _HTTP_STATUS[self]


_HTTP_STATUS: dict[StatusCode, int] = {
    StatusCode.OK: 200,
    StatusCode.CANCELLED: 499,
    StatusCode.INVALID_ARGUMENT: 400,
    StatusCode.DEADLINE_EXCEEDED: 504,
    StatusCode.NOT_FOUND: 404,
    StatusCode.INTERNAL: 500,
    StatusCode.UNAVAILABLE: 503,
}


class RpcError(Exception):
    """A classified failure ready to be returned to the caller.

    Attributes:
        code: The [StatusCode][smarthub.rpc.status.StatusCode].
        message: Caller-safe reason.
    """

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(f"{code.name}: {message}")
        self.code = code
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code.name, "message": self.message}


def classify_error(exc: Exception, *, action: str, entity: str, logger: Logger) -> RpcError:
    """Translate an exception raised below the handler into an ``RpcError``.

    Args:
        exc: The exception raised by the mapper, validator or service.
        action: Verb of the failing operation (``"create"``, ``"list"``, ...).
        entity: Entity name (``"smart model"``, ``"smart features"``, ...).
        logger: Logger receiving the cause of internal failures.

    Returns:
        The classified error. ``RpcError`` instances pass through unchanged.
    """
    if isinstance(exc, RpcError):
        return exc
    if isinstance(exc, InvalidArgumentError):
        return RpcError(StatusCode.INVALID_ARGUMENT, str(exc))
    if isinstance(exc, NotFoundError):
        return RpcError(StatusCode.NOT_FOUND, f"{exc.entity} not found")
    if isinstance(exc, ConversionError):
        logger.error("conversion_failed", action=action, entity=entity, error=str(exc))
        return RpcError(StatusCode.INTERNAL, f"failed to convert {entity} to wire format")

    logger.error(
        "request_failed",
        action=action,
        entity=entity,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return RpcError(StatusCode.INTERNAL, f"failed to {action} {entity}")
