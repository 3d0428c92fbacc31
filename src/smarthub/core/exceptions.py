"""SmartHub exception hierarchy.

Provides typed exceptions for every failure category of the
request-to-storage pipeline. Lower layers raise these (or let driver
errors propagate untouched); only the RPC handlers translate them into
caller-facing status codes.

Exception hierarchy:

```text
SmartHubError (base -- never raised directly)
├── ConfigurationError         -- config validation, missing keys, bad YAML
├── DatabaseError              -- pool and repository failures
│   ├── ConnectionPoolError    -- transient: pool exhausted, network blip
│   └── NotFoundError          -- no row matched the given id
├── InvalidArgumentError       -- caller input, never retried
│   ├── InvalidIdentifierError -- malformed or empty identifier
│   ├── InvalidRequestError    -- missing payload, unknown enum value
│   └── ValidationFailedError  -- aggregated field rule violations
└── ConversionError            -- domain value not representable on the wire
```

See Also:
    [Pool][smarthub.core.pool.Pool]: Raises
        [ConnectionPoolError][smarthub.core.exceptions.ConnectionPoolError]
        once connection retries are exhausted.
    [Validator][smarthub.validation.validator.Validator]: Raises the
        [InvalidArgumentError][smarthub.core.exceptions.InvalidArgumentError]
        family.
    [classify_error()][smarthub.rpc.status.classify_error]: Maps this
        hierarchy to RPC status codes.
"""

from __future__ import annotations

from typing import NamedTuple


class SmartHubError(Exception):
    """Base exception for all SmartHub errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(SmartHubError):
    """Invalid or missing configuration (YAML, env vars, CLI flags).

    See Also:
        [load_yaml()][smarthub.core.yaml.load_yaml]: YAML loading function
            that may trigger configuration errors.
    """


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


class DatabaseError(SmartHubError):
    """Base for all database-related errors.

    See Also:
        [ConnectionPoolError][smarthub.core.exceptions.ConnectionPoolError]:
            Transient connection-level failures.
        [NotFoundError][smarthub.core.exceptions.NotFoundError]: Zero rows
            matched a keyed lookup or update.
    """


class ConnectionPoolError(DatabaseError):
    """Transient database error: pool exhausted, connection refused, network blip.

    Callers may retry after a backoff.

    See Also:
        [Pool][smarthub.core.pool.Pool]: Connection pool that raises
            this exception on transient failures.
    """


class NotFoundError(DatabaseError):
    """No row matched the requested identifier.

    Raised by repositories when a ``SELECT`` or ``UPDATE ... RETURNING``
    keyed by ``id`` produces no row.

    Attributes:
        entity: Entity name (e.g. ``"smart model"``).
        entity_id: The identifier that matched nothing.
    """

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


# ---------------------------------------------------------------------------
# Caller input
# ---------------------------------------------------------------------------


class InvalidArgumentError(SmartHubError):
    """Base for errors caused by caller-supplied input.

    The message is safe to return to the caller verbatim.
    """


class InvalidIdentifierError(InvalidArgumentError):
    """An externally supplied identifier is empty or not a UUID."""


class InvalidRequestError(InvalidArgumentError):
    """The request payload is missing or carries an unacceptable value."""


class FieldViolation(NamedTuple):
    """A single violated field rule."""

    field: str
    message: str


class ValidationFailedError(InvalidArgumentError):
    """One or more field rules failed structural validation.

    Attributes:
        violations: Every violated rule, in field declaration order.

    Examples:
        ```python
        err = ValidationFailedError([FieldViolation("name", "is required")])
        str(err)  # "validation failed: name is required"
        ```
    """

    def __init__(self, violations: list[FieldViolation]) -> None:
        detail = "; ".join(f"{v.field} {v.message}" for v in violations)
        super().__init__(f"validation failed: {detail}")
        self.violations = violations


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


class ConversionError(SmartHubError):
    """A domain value cannot be represented in the wire format.

    Typically a structured value map holding something outside the JSON
    value space (``NaN``, ``bytes``, ``set``, non-string keys, ...).
    """
