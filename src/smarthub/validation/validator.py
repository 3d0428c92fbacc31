"""Structural and identifier validation for catalog entities.

[Validator][smarthub.validation.validator.Validator] is the single point
that enforces the field rules of
[SmartModel][smarthub.models.smart_model.SmartModel] and
[SmartFeature][smarthub.models.smart_feature.SmartFeature]. Handlers run
it on every mutating call before the service layer is reached.

Structural validation collects every violated rule and raises one
[ValidationFailedError][smarthub.core.exceptions.ValidationFailedError]
listing all of them. Identifier validation runs on its own, before any
storage round trip, and raises
[InvalidIdentifierError][smarthub.core.exceptions.InvalidIdentifierError].

Examples:
    ```python
    validator = Validator()
    model_id = validator.validate_identifier(request.id)
    validator.validate_model(model)
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from smarthub.core.exceptions import (
    FieldViolation,
    InvalidIdentifierError,
    ValidationFailedError,
)
from smarthub.core.logger import Logger
from smarthub.models.constants import (
    DESCRIPTION_MAX_LENGTH,
    MANUFACTURER_MAX_LENGTH,
    MODEL_NUMBER_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    ModelCategory,
    ModelType,
    ProtocolType,
)

from . import rules


if TYPE_CHECKING:
    from collections.abc import Callable

    from smarthub.models import SmartFeature, SmartModel


class Validator:
    """Validates catalog entities and externally supplied identifiers.

    Stateless apart from its logger; one instance is built at bootstrap
    and shared by every handler.
    """

    def __init__(self, *, logger: Logger | None = None) -> None:
        self._logger = logger or Logger("validator")

    def validate_identifier(self, value: Any, field: str = "id") -> UUID:
        """Parse an identifier supplied by a caller.

        Args:
            value: The raw identifier (normally a string from the wire).
            field: Field name used in the error message.

        Returns:
            The parsed ``UUID``.

        Raises:
            InvalidIdentifierError: If ``value`` is empty or not a UUID.
        """
        if isinstance(value, UUID):
            return value
        if not isinstance(value, str) or not value:
            raise InvalidIdentifierError(f"{field} is required")
        try:
            return UUID(value)
        except ValueError:
            raise InvalidIdentifierError(f"{field} must be a valid UUID, got {value!r}") from None

    def validate_model(self, model: SmartModel) -> None:
        """Check every field rule of a smart model.

        Raises:
            ValidationFailedError: Listing every violated rule.
        """
        violations = self._collect(
            [
                ("name", lambda: self._check_name(model.name)),
                ("description", lambda: self._check_description(model.description)),
                ("type", lambda: rules.check_enum(model.type, ModelType)),
                ("category", lambda: rules.check_enum(model.category, ModelCategory)),
                (
                    "manufacturer",
                    lambda: rules.check_optional_length(
                        model.manufacturer, max_length=MANUFACTURER_MAX_LENGTH
                    ),
                ),
                ("model_number", lambda: self._check_model_number(model.model_number)),
                ("metadata", lambda: rules.check_value_map(model.metadata)),
            ]
        )
        violations.extend(self._check_timestamps(model.created_at, model.updated_at))
        self._raise_if_any("smart_model", violations)

    def validate_feature(self, feature: SmartFeature, *, for_update: bool = False) -> None:
        """Check every field rule of a smart feature.

        Args:
            feature: The feature to check.
            for_update: Skip the ``model_id`` requirement; updates never
                change ownership and do not carry it.

        Raises:
            ValidationFailedError: Listing every violated rule.
        """
        checks: list[tuple[str, Callable[[], str | None]]] = []
        if not for_update:
            checks.append(("model_id", lambda: self._check_model_id(feature.model_id)))
        checks += [
            ("name", lambda: self._check_name(feature.name)),
            ("description", lambda: self._check_description(feature.description)),
            ("protocol", lambda: rules.check_enum(feature.protocol, ProtocolType)),
            ("interface_path", lambda: self._check_interface_path(feature.interface_path)),
            ("parameters", lambda: rules.check_value_map(feature.parameters)),
        ]
        violations = self._collect(checks)
        violations.extend(self._check_timestamps(feature.created_at, feature.updated_at))
        self._raise_if_any("smart_feature", violations)

    # -------------------------------------------------------------------------
    # Field checks
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_name(value: Any) -> str | None:
        return rules.check_required_length(
            value, min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH
        )

    @staticmethod
    def _check_description(value: Any) -> str | None:
        return rules.check_required_length(value, max_length=DESCRIPTION_MAX_LENGTH)

    @staticmethod
    def _check_model_number(value: Any) -> str | None:
        return rules.check_optional_length(
            value, max_length=MODEL_NUMBER_MAX_LENGTH
        ) or rules.check_alphanumeric(value)

    @staticmethod
    def _check_model_id(value: Any) -> str | None:
        if value is None:
            return "is required"
        if not isinstance(value, UUID):
            return "must be a UUID"
        return None

    @staticmethod
    def _check_interface_path(value: Any) -> str | None:
        return rules.check_required_length(value) or rules.check_starts_with(value, "/")

    @staticmethod
    def _check_timestamps(created_at: Any, updated_at: Any) -> list[FieldViolation]:
        violations = [
            FieldViolation(name, problem)
            for name, problem in (
                ("created_at", rules.check_timestamp(created_at)),
                ("updated_at", rules.check_timestamp(updated_at)),
            )
            if problem
        ]
        if not violations and created_at > updated_at:
            violations.append(FieldViolation("created_at", "must not be after updated_at"))
        return violations

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    @staticmethod
    def _collect(checks: list[tuple[str, Callable[[], str | None]]]) -> list[FieldViolation]:
        return [FieldViolation(name, problem) for name, check in checks if (problem := check())]

    def _raise_if_any(self, entity: str, violations: list[FieldViolation]) -> None:
        if not violations:
            return
        self._logger.debug(
            "validation_failed",
            entity=entity,
            fields=",".join(v.field for v in violations),
        )
        raise ValidationFailedError(violations)
