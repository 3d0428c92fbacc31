"""Smart model entity for database persistence.

Pure data container representing a row in the ``smart_models`` table. The
model does no validation of its own: field rules live in
[Validator][smarthub.validation.validator.Validator], which runs before
every mutating call reaches a repository.

Database parameter containers use ``NamedTuple`` with fields in the column
order used by the repository's ``INSERT`` and ``UPDATE`` statements.

See Also:
    [PgSmartModelRepository][smarthub.repositories.smart_model.PgSmartModelRepository]:
        Persists and loads instances of this class.
    [SmartModelMapper][smarthub.rpc.mappers.SmartModelMapper]: Converts
        between wire messages and this class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any, NamedTuple
from uuid import UUID  # noqa: TC003

from .constants import ModelCategory, ModelType


if TYPE_CHECKING:
    from collections.abc import Mapping


class SmartModelDbParams(NamedTuple):
    """Database parameter container for the ``smart_models`` table.

    Column order matches
    ``INSERT INTO smart_models (id, name, description, type, category,
    manufacturer, model_number, metadata, created_at, updated_at)``.

    See Also:
        [SmartModel.to_db_params][smarthub.models.smart_model.SmartModel.to_db_params]:
            Builds an instance of this tuple.
    """

    id: UUID
    name: str
    description: str
    type: str
    category: str
    manufacturer: str
    model_number: str
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class SmartModel:
    """A catalog archetype: a class of device or service.

    Attributes:
        id: Server-generated identifier, immutable after creation.
        name: Display name (2 to 255 characters).
        description: Free text (at most 1000 characters).
        type: [ModelType][smarthub.models.constants.ModelType] of the archetype.
        category: [ModelCategory][smarthub.models.constants.ModelCategory].
        manufacturer: Optional manufacturer name (empty when unknown).
        model_number: Optional alphanumeric model number.
        metadata: Structured value map with non-empty string keys.
        created_at: Creation instant (timezone-aware).
        updated_at: Last update instant, never earlier than ``created_at``.

    Examples:
        ```python
        model = SmartModel(
            id=uuid4(),
            name="Thermostat",
            description="Smart thermostat",
            type=ModelType.DEVICE,
            category=ModelCategory.WEATHER,
            created_at=now,
            updated_at=now,
        )
        model.to_db_params()  # SmartModelDbParams(...)
        ```
    """

    id: UUID
    name: str
    description: str
    type: ModelType
    category: ModelCategory
    created_at: datetime
    updated_at: datetime
    manufacturer: str = ""
    model_number: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_db_params(self) -> SmartModelDbParams:
        """Return the row values in ``INSERT`` column order."""
        return SmartModelDbParams(
            id=self.id,
            name=self.name,
            description=self.description,
            type=str(self.type),
            category=str(self.category),
            manufacturer=self.manufacturer,
            model_number=self.model_number,
            metadata=dict(self.metadata),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_db_row(cls, row: Mapping[str, Any]) -> SmartModel:
        """Build a ``SmartModel`` from a ``smart_models`` row.

        Args:
            row: An ``asyncpg.Record`` or any mapping keyed by column name.
                ``NULL`` text and JSONB columns become empty values.

        Raises:
            ValueError: If ``type`` or ``category`` holds a value outside
                the enumerations.
        """
        return cls(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            type=ModelType(row["type"]),
            category=ModelCategory(row["category"]),
            manufacturer=row["manufacturer"] or "",
            model_number=row["model_number"] or "",
            metadata=dict(row["metadata"] or {}),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
