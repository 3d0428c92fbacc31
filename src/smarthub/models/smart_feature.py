"""Smart feature entity for database persistence.

Pure data container representing a row in the ``smart_features`` table.
A feature always belongs to one [SmartModel][smarthub.models.smart_model.SmartModel]
through ``model_id``; the reference is enforced by the foreign key on the
table, never by this class.

See Also:
    [PgSmartFeatureRepository][smarthub.repositories.smart_feature.PgSmartFeatureRepository]:
        Persists and loads instances of this class.
    [SmartFeatureMapper][smarthub.rpc.mappers.SmartFeatureMapper]: Converts
        between wire messages and this class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Any, NamedTuple
from uuid import UUID  # noqa: TC003

from .constants import ProtocolType


if TYPE_CHECKING:
    from collections.abc import Mapping


class SmartFeatureDbParams(NamedTuple):
    """Database parameter container for the ``smart_features`` table.

    Column order matches
    ``INSERT INTO smart_features (id, model_id, name, description, protocol,
    interface_path, parameters, created_at, updated_at)``.
    """

    id: UUID
    model_id: UUID | None
    name: str
    description: str
    protocol: str
    interface_path: str
    parameters: dict[str, Any]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class SmartFeature:
    """A named capability exposed by a smart model.

    Attributes:
        id: Server-generated identifier.
        model_id: Owning model. ``None`` only on update payloads, which
            never change ownership.
        name: Display name (2 to 255 characters).
        description: Free text (at most 1000 characters).
        protocol: [ProtocolType][smarthub.models.constants.ProtocolType] used
            to reach the feature.
        interface_path: Endpoint path, starting with ``/``.
        parameters: Structured value map with non-empty string keys.
        created_at: Creation instant (timezone-aware).
        updated_at: Last update instant, never earlier than ``created_at``.
    """

    id: UUID
    model_id: UUID | None
    name: str
    description: str
    protocol: ProtocolType
    interface_path: str
    created_at: datetime
    updated_at: datetime
    parameters: dict[str, Any] = field(default_factory=dict)

    def to_db_params(self) -> SmartFeatureDbParams:
        """Return the row values in ``INSERT`` column order."""
        return SmartFeatureDbParams(
            id=self.id,
            model_id=self.model_id,
            name=self.name,
            description=self.description,
            protocol=str(self.protocol),
            interface_path=self.interface_path,
            parameters=dict(self.parameters),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_db_row(cls, row: Mapping[str, Any]) -> SmartFeature:
        """Build a ``SmartFeature`` from a ``smart_features`` row."""
        return cls(
            id=row["id"],
            model_id=row["model_id"],
            name=row["name"],
            description=row["description"],
            protocol=ProtocolType(row["protocol"]),
            interface_path=row["interface_path"],
            parameters=dict(row["parameters"] or {}),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
