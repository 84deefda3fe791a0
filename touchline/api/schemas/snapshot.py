"""Pydantic schemas for the persisted/transport formation snapshot.

Wire shape (camelCase keys):

    {
      "formationId": ..., "name": ...,
      "slots": [{"id", "role", "defaultPosition": {"x", "y"}, "playerId"}],
      "metadata": {"createdAt", "updatedAt", "version"}
    }
"""

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from touchline.board.errors import CorruptedSnapshotError
from touchline.core.enums import Role, Team
from touchline.core.models.field import Position
from touchline.core.models.formation import Formation, Slot
from touchline.core.models.templates import PREFERRED_ROLES, build_formation

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "4-4-2"


class PositionSchema(BaseModel):
    """A point in percentage space."""

    x: float = Field(..., ge=0, le=100, allow_inf_nan=False)
    y: float = Field(..., ge=0, le=100, allow_inf_nan=False)

    @classmethod
    def from_model(cls, pos: Position) -> "PositionSchema":
        return cls(x=pos.x, y=pos.y)

    def to_model(self) -> Position:
        return Position(self.x, self.y)


class SlotSchema(BaseModel):
    """One slot and its occupant, if any."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    role: str
    default_position: PositionSchema = Field(..., alias="defaultPosition")
    player_id: Optional[str] = Field(None, alias="playerId")

    @field_validator("role")
    @classmethod
    def known_role(cls, value: str) -> str:
        return Role.parse(value).value

    @classmethod
    def from_model(cls, slot: Slot) -> "SlotSchema":
        return cls(
            id=slot.id,
            role=slot.role.value,
            default_position=PositionSchema.from_model(slot.default_position),
            player_id=slot.occupant_id,
        )

    def to_model(self) -> Slot:
        role = Role.parse(self.role)
        return Slot(
            id=self.id,
            default_position=self.default_position.to_model(),
            role=role,
            occupant_id=self.player_id,
            preferred_roles=PREFERRED_ROLES.get(role, ()),
        )


class MetadataSchema(BaseModel):
    """Timestamps and the concurrency version."""

    model_config = ConfigDict(populate_by_name=True)

    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    version: int = Field(1, ge=1)


class FormationSnapshotSchema(BaseModel):
    """Boundary-stable snapshot of a formation."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "formationId": "home-4-4-2",
                "name": "4-4-2",
                "slots": [
                    {
                        "id": "GK1",
                        "role": "GK",
                        "defaultPosition": {"x": 50, "y": 95},
                        "playerId": "p1",
                    },
                ],
                "metadata": {
                    "createdAt": "2024-01-01T12:00:00",
                    "updatedAt": "2024-01-01T12:05:00",
                    "version": 3,
                },
            }
        },
    )

    formation_id: str = Field(..., alias="formationId", min_length=1)
    name: str = ""
    slots: list[SlotSchema] = Field(default_factory=list)
    metadata: MetadataSchema

    @model_validator(mode="after")
    def one_to_one(self) -> "FormationSnapshotSchema":
        slot_ids = [s.id for s in self.slots]
        if len(slot_ids) != len(set(slot_ids)):
            raise ValueError("Duplicate slot ids")
        occupants = [s.player_id for s in self.slots if s.player_id is not None]
        if len(occupants) != len(set(occupants)):
            raise ValueError("A player occupies more than one slot")
        return self

    @classmethod
    def from_model(cls, formation: Formation) -> "FormationSnapshotSchema":
        return cls(
            formation_id=formation.id,
            name=formation.name,
            slots=[SlotSchema.from_model(slot) for slot in formation.slots],
            metadata=MetadataSchema(
                created_at=formation.created_at,
                updated_at=formation.updated_at,
                version=formation.version,
            ),
        )

    def to_model(self, team: Team = Team.HOME, is_custom: bool = False) -> Formation:
        return Formation(
            id=self.formation_id,
            name=self.name,
            slots=tuple(slot.to_model() for slot in self.slots),
            team=team,
            is_custom=is_custom,
            created_at=self.metadata.created_at,
            updated_at=self.metadata.updated_at,
            version=self.metadata.version,
        )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def snapshot_from_formation(formation: Formation) -> dict:
    """Export a formation in the wire shape."""
    return FormationSnapshotSchema.from_model(formation).to_wire()


def formation_from_snapshot(
    data: Any,
    team: Team = Team.HOME,
    is_custom: bool = False,
) -> Formation:
    """
    Load a formation from wire data.

    Raises CorruptedSnapshotError if anything in it is malformed; nothing
    is partially applied.
    """
    if not isinstance(data, dict):
        raise CorruptedSnapshotError(f"Snapshot must be an object, got {type(data).__name__}")
    try:
        schema = FormationSnapshotSchema.model_validate(data)
    except ValidationError as e:
        raise CorruptedSnapshotError(f"Invalid formation snapshot: {e.error_count()} errors") from e
    return schema.to_model(team=team, is_custom=is_custom)


def load_formation_or_default(
    data: Any,
    team: Team = Team.HOME,
    default_template: str = DEFAULT_TEMPLATE,
) -> Formation:
    """Load a snapshot, falling back to an empty template formation if it is corrupted."""
    try:
        return formation_from_snapshot(data, team=team)
    except CorruptedSnapshotError as e:
        logger.warning(f"Discarding corrupted formation snapshot: {e}")
        return build_formation(default_template, team=team)
