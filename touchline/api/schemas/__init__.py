"""Pydantic schemas for data crossing the engine boundary."""

from touchline.api.schemas.snapshot import (
    FormationSnapshotSchema,
    MetadataSchema,
    PositionSchema,
    SlotSchema,
    formation_from_snapshot,
    load_formation_or_default,
    snapshot_from_formation,
)

__all__ = [
    "FormationSnapshotSchema",
    "MetadataSchema",
    "PositionSchema",
    "SlotSchema",
    "formation_from_snapshot",
    "load_formation_or_default",
    "snapshot_from_formation",
]
