"""Board data models."""

from touchline.core.models.field import Bounds, Position, SurfaceRect
from touchline.core.models.formation import Formation, Slot, TacticalZone
from touchline.core.models.player import Player, parse_players
from touchline.core.models.templates import (
    FORMATION_TEMPLATES,
    FormationTemplate,
    build_formation,
    get_template,
)

__all__ = [
    "Bounds",
    "FORMATION_TEMPLATES",
    "Formation",
    "FormationTemplate",
    "Player",
    "Position",
    "Slot",
    "SurfaceRect",
    "TacticalZone",
    "build_formation",
    "get_template",
    "parse_players",
]
