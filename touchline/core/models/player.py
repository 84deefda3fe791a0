"""Player model."""

from dataclasses import dataclass, field, replace
from typing import Optional
from uuid import uuid4

from touchline.core.enums import Availability, Form, Morale, Role, Team
from touchline.core.models.field import Position


DEFAULT_RADIUS = 3.0  # Collision radius in percent of the surface


@dataclass(frozen=True)
class Player:
    """
    A token on the board.

    The host owns players; the engine only reads them and produces new
    positions. Role tags are parsed on construction so an unknown role is
    rejected immediately instead of at first use.
    """

    id: str = field(default_factory=lambda: str(uuid4()))
    name: str = ""
    position: Position = field(default_factory=lambda: Position(50.0, 50.0))
    role: Role = Role.CM
    team: Team = Team.HOME
    availability: Availability = Availability.AVAILABLE

    # Condition, applied as multipliers when scoring slot fit
    form: Form = Form.AVERAGE
    morale: Morale = Morale.AVERAGE
    rating: int = 60  # 0-100

    radius: float = DEFAULT_RADIUS

    def __post_init__(self) -> None:
        """Normalize loosely typed fields and reject unknown roles."""
        object.__setattr__(self, "role", Role.parse(self.role))
        object.__setattr__(self, "team", Team(self.team))
        object.__setattr__(self, "availability", Availability(self.availability))
        object.__setattr__(self, "form", Form(self.form))
        object.__setattr__(self, "morale", Morale(self.morale))
        object.__setattr__(self, "rating", max(0, min(100, int(self.rating))))

    @property
    def is_available(self) -> bool:
        return self.availability is Availability.AVAILABLE

    @property
    def display_name(self) -> str:
        """Name for prompts, falling back to the id."""
        return self.name or self.id

    def moved_to(self, position: Position) -> "Player":
        """Return a copy of this player at a new position."""
        return replace(self, position=position)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "position": self.position.to_dict(),
            "role": self.role.value,
            "team": self.team.value,
            "availability": self.availability.value,
            "form": self.form.value,
            "morale": self.morale.value,
            "rating": self.rating,
            "radius": self.radius,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        """
        Create from dictionary.

        Raises ValueError for a missing id, a malformed position or an
        unknown role.
        """
        player_id = data.get("id")
        if not player_id:
            raise ValueError("Player is missing an id")
        if "position" not in data:
            raise ValueError(f"Player {player_id} is missing a position")
        return cls(
            id=str(player_id),
            name=data.get("name", ""),
            position=Position.from_dict(data["position"]),
            role=Role.parse(data.get("role", "CM")),
            team=Team(data.get("team", "home")),
            availability=Availability(data.get("availability", "available")),
            form=Form(data.get("form", "average")),
            morale=Morale(data.get("morale", "average")),
            rating=data.get("rating", 60),
            radius=float(data.get("radius", DEFAULT_RADIUS)),
        )


def parse_players(raw: list) -> list[Player]:
    """
    Build players from raw records, dropping malformed ones.

    Anything that is not a mapping, lacks an id or position, or carries a
    non-finite coordinate is skipped rather than raised.
    """
    players: list[Player] = []
    for item in raw:
        if isinstance(item, Player):
            candidate: Optional[Player] = item
        elif isinstance(item, dict):
            try:
                candidate = Player.from_dict(item)
            except (TypeError, ValueError):
                candidate = None
        else:
            candidate = None
        if candidate is None or not candidate.id or not candidate.position.is_finite:
            continue
        players.append(candidate)
    return players
