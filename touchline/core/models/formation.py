"""Formation, slot and tactical zone models."""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Optional
from uuid import uuid4

from touchline.core.enums import SIGNATURE_BANDS, Role, RoleBand, Team
from touchline.core.models.field import Bounds, Position


@dataclass(frozen=True)
class Slot:
    """
    A named position within a formation.

    Holds at most one occupant. ``preferred_roles`` are the roles that
    count as a perfect fit; the slot's own role is always one of them.
    """

    id: str
    default_position: Position
    role: Role
    occupant_id: Optional[str] = None
    preferred_roles: tuple[Role, ...] = ()
    label: str = ""

    def __post_init__(self) -> None:
        role = Role.parse(self.role)
        object.__setattr__(self, "role", role)
        preferred = tuple(Role.parse(r) for r in self.preferred_roles)
        if role not in preferred:
            preferred = (role,) + preferred
        object.__setattr__(self, "preferred_roles", preferred)
        if not self.label:
            object.__setattr__(self, "label", role.value)

    @property
    def is_occupied(self) -> bool:
        return self.occupant_id is not None

    def with_occupant(self, player_id: Optional[str]) -> "Slot":
        """Return a copy of this slot with a different occupant."""
        return replace(self, occupant_id=player_id)


@dataclass(frozen=True)
class TacticalZone:
    """A named region of the board, optionally carrying explicit snap points."""

    id: str
    name: str
    bounds: Bounds
    snap_points: tuple[Position, ...] = ()

    def contains(self, pos: Position) -> bool:
        return self.bounds.contains(pos)


@dataclass(frozen=True)
class Formation:
    """
    An ordered set of slots representing one team's tactical layout.

    Formations are immutable; every edit returns a new instance. The
    ``version`` counter is bumped by the board on each committed change and
    is carried to the transport snapshot for optimistic concurrency checks.
    """

    id: str = field(default_factory=lambda: str(uuid4()))
    name: str = ""
    slots: tuple[Slot, ...] = ()
    team: Team = Team.HOME
    is_custom: bool = False

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    version: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "slots", tuple(self.slots))
        object.__setattr__(self, "team", Team(self.team))

    # =========================================================================
    # Queries
    # =========================================================================

    def get_slot(self, slot_id: str) -> Optional[Slot]:
        """Get a slot by ID, or None if it does not exist."""
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def slot_for(self, player_id: str) -> Optional[Slot]:
        """Get the slot a player occupies, or None if benched."""
        for slot in self.slots:
            if slot.occupant_id == player_id:
                return slot
        return None

    @property
    def occupant_ids(self) -> list[str]:
        return [s.occupant_id for s in self.slots if s.occupant_id is not None]

    @property
    def occupied_count(self) -> int:
        return sum(1 for s in self.slots if s.is_occupied)

    @property
    def free_slots(self) -> list[Slot]:
        return [s for s in self.slots if not s.is_occupied]

    @property
    def band_counts(self) -> dict[RoleBand, int]:
        """Number of slots per role band."""
        counts = Counter(slot.role.band for slot in self.slots)
        return {band: counts.get(band, 0) for band in RoleBand}

    @property
    def layout_signature(self) -> str:
        """
        Outfield slot counts per band, e.g. "4-4-2".

        Goalkeepers are left out the way the sport names its shapes.
        """
        counts = self.band_counts
        return "-".join(str(counts[band]) for band in SIGNATURE_BANDS)

    def check_occupancy(self) -> list[str]:
        """Validate slot identity and 1:1 occupancy, return list of errors."""
        errors = []
        slot_ids = Counter(s.id for s in self.slots)
        for slot_id, count in slot_ids.items():
            if count > 1:
                errors.append(f"Duplicate slot id: {slot_id}")
        occupants = Counter(self.occupant_ids)
        for player_id, count in occupants.items():
            if count > 1:
                errors.append(f"Player {player_id} occupies {count} slots")
        return errors

    # =========================================================================
    # Edits (all return new formations)
    # =========================================================================

    def with_slots(self, slots: Iterable[Slot]) -> "Formation":
        return replace(self, slots=tuple(slots))

    def with_occupant(self, slot_id: str, player_id: Optional[str]) -> "Formation":
        """
        Place ``player_id`` in a slot (or empty it with None).

        The player is first removed from any other slot so occupancy stays 1:1.
        """
        slots = []
        for slot in self.slots:
            if slot.id == slot_id:
                slots.append(slot.with_occupant(player_id))
            elif player_id is not None and slot.occupant_id == player_id:
                slots.append(slot.with_occupant(None))
            else:
                slots.append(slot)
        return self.with_slots(slots)

    def without_player(self, player_id: str) -> "Formation":
        """Bench a player, emptying whichever slot they held."""
        return self.with_slots(
            s.with_occupant(None) if s.occupant_id == player_id else s for s in self.slots
        )

    def cleared(self) -> "Formation":
        """Return a copy with every slot empty."""
        return self.with_slots(s.with_occupant(None) for s in self.slots)

    def bumped(self, now: Optional[datetime] = None) -> "Formation":
        """Return a copy with the version incremented and ``updated_at`` refreshed."""
        return replace(self, version=self.version + 1, updated_at=now or datetime.now())
