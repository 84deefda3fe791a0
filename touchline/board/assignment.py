"""
Slot assignment.

Scores how well a player fits a slot, validates explicit placements and
fills a formation automatically.

Auto-assignment is a deterministic greedy pass:
1. Critical slots (the goalkeeper) are filled first
2. Then the slot with the fewest primary-fit players still unassigned;
   slots nobody fits naturally go last
3. Each slot takes the highest scoring remaining player; ties go to the
   player listed first
4. Restricted pairings are never made; slots nobody can fill stay empty

An optimal variant solves the same score matrix as a linear assignment
problem with SciPy.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Union

import numpy as np
from scipy.optimize import linear_sum_assignment

from touchline.board.compatibility import CompatibilityTier, band_distance, get_tier
from touchline.core.enums import Team
from touchline.core.models.field import Position
from touchline.core.models.formation import Formation, Slot
from touchline.core.models.player import Player, parse_players

logger = logging.getLogger(__name__)


# Role component of a fit score
PERFECT_MATCH_SCORE = 70  # Player role is one of the slot's preferred roles
TIER_SCORES = {
    CompatibilityTier.PRIMARY: 65,
    CompatibilityTier.SECONDARY: 45,
}
UNLISTED_BAND_SCORES = {0: 25, 1: 10}  # Same band, neighbouring band

RATING_WEIGHT = 0.3  # A 100-rated player adds 30
UNAVAILABLE_PENALTY = 0.3

SLOW_ASSIGNMENT_SECONDS = 0.05

PlayerInput = Union[Player, dict]


# =============================================================================
# Scoring
# =============================================================================


def score_player_for_slot(player: Player, slot: Slot) -> int:
    """
    How well ``player`` fits ``slot``, from 0 to 100.

    Role fit dominates and rating adds up to 30. Availability, form and
    morale scale the total. A restricted pairing always scores 0.
    """
    tier = get_tier(slot.role, player.role)
    if tier is CompatibilityTier.RESTRICTED:
        return 0
    if player.role in slot.preferred_roles:
        role_score = PERFECT_MATCH_SCORE
    elif tier is CompatibilityTier.UNLISTED:
        role_score = UNLISTED_BAND_SCORES.get(band_distance(slot.role, player.role), 0)
    else:
        role_score = TIER_SCORES[tier]

    score = role_score + player.rating * RATING_WEIGHT
    if not player.is_available:
        score *= UNAVAILABLE_PENALTY
    score *= player.form.multiplier
    score *= player.morale.multiplier
    return int(round(max(0.0, min(100.0, score))))


def index_players(players: Iterable[PlayerInput]) -> dict[str, Player]:
    """Well-formed players keyed by id, first occurrence wins."""
    index: dict[str, Player] = {}
    for player in parse_players(list(players)):
        index.setdefault(player.id, player)
    return index


# =============================================================================
# Validation
# =============================================================================


def validate_placement(
    player_id: str,
    players: Union[Mapping[str, Player], Iterable[PlayerInput]],
    formation: Optional[Formation] = None,
    target_slot_id: Optional[str] = None,
) -> bool:
    """
    Check whether a player may be placed, optionally into a specific slot.

    The player must exist and be available. With a target slot, the slot
    must exist in ``formation``, belong to the player's team and list the
    player's role as a primary or secondary fit.
    """
    if not player_id or not isinstance(player_id, str):
        return False

    index = players if isinstance(players, Mapping) else index_players(players)
    player = index.get(player_id)
    if player is None or not player.is_available:
        return False

    if target_slot_id is None:
        return True

    if formation is None:
        return False
    slot = formation.get_slot(target_slot_id)
    if slot is None or formation.team is not player.team:
        return False

    return get_tier(slot.role, player.role).accepts


@dataclass(frozen=True)
class DropZones:
    """Slots a player may be dropped into; magnetic ones match the role exactly."""

    valid: tuple[str, ...] = ()
    magnetic: tuple[str, ...] = ()


def drop_zones(player: Player, formation: Formation) -> DropZones:
    """Valid and magnetic slots for ``player`` in ``formation``."""
    if not player.is_available or formation.team is not player.team:
        return DropZones()
    valid = []
    magnetic = []
    for slot in formation.slots:
        if not get_tier(slot.role, player.role).accepts:
            continue
        valid.append(slot.id)
        if slot.role is player.role:
            magnetic.append(slot.id)
    return DropZones(valid=tuple(valid), magnetic=tuple(magnetic))


# =============================================================================
# Auto-assignment
# =============================================================================


@dataclass(frozen=True)
class Assignment:
    """One slot filled during auto-assignment."""

    slot_id: str
    player_id: str
    score: int


@dataclass
class AssignmentPlan:
    """Result of planning an auto-assignment, in fill order."""

    assignments: list[Assignment] = field(default_factory=list)
    empty_slot_ids: list[str] = field(default_factory=list)
    unassigned_player_ids: list[str] = field(default_factory=list)
    strategy: str = "greedy"

    @property
    def filled_count(self) -> int:
        return len(self.assignments)

    @property
    def total_score(self) -> int:
        return sum(a.score for a in self.assignments)

    def apply(self, formation: Formation) -> Formation:
        """Return ``formation`` emptied and then filled per this plan."""
        by_slot = {a.slot_id: a.player_id for a in self.assignments}
        return formation.with_slots(
            slot.with_occupant(by_slot.get(slot.id)) for slot in formation.slots
        )


def _eligible_players(
    players: Iterable[PlayerInput],
    team: Team,
) -> list[Player]:
    return [
        p for p in index_players(players).values()
        if p.team is team and p.is_available
    ]


def _next_slot(slots: tuple[Slot, ...], open_slots: list[int], remaining: list[Player]) -> int:
    """
    Pick the next slot for the greedy pass.

    Critical slots first, then the slot with the fewest primary-fit players
    still unassigned (slots with none go last), then template order.
    """
    def key(i: int) -> tuple:
        count = sum(
            1 for p in remaining
            if get_tier(slots[i].role, p.role) is CompatibilityTier.PRIMARY
        )
        return (not slots[i].role.is_critical, count == 0, count, i)

    return min(open_slots, key=key)


def _plan_greedy(slots: tuple[Slot, ...], candidates: list[Player]) -> list[Assignment]:
    remaining = list(candidates)
    open_slots = list(range(len(slots)))
    assignments = []
    while open_slots and remaining:
        index = _next_slot(slots, open_slots, remaining)
        open_slots.remove(index)
        slot = slots[index]
        best: Optional[Player] = None
        best_score = -1
        for player in remaining:
            if get_tier(slot.role, player.role) is CompatibilityTier.RESTRICTED:
                continue
            score = score_player_for_slot(player, slot)
            # Strict comparison keeps the earliest player on ties
            if score > best_score:
                best = player
                best_score = score
        if best is None:
            continue
        remaining.remove(best)
        assignments.append(Assignment(slot.id, best.id, best_score))
    return assignments


_FORBIDDEN = -1e6


def _plan_optimal(slots: tuple[Slot, ...], candidates: list[Player]) -> list[Assignment]:
    if not slots or not candidates:
        return []
    scores = np.zeros((len(candidates), len(slots)))
    for i, player in enumerate(candidates):
        for j, slot in enumerate(slots):
            if get_tier(slot.role, player.role) is CompatibilityTier.RESTRICTED:
                scores[i, j] = _FORBIDDEN
            else:
                scores[i, j] = score_player_for_slot(player, slot)

    rows, cols = linear_sum_assignment(scores, maximize=True)
    assignments = []
    for i, j in sorted(zip(rows, cols), key=lambda pair: pair[1]):
        if scores[i, j] <= _FORBIDDEN:
            continue
        assignments.append(Assignment(slots[j].id, candidates[i].id, int(scores[i, j])))
    return assignments


def plan_assignment(
    players: Iterable[PlayerInput],
    formation: Formation,
    team: Optional[Team] = None,
    strategy: str = "greedy",
) -> AssignmentPlan:
    """
    Decide which available player fills which slot.

    Malformed player records are skipped. Never raises for a short squad:
    it fills what it can and leaves the rest empty.
    """
    started = time.perf_counter()
    team = Team(team) if team is not None else formation.team
    candidates = _eligible_players(players, team)

    if strategy == "optimal":
        assignments = _plan_optimal(formation.slots, candidates)
    elif strategy == "greedy":
        assignments = _plan_greedy(formation.slots, candidates)
    else:
        raise ValueError(f"Unknown assignment strategy: {strategy}")

    filled = {a.slot_id for a in assignments}
    used = {a.player_id for a in assignments}
    plan = AssignmentPlan(
        assignments=assignments,
        empty_slot_ids=[s.id for s in formation.slots if s.id not in filled],
        unassigned_player_ids=[p.id for p in candidates if p.id not in used],
        strategy=strategy,
    )

    elapsed = time.perf_counter() - started
    if elapsed > SLOW_ASSIGNMENT_SECONDS:
        logger.warning(
            f"Slow formation assignment: {elapsed * 1000:.1f}ms for {len(candidates)} players"
        )
    logger.debug(
        f"Planned {plan.filled_count}/{len(formation.slots)} slots for {formation.name} ({strategy})"
    )
    return plan


def auto_assign(
    players: Iterable[PlayerInput],
    formation: Formation,
    team: Optional[Team] = None,
    strategy: str = "greedy",
) -> Formation:
    """Return ``formation`` refilled with the best available players."""
    return plan_assignment(players, formation, team, strategy).apply(formation)


def player_positions_from_formation(
    players: Iterable[PlayerInput],
    formation: Formation,
) -> dict[str, Position]:
    """New positions for every player of the formation's team that holds a slot."""
    positions = {}
    for player in index_players(players).values():
        if player.team is not formation.team:
            continue
        slot = formation.slot_for(player.id)
        if slot is not None:
            positions[player.id] = slot.default_position
    return positions
