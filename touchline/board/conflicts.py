"""
Placement conflict resolution.

A conflict is a drop onto a slot that already has an occupant. The engine
only lists what could be done about it; the caller picks one option and
hands it back to ``apply_resolution``.

Options:
    swap           dragged player and occupant exchange slots
    replace        dragged player takes the slot, occupant goes to the bench
    move-to-bench  dragged player goes to the bench, the slot is untouched
    reassign       dragged player takes the slot, occupant moves to its best
                   free slot
    cancel         nothing changes
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from touchline.board.assignment import PlayerInput, index_players, score_player_for_slot
from touchline.board.errors import BoardValidationError
from touchline.core.models.formation import Formation

logger = logging.getLogger(__name__)


REASSIGN_MIN_SCORE = 40


class ConflictAction(str, Enum):
    SWAP = "swap"
    REPLACE = "replace"
    MOVE_TO_BENCH = "move-to-bench"
    REASSIGN = "reassign"
    CANCEL = "cancel"


@dataclass(frozen=True)
class ResolutionOption:
    """One way out of a conflict."""

    action: ConflictAction
    description: str
    score: Optional[int] = None  # Fit of the resulting arrangement, None for cancel
    target_slot_id: Optional[str] = None  # Where the occupant ends up, when it moves

    def to_dict(self) -> dict:
        return {
            "action": self.action.value,
            "description": self.description,
            "score": self.score,
            "target_slot_id": self.target_slot_id,
        }


@dataclass(frozen=True)
class ConflictResolution:
    """The options for one conflict, best scoring first and cancel last."""

    dragged_id: str
    target_slot_id: str
    occupant_id: str
    source_slot_id: Optional[str]
    options: tuple[ResolutionOption, ...]

    @property
    def actions(self) -> list[ConflictAction]:
        return [option.action for option in self.options]

    @property
    def recommended(self) -> ResolutionOption:
        return self.options[0]

    def option(self, action: ConflictAction) -> Optional[ResolutionOption]:
        action = ConflictAction(action)
        for option in self.options:
            if option.action is action:
                return option
        return None

    def to_dict(self) -> dict:
        return {
            "dragged_id": self.dragged_id,
            "target_slot_id": self.target_slot_id,
            "occupant_id": self.occupant_id,
            "source_slot_id": self.source_slot_id,
            "options": [option.to_dict() for option in self.options],
        }


def resolve_conflict(
    dragged_id: str,
    target_slot_id: str,
    occupant_id: str,
    formation: Formation,
    players: Iterable[PlayerInput],
) -> Optional[ConflictResolution]:
    """
    List the ways to settle a drop of ``dragged_id`` onto an occupied slot.

    Returns None when the inputs do not describe a real conflict (unknown
    ids, an empty slot, or the occupant not actually in the slot).
    """
    index = index_players(players)
    dragged = index.get(dragged_id)
    occupant = index.get(occupant_id)
    target = formation.get_slot(target_slot_id)
    if dragged is None or occupant is None or target is None:
        logger.debug(f"Ignoring conflict with unknown ids: {dragged_id}, {occupant_id}, {target_slot_id}")
        return None
    if target.occupant_id != occupant_id or dragged_id == occupant_id:
        return None

    source = formation.slot_for(dragged_id)
    dragged_in_target = score_player_for_slot(dragged, target)
    scored: list[ResolutionOption] = []

    if source is not None:
        occupant_in_source = score_player_for_slot(occupant, source)
        scored.append(ResolutionOption(
            ConflictAction.SWAP,
            f"Swap {dragged.display_name} ({source.label}) with "
            f"{occupant.display_name} ({target.label})",
            score=int(round((dragged_in_target + occupant_in_source) / 2)),
            target_slot_id=source.id,
        ))

    scored.append(ResolutionOption(
        ConflictAction.REPLACE,
        f"Put {dragged.display_name} at {target.label} and bench {occupant.display_name}",
        score=dragged_in_target,
    ))

    best_free = None
    best_free_score = REASSIGN_MIN_SCORE
    for slot in formation.free_slots:
        if slot.id == target.id:
            continue
        score = score_player_for_slot(occupant, slot)
        if score > best_free_score:
            best_free = slot
            best_free_score = score
    if best_free is not None:
        scored.append(ResolutionOption(
            ConflictAction.REASSIGN,
            f"Put {dragged.display_name} at {target.label} and move "
            f"{occupant.display_name} to {best_free.label}",
            score=int(round((dragged_in_target + best_free_score) / 2)),
            target_slot_id=best_free.id,
        ))

    if source is not None:
        scored.append(ResolutionOption(
            ConflictAction.MOVE_TO_BENCH,
            f"Move {dragged.display_name} to the bench",
            score=score_player_for_slot(occupant, target),
        ))

    # Stable sort keeps the listing order above for equal scores
    options = sorted(scored, key=lambda option: -option.score)
    options.append(ResolutionOption(ConflictAction.CANCEL, "Keep the current arrangement"))

    return ConflictResolution(
        dragged_id=dragged_id,
        target_slot_id=target.id,
        occupant_id=occupant_id,
        source_slot_id=source.id if source else None,
        options=tuple(options),
    )


def apply_resolution(
    formation: Formation,
    resolution: ConflictResolution,
    action: ConflictAction,
) -> Formation:
    """
    Apply the option the caller chose.

    Raises BoardValidationError if the action was not offered or the
    formation no longer matches the conflict it was computed for.
    """
    action = ConflictAction(action)
    option = resolution.option(action)
    if option is None:
        raise BoardValidationError(f"{action.value} is not an option for this conflict")
    if action is ConflictAction.CANCEL:
        return formation

    target = formation.get_slot(resolution.target_slot_id)
    if target is None or target.occupant_id != resolution.occupant_id:
        raise BoardValidationError(f"Slot {resolution.target_slot_id} changed since the conflict was raised")

    if action is ConflictAction.SWAP:
        source = formation.get_slot(resolution.source_slot_id or "")
        if source is None or source.occupant_id != resolution.dragged_id:
            raise BoardValidationError(f"{resolution.dragged_id} no longer holds a slot to swap")
        slots = []
        for slot in formation.slots:
            if slot.id == target.id:
                slots.append(slot.with_occupant(resolution.dragged_id))
            elif slot.id == source.id:
                slots.append(slot.with_occupant(resolution.occupant_id))
            else:
                slots.append(slot)
        return formation.with_slots(slots)

    if action is ConflictAction.REPLACE:
        return formation.with_occupant(target.id, resolution.dragged_id)

    if action is ConflictAction.MOVE_TO_BENCH:
        return formation.without_player(resolution.dragged_id)

    destination = formation.get_slot(option.target_slot_id or "")
    if destination is None or destination.is_occupied:
        raise BoardValidationError(f"Slot {option.target_slot_id} is no longer free")
    moved = formation.with_occupant(destination.id, resolution.occupant_id)
    return moved.with_occupant(target.id, resolution.dragged_id)
