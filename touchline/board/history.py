"""
Branching undo/redo history.

History is kept as three parts:

    past[]  (oldest first, the top is the end of the list)
    present
    future[] (next redo first)

Pushing a new state after an undo discards the future for good. The total
number of stored past and future snapshots never exceeds
``max_history_size``.
"""

import copy
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from touchline.core.models.formation import Formation
from touchline.core.models.player import Player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistorySnapshot:
    """
    Immutable copy of board state at one point in time.

    Formations and players are already immutable; annotations are host data
    and are deep-copied on capture so later edits cannot leak in.
    """

    formation: Optional[Formation] = None
    players: tuple[Player, ...] = ()
    annotations: tuple[Any, ...] = ()
    timestamp: float = field(default_factory=time.time)
    label: str = ""
    # Consecutive pushes with the same key inside the coalesce window merge
    coalesce_key: Optional[str] = None

    @classmethod
    def capture(
        cls,
        formation: Optional[Formation],
        players: Iterable[Player],
        annotations: Iterable[Any] = (),
        label: str = "",
        coalesce_key: Optional[str] = None,
        timestamp: Optional[float] = None,
    ) -> "HistorySnapshot":
        return cls(
            formation=formation,
            players=tuple(players),
            annotations=tuple(copy.deepcopy(list(annotations))),
            timestamp=time.time() if timestamp is None else timestamp,
            label=label,
            coalesce_key=coalesce_key,
        )

    def same_content(self, other: "HistorySnapshot") -> bool:
        """Equal board state, ignoring timestamps, labels and version counters."""
        if self.players != other.players or self.annotations != other.annotations:
            return False
        if self.formation is None or other.formation is None:
            return self.formation is other.formation
        return (
            self.formation.id == other.formation.id
            and self.formation.slots == other.formation.slots
        )

    def player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None


class HistoryManager:
    """
    Undo/redo over ``HistorySnapshot`` values.

    Undo and redo never raise: they return False when there is nothing to
    move to.
    """

    def __init__(
        self,
        initial: HistorySnapshot,
        max_history_size: int = 50,
        coalesce_window: float = 0.5,
    ) -> None:
        if max_history_size < 1:
            raise ValueError("max_history_size must be at least 1")
        self.max_history_size = max_history_size
        self.coalesce_window = coalesce_window
        self._past: list[HistorySnapshot] = []
        self._present = initial
        self._future: list[HistorySnapshot] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def present(self) -> HistorySnapshot:
        return self._present

    @property
    def past(self) -> list[HistorySnapshot]:
        return list(self._past)

    @property
    def future(self) -> list[HistorySnapshot]:
        return list(self._future)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def timeline(self) -> list[HistorySnapshot]:
        """Every stored snapshot, oldest first."""
        return self._past + [self._present] + self._future

    @property
    def current_index(self) -> int:
        """Index of ``present`` in ``timeline``."""
        return len(self._past)

    def __len__(self) -> int:
        return len(self._past) + 1 + len(self._future)

    # =========================================================================
    # Transitions
    # =========================================================================

    def push_state(self, snapshot: HistorySnapshot) -> bool:
        """
        Record a new present.

        Returns False when the snapshot was ignored as a duplicate. A push
        that shares ``coalesce_key`` with the present and lands inside the
        coalesce window replaces the present instead of adding an entry.
        """
        if snapshot.same_content(self._present):
            logger.debug("Ignoring duplicate history snapshot")
            return False

        self._future.clear()

        if self._coalesces(snapshot):
            self._present = snapshot
            return True

        self._past.append(self._present)
        overflow = len(self._past) - self.max_history_size
        if overflow > 0:
            del self._past[:overflow]
        self._present = snapshot
        return True

    def _coalesces(self, snapshot: HistorySnapshot) -> bool:
        key = snapshot.coalesce_key
        if key is None or key != self._present.coalesce_key:
            return False
        return 0 <= snapshot.timestamp - self._present.timestamp <= self.coalesce_window

    def undo(self) -> bool:
        if not self._past:
            return False
        self._future.insert(0, self._present)
        self._present = self._past.pop()
        return True

    def redo(self) -> bool:
        if not self._future:
            return False
        self._past.append(self._present)
        self._present = self._future.pop(0)
        return True

    def jump_to_state(self, index: int) -> bool:
        """Make ``timeline[index]`` the present. Out-of-range indexes are a no-op."""
        timeline = self.timeline
        if not 0 <= index < len(timeline):
            return False
        self._past = timeline[:index]
        self._present = timeline[index]
        self._future = timeline[index + 1:]
        return True

    def clear(self) -> None:
        """Drop everything but the present."""
        self._past.clear()
        self._future.clear()
