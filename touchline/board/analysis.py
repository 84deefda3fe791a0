"""Formation fitness analysis and completeness reporting."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from touchline.board.assignment import PlayerInput, index_players, score_player_for_slot
from touchline.core.enums import Role, RoleBand
from touchline.core.models.formation import Formation

logger = logging.getLogger(__name__)


POOR_FIT_THRESHOLD = 60


class Fitness(str, Enum):
    """Bucket for a per-slot fit score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: int) -> "Fitness":
        if score >= 90:
            return cls.EXCELLENT
        if score >= 70:
            return cls.GOOD
        if score >= 50:
            return cls.AVERAGE
        return cls.POOR


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class PositionScore:
    """Fit of one slot's occupant; an empty slot scores 0 and has no player."""

    slot_id: str
    role: Role
    player_id: Optional[str]
    player_name: str
    score: int
    fitness: Fitness

    @property
    def is_empty(self) -> bool:
        return self.player_id is None


@dataclass(frozen=True)
class Recommendation:
    slot_id: str
    issue: str
    suggestion: str
    priority: Priority


@dataclass
class FormationAnalysis:
    """Scores, issues and band balance for one formation."""

    total_score: int = 0
    average_score: int = 0
    position_scores: list[PositionScore] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)
    band_metrics: dict[RoleBand, int] = field(default_factory=dict)
    overall_balance: int = 0
    missing_roles: list[Role] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every slot has an occupant."""
        return not self.missing_roles

    def completeness_summary(self) -> str:
        """One-line, user-facing coverage summary."""
        filled = sum(1 for s in self.position_scores if not s.is_empty)
        total = len(self.position_scores)
        if self.is_complete:
            return f"All {total} positions filled"
        missing = ", ".join(role.value for role in self.missing_roles)
        return f"{filled}/{total} positions filled, missing: {missing}"


def _priority_for(score: int) -> Priority:
    if score < 40:
        return Priority.HIGH
    if score < 50:
        return Priority.MEDIUM
    return Priority.LOW


def analyze_formation(
    formation: Formation,
    players: Iterable[PlayerInput],
) -> FormationAnalysis:
    """
    Score every slot and collect the issues worth showing the user.

    An occupant id with no matching well-formed player is treated as an
    empty slot.
    """
    index = index_players(players)
    position_scores = []
    recommendations = []
    missing_roles = []

    for slot in formation.slots:
        player = index.get(slot.occupant_id) if slot.occupant_id else None
        if player is None:
            position_scores.append(PositionScore(
                slot.id, slot.role, None, "", 0, Fitness.POOR,
            ))
            missing_roles.append(slot.role)
            recommendations.append(Recommendation(
                slot.id,
                f"No player assigned to {slot.label}",
                f"Assign a {slot.role.value}",
                Priority.HIGH,
            ))
            continue

        score = score_player_for_slot(player, slot)
        position_scores.append(PositionScore(
            slot.id, slot.role, player.id, player.display_name, score, Fitness.from_score(score),
        ))

        if not player.is_available:
            recommendations.append(Recommendation(
                slot.id,
                f"{player.display_name} is {player.availability.value}",
                f"Replace with an available {slot.role.value}",
                Priority.HIGH,
            ))
        elif score < POOR_FIT_THRESHOLD:
            recommendations.append(Recommendation(
                slot.id,
                f"{player.display_name} is a poor fit at {slot.label} ({score})",
                f"Consider a natural {slot.role.value}",
                _priority_for(score),
            ))

    recommendations.sort(key=lambda r: _PRIORITY_ORDER[r.priority])

    scores = [s.score for s in position_scores]
    total = sum(scores)
    average = int(round(total / len(scores))) if scores else 0

    band_metrics = {}
    for band in RoleBand:
        band_scores = [s.score for s in position_scores if s.role.band is band]
        if band_scores:
            band_metrics[band] = int(round(sum(band_scores) / len(band_scores)))

    outfield = [v for band, v in band_metrics.items() if band is not RoleBand.GOALKEEPER]
    balance = int(round(sum(outfield) / len(outfield))) if outfield else 0

    logger.debug(f"Analysed {formation.name}: average {average}, {len(recommendations)} issues")
    return FormationAnalysis(
        total_score=total,
        average_score=average,
        position_scores=position_scores,
        recommendations=recommendations,
        band_metrics=band_metrics,
        overall_balance=balance,
        missing_roles=missing_roles,
    )
