"""Standard formation templates.

Coordinates are for the home side, attacking toward y = 0. Away formations
are mirrored on the y axis when built.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Optional

from touchline.core.enums import Role, Team
from touchline.core.models.field import Position
from touchline.core.models.formation import Formation, Slot


@dataclass(frozen=True)
class FormationTemplate:
    """A named set of (x, y, role) slot definitions."""

    name: str
    display_name: str
    category: str  # "classic", "balanced", "attacking", "defensive"
    positions: tuple[tuple[float, float, Role], ...]
    description: str = ""


FORMATION_TEMPLATES: dict[str, FormationTemplate] = {
    "4-4-2": FormationTemplate(
        name="4-4-2",
        display_name="4-4-2 Classic",
        category="classic",
        description="Two banks of four with a front pair.",
        positions=(
            (50, 95, Role.GK),
            (15, 80, Role.LB),
            (35, 85, Role.CB),
            (65, 85, Role.CB),
            (85, 80, Role.RB),
            (15, 55, Role.LM),
            (35, 60, Role.CM),
            (65, 60, Role.CM),
            (85, 55, Role.RM),
            (35, 25, Role.ST),
            (65, 25, Role.ST),
        ),
    ),
    "4-3-3": FormationTemplate(
        name="4-3-3",
        display_name="4-3-3 Attack",
        category="attacking",
        description="Three forwards providing width, a holding midfielder behind two eights.",
        positions=(
            (50, 95, Role.GK),
            (15, 80, Role.LB),
            (35, 85, Role.CB),
            (65, 85, Role.CB),
            (85, 80, Role.RB),
            (30, 60, Role.CM),
            (50, 65, Role.CDM),
            (70, 60, Role.CM),
            (15, 25, Role.LW),
            (50, 20, Role.ST),
            (85, 25, Role.RW),
        ),
    ),
    "4-2-3-1": FormationTemplate(
        name="4-2-3-1",
        display_name="4-2-3-1 Modern",
        category="balanced",
        description="Double pivot screening the back four, three creators behind a lone striker.",
        positions=(
            (50, 95, Role.GK),
            (15, 80, Role.LB),
            (35, 85, Role.CB),
            (65, 85, Role.CB),
            (85, 80, Role.RB),
            (38, 65, Role.CDM),
            (62, 65, Role.CDM),
            (15, 40, Role.LW),
            (50, 42, Role.CAM),
            (85, 40, Role.RW),
            (50, 20, Role.ST),
        ),
    ),
    "3-5-2": FormationTemplate(
        name="3-5-2",
        display_name="3-5-2 Wing Backs",
        category="balanced",
        description="Three centre backs with wing backs supplying width.",
        positions=(
            (50, 95, Role.GK),
            (30, 85, Role.CB),
            (50, 87, Role.CB),
            (70, 85, Role.CB),
            (10, 55, Role.LWB),
            (35, 60, Role.CM),
            (50, 65, Role.CDM),
            (65, 60, Role.CM),
            (90, 55, Role.RWB),
            (38, 25, Role.ST),
            (62, 25, Role.ST),
        ),
    ),
    "5-3-2": FormationTemplate(
        name="5-3-2",
        display_name="5-3-2 Compact",
        category="defensive",
        description="Back five that shuts the middle, breaking through a front pair.",
        positions=(
            (50, 95, Role.GK),
            (10, 75, Role.LWB),
            (30, 85, Role.CB),
            (50, 87, Role.CB),
            (70, 85, Role.CB),
            (90, 75, Role.RWB),
            (30, 60, Role.CM),
            (50, 62, Role.CDM),
            (70, 60, Role.CM),
            (38, 28, Role.ST),
            (62, 28, Role.ST),
        ),
    ),
}

# Roles that count as a perfect fit for a slot, beyond the slot's own role
PREFERRED_ROLES: dict[Role, tuple[Role, ...]] = {
    Role.LB: (Role.LWB,),
    Role.RB: (Role.RWB,),
    Role.LWB: (Role.LB,),
    Role.RWB: (Role.RB,),
    Role.ST: (Role.CF,),
    Role.CF: (Role.ST,),
}


def get_template(name: str) -> FormationTemplate:
    """Look up a template by name. Raises KeyError if unknown."""
    return FORMATION_TEMPLATES[name]


def build_formation(
    name: str,
    team: Team = Team.HOME,
    formation_id: Optional[str] = None,
) -> Formation:
    """
    Build an empty formation from a template.

    Slot ids follow depth-chart style naming: "GK1", "CB1", "CB2", ...
    """
    template = get_template(name)
    team = Team(team)

    counters: dict[Role, int] = defaultdict(int)
    slots = []
    for x, y, role in template.positions:
        counters[role] += 1
        if team is Team.AWAY:
            y = 100 - y
        slots.append(
            Slot(
                id=f"{role.value}{counters[role]}",
                default_position=Position(float(x), float(y)),
                role=role,
                preferred_roles=PREFERRED_ROLES.get(role, ()),
            )
        )

    return Formation(
        id=formation_id or f"{team.value}-{template.name}",
        name=template.name,
        slots=tuple(slots),
        team=team,
        is_custom=False,
    )
