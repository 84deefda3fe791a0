"""Role compatibility matrix.

Keyed by the *slot* role: each entry lists which player roles are a
primary fit (auto-accept), a secondary fit (accept at lower priority) and
restricted (always reject). Any role not listed is UNLISTED, which a
targeted placement rejects but auto-assignment may still use as a last
resort. The table is asymmetric: a left back slot takes a left
midfielder, but a left midfield slot does not take a left back.

The full Role x Role matrix is built at import time and fails loudly if a
role has no entry or appears in two tiers.
"""

from enum import Enum

from touchline.core.enums import Role, RoleBand


class CompatibilityTier(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    UNLISTED = "unlisted"
    RESTRICTED = "restricted"

    @property
    def accepts(self) -> bool:
        """True if an explicit placement into the slot is allowed."""
        return self in (CompatibilityTier.PRIMARY, CompatibilityTier.SECONDARY)


_OUTFIELD = tuple(r for r in Role if r is not Role.GK)

# slot role -> (primary, secondary, restricted)
ROLE_TABLE: dict[Role, tuple[tuple[Role, ...], tuple[Role, ...], tuple[Role, ...]]] = {
    Role.GK: ((Role.GK,), (), _OUTFIELD),
    Role.CB: (
        (Role.CB,),
        (Role.CDM, Role.LB, Role.RB),
        (Role.GK, Role.ST, Role.CF, Role.LW, Role.RW),
    ),
    Role.LB: (
        (Role.LB, Role.LWB),
        (Role.LM, Role.CB),
        (Role.GK, Role.ST, Role.CF),
    ),
    Role.RB: (
        (Role.RB, Role.RWB),
        (Role.RM, Role.CB),
        (Role.GK, Role.ST, Role.CF),
    ),
    Role.LWB: (
        (Role.LWB, Role.LB),
        (Role.LM, Role.LW),
        (Role.GK, Role.ST, Role.CF),
    ),
    Role.RWB: (
        (Role.RWB, Role.RB),
        (Role.RM, Role.RW),
        (Role.GK, Role.ST, Role.CF),
    ),
    Role.CDM: (
        (Role.CDM,),
        (Role.CB, Role.CM),
        (Role.GK, Role.ST, Role.CF),
    ),
    Role.CM: (
        (Role.CM,),
        (Role.CDM, Role.CAM),
        (Role.GK,),
    ),
    Role.CAM: (
        (Role.CAM,),
        (Role.CM, Role.CF, Role.LW, Role.RW),
        (Role.GK, Role.CB),
    ),
    Role.LM: (
        (Role.LM,),
        (Role.LW, Role.LWB, Role.CM),
        (Role.GK, Role.CB),
    ),
    Role.RM: (
        (Role.RM,),
        (Role.RW, Role.RWB, Role.CM),
        (Role.GK, Role.CB),
    ),
    Role.LW: (
        (Role.LW,),
        (Role.LM, Role.CAM),
        (Role.GK, Role.CB),
    ),
    Role.RW: (
        (Role.RW,),
        (Role.RM, Role.CAM),
        (Role.GK, Role.CB),
    ),
    Role.ST: (
        (Role.ST, Role.CF),
        (Role.CAM, Role.LW, Role.RW),
        (Role.GK, Role.CB, Role.LB, Role.RB),
    ),
    Role.CF: (
        (Role.CF, Role.ST),
        (Role.CAM,),
        (Role.GK, Role.CB, Role.LB, Role.RB),
    ),
}


def _build_matrix() -> dict[Role, dict[Role, CompatibilityTier]]:
    matrix: dict[Role, dict[Role, CompatibilityTier]] = {}
    for slot_role in Role:
        if slot_role not in ROLE_TABLE:
            raise ValueError(f"No compatibility entry for slot role {slot_role.value}")
        primary, secondary, restricted = ROLE_TABLE[slot_role]
        row = {player_role: CompatibilityTier.UNLISTED for player_role in Role}
        seen: set[Role] = set()
        for tier, roles in (
            (CompatibilityTier.PRIMARY, primary),
            (CompatibilityTier.SECONDARY, secondary),
            (CompatibilityTier.RESTRICTED, restricted),
        ):
            for player_role in roles:
                if player_role in seen:
                    raise ValueError(
                        f"{player_role.value} listed twice for slot role {slot_role.value}"
                    )
                seen.add(player_role)
                row[player_role] = tier
        matrix[slot_role] = row
    return matrix


COMPATIBILITY = _build_matrix()


def get_tier(slot_role: Role, player_role: Role) -> CompatibilityTier:
    """Compatibility tier of a player role for a slot role."""
    return COMPATIBILITY[slot_role][player_role]


def is_compatible(slot_role: Role, player_role: Role) -> bool:
    return get_tier(slot_role, player_role).accepts


_BAND_ORDER = {
    RoleBand.GOALKEEPER: 0,
    RoleBand.DEFENCE: 1,
    RoleBand.MIDFIELD: 2,
    RoleBand.ATTACK: 3,
}


def band_distance(a: Role, b: Role) -> int:
    """How many bands apart two roles sit (0 = same band)."""
    return abs(_BAND_ORDER[a.band] - _BAND_ORDER[b.band])
