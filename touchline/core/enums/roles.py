"""Role definitions for players and formation slots."""

from enum import Enum, auto


class RoleBand(Enum):
    """High-level role groupings, used for layout signatures."""

    GOALKEEPER = auto()
    DEFENCE = auto()
    MIDFIELD = auto()
    ATTACK = auto()


class Role(Enum):
    """Individual player roles."""

    # Goalkeeper
    GK = "GK"  # Goalkeeper

    # Defence
    CB = "CB"  # Centre Back
    LB = "LB"  # Left Back
    RB = "RB"  # Right Back
    LWB = "LWB"  # Left Wing Back
    RWB = "RWB"  # Right Wing Back

    # Midfield
    CDM = "CDM"  # Defensive Midfielder
    CM = "CM"  # Central Midfielder
    CAM = "CAM"  # Attacking Midfielder
    LM = "LM"  # Left Midfielder
    RM = "RM"  # Right Midfielder

    # Attack
    LW = "LW"  # Left Winger
    RW = "RW"  # Right Winger
    ST = "ST"  # Striker
    CF = "CF"  # Centre Forward

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """
        Resolve a role from its tag.

        Accepts a Role or a case-insensitive tag like "cb". Unknown tags
        raise ValueError so bad data is rejected when a model is built.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Role tag must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None

    @property
    def band(self) -> RoleBand:
        """Get the role band for this role."""
        if self is Role.GK:
            return RoleBand.GOALKEEPER
        if self in {Role.CB, Role.LB, Role.RB, Role.LWB, Role.RWB}:
            return RoleBand.DEFENCE
        if self in {Role.CDM, Role.CM, Role.CAM, Role.LM, Role.RM}:
            return RoleBand.MIDFIELD
        return RoleBand.ATTACK

    @property
    def is_critical(self) -> bool:
        """Critical roles are filled first during auto-assignment."""
        return self.band is RoleBand.GOALKEEPER


class Team(Enum):
    """Which side of the board a player belongs to."""

    HOME = "home"
    AWAY = "away"


class Availability(Enum):
    """Selection availability for a player."""

    AVAILABLE = "available"
    INJURED = "injured"
    SUSPENDED = "suspended"
    UNAVAILABLE = "unavailable"


class Form(Enum):
    """Recent form, applied as a multiplier to fit scores."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    TERRIBLE = "terrible"

    @property
    def multiplier(self) -> float:
        return _FORM_MULTIPLIERS[self]


class Morale(Enum):
    """Current morale, applied as a multiplier to fit scores."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    TERRIBLE = "terrible"

    @property
    def multiplier(self) -> float:
        return _MORALE_MULTIPLIERS[self]


_FORM_MULTIPLIERS = {
    Form.EXCELLENT: 1.15,
    Form.GOOD: 1.05,
    Form.AVERAGE: 1.0,
    Form.POOR: 0.85,
    Form.TERRIBLE: 0.7,
}

_MORALE_MULTIPLIERS = {
    Morale.EXCELLENT: 1.1,
    Morale.GOOD: 1.02,
    Morale.AVERAGE: 1.0,
    Morale.POOR: 0.9,
    Morale.TERRIBLE: 0.8,
}


# Outfield order used when printing layout signatures ("4-4-2")
SIGNATURE_BANDS = (RoleBand.DEFENCE, RoleBand.MIDFIELD, RoleBand.ATTACK)
