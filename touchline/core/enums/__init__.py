"""Board enumerations."""

from touchline.core.enums.roles import (
    SIGNATURE_BANDS,
    Availability,
    Form,
    Morale,
    Role,
    RoleBand,
    Team,
)

__all__ = [
    "Availability",
    "Form",
    "Morale",
    "Role",
    "RoleBand",
    "SIGNATURE_BANDS",
    "Team",
]
