"""Shared pytest fixtures for touchline tests."""

import pytest

from touchline.board.config import (
    AlignmentConfig,
    BoardConfig,
    BoundaryConfig,
    CollisionConfig,
    GridConfig,
    HistoryConfig,
)
from touchline.board.constraints import ConstraintEngine
from touchline.core.enums import Availability, Role, Team
from touchline.core.models.field import Position
from touchline.core.models.formation import Formation, Slot
from touchline.core.models.player import Player
from touchline.core.models.templates import build_formation
from touchline.events import EventBus


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def config() -> BoardConfig:
    """Default config with explicit values so environment overrides can't leak in."""
    return BoardConfig(
        grid=GridConfig(enabled=True, size=5.0, snap_threshold=2.5),
        collision=CollisionConfig(enabled=True, min_distance=3.0, prevent_overlap=True),
        alignment=AlignmentConfig(enabled=True, alignment_threshold=4.0),
        boundary=BoundaryConfig(min_x=2.0, max_x=98.0, min_y=2.0, max_y=98.0, enforce=True),
        history=HistoryConfig(max_history_size=50, coalesce_window=0.5),
    )


@pytest.fixture
def grid_only_config(config) -> BoardConfig:
    """Config with everything but grid snapping switched off."""
    config.alignment.enabled = False
    config.collision.enabled = False
    return config


@pytest.fixture
def engine(config) -> ConstraintEngine:
    return ConstraintEngine(config)


# =============================================================================
# Player Fixtures
# =============================================================================


@pytest.fixture
def goalkeeper() -> Player:
    return Player(id="gk", name="Alisson", position=Position(50, 90), role=Role.GK, rating=85)


@pytest.fixture
def centre_back() -> Player:
    return Player(id="cb", name="Van Dijk", position=Position(40, 80), role=Role.CB, rating=88)


@pytest.fixture
def midfielder() -> Player:
    return Player(id="cm", name="Rice", position=Position(50, 55), role=Role.CM, rating=82)


@pytest.fixture
def striker() -> Player:
    return Player(id="st", name="Kane", position=Position(50, 25), role=Role.ST, rating=90)


@pytest.fixture
def injured_winger() -> Player:
    return Player(
        id="lw",
        name="Saka",
        position=Position(15, 30),
        role=Role.LW,
        rating=86,
        availability=Availability.INJURED,
    )


@pytest.fixture
def squad(goalkeeper, centre_back, midfielder, striker) -> list[Player]:
    """A spread-out four player squad."""
    return [goalkeeper, centre_back, midfielder, striker]


def make_player(player_id: str, role: Role, x: float, y: float, **kwargs) -> Player:
    return Player(id=player_id, name=player_id.upper(), position=Position(x, y), role=role, **kwargs)


@pytest.fixture
def full_squad() -> list[Player]:
    """Eleven home players matching a 4-4-2, listed out of template order."""
    return [
        make_player("st1", Role.ST, 30, 40, rating=80),
        make_player("st2", Role.ST, 70, 40, rating=78),
        make_player("lm", Role.LM, 10, 50, rating=75),
        make_player("rm", Role.RM, 90, 50, rating=74),
        make_player("cm1", Role.CM, 35, 60, rating=77),
        make_player("cm2", Role.CM, 65, 60, rating=76),
        make_player("lb", Role.LB, 10, 75, rating=72),
        make_player("rb", Role.RB, 90, 75, rating=73),
        make_player("cb1", Role.CB, 35, 85, rating=79),
        make_player("cb2", Role.CB, 65, 85, rating=81),
        make_player("gk", Role.GK, 50, 96, rating=83),
    ]


# =============================================================================
# Formation Fixtures
# =============================================================================


@pytest.fixture
def four_four_two() -> Formation:
    return build_formation("4-4-2", team=Team.HOME)


@pytest.fixture
def small_formation() -> Formation:
    """Three slots, one of them held by the centre back."""
    return Formation(
        id="small",
        name="Small",
        slots=(
            Slot(id="GK1", default_position=Position(50, 95), role=Role.GK),
            Slot(id="CB1", default_position=Position(40, 80), role=Role.CB, occupant_id="cb"),
            Slot(id="ST1", default_position=Position(50, 25), role=Role.ST),
        ),
    )


# =============================================================================
# Event Fixtures
# =============================================================================


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded(bus) -> list:
    """Every event emitted on ``bus``, in order."""
    events = []
    bus.subscribe_all(events.append)
    return events


class FakeClock:
    """Manually advanced clock for coalescing and timestamp tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def player_factory():
    """Build a player with a short id-derived name."""
    def make(player_id: str, role: Role, x: float, y: float, **kwargs) -> Player:
        return make_player(player_id, role, x, y, **kwargs)
    return make
