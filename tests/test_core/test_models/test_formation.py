"""Tests for Formation and Slot."""

from touchline.core.enums import Role, RoleBand
from touchline.core.models.field import Bounds, Position
from touchline.core.models.formation import Formation, Slot, TacticalZone


class TestSlot:
    def test_own_role_always_preferred(self):
        slot = Slot(id="ST1", default_position=Position(50, 25), role="st", preferred_roles=("CF",))
        assert slot.role is Role.ST
        assert slot.preferred_roles == (Role.ST, Role.CF)
        assert slot.label == "ST"

    def test_with_occupant(self):
        slot = Slot(id="GK1", default_position=Position(50, 95), role=Role.GK)
        assert not slot.is_occupied
        assert slot.with_occupant("gk").occupant_id == "gk"


class TestFormation:
    """Tests for Formation queries and edits."""

    def test_queries(self, small_formation):
        assert small_formation.get_slot("CB1").occupant_id == "cb"
        assert small_formation.get_slot("XX1") is None
        assert small_formation.slot_for("cb").id == "CB1"
        assert small_formation.slot_for("gk") is None
        assert small_formation.occupied_count == 1
        assert [s.id for s in small_formation.free_slots] == ["GK1", "ST1"]

    def test_with_occupant_keeps_one_to_one(self, small_formation):
        """Moving a player into a new slot empties its old one."""
        moved = small_formation.with_occupant("ST1", "cb")
        assert moved.get_slot("ST1").occupant_id == "cb"
        assert moved.get_slot("CB1").occupant_id is None
        assert moved.check_occupancy() == []

    def test_edits_return_new_formations(self, small_formation):
        small_formation.with_occupant("GK1", "gk")
        assert small_formation.get_slot("GK1").occupant_id is None

    def test_without_player_and_cleared(self, small_formation):
        assert small_formation.without_player("cb").occupied_count == 0
        assert small_formation.cleared().occupied_count == 0

    def test_check_occupancy_reports_duplicates(self):
        pos = Position(50, 50)
        formation = Formation(slots=(
            Slot(id="A", default_position=pos, role=Role.CM, occupant_id="p"),
            Slot(id="A", default_position=pos, role=Role.CM, occupant_id="p"),
        ))
        errors = formation.check_occupancy()
        assert "Duplicate slot id: A" in errors
        assert "Player p occupies 2 slots" in errors

    def test_bumped(self, small_formation):
        bumped = small_formation.bumped()
        assert bumped.version == small_formation.version + 1
        assert bumped.slots == small_formation.slots

    def test_band_counts(self, four_four_two):
        counts = four_four_two.band_counts
        assert counts[RoleBand.GOALKEEPER] == 1
        assert counts[RoleBand.DEFENCE] == 4
        assert four_four_two.layout_signature == "4-4-2"


class TestTacticalZone:
    def test_contains(self):
        zone = TacticalZone(id="box", name="Box", bounds=Bounds(20, 80, 80, 100))
        assert zone.contains(Position(50, 90))
        assert not zone.contains(Position(50, 50))
