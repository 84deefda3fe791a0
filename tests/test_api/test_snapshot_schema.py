"""Tests for the formation snapshot wire schema."""

import pytest
from pydantic import ValidationError

from touchline.api.schemas import FormationSnapshotSchema
from touchline.api.schemas.snapshot import (
    formation_from_snapshot,
    load_formation_or_default,
    snapshot_from_formation,
)
from touchline.board.errors import CorruptedSnapshotError
from touchline.core.enums import Role


@pytest.fixture
def wire(small_formation):
    return snapshot_from_formation(small_formation)


class TestSnapshotExport:
    def test_camel_case_shape(self, wire):
        assert wire["formationId"] == "small"
        assert wire["slots"][1] == {
            "id": "CB1",
            "role": "CB",
            "defaultPosition": {"x": 40.0, "y": 80.0},
            "playerId": "cb",
        }
        assert wire["metadata"]["version"] == 1
        assert "createdAt" in wire["metadata"]

    def test_round_trip(self, four_four_two):
        """Template slots come back identical, preferred roles included."""
        formation = four_four_two.with_occupant("ST1", "st")
        loaded = formation_from_snapshot(snapshot_from_formation(formation))
        assert loaded.id == formation.id
        assert loaded.slots == formation.slots
        assert loaded.version == formation.version


class TestSnapshotValidation:
    """Tests for rejecting corrupted snapshots as a whole."""

    def test_not_an_object(self):
        with pytest.raises(CorruptedSnapshotError):
            formation_from_snapshot(["nope"])

    def test_position_out_of_range(self, wire):
        wire["slots"][0]["defaultPosition"]["x"] = 140
        with pytest.raises(CorruptedSnapshotError):
            formation_from_snapshot(wire)

    def test_unknown_role(self, wire):
        wire["slots"][0]["role"] = "QB"
        with pytest.raises(CorruptedSnapshotError):
            formation_from_snapshot(wire)

    def test_player_in_two_slots(self, wire):
        wire["slots"][0]["playerId"] = "cb"
        with pytest.raises(CorruptedSnapshotError):
            formation_from_snapshot(wire)

    def test_duplicate_slot_ids(self, wire):
        wire["slots"][2]["id"] = "CB1"
        with pytest.raises(ValidationError):
            FormationSnapshotSchema.model_validate(wire)

    def test_version_must_be_positive(self, wire):
        wire["metadata"]["version"] = 0
        with pytest.raises(CorruptedSnapshotError):
            formation_from_snapshot(wire)

    def test_role_tags_normalized(self, wire):
        wire["slots"][0]["role"] = "gk"
        assert formation_from_snapshot(wire).slots[0].role is Role.GK

    def test_snake_case_names_accepted(self, small_formation):
        schema = FormationSnapshotSchema.from_model(small_formation)
        assert schema.formation_id == "small"
        assert schema.slots[1].player_id == "cb"


class TestLoadOrDefault:
    def test_corrupted_falls_back_to_template(self):
        formation = load_formation_or_default({"formationId": ""})
        assert formation.name == "4-4-2"
        assert formation.occupied_count == 0

    def test_valid_snapshot_loaded(self, wire):
        assert load_formation_or_default(wire).id == "small"
