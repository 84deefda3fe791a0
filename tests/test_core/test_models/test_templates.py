"""Tests for the built-in formation templates."""

import pytest

from touchline.core.enums import Role, Team
from touchline.core.models.templates import FORMATION_TEMPLATES, build_formation, get_template


class TestTemplates:
    def test_every_template_has_eleven_slots_and_one_keeper(self):
        for name in FORMATION_TEMPLATES:
            formation = build_formation(name)
            assert len(formation.slots) == 11, name
            assert sum(1 for s in formation.slots if s.role is Role.GK) == 1, name
            assert formation.check_occupancy() == [], name

    def test_slot_ids_numbered_per_role(self, four_four_two):
        assert [s.id for s in four_four_two.slots] == [
            "GK1", "LB1", "CB1", "CB2", "RB1", "LM1", "CM1", "CM2", "RM1", "ST1", "ST2",
        ]

    def test_built_empty(self, four_four_two):
        assert four_four_two.occupied_count == 0
        assert four_four_two.id == "home-4-4-2"
        assert not four_four_two.is_custom

    def test_away_side_mirrored(self):
        """The away side defends the top of the board."""
        away = build_formation("4-4-2", team=Team.AWAY)
        assert away.get_slot("GK1").default_position.y == 5
        assert away.team is Team.AWAY

    def test_preferred_roles(self, four_four_two):
        assert Role.CF in four_four_two.get_slot("ST1").preferred_roles
        assert Role.LWB in four_four_two.get_slot("LB1").preferred_roles

    def test_layout_signature(self):
        assert build_formation("4-3-3").layout_signature == "4-3-3"

    def test_unknown_template(self):
        with pytest.raises(KeyError):
            get_template("1-1-8")
