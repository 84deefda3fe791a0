"""Tests for fit scoring, placement validation and auto-assignment."""

import pytest

from touchline.board.assignment import (
    auto_assign,
    drop_zones,
    plan_assignment,
    player_positions_from_formation,
    score_player_for_slot,
    validate_placement,
)
from touchline.core.enums import Availability, Form, Morale, Role, Team
from touchline.core.models.field import Position
from touchline.core.models.formation import Formation, Slot
from touchline.core.models.player import Player


def slot(slot_id: str, role: Role) -> Slot:
    return Slot(id=slot_id, default_position=Position(50, 50), role=role)


class TestScoring:
    """Tests for score_player_for_slot."""

    def test_natural_fit(self):
        """Role match plus 30% of rating."""
        player = Player(id="p", role=Role.CB, rating=80)
        assert score_player_for_slot(player, slot("CB1", Role.CB)) == 94

    def test_secondary_fit(self):
        player = Player(id="p", role=Role.CB, rating=80)
        assert score_player_for_slot(player, slot("LB1", Role.LB)) == 69

    def test_unlisted_same_band(self):
        player = Player(id="p", role=Role.RB, rating=80)
        assert score_player_for_slot(player, slot("LB1", Role.LB)) == 49

    def test_restricted_scores_zero(self):
        player = Player(id="p", role=Role.GK, rating=99)
        assert score_player_for_slot(player, slot("ST1", Role.ST)) == 0

    def test_unavailable_penalised(self):
        player = Player(id="p", role=Role.CB, rating=80, availability=Availability.INJURED)
        assert score_player_for_slot(player, slot("CB1", Role.CB)) == 28

    def test_poor_form_lowers_score(self):
        player = Player(id="p", role=Role.CB, rating=80, form=Form.POOR)
        assert score_player_for_slot(player, slot("CB1", Role.CB)) == 80

    def test_capped_at_100(self):
        player = Player(
            id="p", role=Role.CB, rating=100, form=Form.EXCELLENT, morale=Morale.EXCELLENT,
        )
        assert score_player_for_slot(player, slot("CB1", Role.CB)) == 100


class TestValidatePlacement:
    """Tests for validate_placement."""

    def test_unknown_player(self, squad, four_four_two):
        assert not validate_placement("ghost", squad, four_four_two, "CB1")

    def test_unavailable_player(self, injured_winger, four_four_two):
        assert not validate_placement("lw", [injured_winger])

    def test_no_target_slot(self, squad):
        """Without a slot only existence and availability matter."""
        assert validate_placement("st", squad)

    def test_primary_fit(self, squad, four_four_two):
        assert validate_placement("cb", squad, four_four_two, "CB1")

    def test_secondary_fit(self, squad, four_four_two):
        assert validate_placement("cb", squad, four_four_two, "LB1")

    def test_restricted(self, squad, four_four_two):
        assert not validate_placement("gk", squad, four_four_two, "ST1")

    def test_unlisted_rejected_for_targeted_slot(self, squad, four_four_two):
        assert not validate_placement("st", squad, four_four_two, "CM1")

    def test_unknown_slot(self, squad, four_four_two):
        assert not validate_placement("cb", squad, four_four_two, "XX9")

    def test_other_team(self, four_four_two):
        away = Player(id="a", role=Role.CB, team=Team.AWAY)
        assert not validate_placement("a", [away], four_four_two, "CB1")

    def test_accepts_mapping(self, squad, four_four_two):
        index = {p.id: p for p in squad}
        assert validate_placement("cb", index, four_four_two, "CB2")


class TestDropZones:
    def test_valid_and_magnetic(self, centre_back, four_four_two):
        """Magnetic slots share the player's exact role."""
        zones = drop_zones(centre_back, four_four_two)
        assert zones.valid == ("LB1", "CB1", "CB2", "RB1")
        assert zones.magnetic == ("CB1", "CB2")

    def test_unavailable_player_has_none(self, injured_winger, four_four_two):
        zones = drop_zones(injured_winger, four_four_two)
        assert zones.valid == ()


class TestAutoAssign:
    """Tests for the greedy and optimal auto-assignment."""

    def test_short_squad_fills_what_it_can(self, player_factory, four_four_two):
        """Five players into eleven slots: five filled, goalkeeper first, no error."""
        players = [
            player_factory("cb", Role.CB, 40, 80),
            player_factory("cm", Role.CM, 50, 55),
            player_factory("st", Role.ST, 50, 25),
            player_factory("lb", Role.LB, 15, 80),
            player_factory("gk", Role.GK, 50, 95),
        ]
        plan = plan_assignment(players, four_four_two)

        assert plan.filled_count == 5
        assert plan.assignments[0].slot_id == "GK1"
        assert plan.assignments[0].player_id == "gk"
        assert len(plan.empty_slot_ids) == 6
        assert plan.unassigned_player_ids == []

        formation = plan.apply(four_four_two)
        assert formation.occupied_count == 5
        assert formation.get_slot("CM1").occupant_id == "cm"
        assert formation.get_slot("ST1").occupant_id == "st"

    def test_full_squad_gets_natural_slots(self, full_squad, four_four_two):
        """A squad that matches the template lands every player in its own role."""
        formation = auto_assign(full_squad, four_four_two)
        roles = {p.id: p.role for p in full_squad}

        assert formation.occupied_count == 11
        for s in formation.slots:
            assert roles[s.occupant_id] is s.role

    def test_ties_go_to_earlier_player(self, player_factory):
        """Equal scores are broken by input order."""
        formation = Formation(id="f", slots=(slot("CB1", Role.CB),))
        players = [
            player_factory("second", Role.CB, 40, 80, rating=70),
            player_factory("first", Role.CB, 60, 80, rating=70),
        ]
        result = auto_assign(players, formation)
        assert result.get_slot("CB1").occupant_id == "second"

    def test_no_duplicate_ids(self, full_squad, four_four_two):
        """No player is ever assigned twice."""
        for strategy in ("greedy", "optimal"):
            formation = auto_assign(full_squad + full_squad, four_four_two, strategy=strategy)
            assert formation.check_occupancy() == []
            assert formation.occupied_count <= min(len(full_squad), len(formation.slots))

    def test_surplus_players_left_over(self, full_squad, player_factory, four_four_two):
        extra = player_factory("sub", Role.CM, 50, 50, rating=10)
        plan = plan_assignment(full_squad + [extra], four_four_two)
        assert plan.unassigned_player_ids == ["sub"]

    def test_restricted_pairs_never_made(self, player_factory):
        """A goalkeeper is never pushed into an outfield slot."""
        formation = Formation(id="f", slots=(slot("ST1", Role.ST),))
        players = [player_factory("gk", Role.GK, 50, 95)]
        for strategy in ("greedy", "optimal"):
            plan = plan_assignment(players, formation, strategy=strategy)
            assert plan.filled_count == 0

    def test_unavailable_and_other_team_skipped(self, player_factory, four_four_two):
        players = [
            player_factory("hurt", Role.GK, 50, 95, availability=Availability.SUSPENDED),
            player_factory("away", Role.GK, 50, 5, team=Team.AWAY),
        ]
        assert plan_assignment(players, four_four_two).filled_count == 0

    def test_malformed_records_filtered(self, four_four_two):
        """Bad input records are skipped rather than raising."""
        players = [
            {"id": "ok", "position": {"x": 50, "y": 95}, "role": "GK"},
            {"id": "no-position", "role": "CB"},
            {"position": {"x": 1, "y": 1}},
            {"id": "bad-role", "position": {"x": 1, "y": 1}, "role": "QB"},
            "not a player",
        ]
        plan = plan_assignment(players, four_four_two)
        assert [a.player_id for a in plan.assignments] == ["ok"]

    def test_optimal_matches_greedy_on_natural_squad(self, full_squad, four_four_two):
        greedy = plan_assignment(full_squad, four_four_two)
        optimal = plan_assignment(full_squad, four_four_two, strategy="optimal")
        assert optimal.total_score >= greedy.total_score
        assert optimal.filled_count == 11

    def test_unknown_strategy(self, full_squad, four_four_two):
        with pytest.raises(ValueError):
            plan_assignment(full_squad, four_four_two, strategy="random")

    def test_existing_occupants_replaced(self, small_formation, goalkeeper):
        """Auto-assignment starts from an empty formation."""
        formation = auto_assign([goalkeeper], small_formation)
        assert formation.get_slot("GK1").occupant_id == "gk"
        assert formation.get_slot("CB1").occupant_id is None


class TestPlayerPositions:
    def test_assigned_players_move_to_slots(self, squad, small_formation):
        positions = player_positions_from_formation(squad, small_formation)
        assert positions == {"cb": Position(40, 80)}
