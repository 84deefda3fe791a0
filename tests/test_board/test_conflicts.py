"""Tests for conflict options and applying a chosen resolution."""

import pytest

from touchline.board.conflicts import (
    ConflictAction,
    apply_resolution,
    resolve_conflict,
)
from touchline.board.errors import BoardValidationError
from touchline.core.enums import Role


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def backs(centre_back, player_factory):
    """Two centre backs; the second is the one being dragged."""
    return [centre_back, player_factory("cb2", Role.CB, 65, 85, rating=80)]


@pytest.fixture
def paired(four_four_two):
    """4-4-2 with both centre back slots filled."""
    return four_four_two.with_occupant("CB1", "cb").with_occupant("CB2", "cb2")


@pytest.fixture
def conflict(paired, backs):
    return resolve_conflict("cb2", "CB1", "cb", paired, backs)


@pytest.fixture
def bench_conflict(four_four_two, centre_back, midfielder):
    """A benched midfielder dropped onto the occupied CB1."""
    formation = four_four_two.with_occupant("CB1", "cb")
    return formation, resolve_conflict("cm", "CB1", "cb", formation, [centre_back, midfielder])


# =============================================================================
# Options
# =============================================================================


class TestResolveConflict:
    """Tests for listing resolution options."""

    def test_slotted_player_gets_every_option(self, conflict):
        assert set(conflict.actions) == {
            ConflictAction.SWAP,
            ConflictAction.REPLACE,
            ConflictAction.REASSIGN,
            ConflictAction.MOVE_TO_BENCH,
            ConflictAction.CANCEL,
        }

    def test_sorted_best_first_cancel_last(self, conflict):
        """Options run from highest score down, cancel always last."""
        scores = [o.score for o in conflict.options[:-1]]
        assert scores == sorted(scores, reverse=True)
        assert conflict.options[-1].action is ConflictAction.CANCEL
        assert conflict.options[-1].score is None

    def test_swap_score_averages_both_fits(self, conflict):
        """cb2 at CB1 scores 94, cb at CB2 scores 96."""
        assert conflict.option(ConflictAction.SWAP).score == 95
        assert conflict.option(ConflictAction.SWAP).target_slot_id == "CB2"

    def test_reassign_targets_best_free_slot(self, conflict):
        """The occupant's best free slot is a full back position."""
        option = conflict.option(ConflictAction.REASSIGN)
        assert option.target_slot_id == "LB1"

    def test_recommended_is_first(self, conflict):
        assert conflict.recommended is conflict.options[0]

    def test_benched_player_cannot_swap_or_bench(self, bench_conflict):
        """Without a source slot there is nothing to swap into."""
        _, resolution = bench_conflict
        assert resolution.source_slot_id is None
        assert resolution.actions == [
            ConflictAction.REASSIGN,
            ConflictAction.REPLACE,
            ConflictAction.CANCEL,
        ]

    def test_reassign_needs_a_decent_free_slot(self, small_formation, centre_back, midfielder):
        """No free slot above the threshold means no reassign option."""
        resolution = resolve_conflict("cm", "CB1", "cb", small_formation, [centre_back, midfielder])
        assert ConflictAction.REASSIGN not in resolution.actions

    def test_not_a_conflict(self, paired, backs, four_four_two):
        assert resolve_conflict("ghost", "CB1", "cb", paired, backs) is None
        assert resolve_conflict("cb2", "XX1", "cb", paired, backs) is None
        assert resolve_conflict("cb2", "CB1", "cb2", paired, backs) is None
        assert resolve_conflict("cb2", "CB1", "cb", four_four_two, backs) is None

    def test_to_dict(self, conflict):
        data = conflict.to_dict()
        assert data["target_slot_id"] == "CB1"
        assert data["options"][-1]["action"] == "cancel"


# =============================================================================
# Applying
# =============================================================================


class TestApplyResolution:
    """Tests for apply_resolution."""

    def test_swap_exchanges_slots(self, paired, conflict):
        result = apply_resolution(paired, conflict, ConflictAction.SWAP)
        assert result.get_slot("CB1").occupant_id == "cb2"
        assert result.get_slot("CB2").occupant_id == "cb"
        assert result.occupied_count == paired.occupied_count

    def test_replace_benches_occupant(self, paired, conflict):
        result = apply_resolution(paired, conflict, ConflictAction.REPLACE)
        assert result.get_slot("CB1").occupant_id == "cb2"
        assert result.slot_for("cb") is None
        assert result.get_slot("CB2").occupant_id is None

    def test_reassign_moves_occupant(self, bench_conflict):
        formation, resolution = bench_conflict
        result = apply_resolution(formation, resolution, "reassign")
        assert result.get_slot("CB1").occupant_id == "cm"
        assert result.get_slot("CB2").occupant_id == "cb"

    def test_move_to_bench_leaves_target(self, paired, conflict):
        result = apply_resolution(paired, conflict, ConflictAction.MOVE_TO_BENCH)
        assert result.get_slot("CB1").occupant_id == "cb"
        assert result.slot_for("cb2") is None

    def test_cancel_changes_nothing(self, paired, conflict):
        assert apply_resolution(paired, conflict, ConflictAction.CANCEL) is paired

    def test_action_not_offered(self, bench_conflict):
        formation, resolution = bench_conflict
        with pytest.raises(BoardValidationError):
            apply_resolution(formation, resolution, ConflictAction.SWAP)

    def test_stale_formation_rejected(self, paired, conflict):
        """A formation that moved on since the conflict is refused."""
        changed = paired.without_player("cb")
        with pytest.raises(BoardValidationError):
            apply_resolution(changed, conflict, ConflictAction.REPLACE)

    def test_unknown_action(self, paired, conflict):
        with pytest.raises(ValueError):
            apply_resolution(paired, conflict, "teleport")
