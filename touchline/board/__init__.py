"""Tactical positioning engine: constraints, selection, assignment and history."""

from touchline.board.analysis import FormationAnalysis, Fitness, analyze_formation
from touchline.board.assignment import (
    AssignmentPlan,
    DropZones,
    auto_assign,
    drop_zones,
    plan_assignment,
    player_positions_from_formation,
    score_player_for_slot,
    validate_placement,
)
from touchline.board.compatibility import CompatibilityTier, get_tier, is_compatible
from touchline.board.config import BoardConfig
from touchline.board.conflicts import (
    ConflictAction,
    ConflictResolution,
    ResolutionOption,
    apply_resolution,
    resolve_conflict,
)
from touchline.board.constraints import ConstraintEngine, DragResult, SnapContext, SnapType
from touchline.board.drag import DragPhase, DragSession
from touchline.board.errors import (
    BoardValidationError,
    CorruptedSnapshotError,
    InvalidDragTransition,
    TouchlineError,
)
from touchline.board.history import HistoryManager, HistorySnapshot
from touchline.board.selection import AlignEdge, Axis, SelectionManager, SelectionMode
from touchline.board.session import BoardSession, PlacementOutcome
from touchline.board.transitions import Transition, plan_transitions

__all__ = [
    "AlignEdge",
    "AssignmentPlan",
    "Axis",
    "BoardConfig",
    "BoardSession",
    "BoardValidationError",
    "CompatibilityTier",
    "ConflictAction",
    "ConflictResolution",
    "ConstraintEngine",
    "CorruptedSnapshotError",
    "DragPhase",
    "DragResult",
    "DragSession",
    "DropZones",
    "Fitness",
    "FormationAnalysis",
    "HistoryManager",
    "HistorySnapshot",
    "InvalidDragTransition",
    "PlacementOutcome",
    "ResolutionOption",
    "SelectionManager",
    "SelectionMode",
    "SnapContext",
    "SnapType",
    "TouchlineError",
    "Transition",
    "analyze_formation",
    "apply_resolution",
    "auto_assign",
    "drop_zones",
    "get_tier",
    "is_compatible",
    "plan_assignment",
    "player_positions_from_formation",
    "plan_transitions",
    "resolve_conflict",
    "score_player_for_slot",
    "validate_placement",
]
