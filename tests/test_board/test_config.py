"""Tests for board configuration."""

from touchline.board.config import BoardConfig, BoundaryConfig, GridConfig, HistoryConfig


class TestBoardConfig:
    """Tests for BoardConfig defaults, environment overrides and validation."""

    def test_defaults_are_valid(self, monkeypatch):
        for name in ("TOUCHLINE_GRID_SIZE", "TOUCHLINE_MAX_HISTORY", "TOUCHLINE_BOUNDARY_MIN_X"):
            monkeypatch.delenv(name, raising=False)
        config = BoardConfig()
        assert config.validate() == []
        assert config.grid.size == 5.0
        assert config.history.max_history_size == 50
        assert config.selection.max_selection_count is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TOUCHLINE_GRID_SIZE", "10")
        monkeypatch.setenv("TOUCHLINE_GRID_ENABLED", "no")
        monkeypatch.setenv("TOUCHLINE_MAX_HISTORY", "5")
        monkeypatch.setenv("TOUCHLINE_MAX_SELECTION", "3")

        config = BoardConfig.from_env()

        assert config.grid.size == 10.0
        assert not config.grid.enabled
        assert config.history.max_history_size == 5
        assert config.selection.max_selection_count == 3

    def test_empty_env_value_uses_default(self, monkeypatch):
        monkeypatch.setenv("TOUCHLINE_GRID_SIZE", "")
        assert GridConfig().size == 5.0

    def test_validate_reports_every_problem(self):
        config = BoardConfig(
            grid=GridConfig(enabled=True, size=0, snap_threshold=-1),
            boundary=BoundaryConfig(min_x=50, max_x=10, min_y=0, max_y=100, enforce=True),
            history=HistoryConfig(max_history_size=0, coalesce_window=0.5),
        )
        errors = config.validate()
        assert "Grid size must be positive" in errors
        assert "Grid snap threshold cannot be negative" in errors
        assert "Boundary min_x is greater than max_x" in errors
        assert "History size must be at least 1" in errors

    def test_boundary_bounds(self, config):
        bounds = config.boundary.bounds
        assert (bounds.min_x, bounds.max_y) == (2.0, 98.0)
