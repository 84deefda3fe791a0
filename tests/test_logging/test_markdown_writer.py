"""Tests for the markdown formation report."""

from touchline.board.analysis import analyze_formation
from touchline.board.assignment import auto_assign
from touchline.logging import BoardLog, MarkdownBoardWriter


class TestMarkdownBoardWriter:
    def test_report_for_complete_lineup(self, full_squad, four_four_two):
        formation = auto_assign(full_squad, four_four_two)
        report = MarkdownBoardWriter().generate_report_string(
            formation, analyze_formation(formation, full_squad)
        )
        assert report.startswith("# 4-4-2 (4-4-2)")
        assert "All 11 positions filled" in report
        assert "| GK1 | GK | GK |" in report
        assert "*No issues found*" in report
        assert "## Activity" not in report

    def test_report_lists_gaps(self, small_formation, centre_back):
        analysis = analyze_formation(small_formation, [centre_back])
        report = MarkdownBoardWriter().generate_report_string(small_formation, analysis)
        assert "1/3 positions filled, missing: GK, ST" in report
        assert "*empty*" in report
        assert "**[high]** No player assigned to GK" in report

    def test_activity_section(self, small_formation, centre_back):
        log = BoardLog()
        log.add_entry("MOVE", "Van Dijk moved", version=3)
        analysis = analyze_formation(small_formation, [centre_back])
        report = MarkdownBoardWriter().generate_report_string(small_formation, analysis, log)
        assert "## Activity" in report
        assert "| 3 | MOVE | Van Dijk moved |" in report

    def test_write_report(self, tmp_path, small_formation, centre_back):
        path = tmp_path / "report.md"
        analysis = analyze_formation(small_formation, [centre_back])
        MarkdownBoardWriter().write_report(small_formation, analysis, path)
        assert path.read_text().startswith("# Small")
