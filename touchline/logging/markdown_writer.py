"""Markdown formation report writer."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from touchline.board.analysis import FormationAnalysis
from touchline.core.enums import RoleBand
from touchline.core.models.formation import Formation
from touchline.logging.board_log import BoardLog


_BAND_LABELS = {
    RoleBand.GOALKEEPER: "Goalkeeper",
    RoleBand.DEFENCE: "Defence",
    RoleBand.MIDFIELD: "Midfield",
    RoleBand.ATTACK: "Attack",
}


class MarkdownBoardWriter:
    """Generates markdown formation reports."""

    def write_report(
        self,
        formation: Formation,
        analysis: FormationAnalysis,
        output_path: Path,
        board_log: Optional[BoardLog] = None,
    ) -> None:
        """Write the report for ``formation`` to ``output_path``."""
        with open(output_path, "w") as f:
            f.write(self.generate_report_string(formation, analysis, board_log))

    def generate_report_string(
        self,
        formation: Formation,
        analysis: FormationAnalysis,
        board_log: Optional[BoardLog] = None,
    ) -> str:
        """Generate the report as a string."""
        lines = []

        lines.append(f"# {formation.name or 'Formation'} ({formation.layout_signature})")
        lines.append("")
        lines.append(f"**Version:** {formation.version}  ")
        lines.append(f"**Updated:** {formation.updated_at.strftime('%Y-%m-%d %H:%M')}  ")
        lines.append(f"**Coverage:** {analysis.completeness_summary()}")
        lines.append("")

        # Ratings
        lines.append("## Ratings")
        lines.append("")
        lines.append(f"- Average fit: **{analysis.average_score}**")
        lines.append(f"- Outfield balance: **{analysis.overall_balance}**")
        for band, value in analysis.band_metrics.items():
            lines.append(f"- {_BAND_LABELS[band]}: {value}")
        lines.append("")

        # Lineup
        lines.append("## Lineup")
        lines.append("")
        lines.append("| Slot | Role | Player | Score | Fit |")
        lines.append("|------|------|--------|:-----:|-----|")
        for score in analysis.position_scores:
            player = score.player_name or "*empty*"
            lines.append(
                f"| {score.slot_id} | {score.role.value} | {player} | "
                f"{score.score} | {score.fitness.value} |"
            )
        lines.append("")

        # Issues
        lines.append("## Recommendations")
        lines.append("")
        if analysis.recommendations:
            for rec in analysis.recommendations:
                lines.append(f"- **[{rec.priority.value}]** {rec.issue}. {rec.suggestion}.")
        else:
            lines.append("*No issues found*")
        lines.append("")

        if board_log is not None:
            lines.extend(self._activity_lines(board_log))

        lines.append("---")
        lines.append(f"*Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
        return "\n".join(lines)

    def _activity_lines(self, board_log: BoardLog) -> list[str]:
        stats = board_log.stats
        lines = ["## Activity", ""]
        lines.append(f"- Moves: {stats.moves}, group operations: {stats.batches}")
        lines.append(
            f"- Conflicts: {stats.conflicts_raised} raised, "
            f"{stats.conflicts_resolved} resolved, {stats.conflicts_cancelled} cancelled"
        )
        lines.append(f"- Undo/redo: {stats.undos}/{stats.redos}")
        lines.append("")

        if board_log.entries:
            lines.append("| Version | Type | Description |")
            lines.append("|:-------:|------|-------------|")
            for entry in board_log.entries:
                lines.append(f"| {entry.version} | {entry.event_type} | {entry.description} |")
            lines.append("")
        return lines
