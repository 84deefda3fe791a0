"""Board activity logging and report output."""

from touchline.logging.board_log import BoardLog, LogEntry
from touchline.logging.markdown_writer import MarkdownBoardWriter

__all__ = ["BoardLog", "LogEntry", "MarkdownBoardWriter"]
