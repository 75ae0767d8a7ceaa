"""Scrolling log of incoming MIDI events."""
from rich.text import Text
from textual.widgets import RichLog

_WARNING_MARKERS = ("ignored", "not started", "Error")


class EventLog(RichLog):
    """Shows raw traces and decoded reports, newest at the bottom."""

    DEFAULT_CSS = """
    EventLog {
        height: 1fr;
        border: solid #ffd700;
    }
    """

    def __init__(self, max_lines: int = 500, **kwargs):
        super().__init__(max_lines=max_lines, markup=False, wrap=False, **kwargs)

    def add_line(self, line: str):
        """Append one log line; dropped events are highlighted."""
        if any(marker in line for marker in _WARNING_MARKERS):
            self.write(Text(line, style="#ff5f5f"))
        else:
            self.write(line)
