"""Live view of sounding voices and the current pitch bend."""
from textual.widget import Widget
from rich.text import Text
from rich.console import RenderableType
from rich.align import Align
from rich.panel import Panel
from typing import List, Tuple

from music.frequency import note_name


class VoiceDisplay(Widget):
    """Lists every sounding voice with its base and bent frequency."""

    DEFAULT_CSS = """
    VoiceDisplay {
        height: auto;
        min-height: 5;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.voices: List[Tuple[int, float, float]] = []
        self.bend_semitones = 0.0

    def render(self) -> RenderableType:
        """Render the voice list."""
        bend_style = "#00ff87" if self.bend_semitones == 0 else "#ffd700"
        body = Text(f"Bend: {self.bend_semitones:+.3f} st\n", style=bend_style, justify="center")

        if not self.voices:
            body.append("♪ No notes playing", style="dim italic #666666")
        else:
            for note, base_frequency, frequency in self.voices:
                body.append(
                    f"{note_name(note):>4} (MIDI {note:3d})  "
                    f"{base_frequency:9.2f} Hz → {frequency:9.2f} Hz\n",
                    style="#00d7ff",
                )

        return Align.center(Panel(body, title="Voices", border_style="#ffd700"))

    def update_display(self, voices: List[Tuple[int, float, float]], bend_semitones: float):
        """Update the voice list.

        Args:
            voices: (note, base frequency, current frequency) per voice.
            bend_semitones: Current global bend in semitones.
        """
        self.voices = sorted(voices)
        self.bend_semitones = bend_semitones
        self.refresh()
