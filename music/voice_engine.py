"""Polyphonic voice management with global pitch bend."""
from typing import Dict, Optional, Set

from music.frequency import (
    BEND_CENTER, BEND_MAX, BEND_MIN,
    apply_bend, bend_offset_to_semitones, midi_to_frequency,
)


class Voice:
    """One sounding note and the tone that renders it."""

    def __init__(self, note: int, base_frequency: float, frequency: float,
                 render_handle, velocity: int = 127):
        self.note = note
        self.base_frequency = base_frequency
        self.frequency = frequency
        self.render_handle = render_handle
        self.velocity = velocity

    def __repr__(self):
        return (f"Voice(note={self.note}, base_frequency={self.base_frequency:.3f}, "
                f"frequency={self.frequency:.3f})")


class VoiceEngine:
    """Keeps exactly one tone per held note and retunes them all on pitch bend.

    The engine owns every render handle it acquires from ``sink``; nothing
    else may retune or release them. The sink must provide
    ``acquire(frequency) -> handle``, ``retune(handle, frequency)`` and
    ``release(handle)``.

    Mutating calls are not thread-safe; callers serialize them (see
    ``MIDIInputHandler``).
    """

    def __init__(self, sink):
        self.sink = sink
        self.voices: Dict[int, Voice] = {}
        self.bend_offset = 0

    # ── Note events ──────────────────────────────────────────────

    def note_on(self, note: int, velocity: int = 127):
        """Start a sustained tone for ``note``, replacing any tone already sounding it.

        Velocity is recorded on the voice but does not shape amplitude.

        Raises:
            SinkUnavailable: If the sink cannot allocate a tone. The note is
                left silent and other voices are untouched.
        """
        _check_data_value("note", note)
        _check_data_value("velocity", velocity)

        previous = self.voices.pop(note, None)
        if previous is not None:
            self.sink.release(previous.render_handle)

        base_frequency = midi_to_frequency(note)
        frequency = apply_bend(base_frequency, self.bend_offset)
        handle = self.sink.acquire(frequency)
        self.voices[note] = Voice(note, base_frequency, frequency, handle, velocity)

    def note_off(self, note: int):
        """Release the voice for ``note``. Silent notes are ignored."""
        voice = self.voices.pop(note, None)
        if voice is not None:
            self.sink.release(voice.render_handle)

    def all_notes_off(self):
        """Release every voice. The bend value is kept."""
        for note in list(self.voices):
            self.note_off(note)

    # ── Pitch bend ───────────────────────────────────────────────

    def pitch_bend(self, value: int):
        """Apply a 14-bit bend value (0..16383, centre 8192) to all voices."""
        if not BEND_MIN <= value <= BEND_MAX:
            raise ValueError(f"Pitch bend value out of range: {value}")
        self.bend_offset = value - BEND_CENTER
        for voice in list(self.voices.values()):
            voice.frequency = apply_bend(voice.base_frequency, self.bend_offset)
            self.sink.retune(voice.render_handle, voice.frequency)

    @property
    def bend_semitones(self) -> float:
        return bend_offset_to_semitones(self.bend_offset)

    # ── Queries ──────────────────────────────────────────────────

    def effective_frequency(self, note: int) -> Optional[float]:
        """Frequency the voice for ``note`` sounds at under the current bend.

        Returns:
            Frequency in Hz, or None if ``note`` is not sounding.
        """
        voice = self.voices.get(note)
        if voice is None:
            return None
        return apply_bend(voice.base_frequency, self.bend_offset)

    def get_voice(self, note: int) -> Optional[Voice]:
        return self.voices.get(note)

    def get_active_notes(self) -> Set[int]:
        return set(self.voices)

    def close(self):
        """Release every voice; the engine holds no tones afterwards."""
        self.all_notes_off()


def _check_data_value(name: str, value: int):
    if not 0 <= value <= 127:
        raise ValueError(f"{name} out of range 0..127: {value}")
