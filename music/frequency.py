"""Equal-tempered pitch math and pitch-bend scaling."""

A4_NOTE = 69
A4_FREQUENCY = 440.0

# Pitch-bend wire format: 14-bit value centred on 8192
BEND_CENTER = 8192
BEND_MIN = 0
BEND_MAX = 16383

# Fixed +/- bend range of the engine
MAX_BEND_SEMITONES = 2.0

SEMITONE_RATIO = 2.0 ** (1.0 / 12.0)

NOTE_NAMES = ['C', 'C#', 'D', 'D#', 'E', 'F', 'F#', 'G', 'G#', 'A', 'A#', 'B']


def midi_to_frequency(note: int) -> float:
    """Frequency in Hz of a MIDI note with A4 (note 69) tuned to 440 Hz."""
    return A4_FREQUENCY * (2.0 ** ((note - A4_NOTE) / 12.0))


def bend_offset_to_semitones(bend_offset: int) -> float:
    return (bend_offset / float(BEND_CENTER)) * MAX_BEND_SEMITONES


def apply_bend(base_frequency: float, bend_offset: int) -> float:
    """Shift a frequency by a signed bend offset in [-8192, 8191].

    A full-scale offset moves the pitch by MAX_BEND_SEMITONES; an offset of
    zero returns ``base_frequency`` unchanged.
    """
    return base_frequency * (SEMITONE_RATIO ** bend_offset_to_semitones(bend_offset))


def note_name(note: int) -> str:
    """Scientific pitch name, e.g. 60 -> 'C4'."""
    return f"{NOTE_NAMES[note % 12]}{(note // 12) - 1}"
