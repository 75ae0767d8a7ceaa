"""Classification of raw MIDI byte payloads into typed events."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from errors import InvalidEvent


class EventKind(Enum):
    """Channel-voice message kinds, keyed by status-byte high nibble."""
    NOTE_OFF = "note_off"
    NOTE_ON = "note_on"
    POLY_PRESSURE = "poly_pressure"
    CONTROL_CHANGE = "control_change"
    PROGRAM_CHANGE = "program_change"
    CHANNEL_PRESSURE = "channel_pressure"
    PITCH_BEND = "pitch_bend"
    UNKNOWN = "unknown"


_STATUS_KINDS = {
    0x80: EventKind.NOTE_OFF,
    0x90: EventKind.NOTE_ON,
    0xA0: EventKind.POLY_PRESSURE,
    0xB0: EventKind.CONTROL_CHANGE,
    0xC0: EventKind.PROGRAM_CHANGE,
    0xD0: EventKind.CHANNEL_PRESSURE,
    0xE0: EventKind.PITCH_BEND,
}

# Total payload length (status byte included) each kind needs
_REQUIRED_LENGTH = {
    EventKind.NOTE_OFF: 3,
    EventKind.NOTE_ON: 3,
    EventKind.POLY_PRESSURE: 3,
    EventKind.CONTROL_CHANGE: 3,
    EventKind.PROGRAM_CHANGE: 2,
    EventKind.CHANNEL_PRESSURE: 2,
    EventKind.PITCH_BEND: 3,
    EventKind.UNKNOWN: 1,
}


@dataclass(frozen=True)
class ClassifiedEvent:
    """A decoded MIDI event.

    ``data1``/``data2`` hold the data bytes the kind uses (``data2`` is 0 for
    two-byte kinds). ``channel`` is None for UNKNOWN events.
    """
    kind: EventKind
    channel: Optional[int]
    data1: int = 0
    data2: int = 0
    raw: Tuple[int, ...] = ()

    @property
    def note(self) -> int:
        return self.data1

    @property
    def velocity(self) -> int:
        return self.data2

    @property
    def controller(self) -> int:
        return self.data1

    @property
    def value(self) -> int:
        """Controller value, or the 14-bit bend value for PITCH_BEND."""
        if self.kind == EventKind.PITCH_BEND:
            return (self.data2 << 7) | self.data1
        return self.data2

    def describe(self) -> str:
        """Human-readable one-line report of the event."""
        ch = self.channel
        if self.kind == EventKind.NOTE_OFF:
            return f"Note Off: channel={ch}, note={self.data1}, velocity={self.data2}"
        if self.kind == EventKind.NOTE_ON:
            return f"Note On: channel={ch}, note={self.data1}, velocity={self.data2}"
        if self.kind == EventKind.POLY_PRESSURE:
            return f"Polyphonic Key Pressure: channel={ch}, note={self.data1}, pressure={self.data2}"
        if self.kind == EventKind.CONTROL_CHANGE:
            return f"Control Change: channel={ch}, controller={self.data1}, value={self.data2}"
        if self.kind == EventKind.PROGRAM_CHANGE:
            return f"Program Change: channel={ch}, program={self.data1}"
        if self.kind == EventKind.CHANNEL_PRESSURE:
            return f"Channel Pressure: channel={ch}, pressure={self.data1}"
        if self.kind == EventKind.PITCH_BEND:
            return (f"Pitch Bend Change: channel={ch}, lsb={self.data1}, "
                    f"msb={self.data2}, value={self.value}")
        return f"Unknown message: {list(self.raw)}"


def decode(data: Sequence[int]) -> Optional[ClassifiedEvent]:
    """Classify a raw MIDI payload.

    Args:
        data: Status byte followed by its data bytes.

    Returns:
        The classified event, or None for an empty payload.

    Raises:
        InvalidEvent: If a byte is out of range or the payload is shorter
            than its status byte requires.
    """
    raw = tuple(data)
    if not raw:
        return None

    for byte in raw:
        if not 0 <= byte <= 0xFF:
            raise InvalidEvent(f"Byte out of range: {byte}", raw)

    status = raw[0]
    kind = _STATUS_KINDS.get(status & 0xF0, EventKind.UNKNOWN)
    if kind == EventKind.UNKNOWN:
        return ClassifiedEvent(EventKind.UNKNOWN, None, raw=raw)

    needed = _REQUIRED_LENGTH[kind]
    if len(raw) < needed:
        raise InvalidEvent(
            f"Truncated {kind.value} message: expected {needed} bytes, got {len(raw)}", raw)

    payload = raw[1:needed]
    for byte in payload:
        if byte > 0x7F:
            raise InvalidEvent(f"Data byte out of range: {byte}", raw)

    data1 = payload[0]
    data2 = payload[1] if len(payload) > 1 else 0
    return ClassifiedEvent(kind, status & 0x0F, data1, data2, raw)


def format_raw(stamp, data: Sequence[int]) -> str:
    """Trace line for an incoming payload, e.g. ``'1234: [144, 60, 100] (len = 3)'``."""
    return f"{stamp}: {list(data)} (len = {len(data)})"
