#!/usr/bin/env python3
"""ABOUTME: Tests for raw MIDI payload classification.
ABOUTME: Covers every status range, pitch-bend byte order and truncated payloads."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from errors import InvalidEvent
from midi.decoder import EventKind, decode, format_raw


def test_note_on():
    event = decode([0x90, 60, 100])
    assert event.kind == EventKind.NOTE_ON
    assert event.channel == 0
    assert event.note == 60
    assert event.velocity == 100


def test_note_off():
    event = decode([0x80, 60, 0])
    assert event.kind == EventKind.NOTE_OFF
    assert event.channel == 0
    assert event.note == 60


def test_pitch_bend_centre():
    # lsb first, msb second: (64 << 7) | 0
    event = decode([0xE0, 0, 64])
    assert event.kind == EventKind.PITCH_BEND
    assert event.channel == 0
    assert event.value == 8192


def test_pitch_bend_extremes():
    assert decode([0xE0, 0, 0]).value == 0
    assert decode([0xE0, 127, 127]).value == 16383
    assert decode([0xE0, 1, 0]).value == 1
    assert decode([0xE0, 0, 1]).value == 128


def test_empty_payload_produces_no_event():
    assert decode([]) is None
    assert decode(b"") is None


def test_note_on_with_zero_velocity_stays_note_on():
    event = decode([0x90, 60, 0])
    assert event.kind == EventKind.NOTE_ON
    assert event.velocity == 0


def test_channel_from_low_nibble():
    event = decode([0x9F, 72, 1])
    assert event.kind == EventKind.NOTE_ON
    assert event.channel == 15
    assert decode([0xE5, 0, 64]).channel == 5


@pytest.mark.parametrize("status,kind", [
    (0x80, EventKind.NOTE_OFF),
    (0x90, EventKind.NOTE_ON),
    (0xA0, EventKind.POLY_PRESSURE),
    (0xB0, EventKind.CONTROL_CHANGE),
    (0xE0, EventKind.PITCH_BEND),
])
def test_three_byte_kinds(status, kind):
    event = decode([status | 0x03, 10, 20])
    assert event.kind == kind
    assert event.channel == 3
    assert event.data1 == 10
    assert event.data2 == 20


def test_two_byte_kinds():
    program = decode([0xC2, 5])
    assert program.kind == EventKind.PROGRAM_CHANGE
    assert program.channel == 2
    assert program.data1 == 5
    pressure = decode([0xD0, 90])
    assert pressure.kind == EventKind.CHANNEL_PRESSURE
    assert pressure.data1 == 90


def test_system_messages_are_unknown():
    clock = decode([0xF8])
    assert clock.kind == EventKind.UNKNOWN
    assert clock.channel is None
    sysex = decode([0xF0, 0x7E, 0x7F, 0x06, 0x01, 0xF7])
    assert sysex.kind == EventKind.UNKNOWN
    assert sysex.describe() == "Unknown message: [240, 126, 127, 6, 1, 247]"


def test_data_byte_in_status_position_is_unknown():
    assert decode([0x40, 1, 2]).kind == EventKind.UNKNOWN


@pytest.mark.parametrize("data", [
    [0x90],
    [0x90, 60],
    [0x80, 60],
    [0xE0, 0],
    [0xB0, 7],
    [0xC0],
    [0xD0],
])
def test_truncated_payload_is_invalid(data):
    with pytest.raises(InvalidEvent) as info:
        decode(data)
    assert info.value.data == data


def test_out_of_range_bytes_are_invalid():
    with pytest.raises(InvalidEvent):
        decode([0x90, 200, 100])
    with pytest.raises(InvalidEvent):
        decode([0x90, 60, 256])
    with pytest.raises(InvalidEvent):
        decode([-1])


def test_extra_bytes_are_ignored():
    event = decode([0xC0, 5, 99])
    assert event.kind == EventKind.PROGRAM_CHANGE
    assert event.data1 == 5
    assert event.data2 == 0


def test_describe_lines():
    assert decode([0x90, 60, 100]).describe() == "Note On: channel=0, note=60, velocity=100"
    assert decode([0x81, 60, 64]).describe() == "Note Off: channel=1, note=60, velocity=64"
    assert decode([0xA0, 60, 30]).describe() == "Polyphonic Key Pressure: channel=0, note=60, pressure=30"
    assert decode([0xB0, 1, 64]).describe() == "Control Change: channel=0, controller=1, value=64"
    assert decode([0xC0, 12]).describe() == "Program Change: channel=0, program=12"
    assert decode([0xD0, 40]).describe() == "Channel Pressure: channel=0, pressure=40"
    assert decode([0xE0, 0, 64]).describe() == "Pitch Bend Change: channel=0, lsb=0, msb=64, value=8192"


def test_format_raw():
    assert format_raw(1234, [0x90, 60, 100]) == "1234: [144, 60, 100] (len = 3)"
    assert format_raw(0, b"\xf8") == "0: [248] (len = 1)"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
