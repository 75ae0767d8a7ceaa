#!/usr/bin/env python3
"""ABOUTME: Tests for polyphonic voice management and pitch-bend propagation.
ABOUTME: Uses a real ToneBank as the sink so handle ownership is verified end to end."""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from errors import SinkUnavailable
from music.frequency import SEMITONE_RATIO, apply_bend, midi_to_frequency
from music.tone_sink import ToneBank
from music.voice_engine import VoiceEngine


@pytest.fixture
def bank():
    return ToneBank(sample_rate=48000, max_tones=16)


@pytest.fixture
def engine(bank):
    return VoiceEngine(bank)


def test_note_on_creates_voice_at_base_frequency(engine, bank):
    engine.note_on(69, 100)
    voice = engine.get_voice(69)
    assert voice.base_frequency == pytest.approx(440.0)
    assert voice.frequency == pytest.approx(440.0)
    assert voice.velocity == 100
    assert bank.frequency(voice.render_handle) == pytest.approx(440.0)
    assert engine.effective_frequency(69) == pytest.approx(440.0)


def test_note_off_twice_is_same_as_once(engine, bank):
    engine.note_on(60, 100)
    engine.note_off(60)
    engine.note_off(60)
    assert engine.get_active_notes() == set()
    assert bank.active_count() == 0


def test_note_off_for_silent_note_is_noop(engine, bank):
    engine.note_off(42)
    assert engine.voices == {}


def test_retrigger_replaces_voice_and_releases_old_tone(engine, bank):
    engine.note_on(60, 80)
    old_handle = engine.get_voice(60).render_handle
    engine.note_on(60, 110)
    voice = engine.get_voice(60)
    assert list(engine.voices) == [60]
    assert voice.velocity == 110
    assert voice.render_handle != old_handle
    assert not bank.is_live(old_handle)
    assert bank.is_live(voice.render_handle)
    assert bank.active_count() == 1


def test_bend_propagates_to_every_voice(engine, bank):
    engine.note_on(60, 100)
    engine.note_on(67, 100)
    f1 = midi_to_frequency(60)
    f2 = midi_to_frequency(67)

    engine.pitch_bend(8192 + 4096)
    assert engine.effective_frequency(60) == pytest.approx(f1 * SEMITONE_RATIO)
    assert engine.effective_frequency(67) == pytest.approx(f2 * SEMITONE_RATIO)
    assert bank.frequency(engine.get_voice(60).render_handle) == pytest.approx(f1 * SEMITONE_RATIO)
    assert bank.frequency(engine.get_voice(67).render_handle) == pytest.approx(f2 * SEMITONE_RATIO)
    assert engine.bend_semitones == pytest.approx(1.0)

    engine.pitch_bend(8192)
    assert engine.get_voice(60).frequency == f1
    assert engine.get_voice(67).frequency == f2
    assert bank.frequency(engine.get_voice(60).render_handle) == f1
    assert engine.bend_semitones == 0.0


def test_bend_before_note_applies_to_new_voice(engine, bank):
    engine.pitch_bend(0)
    engine.note_on(69, 100)
    expected = apply_bend(440.0, -8192)
    assert engine.get_voice(69).frequency == pytest.approx(expected)
    assert bank.frequency(engine.get_voice(69).render_handle) == pytest.approx(expected)
    assert expected == pytest.approx(440.0 * 2.0 ** (-2.0 / 12.0))


def test_bend_without_voices_only_updates_offset(engine):
    engine.pitch_bend(16383)
    assert engine.bend_offset == 8191
    engine.pitch_bend(0)
    assert engine.bend_offset == -8192


def test_scenario_bend_release_and_restore(engine, bank):
    engine.note_on(60, 100)
    engine.note_on(64, 100)
    engine.pitch_bend(16383)
    engine.note_off(60)
    engine.pitch_bend(8192)

    assert engine.get_active_notes() == {64}
    voice = engine.get_voice(64)
    assert voice.frequency == voice.base_frequency
    assert voice.base_frequency == pytest.approx(midi_to_frequency(64))
    assert bank.frequency(voice.render_handle) == voice.base_frequency
    assert bank.active_count() == 1


def test_rapid_bends_do_not_leak_or_drop_tones(engine, bank):
    for note in (48, 52, 55, 60):
        engine.note_on(note, 90)
    for value in list(range(0, 16384, 37)) + [8192]:
        engine.pitch_bend(value)
    assert bank.active_count() == 4
    for note in (48, 52, 55, 60):
        assert engine.get_voice(note).frequency == midi_to_frequency(note)


def test_sink_exhaustion_fails_only_the_new_note():
    bank = ToneBank(max_tones=2)
    engine = VoiceEngine(bank)
    engine.note_on(60, 100)
    engine.note_on(62, 100)
    with pytest.raises(SinkUnavailable):
        engine.note_on(64, 100)
    assert engine.get_active_notes() == {60, 62}
    assert engine.effective_frequency(64) is None
    assert bank.active_count() == 2


def test_retrigger_succeeds_when_bank_is_full():
    bank = ToneBank(max_tones=1)
    engine = VoiceEngine(bank)
    engine.note_on(60, 100)
    engine.note_on(60, 50)
    assert engine.get_active_notes() == {60}
    assert bank.active_count() == 1


def test_out_of_range_arguments_are_rejected(engine):
    with pytest.raises(ValueError):
        engine.note_on(128, 100)
    with pytest.raises(ValueError):
        engine.note_on(60, -1)
    with pytest.raises(ValueError):
        engine.pitch_bend(16384)
    with pytest.raises(ValueError):
        engine.pitch_bend(-1)
    assert engine.voices == {}
    assert engine.bend_offset == 0


def test_all_notes_off_keeps_bend(engine, bank):
    engine.note_on(60, 100)
    engine.note_on(72, 100)
    engine.pitch_bend(12288)
    engine.all_notes_off()
    assert engine.voices == {}
    assert bank.active_count() == 0
    assert engine.bend_offset == 4096


def test_close_releases_everything(engine, bank):
    for note in range(60, 70):
        engine.note_on(note, 100)
    engine.close()
    assert engine.get_active_notes() == set()
    assert bank.active_count() == 0


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
