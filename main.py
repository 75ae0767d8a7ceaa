#!/usr/bin/env python3
"""Bendsynth - MIDI-driven sine synthesizer with live pitch bend."""
import sys

from textual.app import App
from textual.binding import Binding
from textual.widgets import Header, Footer
from textual.containers import Vertical
from textual.screen import Screen

from config_manager import ConfigManager
from errors import NoPortAvailable, PortOpenFailure, SinkUnavailable
from midi.device_manager import MIDIDeviceManager
from midi.input_handler import MIDIInputHandler
from music.tone_sink import ToneSink
from music.voice_engine import VoiceEngine

from components.event_log import EventLog
from components.header_widget import HeaderWidget
from components.voice_display import VoiceDisplay
from modes.port_select_mode import PortSelectMode


class MonitorScreen(Screen):
    """Shows the sounding voices and the incoming event stream."""

    CSS = """
    MonitorScreen {
        layout: vertical;
    }

    #monitor-area {
        height: 1fr;
        width: 100%;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("enter", "quit_app", "Exit", show=True, priority=True),
        Binding("escape", "quit_app", "Exit", show=False),
        Binding("space", "panic", "All Notes Off", show=True),
        Binding("c", "select_port", "Port", show=True),
    ]

    def __init__(self, app_context):
        super().__init__()
        self.app_context = app_context
        self.header = None
        self.voice_display = None
        self.event_log = None

    def compose(self):
        """Compose the monitor layout."""
        handler = self.app_context["midi_handler"]
        yield Header()
        with Vertical(id="monitor-area"):
            self.header = HeaderWidget("BENDSYNTH", self._status_text())
            yield self.header
            self.voice_display = VoiceDisplay()
            yield self.voice_display
            self.event_log = EventLog(max_lines=handler.event_log.maxlen)
            yield self.event_log
        yield Footer()

    def on_mount(self):
        """Called when mounted."""
        handler = self.app_context["midi_handler"]
        for line in handler.get_event_log():
            self.event_log.add_line(line)
        handler.set_event_listener(self.event_log.add_line)
        self._refresh_voices()
        self.set_interval(self.app_context["config_manager"].get_poll_interval(), self._poll_midi)

    def on_unmount(self):
        self.app_context["midi_handler"].set_event_listener(None)

    def _status_text(self) -> str:
        handler = self.app_context["midi_handler"]
        port = handler.port_name or "no port"
        audio = "audio on" if self.app_context["tone_sink"].is_available() else "audio unavailable"
        return f"Reading MIDI input from '{port}' • {audio} • Press Enter to exit"

    # ── MIDI plumbing ────────────────────────────────────────────

    def _poll_midi(self):
        handler = self.app_context["midi_handler"]
        if handler.is_device_open():
            handler.poll_messages()
        self._refresh_voices()

    def _refresh_voices(self):
        handler = self.app_context["midi_handler"]
        engine = self.app_context["voice_engine"]
        with handler.engine_lock:
            voices = [(v.note, v.base_frequency, v.frequency) for v in engine.voices.values()]
            bend = engine.bend_semitones
        if self.voice_display:
            self.voice_display.update_display(voices, bend)

    # ── Actions ──────────────────────────────────────────────────

    def action_panic(self):
        """Silence every voice."""
        self.app_context["midi_handler"].all_notes_off()
        self._refresh_voices()

    def action_select_port(self):
        """Open the port selection screen and switch to the chosen port."""
        handler = self.app_context["midi_handler"]

        def on_closed(selected):
            if not selected or selected == handler.port_name:
                return
            handler.all_notes_off()
            try:
                handler.open_device(selected)
            except PortOpenFailure as e:
                self.app.notify(f"✗ {e}", severity="error")
            if self.header:
                self.header.update_subtitle(self._status_text())
            self.app.update_sub_title()

        self.app.push_screen(PortSelectMode(self.app_context["device_manager"]), on_closed)

    def action_quit_app(self):
        self.app.exit()


class BendsynthApp(App):
    """Terminal front end around the MIDI handler and voice engine."""

    VERSION = "0.1.0"

    def __init__(self, app_context):
        super().__init__()
        self.title = f"Bendsynth v{self.VERSION}"
        self.app_context = app_context

    def on_mount(self):
        """Called when app mounts."""
        self.push_screen(MonitorScreen(self.app_context))
        self.update_sub_title()

    def update_sub_title(self):
        """Update sub title with device info."""
        port = self.app_context["midi_handler"].port_name
        if port:
            self.sub_title = f"🎹 Device: {port}"
        else:
            self.sub_title = "⚠ No MIDI device open (press C to select one)"

    def on_unmount(self):
        """Release the port, every voice and the audio device."""
        self.app_context["midi_handler"].close_device()
        self.app_context["voice_engine"].close()
        self.app_context["tone_sink"].close()


def build_tone_sink(config_manager: ConfigManager) -> ToneSink:
    """Create the (unopened) audio sink from config; bad settings fall back to defaults."""
    try:
        return ToneSink(
            sample_rate=config_manager.get_sample_rate(),
            buffer_size=config_manager.get_buffer_size(),
            max_tones=config_manager.get_max_voices(),
            level=config_manager.get_tone_level(),
        )
    except ValueError as e:
        print(f"Warning: invalid audio settings ({e}). Using defaults.")
        return ToneSink()


def start_tone_sink(tone_sink: ToneSink) -> bool:
    """Open the audio device. Failure leaves the app running without sound."""
    try:
        tone_sink.open()
    except SinkUnavailable as e:
        print(f"Warning: {e}. Notes will be logged but not played.")
        return False
    return True


def main(config_file=None) -> int:
    """Main entry point."""
    config_manager = ConfigManager(config_file)
    device_manager = MIDIDeviceManager(config_manager)

    try:
        port_name = device_manager.choose_port()
    except NoPortAvailable as e:
        print(e)
        return 0

    tone_sink = build_tone_sink(config_manager)
    voice_engine = VoiceEngine(tone_sink)
    midi_handler = MIDIInputHandler(voice_engine, config_manager.get_event_log_lines())

    print(f"Opening connection to port: {port_name}")
    try:
        midi_handler.open_device(port_name)
    except PortOpenFailure as e:
        print(f"Error opening MIDI device: {e}")
        return 1

    start_tone_sink(tone_sink)

    app_context = {
        "config_manager": config_manager,
        "device_manager": device_manager,
        "midi_handler": midi_handler,
        "voice_engine": voice_engine,
        "tone_sink": tone_sink,
    }
    BendsynthApp(app_context).run()
    print("Closing connection")
    return 0


if __name__ == "__main__":
    sys.exit(main())
