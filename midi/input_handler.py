"""Real-time MIDI input processing."""
import time
import mido
from collections import deque
from typing import Callable, Deque, List, Optional, Sequence, Set
from threading import Lock

from errors import InvalidEvent, PortOpenFailure, SinkUnavailable
from midi.decoder import ClassifiedEvent, EventKind, decode, format_raw
from music.voice_engine import VoiceEngine


class MIDIInputHandler:
    """Reads MIDI input, reports every event and applies it to the voice engine.

    All engine mutations go through ``engine_lock`` so events are applied
    one at a time in arrival order, whichever thread delivers them.
    """

    def __init__(self, engine: VoiceEngine, max_log_lines: int = 500):
        self.port: Optional[mido.ports.BaseInput] = None
        self.port_name: Optional[str] = None
        self.engine = engine
        self.engine_lock = Lock()
        self.event_log: Deque[str] = deque(maxlen=max_log_lines)
        self._event_listener: Optional[Callable[[str], None]] = None
        self._start_time = time.monotonic()

    def open_device(self, device_name: str):
        """Open a MIDI input device.

        Args:
            device_name: Name of the MIDI device to open.

        Raises:
            PortOpenFailure: If the port cannot be opened.
        """
        self.close_device()
        try:
            self.port = mido.open_input(device_name)
        except Exception as e:
            raise PortOpenFailure(f"Could not open MIDI port '{device_name}': {e}") from e
        self.port_name = device_name
        self._log(f"Connection open, reading MIDI input from '{device_name}'")

    def close_device(self):
        """Close the current MIDI input device."""
        if self.port:
            try:
                self.port.close()
            except Exception as e:
                print(f"Error closing MIDI device: {e}")
            finally:
                self.port = None
                self._log(f"Closed MIDI port '{self.port_name}'")
                self.port_name = None

    def set_event_listener(self, listener: Optional[Callable[[str], None]]):
        """Set a callback that receives every new event-log line."""
        self._event_listener = listener

    def poll_messages(self):
        """Poll for pending MIDI messages (non-blocking).

        Should be called regularly to process incoming MIDI data.
        """
        if not self.port:
            return

        try:
            for msg in self.port.iter_pending():
                self.handle_raw(msg.bytes())
        except Exception as e:
            print(f"Error polling MIDI messages: {e}")

    def handle_raw(self, data: Sequence[int], stamp: Optional[int] = None) -> Optional[ClassifiedEvent]:
        """Decode one raw payload, log it and apply it to the engine.

        Args:
            data: Raw MIDI bytes, status byte first.
            stamp: Event timestamp for the trace line; defaults to
                microseconds since the handler was created.

        Returns:
            The classified event, or None if nothing was decoded.
        """
        if stamp is None:
            stamp = int((time.monotonic() - self._start_time) * 1_000_000)
        self._log(format_raw(stamp, data))

        try:
            event = decode(data)
        except InvalidEvent as e:
            self._log(f"Invalid event ignored: {e}")
            return None
        if event is None:
            self._log("Empty message ignored")
            return None

        self._log(event.describe())
        self._apply(event)
        return event

    def _apply(self, event: ClassifiedEvent):
        with self.engine_lock:
            try:
                if event.kind == EventKind.NOTE_ON:
                    self.engine.note_on(event.note, event.velocity)
                elif event.kind == EventKind.NOTE_OFF:
                    self.engine.note_off(event.note)
                elif event.kind == EventKind.PITCH_BEND:
                    self.engine.pitch_bend(event.value)
            except SinkUnavailable as e:
                self._log(f"Note {event.note} not started: {e}")

    def all_notes_off(self):
        """Silence every voice."""
        with self.engine_lock:
            self.engine.all_notes_off()
        self._log("All notes off")

    def get_active_notes(self) -> Set[int]:
        """Get set of currently sounding notes."""
        with self.engine_lock:
            return self.engine.get_active_notes()

    def get_event_log(self) -> List[str]:
        return list(self.event_log)

    def is_device_open(self) -> bool:
        return self.port is not None

    def _log(self, line: str):
        self.event_log.append(line)
        if self._event_listener:
            self._event_listener(line)
