"""Sustained sine-tone rendering and the PyAudio output stream that plays it."""
import threading
import numpy as np
from typing import Dict, Optional

from errors import SinkUnavailable

# Check for PyAudio availability
try:
    import pyaudio
    AUDIO_AVAILABLE = True
except ImportError:
    AUDIO_AVAILABLE = False
    pyaudio = None


class Tone:
    """One continuous sine oscillator."""

    def __init__(self, frequency: float):
        self.frequency = frequency
        self.phase = 0.0
        self.paused = False

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False


class ToneBank:
    """A bounded set of sustained tones mixed into a single buffer.

    Handles returned by ``acquire`` are opaque integers; they are never
    reused within one bank. Every mutation and every ``render`` call runs
    under the same lock, so a retune lands between two buffers and never
    inside one.
    """

    def __init__(self, sample_rate: int = 48000, max_tones: int = 32, level: float = 0.2):
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        if max_tones <= 0:
            raise ValueError(f"max_tones must be positive, got {max_tones}")
        self.sample_rate = sample_rate
        self.max_tones = max_tones
        self.level = level
        self._tones: Dict[int, Tone] = {}
        self._next_handle = 1
        self._lock = threading.Lock()

    def acquire(self, frequency: float) -> int:
        """Start a new tone at ``frequency`` Hz.

        Raises:
            SinkUnavailable: If ``max_tones`` tones are already sounding.
        """
        if not frequency > 0:
            raise ValueError(f"Frequency must be positive, got {frequency}")
        with self._lock:
            if len(self._tones) >= self.max_tones:
                raise SinkUnavailable(f"All {self.max_tones} tones are in use")
            handle = self._next_handle
            self._next_handle += 1
            self._tones[handle] = Tone(frequency)
            return handle

    def retune(self, handle: int, frequency: float) -> bool:
        """Move a sounding tone to a new frequency, keeping its phase.

        Returns:
            False if the handle is no longer live.
        """
        if not frequency > 0:
            raise ValueError(f"Frequency must be positive, got {frequency}")
        with self._lock:
            tone = self._tones.get(handle)
            if tone is None:
                return False
            tone.pause()
            tone.frequency = frequency
            tone.resume()
            return True

    def release(self, handle: int):
        """Stop and free a tone. Unknown handles are ignored."""
        with self._lock:
            self._tones.pop(handle, None)

    def release_all(self):
        with self._lock:
            self._tones.clear()

    def frequency(self, handle: int) -> Optional[float]:
        with self._lock:
            tone = self._tones.get(handle)
            return tone.frequency if tone is not None else None

    def is_live(self, handle: int) -> bool:
        with self._lock:
            return handle in self._tones

    def active_count(self) -> int:
        with self._lock:
            return len(self._tones)

    def render(self, frame_count: int) -> np.ndarray:
        """Mix the next ``frame_count`` samples of every unpaused tone.

        Returns:
            Mono float32 samples in (-1, 1).
        """
        mixed = np.zeros(frame_count, dtype=np.float64)
        t = np.arange(frame_count)
        with self._lock:
            for tone in self._tones.values():
                if tone.paused:
                    continue
                phase_inc = 2 * np.pi * tone.frequency / self.sample_rate
                mixed += np.sin(tone.phase + t * phase_inc)
                tone.phase = (tone.phase + frame_count * phase_inc) % (2 * np.pi)
        # tanh keeps dense chords from clipping hard
        return np.tanh(mixed * self.level).astype(np.float32)


class ToneSink:
    """ToneBank rendered to the default output device through PyAudio."""

    def __init__(self, sample_rate: int = 48000, buffer_size: int = 256,
                 max_tones: int = 32, level: float = 0.2):
        self.sample_rate = sample_rate
        self.buffer_size = buffer_size
        self.bank = ToneBank(sample_rate, max_tones, level)
        self.audio = None
        self.stream = None
        self.running = False

    def open(self):
        """Open the default output device and start streaming.

        Raises:
            SinkUnavailable: If PyAudio is missing or the device cannot be opened.
        """
        if self.running:
            return
        if not AUDIO_AVAILABLE or pyaudio is None:
            raise SinkUnavailable("PyAudio is not installed")
        try:
            self.audio = pyaudio.PyAudio()
            default_output = self.audio.get_default_output_device_info()
            self.stream = self.audio.open(
                format=pyaudio.paInt16, channels=2, rate=self.sample_rate,
                output=True, output_device_index=default_output['index'],
                frames_per_buffer=self.buffer_size, stream_callback=self._audio_callback, start=False
            )
            self.stream.start_stream()
            self.running = True
        except Exception as e:
            self.close()
            raise SinkUnavailable(f"Audio initialization failed: {e}") from e

    def _audio_callback(self, in_data, frame_count, time_info, status):
        try:
            mono = self.bank.render(frame_count)
        except Exception:
            mono = np.zeros(frame_count, dtype=np.float32)
        out = np.empty(frame_count * 2, dtype=np.int16)
        scaled = np.clip(mono * 32767, -32767, 32767)
        out[0::2] = scaled
        out[1::2] = scaled
        return (out.tobytes(), pyaudio.paContinue)

    def acquire(self, frequency: float) -> int:
        if not self.running:
            raise SinkUnavailable("Audio output is not open")
        return self.bank.acquire(frequency)

    def retune(self, handle: int, frequency: float) -> bool:
        return self.bank.retune(handle, frequency)

    def release(self, handle: int):
        self.bank.release(handle)

    def close(self):
        self.running = False
        self.bank.release_all()
        if self.stream:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except Exception as e:
                print(f"Error closing audio stream: {e}")
            finally:
                self.stream = None
        if self.audio:
            self.audio.terminate()
            self.audio = None

    def is_available(self) -> bool:
        return AUDIO_AVAILABLE and self.running
