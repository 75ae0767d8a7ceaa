"""Configuration loading."""
import json
import math
from pathlib import Path
from typing import Optional


class ConfigManager:
    """Manages application configuration.

    Settings come from built-in defaults, optionally overridden by a
    ``config.json`` file beside this module. The file is only read.
    """

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path(__file__).parent / "config.json"
        self.config = self._load_config()

    def _load_config(self) -> dict:
        """Load configuration from file, layered over the defaults."""
        config = self._default_config()
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r') as f:
                    loaded = json.load(f)
            except Exception as e:
                print(f"Error loading config: {e}")
                return config
            if isinstance(loaded, dict):
                for key, value in loaded.items():
                    if key in config and self._valid_override(config[key], value):
                        config[key] = value
        return config

    def _valid_override(self, default, value) -> bool:
        """Numeric settings only take numbers; the device name takes a string or null."""
        if default is None:
            return value is None or isinstance(value, str)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        return math.isfinite(value)

    def _default_config(self) -> dict:
        """Return default configuration."""
        return {
            "selected_midi_device": None,
            "sample_rate": 48000,
            "buffer_size": 256,
            "max_voices": 32,
            "tone_level": 0.2,
            "poll_interval": 0.01,
            "event_log_lines": 500,
        }

    # ── MIDI device ──────────────────────────────────────────────

    def get_selected_device(self) -> Optional[str]:
        """Get the preferred MIDI input device."""
        return self.config.get("selected_midi_device")

    def set_selected_device(self, device_name: Optional[str]):
        """Remember the selected MIDI device for this session."""
        self.config["selected_midi_device"] = device_name

    # ── Audio output ─────────────────────────────────────────────

    def get_sample_rate(self) -> int:
        """Output sample rate in Hz. Clamped to [8000, 192000]."""
        return int(max(8000, min(192000, self.config.get("sample_rate", 48000))))

    def get_buffer_size(self) -> int:
        """Frames per audio callback. Clamped to [32, 4096]."""
        return int(max(32, min(4096, self.config.get("buffer_size", 256))))

    def get_max_voices(self) -> int:
        """Maximum simultaneous tones. Clamped to [1, 128]."""
        return int(max(1, min(128, self.config.get("max_voices", 32))))

    def get_tone_level(self) -> float:
        """Per-tone gain before limiting. Clamped to [0.0, 1.0]."""
        return float(max(0.0, min(1.0, self.config.get("tone_level", 0.2))))

    # ── Input / display ──────────────────────────────────────────

    def get_poll_interval(self) -> float:
        """Seconds between MIDI polls. Clamped to [0.001, 0.1]."""
        return float(max(0.001, min(0.1, self.config.get("poll_interval", 0.01))))

    def get_event_log_lines(self) -> int:
        return int(max(10, self.config.get("event_log_lines", 500)))
