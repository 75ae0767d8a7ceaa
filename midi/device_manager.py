"""MIDI device detection and management."""
import mido
import os
import sys
from typing import List, Optional, TYPE_CHECKING

from errors import NoPortAvailable

if TYPE_CHECKING:
    from config_manager import ConfigManager


class MIDIDeviceManager:
    """Manages MIDI device enumeration and selection."""

    def __init__(self, config_manager: 'ConfigManager' = None):
        self.config_manager = config_manager
        self.selected_device: Optional[str] = None
        self.last_error: Optional[str] = None

        # Use the configured device if it is still connected
        if self.config_manager:
            saved_device = self.config_manager.get_selected_device()
            if saved_device and saved_device in self.get_input_devices():
                self.selected_device = saved_device

    def get_input_devices(self) -> List[str]:
        """Get list of available MIDI input devices.

        Returns:
            List of MIDI input device names.
        """
        try:
            # Suppress ALSA error messages to stderr
            stderr_backup = sys.stderr
            with open(os.devnull, 'w') as devnull:
                sys.stderr = devnull
                try:
                    devices = mido.get_input_names()
                finally:
                    sys.stderr = stderr_backup

            self.last_error = None
            return devices
        except Exception as e:
            error_msg = str(e).lower()
            if "no such file" in error_msg and "snd/seq" in error_msg:
                self.last_error = "ALSA sequencer not available. Run: sudo modprobe snd-seq"
            else:
                self.last_error = f"Error: {e}"
            return []

    def select_device(self, device_name: str) -> bool:
        """Select a MIDI input device.

        Args:
            device_name: Name of the device to select.

        Returns:
            True if device is valid and selected, False otherwise.
        """
        if device_name in self.get_input_devices():
            self.selected_device = device_name
            if self.config_manager:
                self.config_manager.set_selected_device(device_name)
            return True
        return False

    def choose_port(self) -> str:
        """Pick the input port to listen on.

        The selected device wins if it is still connected, otherwise the
        first available port is selected.

        Raises:
            NoPortAvailable: If no MIDI input port exists.
        """
        devices = self.get_input_devices()
        if not devices:
            detail = f" ({self.last_error})" if self.last_error else ""
            raise NoPortAvailable(f"No available MIDI input ports.{detail}")
        if self.selected_device not in devices:
            self.selected_device = devices[0]
        return self.selected_device

    def get_selected_device(self) -> Optional[str]:
        """Get currently selected device name."""
        return self.selected_device

    def has_devices(self) -> bool:
        return len(self.get_input_devices()) > 0
