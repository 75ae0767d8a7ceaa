"""MIDI input port selection screen."""
from textual.screen import ModalScreen
from textual.widgets import ListView, ListItem, Label
from textual.binding import Binding
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from midi.device_manager import MIDIDeviceManager


class PortSelectMode(ModalScreen):
    """Modal list of input ports.

    Dismisses with the chosen port name, or None when closed without a
    choice.
    """

    BINDINGS = [
        Binding("escape", "close", "Close", show=True),
        Binding("r", "refresh_devices", "Refresh", show=True),
        Binding("space", "select_and_close", "Select", show=True),
    ]

    DEFAULT_CSS = """
    PortSelectMode {
        align: center middle;
    }

    #port-list {
        width: 60;
        height: auto;
        max-height: 20;
        border: round $accent;
        border-title-color: #ffd700;
        border-subtitle-color: #888888;
        background: $surface;
    }
    """

    def __init__(self, device_manager: 'MIDIDeviceManager'):
        super().__init__()
        self.device_manager = device_manager
        self.devices: List[str] = []

    def compose(self):
        port_list = ListView(id="port-list")
        port_list.border_title = "🎹 MIDI Input Port"
        port_list.border_subtitle = "Space: select • R: refresh • Esc: close"
        yield port_list

    def on_mount(self):
        self.refresh_device_list()

    def refresh_device_list(self):
        """Rebuild the list from the ports currently connected."""
        port_list = self.query_one("#port-list", ListView)
        port_list.clear()

        self.devices = self.device_manager.get_input_devices()
        active = self.device_manager.get_selected_device()

        if not self.devices:
            reason = self.device_manager.last_error or "No MIDI devices found"
            port_list.append(ListItem(Label(f"❌ {reason}")))
            return

        for device in self.devices:
            prefix = "▶" if device == active else " "
            port_list.append(ListItem(Label(f"{prefix} {device}")))
        port_list.index = self.devices.index(active) if active in self.devices else 0

    def action_refresh_devices(self):
        self.refresh_device_list()
        self.app.notify("Device list refreshed")

    def action_select_and_close(self):
        """Select the highlighted port and close."""
        index = self.query_one("#port-list", ListView).index
        if index is None or not 0 <= index < len(self.devices):
            return
        device = self.devices[index]
        if self.device_manager.select_device(device):
            self.dismiss(device)
        else:
            self.app.notify(f"✗ Failed to select: {device}")

    def action_close(self):
        self.dismiss(None)
