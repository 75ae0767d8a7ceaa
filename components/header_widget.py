"""Boxed title header with a status line."""
from textual.widgets import Static
from textual.containers import Center, Vertical
from textual.app import ComposeResult
from textual.css.query import NoMatches


class HeaderWidget(Vertical):
    """Displays a boxed title and an updatable status subtitle."""

    DEFAULT_CSS = """
    HeaderWidget {
        width: 100%;
        height: auto;
        align: center top;
        margin-bottom: 1;
    }

    .header-boxed {
        width: auto;
        height: auto;
        text-align: center;
        color: $accent;
        margin-bottom: 0;
    }

    #header-status {
        width: 100%;
        text-align: center;
        content-align: center middle;
    }
    """

    def __init__(self, title: str, subtitle: str = "", **kwargs):
        super().__init__(**kwargs)
        self.title_text = title
        self.subtitle_text = subtitle

    def compose(self) -> ComposeResult:
        with Center():
            yield Static(self._create_boxed_title(self.title_text), classes="header-boxed")
        with Center():
            yield Static(f"[italic #666666]{self.subtitle_text}[/]", id="header-status")

    def _create_boxed_title(self, title: str, width: int = 48) -> str:
        """Create a boxed title ASCII art."""
        title_padded = f" {title} "
        inner_width = max(width - 2, len(title_padded))
        padding = inner_width - len(title_padded)
        left_pad = padding // 2
        right_pad = padding - left_pad

        top = f"╔{'═' * inner_width}╗"
        mid = f"║{' ' * left_pad}{title_padded}{' ' * right_pad}║"
        bottom = f"╚{'═' * inner_width}╝"

        return f"{top}\n{mid}\n{bottom}"

    def update_subtitle(self, new_subtitle: str):
        """Update the subtitle/status text."""
        self.subtitle_text = new_subtitle
        try:
            status_label = self.query_one("#header-status", Static)
        except NoMatches:
            return
        status_label.update(f"[italic #666666]{new_subtitle}[/]")
