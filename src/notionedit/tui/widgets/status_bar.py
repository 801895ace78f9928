"""StatusBar widget showing session mode, sync status and key help."""

from typing import Optional

from rich.text import Text
from textual.widgets import Static

from notionedit.editing.controller import StatusSnapshot, SyncStatus

_SYNC_STYLES = {
    SyncStatus.SYNCED: "bold green",
    SyncStatus.SYNCING: "bold yellow",
    SyncStatus.ERROR: "bold red",
}


class StatusBar(Static):
    """One-line status bar at the bottom of the edit screen."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    def __init__(self, *args, **kwargs):
        super().__init__("", *args, id="status-bar", **kwargs)
        self.status: Optional[StatusSnapshot] = None

    def show(self, status: StatusSnapshot) -> None:
        """Render a status snapshot."""
        self.status = status
        self.update(self.render_status(status))

    @staticmethod
    def render_status(status: StatusSnapshot) -> Text:
        """Build the status line as rich Text.

        Layout: "<mode>  ● SYNCED  <help>  Last sync: HH:MM:SS"
        """
        text = Text()
        text.append(status.mode, style="bold")
        text.append("  ")
        text.append(f"● {status.sync_status.value}", style=_SYNC_STYLES[status.sync_status])
        if status.help_text:
            text.append("  ")
            text.append(status.help_text, style="dim")
        if status.last_synced is not None:
            text.append("  ")
            text.append(f"Last sync: {status.last_synced:%H:%M:%S}", style="dim italic")
        return text

    @property
    def mode(self) -> str:
        return self.status.mode if self.status else ""
