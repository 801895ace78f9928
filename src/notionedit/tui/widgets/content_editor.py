"""ContentEditor widget for editing a block's text.

Text changes are reported through TextArea.Changed; the edit screen
forwards them to the session controller, which owns dirtiness.
"""

from textual.widgets import TextArea
from textual.reactive import reactive


class ContentEditor(TextArea):
    """Multi-line text editor for block content."""

    # Reactive attribute to track if editor has focus
    editor_has_focus = reactive(False)

    def __init__(
        self,
        *args,
        **kwargs
    ):
        """Initialize ContentEditor."""
        super().__init__("", *args, id="content-editor", **kwargs)
        self.can_focus = True
        self.show_line_numbers = False

    def on_focus(self) -> None:
        """Handle focus event."""
        self.editor_has_focus = True
        self.styles.border = ("heavy", "blue")

    def on_blur(self) -> None:
        """Handle blur event."""
        self.editor_has_focus = False
        self.styles.border = ("solid", "white")

    def load_content(self, content: str) -> None:
        """Replace the editor text without moving focus.

        Args:
            content: Text content to load
        """
        self.text = content

    def get_content(self) -> str:
        """Get current content from editor.

        Returns:
            Current text content
        """
        return self.text

    def set_editable(self, editable: bool) -> None:
        """Lock the editor while a save or load is in flight."""
        self.read_only = not editable
