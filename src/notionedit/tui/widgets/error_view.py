"""ErrorView widget: a classified error with its available actions."""

from typing import Optional

from rich.text import Text
from textual.widgets import Static

from notionedit.editing.classifier import ClassifiedError


class ErrorView(Static):
    """Bordered panel shown over the editor while an error is displayed."""

    can_focus = True

    DEFAULT_CSS = """
    ErrorView {
        display: none;
        height: auto;
        border: round $error;
        padding: 1 2;
        margin: 1 2;
    }
    """

    def __init__(self, *args, **kwargs):
        super().__init__("", *args, id="error-view", **kwargs)
        self.error: Optional[ClassifiedError] = None
        self.retry_offered = False

    def show_error(self, error: ClassifiedError, retry_offered: bool) -> None:
        """Display an error; the retry action is listed only when offered."""
        self.error = error
        self.retry_offered = retry_offered
        self.update(self.render_error(error, retry_offered))
        self.display = True

    def hide(self) -> None:
        self.error = None
        self.retry_offered = False
        self.update("")
        self.display = False

    @staticmethod
    def render_error(error: ClassifiedError, retry_offered: bool) -> Text:
        text = Text()
        text.append("✗ ", style="bold red")
        text.append(error.title, style="bold red")
        text.append("\n\n")
        text.append(error.context)
        if error.detail and error.detail != error.context:
            text.append("\n")
            text.append(error.detail, style="dim italic")
        text.append("\n\n")
        if retry_offered:
            text.append("[r] Retry", style="bold green")
            text.append("  ")
        text.append("[d] Dismiss", style="bold green")
        return text
