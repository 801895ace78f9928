"""Textual widget components."""

from notionedit.tui.widgets.content_editor import ContentEditor
from notionedit.tui.widgets.error_view import ErrorView
from notionedit.tui.widgets.status_bar import StatusBar

__all__ = [
    "ContentEditor",
    "ErrorView",
    "StatusBar",
]
