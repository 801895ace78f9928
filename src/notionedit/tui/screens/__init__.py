"""Textual screens for the block editor."""

from notionedit.tui.screens.confirm_exit import ConfirmExitScreen
from notionedit.tui.screens.edit_block import EditBlockScreen

__all__ = [
    "ConfirmExitScreen",
    "EditBlockScreen",
]
