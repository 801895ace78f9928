"""Shared fixtures for UI tests."""

import pytest
from textual.app import App

from notionedit.editing.controller import SessionController
from notionedit.tui.screens import EditBlockScreen


class EditScreenTestApp(App):
    """Test app wrapper for EditBlockScreen that records how the session ended."""

    ENABLE_COMMAND_PALETTE = False

    def __init__(self, screen: EditBlockScreen):
        super().__init__()
        self.test_screen = screen
        self.exits = []

    def on_mount(self) -> None:
        """Push the test screen on mount."""
        self.push_screen(self.test_screen)

    def on_edit_block_screen_exited(self, message: EditBlockScreen.Exited) -> None:
        self.exits.append(message.saved)


@pytest.fixture
def fast_controller():
    """Controller with short delays so retries happen within a test."""

    def factory(max_retries=3, indicator_duration=1.5):
        return SessionController(
            max_retries=max_retries,
            retry_base_delay=0.01,
            retry_max_delay=0.05,
            indicator_duration=indicator_duration,
        )

    return factory


@pytest.fixture
def edit_app(block_id, fake_store, fast_controller):
    """Factory building an EditScreenTestApp around the shared fake store."""

    def factory(**controller_kwargs):
        screen = EditBlockScreen(
            block_id=block_id,
            store=fake_store,
            controller=fast_controller(**controller_kwargs),
        )
        return EditScreenTestApp(screen)

    return factory
