"""UI tests for the unsaved-changes prompt."""

import pytest
from textual.app import App

from notionedit.editing.messages import ConfirmChoice
from notionedit.tui.screens import ConfirmExitScreen


class PromptTestApp(App):
    """Pushes the prompt and records what it was dismissed with."""

    def __init__(self):
        super().__init__()
        self.choices = []

    def on_mount(self) -> None:
        self.push_screen(
            ConfirmExitScreen("Unsaved Changes", "You have unsaved changes."),
            callback=self.choices.append,
        )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "key,choice",
    [
        ("s", ConfirmChoice.SAVE),
        ("d", ConfirmChoice.DISCARD),
        ("c", ConfirmChoice.CANCEL),
        ("escape", ConfirmChoice.CANCEL),
    ],
)
async def test_keys_dismiss_with_choice(key, choice):
    app = PromptTestApp()

    async with app.run_test() as pilot:
        await pilot.pause()
        assert isinstance(app.screen, ConfirmExitScreen)

        await pilot.press(key)
        await pilot.pause()

        assert app.choices == [choice]
        assert not isinstance(app.screen, ConfirmExitScreen)


@pytest.mark.asyncio
async def test_discard_button():
    app = PromptTestApp()

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.click("#discard")
        await pilot.pause()

        assert app.choices == [ConfirmChoice.DISCARD]
