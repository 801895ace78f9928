"""Main notionedit TUI application.

The app owns a single EditBlockScreen and exits when the edit session
ends. Its return value is True when the session ended with a save.
"""

from typing import Optional

from textual.app import App
from textual.binding import Binding
import structlog

from notionedit.editing.controller import SessionController
from notionedit.models.config import Config
from notionedit.services.notion_client import RemoteContentStore
from notionedit.tui.screens import EditBlockScreen

logger = structlog.get_logger()


class NotionEditApp(App[bool]):
    """Terminal editor for a single Notion block."""

    CSS = """
    Screen {
        background: $surface;
    }
    """

    # ctrl+p is a transform shortcut on the edit screen
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", show=True, priority=True),
    ]

    def __init__(
        self,
        block_id: str,
        store: RemoteContentStore,
        config: Config,
        page_id: Optional[str] = None,
    ):
        """Initialize the app.

        Args:
            block_id: Notion block to edit
            store: Content store (NotionClient in production)
            config: Application configuration
            page_id: Optional parent page id
        """
        super().__init__()
        self.block_id = block_id
        self.page_id = page_id
        self.store = store
        self.config = config

    def create_controller(self) -> SessionController:
        editor = self.config.editor
        return SessionController(
            max_retries=editor.max_retries,
            retry_base_delay=editor.retry_base_delay,
            retry_max_delay=editor.retry_max_delay,
            indicator_duration=editor.indicator_duration,
        )

    def on_mount(self) -> None:
        logger.info("app_started", block_id=self.block_id, page_id=self.page_id)
        self.push_screen(
            EditBlockScreen(
                block_id=self.block_id,
                store=self.store,
                controller=self.create_controller(),
                page_id=self.page_id,
            )
        )

    def on_edit_block_screen_exited(self, message: EditBlockScreen.Exited) -> None:
        logger.info("app_exiting", block_id=message.block_id, saved=message.saved)
        self.exit(message.saved)
