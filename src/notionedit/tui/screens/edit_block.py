"""Edit screen: drives a SessionController for one Notion block.

The controller decides; this screen does the work it asks for. Every
user action and every async result is handed to the controller, and the
commands it returns are executed here:

- FetchBlock / SaveBlock run as Textual workers against the content store
- ScheduleRetry / ScheduleIndicatorClear become timers
- PresentConfirmation pushes ConfirmExitScreen
- ExitSession posts EditBlockScreen.Exited for the app

Worker results come back as SessionResult messages so they are handled
on the screen's message loop, one at a time.
"""

from functools import partial
from typing import Iterable, Optional

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Footer, Label, TextArea
import structlog

from notionedit.editing.controller import SessionController, SessionPhase, ShowingError
from notionedit.editing.messages import (
    ConfirmChoice,
    ExitSession,
    FetchBlock,
    FetchResult,
    IndicatorExpired,
    PresentConfirmation,
    RetryTimerFired,
    SaveBlock,
    SaveResult,
    ScheduleIndicatorClear,
    ScheduleRetry,
    SessionCommand,
    SessionMessage,
)
from notionedit.models.block import BlockType
from notionedit.services.exceptions import NotionError
from notionedit.services.notion_client import RemoteContentStore
from notionedit.tui.screens.confirm_exit import ConfirmExitScreen
from notionedit.tui.widgets import ContentEditor, ErrorView, StatusBar

logger = structlog.get_logger()


class SessionResult(Message):
    """Carries a fetch/save/timer result back to the screen's message loop."""

    bubble = False

    def __init__(self, result: SessionMessage) -> None:
        super().__init__()
        self.result = result


class EditBlockScreen(Screen):
    """Edit one block's text, save it, change its type, or leave."""

    DEFAULT_CSS = """
    EditBlockScreen {
        layout: vertical;
    }

    #edit-container {
        height: 1fr;
        layout: vertical;
    }

    #block-header {
        height: auto;
        padding: 0 1;
        text-style: bold;
    }

    ContentEditor {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "save", "Save", priority=True),
        Binding("ctrl+r", "refresh", "Refresh", priority=True),
        Binding("escape", "exit", "Exit", priority=True),
        Binding("ctrl+p", "transform('paragraph')", "Paragraph", show=False, priority=True),
        Binding("ctrl+1", "transform('heading_1')", "Heading 1", show=False, priority=True),
        Binding("ctrl+2", "transform('heading_2')", "Heading 2", show=False, priority=True),
        Binding("ctrl+3", "transform('heading_3')", "Heading 3", show=False, priority=True),
        Binding("ctrl+l", "transform('bulleted_list_item')", "Bulleted list", show=False, priority=True),
        Binding("ctrl+o", "transform('numbered_list_item')", "Numbered list", show=False, priority=True),
        Binding("ctrl+b", "transform('quote')", "Quote", show=False, priority=True),
        Binding("ctrl+k", "transform('code')", "Code", show=False, priority=True),
        Binding("r", "retry_error", "Retry", show=False),
        Binding("d", "dismiss_error", "Dismiss", show=False),
    ]

    class Exited(Message):
        """The session ended; ``saved`` is True when it ended with a save."""

        def __init__(self, block_id: Optional[str], saved: bool) -> None:
            super().__init__()
            self.block_id = block_id
            self.saved = saved

    def __init__(
        self,
        block_id: str,
        store: RemoteContentStore,
        controller: Optional[SessionController] = None,
        page_id: Optional[str] = None,
        auto_load: bool = True,
        **kwargs,
    ):
        """Initialize the edit screen.

        Args:
            block_id: Notion block to edit
            store: Content store used for fetches and saves
            controller: Session controller (a default one is created if omitted)
            page_id: Parent page id, carried for logging only
            auto_load: Fetch the block on mount (tests may disable this)
        """
        super().__init__(**kwargs)
        self.block_id = block_id
        self.page_id = page_id
        self.store = store
        self.controller = controller or SessionController()
        self.auto_load = auto_load

    def compose(self) -> ComposeResult:
        with Vertical(id="edit-container"):
            yield Label("", id="block-header")
            yield ErrorView()
            yield ContentEditor()
        yield StatusBar()
        yield Footer()

    def on_mount(self) -> None:
        editor = self.query_one(ContentEditor)
        editor.set_editable(False)
        self._refresh_view()
        if self.auto_load:
            self.execute(self.controller.load_block(self.block_id, self.page_id))

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def execute(self, commands: Iterable[SessionCommand]) -> None:
        """Run controller commands, then bring the widgets up to date."""
        for command in commands:
            self._execute_one(command)
        self._refresh_view()

    def _execute_one(self, command: SessionCommand) -> None:
        if isinstance(command, FetchBlock):
            self.run_worker(self._fetch_worker(command), name=f"fetch_block_{command.generation}", group="fetch")
        elif isinstance(command, SaveBlock):
            self.run_worker(
                self._save_worker(command),
                name=f"save_block_{command.generation}_{command.attempt}",
                group="save",
            )
        elif isinstance(command, ScheduleRetry):
            self.set_timer(
                command.delay,
                partial(self._deliver, RetryTimerFired(generation=command.generation, attempt=command.attempt)),
            )
        elif isinstance(command, ScheduleIndicatorClear):
            self.set_timer(command.delay, partial(self._deliver, IndicatorExpired(token=command.token)))
        elif isinstance(command, PresentConfirmation):
            self.app.push_screen(
                ConfirmExitScreen(command.title, command.message),
                callback=self._on_confirm_exit,
            )
        elif isinstance(command, ExitSession):
            logger.info("edit_session_exited", block_id=self.block_id, saved=command.saved)
            self.post_message(self.Exited(self.block_id, command.saved))
        else:
            raise TypeError(f"Unknown session command: {command!r}")

    def _deliver(self, result: SessionMessage) -> None:
        self.post_message(SessionResult(result))

    async def _fetch_worker(self, command: FetchBlock) -> None:
        """Fetch the block and report the outcome to the controller."""
        try:
            block = await self.store.fetch_block(command.block_id)
            result = FetchResult(generation=command.generation, block=block)
        except NotionError as e:
            logger.warning("fetch_worker_failed", block_id=command.block_id, error=str(e))
            result = FetchResult(generation=command.generation, error=e)
        except Exception as e:
            logger.error("fetch_worker_unexpected_error", block_id=command.block_id, error=str(e), exc_info=True)
            result = FetchResult(generation=command.generation, error=e)
        self._deliver(result)

    async def _save_worker(self, command: SaveBlock) -> None:
        """Send the save payload and report the outcome to the controller."""
        payload = command.payload
        try:
            last_edited = await self.store.update_block(
                command.block_id, payload.text, payload.block_type, language=payload.language
            )
            result = SaveResult(generation=command.generation, payload=payload, last_edited_time=last_edited)
        except NotionError as e:
            logger.warning(
                "save_worker_failed",
                block_id=command.block_id,
                attempt=command.attempt,
                error=str(e),
            )
            result = SaveResult(generation=command.generation, payload=payload, error=e)
        except Exception as e:
            logger.error("save_worker_unexpected_error", block_id=command.block_id, error=str(e), exc_info=True)
            result = SaveResult(generation=command.generation, payload=payload, error=e)
        self._deliver(result)

    def on_session_result(self, message: SessionResult) -> None:
        self.execute(self.controller.handle(message.result))

    def _on_confirm_exit(self, choice: Optional[ConfirmChoice]) -> None:
        self.execute(self.controller.on_confirmation_response(choice or ConfirmChoice.CANCEL))

    # ------------------------------------------------------------------
    # User input
    # ------------------------------------------------------------------

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        if event.text_area.id != "content-editor":
            return
        commands = self.controller.on_user_edit(event.text_area.text)
        self.execute(commands)

    def action_save(self) -> None:
        self.execute(self.controller.request_save())

    def action_refresh(self) -> None:
        self.execute(self.controller.request_refresh())

    def action_exit(self) -> None:
        # Escape closes the error view rather than leaving the editor
        if self.controller.phase is SessionPhase.SHOWING_ERROR:
            self.execute(self.controller.on_error_acknowledged(retry=False))
        else:
            self.execute(self.controller.request_exit())

    def action_transform(self, block_type: str) -> None:
        self.execute(self.controller.request_transform(BlockType(block_type)))

    def action_retry_error(self) -> None:
        if self.controller.phase is SessionPhase.SHOWING_ERROR:
            self.execute(self.controller.on_error_acknowledged(retry=True))

    def action_dismiss_error(self) -> None:
        if self.controller.phase is SessionPhase.SHOWING_ERROR:
            self.execute(self.controller.on_error_acknowledged(retry=False))

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def _refresh_view(self) -> None:
        """Bring header, editor, error view and status bar in line with the controller."""
        controller = self.controller
        session = controller.session
        editor = self.query_one(ContentEditor)
        error_view = self.query_one(ErrorView)
        phase = controller.phase

        self.query_one("#block-header", Label).update(self.header_text())

        if phase is SessionPhase.EDITING and session.draft is not None:
            if editor.get_content() != session.draft.get_text():
                editor.load_content(session.draft.get_text())
            editor.set_editable(True)
            if not editor.has_focus:
                editor.focus()
        else:
            editor.set_editable(False)

        state = controller.state
        if isinstance(state, ShowingError):
            if error_view.error is not state.error:
                error_view.show_error(state.error, state.retry_offered)
                error_view.focus()
        elif error_view.display:
            error_view.hide()

        self.query_one(StatusBar).show(controller.status)

    def header_text(self) -> str:
        """Block type and id, plus the pending type while a conversion is outstanding."""
        session = self.controller.session
        if session.block_type is None:
            return f"Block {self.block_id}"
        header = f"{session.block_type.label} · {self.block_id}"
        if session.pending_block_type is not None and session.pending_block_type is not session.block_type:
            header += f" → {session.pending_block_type.label}"
        return header
