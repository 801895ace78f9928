"""Session controller: the state machine behind editing one block.

The controller owns a single EditSession and a single tagged state. Every
public method handles one event (user intent or async result), updates
the state, and returns the commands the driver must execute. Nothing in
here awaits or touches the network.

State flow:

    LOADING -> EDITING -> SAVING -> (RETRY_WAITING -> SAVING)* -> EDITING | SHOWING_ERROR
    EDITING -> CONFIRMING_EXIT -> SAVING | EXITED | EDITING
    any failure that is permanent or out of retries -> SHOWING_ERROR

Calls that are not valid in the current state are ignored (logged at
debug level) and return no commands.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional, Union

import structlog

from notionedit.editing.classifier import ClassifiedError, classify_error
from notionedit.editing.draft import Draft
from notionedit.editing.messages import (
    ConfirmChoice,
    ExitSession,
    FetchBlock,
    FetchResult,
    IndicatorExpired,
    PresentConfirmation,
    RetryTimerFired,
    SaveBlock,
    SavePayload,
    SaveResult,
    ScheduleIndicatorClear,
    ScheduleRetry,
    SessionCommand,
    SessionMessage,
)
from notionedit.editing.retry import DEFAULT_BASE_DELAY, DEFAULT_MAX_DELAY, decide
from notionedit.models.block import BlockType, FetchedBlock

logger = structlog.get_logger()

SAVED_INDICATOR = "Saved!"
REFRESHED_INDICATOR = "Refreshed"

EDITING_HELP = "Ctrl+S: Save | Ctrl+R: Refresh | Esc: Exit"


class SessionPhase(str, Enum):
    LOADING = "loading"
    EDITING = "editing"
    SAVING = "saving"
    RETRY_WAITING = "retry_waiting"
    CONFIRMING_EXIT = "confirming_exit"
    SHOWING_ERROR = "showing_error"
    EXITED = "exited"


class ErrorOrigin(str, Enum):
    """Which operation produced the error being shown."""

    LOAD = "load"
    REFRESH = "refresh"
    SAVE = "save"


class SyncStatus(str, Enum):
    SYNCED = "SYNCED"
    SYNCING = "SYNCING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Loading:
    phase: ClassVar[SessionPhase] = SessionPhase.LOADING
    refresh: bool = False


@dataclass(frozen=True)
class Editing:
    phase: ClassVar[SessionPhase] = SessionPhase.EDITING
    indicator: Optional[str] = None


@dataclass(frozen=True)
class Saving:
    phase: ClassVar[SessionPhase] = SessionPhase.SAVING
    payload: SavePayload
    converting: bool = False


@dataclass(frozen=True)
class RetryWaiting:
    phase: ClassVar[SessionPhase] = SessionPhase.RETRY_WAITING
    payload: SavePayload
    attempt: int
    delay: float
    error: ClassifiedError


@dataclass(frozen=True)
class ConfirmingExit:
    phase: ClassVar[SessionPhase] = SessionPhase.CONFIRMING_EXIT


@dataclass(frozen=True)
class ShowingError:
    phase: ClassVar[SessionPhase] = SessionPhase.SHOWING_ERROR
    error: ClassifiedError
    retry_offered: bool
    origin: ErrorOrigin


@dataclass(frozen=True)
class Exited:
    phase: ClassVar[SessionPhase] = SessionPhase.EXITED
    saved: bool = False


SessionState = Union[Loading, Editing, Saving, RetryWaiting, ConfirmingExit, ShowingError, Exited]


@dataclass
class EditSession:
    """Everything the controller knows about the block being edited."""

    block_id: Optional[str] = None
    page_id: Optional[str] = None
    block_type: Optional[BlockType] = None
    pending_block_type: Optional[BlockType] = None
    draft: Optional[Draft] = None
    code_language: Optional[str] = None
    last_edited_time: Optional[datetime] = None
    last_synced: Optional[datetime] = None
    retry_attempt: int = 0
    max_retries: int = 3
    quit_after_save: bool = False
    generation: int = 0
    pending_save: Optional[SavePayload] = field(default=None)

    @property
    def baseline_text(self) -> str:
        """Last text known to match the remote store."""
        return self.draft.baseline if self.draft else ""

    @property
    def is_dirty(self) -> bool:
        return self.draft is not None and self.draft.get_text() != self.baseline_text


@dataclass(frozen=True)
class StatusSnapshot:
    """What the status bar should show for the current state."""

    mode: str
    sync_status: SyncStatus
    help_text: str
    last_synced: Optional[datetime] = None


class SessionController:
    """State machine for one block editing session."""

    def __init__(
        self,
        max_retries: int = 3,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        retry_max_delay: float = DEFAULT_MAX_DELAY,
        indicator_duration: float = 1.5,
    ):
        """Initialize the controller.

        Args:
            max_retries: Automatic retries per save request
            retry_base_delay: First retry delay in seconds
            retry_max_delay: Cap on any retry delay in seconds
            indicator_duration: Seconds before "Saved!"/"Refreshed" is cleared
        """
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.indicator_duration = indicator_duration

        self.session = EditSession(max_retries=max_retries)
        self.state: SessionState = Loading()
        self._indicator_token = 0

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    def load_block(self, block_id: str, page_id: Optional[str] = None) -> List[SessionCommand]:
        """Start a fresh session for ``block_id`` and fetch it."""
        if self.phase is SessionPhase.SAVING:
            return self._ignore("load_block", block_id=block_id)

        generation = self.session.generation + 1
        self.session = EditSession(
            block_id=block_id,
            page_id=page_id,
            max_retries=self.max_retries,
            generation=generation,
        )
        self._transition(Loading())
        logger.info("session_load_started", block_id=block_id, page_id=page_id, generation=generation)
        return [FetchBlock(block_id=block_id, generation=generation)]

    def on_user_edit(self, text: str) -> List[SessionCommand]:
        """Record the editor's current text."""
        if self.phase is not SessionPhase.EDITING or self.session.draft is None:
            return self._ignore("on_user_edit")

        if text == self.session.draft.get_text():
            return []
        self.session.draft.set_text(text)
        if self.state.indicator is not None:
            self.state = Editing()
        return []

    def request_save(self) -> List[SessionCommand]:
        """Save the draft (dirty or not)."""
        if self.phase is not SessionPhase.EDITING:
            return self._ignore("request_save")
        return self._start_save()

    def request_transform(self, new_type: BlockType) -> List[SessionCommand]:
        """Change the block's structural type through a normal save."""
        if self.phase is not SessionPhase.EDITING:
            return self._ignore("request_transform", new_type=str(new_type))

        new_type = BlockType(new_type)
        previous = self.session.pending_block_type
        self.session.pending_block_type = new_type
        logger.info(
            "block_transform_requested",
            block_id=self.session.block_id,
            from_type=self.session.block_type.value if self.session.block_type else None,
            to_type=new_type.value,
            replaced_pending=previous.value if previous else None,
        )
        return self._start_save(converting=True)

    def request_refresh(self) -> List[SessionCommand]:
        """Discard local state and re-fetch the block."""
        # One fetch in flight at a time
        if self.phase in (SessionPhase.LOADING, SessionPhase.SAVING, SessionPhase.RETRY_WAITING, SessionPhase.EXITED):
            return self._ignore("request_refresh")
        if self.session.block_id is None:
            return self._ignore("request_refresh", reason="no block loaded")

        self.session.pending_block_type = None
        self.session.pending_save = None
        self.session.retry_attempt = 0
        self.session.quit_after_save = False
        return self._start_fetch(refresh=True)

    def request_exit(self) -> List[SessionCommand]:
        """Leave the editor, asking first if there are unsaved changes."""
        if self.phase is SessionPhase.LOADING:
            return self._exit(saved=False)
        if self.phase is not SessionPhase.EDITING:
            return self._ignore("request_exit")

        if self.session.is_dirty:
            self._transition(ConfirmingExit())
            return [
                PresentConfirmation(
                    title="Unsaved Changes",
                    message="You have unsaved changes. What do you want to do?",
                )
            ]
        return self._exit(saved=False)

    def on_confirmation_response(self, choice: ConfirmChoice) -> List[SessionCommand]:
        """Handle the Save/Discard/Cancel answer."""
        if self.phase is not SessionPhase.CONFIRMING_EXIT:
            return self._ignore("on_confirmation_response", choice=str(choice))

        choice = ConfirmChoice(choice)
        logger.info("exit_confirmation_answered", choice=choice.value)
        if choice is ConfirmChoice.SAVE:
            self.session.quit_after_save = True
            self._transition(Editing())
            return self._start_save()
        if choice is ConfirmChoice.DISCARD:
            return self._exit(saved=False)
        self._transition(Editing())
        return []

    def on_error_acknowledged(self, retry: bool = False) -> List[SessionCommand]:
        """Dismiss the error view, or retry when retry is offered."""
        state = self.state
        if not isinstance(state, ShowingError):
            return self._ignore("on_error_acknowledged")

        if retry:
            if not state.retry_offered:
                return self._ignore("on_error_acknowledged", reason="retry not offered")
            logger.info("manual_retry_requested", origin=state.origin.value, kind=state.error.kind.value)
            if state.origin is ErrorOrigin.SAVE:
                return self._start_save()
            return self._start_fetch(refresh=state.origin is ErrorOrigin.REFRESH)

        self.session.quit_after_save = False
        self.session.pending_save = None
        self.session.retry_attempt = 0
        if self.session.draft is None:
            # Nothing was ever loaded, so there is nothing to edit
            return self._exit(saved=False)
        self._transition(Editing())
        return []

    # ------------------------------------------------------------------
    # Async results
    # ------------------------------------------------------------------

    def handle(self, message: SessionMessage) -> List[SessionCommand]:
        """Dispatch a result message to its handler."""
        if isinstance(message, FetchResult):
            return self.on_fetch_result(message)
        if isinstance(message, SaveResult):
            return self.on_save_result(message)
        if isinstance(message, RetryTimerFired):
            return self.on_retry_timer_fired(message)
        if isinstance(message, IndicatorExpired):
            return self.on_indicator_expired(message)
        raise TypeError(f"Unknown session message: {message!r}")

    def on_fetch_result(self, result: FetchResult) -> List[SessionCommand]:
        if self._is_stale(result.generation, "fetch"):
            return []
        state = self.state
        if not isinstance(state, Loading):
            return self._ignore("on_fetch_result")

        if result.error is not None or result.block is None:
            error = classify_error(result.error or RuntimeError("empty fetch result"))
            origin = ErrorOrigin.REFRESH if state.refresh else ErrorOrigin.LOAD
            logger.error(
                "block_fetch_failed",
                block_id=self.session.block_id,
                kind=error.kind.value,
                detail=error.detail,
                origin=origin.value,
            )
            self._transition(ShowingError(error=error, retry_offered=error.is_transient, origin=origin))
            return []

        self._apply_fetched(result.block)
        if state.refresh:
            self._transition(Editing(indicator=REFRESHED_INDICATOR))
            return [self._schedule_indicator_clear()]
        self._transition(Editing())
        return []

    def on_save_result(self, result: SaveResult) -> List[SessionCommand]:
        if self._is_stale(result.generation, "save"):
            return []
        if self.phase is not SessionPhase.SAVING:
            return self._ignore("on_save_result")

        session = self.session
        if result.error is None:
            session.draft.mark_clean()
            session.block_type = result.payload.block_type
            session.code_language = (
                (result.payload.language or "plain text") if session.block_type is BlockType.CODE else None
            )
            session.pending_block_type = None
            session.pending_save = None
            session.retry_attempt = 0
            session.last_edited_time = result.last_edited_time
            session.last_synced = datetime.now()
            logger.info(
                "block_saved",
                block_id=session.block_id,
                block_type=session.block_type.value,
                quit_after_save=session.quit_after_save,
            )
            if session.quit_after_save:
                return self._exit(saved=True)
            self._transition(Editing(indicator=SAVED_INDICATOR))
            return [self._schedule_indicator_clear()]

        error = classify_error(result.error)
        decision = decide(
            session.retry_attempt,
            session.max_retries,
            error.classification,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
        )
        if decision.should_retry:
            delay = decision.delay
            if error.retry_after is not None:
                # Retry-After is a lower bound on the wait
                delay = max(delay, error.retry_after)
            session.retry_attempt += 1
            logger.warning(
                "save_retry_scheduled",
                block_id=session.block_id,
                attempt=session.retry_attempt,
                max_retries=session.max_retries,
                delay=delay,
                kind=error.kind.value,
            )
            self._transition(
                RetryWaiting(
                    payload=result.payload,
                    attempt=session.retry_attempt,
                    delay=delay,
                    error=error,
                )
            )
            return [ScheduleRetry(delay=delay, generation=session.generation, attempt=session.retry_attempt)]

        logger.error(
            "block_save_failed",
            block_id=session.block_id,
            kind=error.kind.value,
            detail=error.detail,
            retries=session.retry_attempt,
        )
        self._transition(ShowingError(error=error, retry_offered=error.is_transient, origin=ErrorOrigin.SAVE))
        return []

    def on_retry_timer_fired(self, message: Optional[RetryTimerFired] = None) -> List[SessionCommand]:
        """Resend the pending payload once the backoff delay has elapsed."""
        if message is not None and self._is_stale(message.generation, "retry_timer"):
            return []
        state = self.state
        if not isinstance(state, RetryWaiting):
            return self._ignore("on_retry_timer_fired")
        if message is not None and message.attempt != state.attempt:
            return self._ignore("on_retry_timer_fired", reason="attempt mismatch")

        self._transition(Saving(payload=state.payload))
        logger.info("save_retry_started", block_id=self.session.block_id, attempt=state.attempt)
        return [
            SaveBlock(
                block_id=self.session.block_id,
                payload=state.payload,
                generation=self.session.generation,
                attempt=state.attempt,
            )
        ]

    def on_indicator_expired(self, message: IndicatorExpired) -> List[SessionCommand]:
        state = self.state
        if isinstance(state, Editing) and state.indicator and message.token == self._indicator_token:
            self.state = Editing()
        return []

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def status(self) -> StatusSnapshot:
        """Status bar contents for the current state."""
        state = self.state
        last_synced = self.session.last_synced

        if isinstance(state, Loading):
            mode = "Refreshing..." if state.refresh else "Loading"
            return StatusSnapshot(mode, SyncStatus.SYNCING, "Esc: Exit", last_synced)
        if isinstance(state, Editing):
            if state.indicator:
                mode = state.indicator
            else:
                mode = "Modified *" if self.session.is_dirty else "Editing"
            return StatusSnapshot(mode, SyncStatus.SYNCED, EDITING_HELP, last_synced)
        if isinstance(state, Saving):
            if state.converting:
                mode = f"Converting to {state.payload.block_type.label}..."
            else:
                mode = "Saving..."
            return StatusSnapshot(mode, SyncStatus.SYNCING, "", last_synced)
        if isinstance(state, RetryWaiting):
            mode = f"Retrying in {state.delay:g}s... ({state.attempt}/{self.session.max_retries})"
            return StatusSnapshot(mode, SyncStatus.SYNCING, "", last_synced)
        if isinstance(state, ConfirmingExit):
            return StatusSnapshot("Unsaved changes", SyncStatus.SYNCED, "s: Save | d: Discard | c: Cancel", last_synced)
        if isinstance(state, ShowingError):
            help_text = "r: Retry | d: Dismiss" if state.retry_offered else "d: Dismiss"
            return StatusSnapshot("Error", SyncStatus.ERROR, help_text, last_synced)
        if isinstance(state, Exited):
            return StatusSnapshot("Exited", SyncStatus.SYNCED, "", last_synced)
        raise TypeError(f"Unknown session state: {state!r}")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _start_fetch(self, refresh: bool) -> List[SessionCommand]:
        self.session.generation += 1
        self._transition(Loading(refresh=refresh))
        logger.info(
            "session_fetch_started",
            block_id=self.session.block_id,
            generation=self.session.generation,
            refresh=refresh,
        )
        return [FetchBlock(block_id=self.session.block_id, generation=self.session.generation, refresh=refresh)]

    def _start_save(self, converting: bool = False) -> List[SessionCommand]:
        session = self.session
        block_type = session.pending_block_type or session.block_type
        # Keep an existing code block's language; a conversion to code gets the default
        language = session.code_language if block_type is BlockType.CODE else None
        payload = SavePayload(text=session.draft.get_text(), block_type=block_type, language=language)

        session.retry_attempt = 0
        session.pending_save = payload
        self._transition(Saving(payload=payload, converting=converting))
        logger.info(
            "save_started",
            block_id=session.block_id,
            block_type=block_type.value,
            text_length=len(payload.text),
            quit_after_save=session.quit_after_save,
        )
        return [SaveBlock(block_id=session.block_id, payload=payload, generation=session.generation, attempt=0)]

    def _apply_fetched(self, block: FetchedBlock) -> None:
        session = self.session
        if session.draft is None:
            session.draft = Draft(block.text)
        else:
            session.draft.reset(block.text)
        session.block_type = block.block_type
        session.code_language = block.code_language
        session.last_edited_time = block.last_edited_time
        session.last_synced = datetime.now()
        logger.info(
            "block_loaded",
            block_id=session.block_id,
            block_type=block.block_type.value,
            text_length=len(block.text),
        )

    def _exit(self, saved: bool) -> List[SessionCommand]:
        self.session.pending_block_type = None
        self.session.pending_save = None
        self._transition(Exited(saved=saved))
        return [ExitSession(saved=saved)]

    def _schedule_indicator_clear(self) -> ScheduleIndicatorClear:
        self._indicator_token += 1
        return ScheduleIndicatorClear(delay=self.indicator_duration, token=self._indicator_token)

    def _is_stale(self, generation: int, kind: str) -> bool:
        if generation == self.session.generation:
            return False
        logger.debug(
            "stale_result_discarded",
            kind=kind,
            result_generation=generation,
            current_generation=self.session.generation,
        )
        return True

    def _transition(self, new_state: SessionState) -> None:
        old_phase = self.state.phase
        self.state = new_state
        if old_phase is not new_state.phase:
            logger.debug("session_transition", from_phase=old_phase.value, to_phase=new_state.phase.value)

    def _ignore(self, operation: str, **context) -> List[SessionCommand]:
        logger.debug("session_operation_ignored", operation=operation, phase=self.phase.value, **context)
        return []
