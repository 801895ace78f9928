"""Messages delivered to the session controller, and commands it emits.

Results of asynchronous work (fetches, saves, timers) come back to the
controller as result messages. Each one carries the session generation
it was issued under so results that arrive after a reload can be
recognised and dropped.

Commands describe work for the driver (the edit screen) to start. The
controller never performs I/O itself.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from notionedit.models.block import BlockType, FetchedBlock


class ConfirmChoice(str, Enum):
    """Answers to the unsaved-changes prompt."""

    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


@dataclass(frozen=True)
class SavePayload:
    """Exactly what a save sends; automatic retries resend it unchanged."""

    text: str
    block_type: BlockType
    language: Optional[str] = None


# Result messages

@dataclass(frozen=True)
class FetchResult:
    generation: int
    block: Optional[FetchedBlock] = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class SaveResult:
    generation: int
    payload: SavePayload
    last_edited_time: Optional[datetime] = None
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class RetryTimerFired:
    generation: int
    attempt: int


@dataclass(frozen=True)
class IndicatorExpired:
    token: int


SessionMessage = Union[FetchResult, SaveResult, RetryTimerFired, IndicatorExpired]


# Commands

@dataclass(frozen=True)
class FetchBlock:
    block_id: str
    generation: int
    refresh: bool = False


@dataclass(frozen=True)
class SaveBlock:
    block_id: str
    payload: SavePayload
    generation: int
    attempt: int


@dataclass(frozen=True)
class ScheduleRetry:
    delay: float
    generation: int
    attempt: int


@dataclass(frozen=True)
class ScheduleIndicatorClear:
    delay: float
    token: int


@dataclass(frozen=True)
class PresentConfirmation:
    title: str
    message: str
    options: Tuple[ConfirmChoice, ...] = (ConfirmChoice.SAVE, ConfirmChoice.DISCARD, ConfirmChoice.CANCEL)


@dataclass(frozen=True)
class ExitSession:
    saved: bool


SessionCommand = Union[
    FetchBlock,
    SaveBlock,
    ScheduleRetry,
    ScheduleIndicatorClear,
    PresentConfirmation,
    ExitSession,
]
