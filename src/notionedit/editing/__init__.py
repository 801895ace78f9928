"""Edit/save session: state machine, retry policy, error classification."""

from notionedit.editing.classifier import ClassifiedError, ErrorClassification, ErrorKind, classify_error
from notionedit.editing.controller import EditSession, SessionController, SessionPhase
from notionedit.editing.draft import Draft
from notionedit.editing.retry import RetryDecision, backoff_delay, decide

__all__ = [
    "ClassifiedError",
    "Draft",
    "EditSession",
    "ErrorClassification",
    "ErrorKind",
    "RetryDecision",
    "SessionController",
    "SessionPhase",
    "backoff_delay",
    "classify_error",
    "decide",
]
