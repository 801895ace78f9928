"""Retry/backoff policy for saves that fail transiently."""

from dataclasses import dataclass

from notionedit.editing.classifier import ErrorClassification

DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 10.0


@dataclass(frozen=True)
class RetryDecision:
    """Whether to retry, and how long to wait first (seconds)."""

    should_retry: bool
    delay: float


def backoff_delay(
    attempt: int,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> float:
    """Exponential backoff: base * 2**attempt, capped at max_delay.

    With the defaults this yields 1, 2, 4, 8, 10, 10, ... seconds.

    Args:
        attempt: Zero-indexed retry number (0 for the first retry)
        base_delay: Delay before the first retry
        max_delay: Upper bound for any delay

    Returns:
        Delay in seconds
    """
    if attempt < 0:
        raise ValueError(f"attempt must be >= 0, got {attempt}")
    return min(max_delay, base_delay * (2 ** attempt))


def decide(
    attempt: int,
    max_retries: int,
    classification: ErrorClassification,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> RetryDecision:
    """Decide whether a failed save should be retried automatically.

    Only transient failures are retried, and only while fewer than
    ``max_retries`` retries have been made for the current save request.
    The initial attempt does not count: ``attempt`` is 0 when deciding
    about the first retry.

    Args:
        attempt: Retries already made for this save request
        max_retries: Configured retry ceiling
        classification: Classification of the failure that just happened
        base_delay: Delay before the first retry (seconds)
        max_delay: Cap on any single delay (seconds)

    Returns:
        RetryDecision; delay is 0.0 when no retry should happen
    """
    should_retry = classification is ErrorClassification.TRANSIENT and attempt < max_retries
    if not should_retry:
        return RetryDecision(should_retry=False, delay=0.0)
    return RetryDecision(should_retry=True, delay=backoff_delay(attempt, base_delay, max_delay))
