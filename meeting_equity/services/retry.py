"""
Bounded retry with exponential backoff.

The loop never raises on exhaustion: it hands back a RetryOutcome and the
caller decides whether to degrade or propagate.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

from meeting_equity.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryOutcome(Generic[T]):
    """Tagged result of retry_with_backoff."""
    succeeded: bool
    attempts: int
    value: Optional[T] = None
    last_error: Optional[Exception] = None
    delays: list[float] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return not self.succeeded


def backoff_schedule(max_attempts: int, initial_delay: float = 1.0, factor: float = 2.0) -> list[float]:
    """Delays slept between attempts: 1s, 2s, 4s, ... (one fewer than attempts)."""
    return [initial_delay * (factor ** attempt) for attempt in range(max(max_attempts - 1, 0))]


def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    factor: float = 2.0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome[T]:
    """
    Call ``func`` until it succeeds or ``max_attempts`` is reached.

    Args:
        func: Zero-argument callable to retry
        max_attempts: Maximum number of attempts (at least one is always made)
        initial_delay: Delay in seconds after the first failure
        factor: Multiplier applied to the delay after each further failure
        retry_on: Exception types considered transient; anything else propagates
        sleep: Sleep function, injectable for tests

    Returns:
        RetryOutcome tagged succeeded/exhausted with the value or last error
    """
    attempts = max(max_attempts, 1)
    schedule = backoff_schedule(attempts, initial_delay, factor)
    outcome: RetryOutcome[T] = RetryOutcome(succeeded=False, attempts=0)

    for attempt in range(attempts):
        outcome.attempts = attempt + 1
        try:
            outcome.value = func()
            outcome.succeeded = True
            if attempt > 0:
                logger.info("retry_succeeded", attempt=attempt + 1)
            return outcome
        except retry_on as e:
            outcome.last_error = e
            if attempt == attempts - 1:
                break
            delay = schedule[attempt]
            logger.warning(
                "retry_attempt_failed",
                attempt=attempt + 1,
                max_attempts=attempts,
                error=str(e),
                retry_in_seconds=delay,
            )
            outcome.delays.append(delay)
            sleep(delay)

    return outcome
