"""
Retry with backoff and jitter.

Delay grows per failed attempt according to the policy's strategy (fixed,
linear or exponential), is capped at max_delay, and is spread by a random
jitter so that several scrapers retrying at once do not hit a source in
lockstep.
"""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from ..errors import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackoffStrategy(str, Enum):
    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass
class RetryPolicy:
    """
    Retry Configuration

    attempts counts the first call, so attempts=1 disables retrying.
    """

    attempts: int = 3
    delay: float = 1.0
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    max_delay: float = 30.0
    jitter_factor: float = 0.2

    def __post_init__(self) -> None:
        """Validate configuration after initialization"""
        if isinstance(self.backoff, str) and not isinstance(self.backoff, BackoffStrategy):
            self.backoff = BackoffStrategy(self.backoff)
        if self.attempts < 1:
            raise ValueError("Retry attempts must be at least 1")
        if self.delay < 0:
            raise ValueError("Retry delay must be non-negative")
        if self.max_delay < self.delay:
            raise ValueError("Max delay must be greater than retry delay")
        if not 0 <= self.jitter_factor <= 1:
            raise ValueError("Jitter factor must be between 0 and 1")

    def calculate_delay(self, attempt: int) -> float:
        """
        Delay to wait after the given failed attempt (1-based).

        Args:
            attempt: Number of the attempt that just failed

        Returns:
            Delay in seconds, never negative
        """
        if self.backoff == BackoffStrategy.FIXED:
            delay = self.delay
        elif self.backoff == BackoffStrategy.LINEAR:
            delay = self.delay * attempt
        else:
            delay = self.delay * (2 ** (attempt - 1))

        delay = min(delay, self.max_delay)

        jitter_range = delay * self.jitter_factor
        delay += random.uniform(-jitter_range, jitter_range)
        return max(0.0, delay)


def call_with_retry(
    func: Callable[..., T],
    *args: Any,
    policy: Optional[RetryPolicy] = None,
    label: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
    on_failed_attempt: Optional[Callable[[int, BaseException], None]] = None,
    **kwargs: Any,
) -> T:
    """
    Call func until it succeeds or the policy's attempts are used up.

    Non-retryable errors (see errors.is_retryable) are raised immediately.

    Args:
        func: Callable to execute
        policy: Retry settings (defaults to RetryPolicy())
        label: Name used in log messages
        sleep: Blocking sleep, injectable for tests
        on_failed_attempt: Called with (attempt, error) after each failure

    Returns:
        Whatever func returns

    Raises:
        The last exception raised by func
    """
    policy = policy or RetryPolicy()

    for attempt in range(1, policy.attempts + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if on_failed_attempt:
                on_failed_attempt(attempt, e)

            if attempt >= policy.attempts or not is_retryable(e):
                raise

            delay = policy.calculate_delay(attempt)
            logger.warning(
                f"🔄 {label} attempt {attempt}/{policy.attempts} failed: {e}. Retrying in {delay:.2f}s"
            )
            sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{label} exhausted retries")
