"""
Immediate retry of actions that fail transiently
"""

import logging
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

from .exceptions import TransientProtocolError, WaitTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# A timed-out wait is worth re-running as part of a full retry
RETRYABLE_ERRORS: Tuple[Type[BaseException], ...] = (TransientProtocolError, WaitTimeoutError)


@dataclass(frozen=True)
class RetryPolicy:
    """Re-invoke an action up to `max_attempts` extra times, without delay"""
    max_attempts: int = 0
    retry_on: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS

    def __post_init__(self):
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")

    def run(self, action: Callable[[], T], name: str = "action") -> T:
        """Call `action` and retry it on retryable errors.

        The last failure propagates unchanged once attempts are exhausted;
        non-retryable failures propagate after the first call.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return action()
            except self.retry_on as e:
                if attempt > self.max_attempts:
                    e.add_note(f"{name} failed after {attempt} attempt(s)")
                    raise
                logger.warning("%s failed transiently on attempt %d/%d: %s",
                               name, attempt, self.max_attempts + 1, e)
