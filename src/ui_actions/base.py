"""
Base classes and interfaces for the wait-strategy system
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .exceptions import TransientProtocolError, WaitTimeoutError
from .locators import Locator, ResolvedHandle
from .protocol import BrowserDriver

logger = logging.getLogger(__name__)


class WaitCondition(Enum):
    PRESENCE = "presence"
    VISIBILITY = "visibility"
    CLICKABLE = "clickable"
    ALERT = "alert"

    def __str__(self):
        return self.name


@dataclass
class WaitContext:
    """Everything a wait strategy needs for one resolution"""
    driver: BrowserDriver
    locator: Optional[Locator]
    condition: WaitCondition
    timeout: float = 10.0
    poll_interval: float = 0.5
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)


class WaitStrategy(ABC):
    """Base class for all wait strategies.

    A strategy polls `locate` + `is_satisfied` until both succeed or the
    timeout elapses. Transient protocol failures during a poll count as a
    miss; anything else propagates immediately.
    """

    def __init__(self, priority: int = 0):
        self.priority = priority
        self.name = self.__class__.__name__

    @abstractmethod
    def can_handle(self, context: WaitContext) -> bool:
        """Determine if this strategy handles the context's condition"""
        pass

    @abstractmethod
    def is_satisfied(self, candidate: Any, context: WaitContext) -> bool:
        """Check the condition against a located candidate"""
        pass

    def locate(self, context: WaitContext) -> Any:
        """Fetch a fresh candidate for this poll"""
        if isinstance(context.locator, ResolvedHandle):
            return context.locator.element
        return context.driver.find_element(context.locator)

    def resolve(self, context: WaitContext) -> Any:
        """Block until the condition holds, then return the candidate"""
        start = context.clock()
        deadline = start + context.timeout
        last_error = None
        polls = 0

        while True:
            polls += 1
            try:
                candidate = self.locate(context)
                if candidate is not None and self.is_satisfied(candidate, context):
                    logger.debug("%s satisfied %s for %s after %d poll(s)",
                                 self.name, context.condition, context.locator, polls)
                    return candidate
            except TransientProtocolError as e:
                last_error = e
                logger.debug("%s poll %d missed: %s", self.name, polls, e)

            now = context.clock()
            if now >= deadline:
                raise WaitTimeoutError(context.locator, context.condition, now - start, last_error)
            context.sleep(min(context.poll_interval, deadline - now))

    def __lt__(self, other):
        """Enable sorting by priority (higher priority first)"""
        return self.priority > other.priority


class TimingMixin:
    """Mixin to add timing capabilities to the controller"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.timing_data: Dict[str, Dict[str, float]] = {}

    def time_operation(self, operation_name: str, func, *args, **kwargs):
        """Time an operation and store the result"""
        start_time = time.time()
        try:
            result = func(*args, **kwargs)
            self._record_timing(operation_name, time.time() - start_time, True)
            return result
        except Exception:
            self._record_timing(operation_name, time.time() - start_time, False)
            raise

    def _record_timing(self, operation_name: str, duration: float, success: bool):
        stats = self.timing_data.setdefault(
            operation_name, {'calls': 0, 'failures': 0, 'total_time': 0.0, 'avg_time': 0.0}
        )
        stats['calls'] += 1
        stats['total_time'] += duration
        stats['avg_time'] = stats['total_time'] / stats['calls']
        if not success:
            stats['failures'] += 1
        logger.debug("%s %s in %.1fms", operation_name, "completed" if success else "failed", duration * 1000)

    def get_timing_summary(self) -> Dict[str, Dict[str, float]]:
        """Get timing summary per operation"""
        return {name: dict(stats) for name, stats in self.timing_data.items()}
