"""
Wait resolver - picks the strategy for a condition and records the result in the session
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from .base import WaitCondition, WaitContext, WaitStrategy
from .exceptions import WaitTimeoutError
from .locators import Locator
from .session import Session
from .strategies import AlertWait, ClickableWait, PresenceWait, VisibilityWait

logger = logging.getLogger(__name__)


class WaitResolver:
    """
    Runs the wait strategy matching an action's declared condition.

    The caller never picks the strategy: the condition does. On success the
    resolved element becomes the session's current element.

    Strategies are tried highest priority first and the first one whose
    `can_handle` accepts the condition wins. The built-in strategies never
    overlap, so priority only matters once `add_strategy` registers a
    replacement for a condition, e.g. a stricter clickable check.
    """

    def __init__(self, timeout: float = 10.0, poll_interval: float = 0.5,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {timeout}")
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {poll_interval}")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep

        self.strategies: List[WaitStrategy] = [
            AlertWait(),
            ClickableWait(),
            VisibilityWait(),
            PresenceWait()
        ]
        self.strategies.sort()

        self._stats_lock = threading.Lock()
        self.performance_stats = {
            'total_waits': 0,
            'timeouts': 0,
            'total_wait_time': 0.0,
            'strategy_usage': {}
        }

    def resolve(self, session: Session, locator: Optional[Locator], condition: WaitCondition,
                timeout: Optional[float] = None) -> Any:
        """
        Block until `locator` satisfies `condition` in `session`'s browser.

        Args:
            session: Session whose driver is polled and whose current element is updated
            locator: What to wait for; ignored for ALERT
            condition: Which predicate must hold
            timeout: Override of the resolver's timeout, in seconds

        Returns:
            The resolved element, or the dialog handle for ALERT
        """
        context = WaitContext(
            driver=session.driver,
            locator=locator,
            condition=condition,
            timeout=self.timeout if timeout is None else timeout,
            poll_interval=self.poll_interval,
            clock=self.clock,
            sleep=self.sleep
        )
        strategy = self._strategy_for(context)

        start_time = time.time()
        try:
            result = strategy.resolve(context)
        except WaitTimeoutError:
            self._update_stats(strategy.name, time.time() - start_time, timed_out=True)
            logger.info("%s timed out on %s for %s", strategy.name, condition, locator)
            raise
        self._update_stats(strategy.name, time.time() - start_time, timed_out=False)

        if condition == WaitCondition.ALERT:
            session.current_alert = result
        else:
            session.current_element = result
        return result

    def wait_for_element_presence(self, session: Session, locator: Locator) -> Any:
        return self.resolve(session, locator, WaitCondition.PRESENCE)

    def wait_for_element_visibility(self, session: Session, locator: Locator) -> Any:
        return self.resolve(session, locator, WaitCondition.VISIBILITY)

    def wait_for_element_clickable(self, session: Session, locator: Locator) -> Any:
        return self.resolve(session, locator, WaitCondition.CLICKABLE)

    def wait_for_alert(self, session: Session) -> Any:
        return self.resolve(session, None, WaitCondition.ALERT)

    def add_strategy(self, strategy: WaitStrategy):
        """Register an extra strategy; it wins over built-ins of lower priority"""
        # Rebuilt rather than mutated; resolvers are shared between worker threads
        self.strategies = sorted(self.strategies + [strategy])

    def _strategy_for(self, context: WaitContext) -> WaitStrategy:
        for strategy in self.strategies:
            if strategy.can_handle(context):
                return strategy
        raise ValueError(f"No wait strategy handles condition {context.condition}")

    def _update_stats(self, strategy_name: str, wait_time: float, timed_out: bool):
        with self._stats_lock:
            self.performance_stats['total_waits'] += 1
            self.performance_stats['total_wait_time'] += wait_time
            if timed_out:
                self.performance_stats['timeouts'] += 1
            usage = self.performance_stats['strategy_usage'].setdefault(
                strategy_name, {'attempts': 0, 'successes': 0, 'total_time': 0.0}
            )
            usage['attempts'] += 1
            usage['total_time'] += wait_time
            if not timed_out:
                usage['successes'] += 1

    def get_performance_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            stats = dict(self.performance_stats)
            stats['strategy_usage'] = {k: dict(v) for k, v in self.performance_stats['strategy_usage'].items()}
        waits = stats['total_waits']
        stats['average_wait_time'] = stats['total_wait_time'] / waits if waits else 0.0
        stats['timeout_rate'] = stats['timeouts'] / waits if waits else 0.0
        return stats


ResolverFactory = Callable[[], WaitResolver]


class WaitStrategyFactory:
    """Maps a session's wait-strategy alias to a configured resolver"""

    def __init__(self, timeout: float = 10.0, poll_interval: float = 0.5):
        self._factories: Dict[str, ResolverFactory] = {}
        self._resolvers: Dict[str, WaitResolver] = {}
        self._lock = threading.Lock()

        self.register('webDriverWait', lambda: WaitResolver(timeout=timeout, poll_interval=poll_interval))
        self.register('fluentWait', lambda: WaitResolver(timeout=timeout, poll_interval=0.1))

    @classmethod
    def from_config(cls, config) -> "WaitStrategyFactory":
        return cls(timeout=config.wait_timeout, poll_interval=config.poll_interval)

    def register(self, alias: str, factory: ResolverFactory):
        """Register (or replace) the resolver built for `alias`"""
        with self._lock:
            self._factories[alias] = factory
            self._resolvers.pop(alias, None)

    def aliases(self) -> List[str]:
        with self._lock:
            return sorted(self._factories)

    def get_wait_strategy(self, alias: str) -> WaitResolver:
        with self._lock:
            resolver = self._resolvers.get(alias)
            if resolver is None:
                factory = self._factories.get(alias)
                if factory is None:
                    raise KeyError(f"Unknown wait strategy alias {alias!r}; known: {sorted(self._factories)}")
                resolver = factory()
                self._resolvers[alias] = resolver
            return resolver
