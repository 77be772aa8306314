"""
Session registry keyed by test-worker identity

Each running test worker owns exactly one Session: its driver, the element
resolved by the last wait, and the alias of the wait strategy it uses. The
registry is the only state shared between workers.
"""

import logging
import threading
import time
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional

from .exceptions import (
    DuplicateSessionError,
    NoActiveSessionError,
    NoActiveWindowError,
    NoCurrentElementError
)
from .protocol import Alert, BrowserDriver, WebElement

logger = logging.getLogger(__name__)

DEFAULT_WAIT_STRATEGY = "webDriverWait"


class SessionState(Enum):
    ACTIVE = "active"
    # Current window closed while other windows remain open
    DEGRADED = "degraded"
    CLOSED = "closed"


class Session:
    """Binding between one test worker and its live browser connection"""

    def __init__(self, identity: Hashable, driver: BrowserDriver, wait_strategy: str = DEFAULT_WAIT_STRATEGY):
        self.identity = identity
        self.driver = driver
        self.wait_strategy = wait_strategy
        self.created_at = time.time()
        self._lock = threading.RLock()
        self._state = SessionState.ACTIVE
        self._current_element: Optional[WebElement] = None
        self.current_alert: Optional[Alert] = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def current_element(self) -> Optional[WebElement]:
        with self._lock:
            return self._current_element

    @current_element.setter
    def current_element(self, element: Optional[WebElement]):
        with self._lock:
            self._current_element = element

    def get_web_element(self) -> WebElement:
        """Element resolved by the most recent wait"""
        with self._lock:
            if self._current_element is None:
                raise NoCurrentElementError(self.identity)
            return self._current_element

    def mark_degraded(self):
        with self._lock:
            if self._state == SessionState.ACTIVE:
                self._state = SessionState.DEGRADED
                self._current_element = None

    def mark_active(self):
        with self._lock:
            if self._state == SessionState.DEGRADED:
                self._state = SessionState.ACTIVE

    def close(self):
        with self._lock:
            self._state = SessionState.CLOSED
            self._current_element = None
            self.current_alert = None

    def ensure_usable(self, require_window: bool = True):
        """Raise unless the session can run an action"""
        state = self.state
        if state == SessionState.CLOSED:
            raise NoActiveSessionError(self.identity, "session was closed")
        if require_window and state == SessionState.DEGRADED:
            raise NoActiveWindowError(self.identity)

    def snapshot(self) -> Dict[str, Any]:
        """Consistent read of the session fields for monitoring"""
        with self._lock:
            return {
                'identity': self.identity,
                'state': self._state.value,
                'wait_strategy': self.wait_strategy,
                'has_element': self._current_element is not None,
                'created_at': self.created_at,
            }

    def __repr__(self):
        return f"Session(identity={self.identity!r}, state={self.state.value}, wait_strategy={self.wait_strategy!r})"


class SessionContext:
    """Process-wide registry mapping worker identities to their sessions"""

    def __init__(self):
        self._sessions: Dict[Hashable, Session] = {}
        self._lock = threading.Lock()

    def bind_driver(self, identity: Hashable, driver: BrowserDriver,
                    wait_strategy: str = DEFAULT_WAIT_STRATEGY) -> Session:
        """Register a new session for `identity`"""
        with self._lock:
            if identity in self._sessions:
                raise DuplicateSessionError(identity)
            session = Session(identity, driver, wait_strategy)
            self._sessions[identity] = session
        logger.info("Bound driver to %r using wait strategy %r", identity, wait_strategy)
        return session

    def get_session(self, identity: Hashable) -> Session:
        with self._lock:
            session = self._sessions.get(identity)
        if session is None:
            raise NoActiveSessionError(identity)
        if session.state == SessionState.CLOSED:
            raise NoActiveSessionError(identity, "session was closed")
        return session

    def set_current_element(self, identity: Hashable, element: WebElement):
        self.get_session(identity).current_element = element

    def get_web_element(self, identity: Hashable) -> WebElement:
        return self.get_session(identity).get_web_element()

    def unbind(self, identity: Hashable) -> Optional[Session]:
        """Remove the session for `identity`; unbinding twice is a no-op"""
        with self._lock:
            session = self._sessions.pop(identity, None)
        if session is not None:
            session.close()
            logger.info("Unbound session %r", identity)
        return session

    def identities(self) -> List[Hashable]:
        with self._lock:
            return list(self._sessions)

    def __contains__(self, identity: Hashable) -> bool:
        with self._lock:
            return identity in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# Shared registry used when callers do not supply their own
session_context = SessionContext()
