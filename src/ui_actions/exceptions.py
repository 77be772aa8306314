"""
Exception hierarchy for the UI action layer

Every error raised by the package derives from `ActionLayerError`. Protocol
failures are split into transient ones (worth an immediate retry) and fatal
ones (never retried).
"""

from typing import Any, Optional


class ActionLayerError(Exception):
    """Base exception for the whole package"""


class NoActiveSessionError(ActionLayerError):
    """No live session is bound to the requested identity"""

    def __init__(self, identity: Any, reason: str = "no session bound"):
        self.identity = identity
        self.reason = reason
        super().__init__(f"No active session for {identity!r}: {reason}")


class NoActiveWindowError(NoActiveSessionError):
    """The session is bound but its current window was closed"""

    def __init__(self, identity: Any):
        super().__init__(identity, "current window was closed, switch to a remaining window first")


class DuplicateSessionError(ActionLayerError):
    """An identity tried to bind a second driver"""

    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f"A session is already bound to {identity!r}")


class NoCurrentElementError(ActionLayerError):
    """An element was read from a session before any wait resolved one"""

    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f"No element has been resolved yet for {identity!r}")


class WaitTimeoutError(ActionLayerError):
    """A wait condition was never satisfied within the timeout"""

    def __init__(self, locator: Any, condition: Any, elapsed: float, last_error: Optional[BaseException] = None):
        self.locator = locator
        self.condition = condition
        self.elapsed = elapsed
        self.last_error = last_error
        message = f"Timed out after {elapsed:.3f}s waiting for {condition} of {locator}"
        if last_error is not None:
            message += f" (last poll error: {last_error})"
        super().__init__(message)


class ProtocolError(ActionLayerError):
    """Failure reported by the underlying browser-control protocol"""


class TransientProtocolError(ProtocolError):
    """Stale element, element not yet interactable and similar interim races"""


class NoSuchElementError(TransientProtocolError):
    """The locator matched nothing in the current document"""

    def __init__(self, locator: Any):
        self.locator = locator
        super().__init__(f"No element matches {locator}")


class FatalProtocolError(ProtocolError):
    """Invalid selector, crashed or disconnected driver and other structural errors"""
