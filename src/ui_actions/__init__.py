"""
UI Action Layer

High-level browser actions for UI test scripts. Every action resolves its
wait condition, performs one protocol call and retries transient failures,
inside a session isolated per test worker.
"""

from .base import WaitCondition, WaitContext, WaitStrategy
from .config import ActionConfig, load_config
from .controller import ActionController, CloseSession
from .exceptions import (
    ActionLayerError,
    DuplicateSessionError,
    FatalProtocolError,
    NoActiveSessionError,
    NoActiveWindowError,
    NoCurrentElementError,
    NoSuchElementError,
    ProtocolError,
    TransientProtocolError,
    WaitTimeoutError
)
from .files import FileService, LocalFileService
from .launcher import browser_session, launch_session
from .locators import LocatorKind, RawSelector, ResolvedHandle, as_locator
from .protocol import Cookie, Dimension, LogEntry, Point
from .resolver import WaitResolver, WaitStrategyFactory
from .retry import RetryPolicy
from .session import Session, SessionContext, SessionState, session_context

__all__ = [
    'ActionConfig',
    'ActionController',
    'ActionLayerError',
    'CloseSession',
    'Cookie',
    'Dimension',
    'DuplicateSessionError',
    'FatalProtocolError',
    'FileService',
    'LocalFileService',
    'LocatorKind',
    'LogEntry',
    'NoActiveSessionError',
    'NoActiveWindowError',
    'NoCurrentElementError',
    'NoSuchElementError',
    'Point',
    'ProtocolError',
    'RawSelector',
    'ResolvedHandle',
    'RetryPolicy',
    'Session',
    'SessionContext',
    'SessionState',
    'TransientProtocolError',
    'WaitCondition',
    'WaitContext',
    'WaitResolver',
    'WaitStrategy',
    'WaitStrategyFactory',
    'WaitTimeoutError',
    'as_locator',
    'browser_session',
    'launch_session',
    'load_config',
    'session_context'
]
