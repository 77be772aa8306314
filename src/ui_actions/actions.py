"""
Composition of wait and retry around controller actions

Each controller action is declared with `@action(wait=..., retries=...)`.
The wrapper builds the pipeline explicitly:

    retry( wait(condition, locator) -> protocol call )

so a retry re-runs the wait as well as the call.
"""

import functools
import inspect
from dataclasses import dataclass
from typing import Optional

from .base import WaitCondition
from .retry import RetryPolicy


@dataclass(frozen=True)
class ActionSpec:
    """Precondition and retry budget of one action"""
    wait: Optional[WaitCondition] = None
    retries: Optional[int] = None
    # Window-agnostic actions (switching, counting, quitting) still run on a degraded session
    require_window: bool = True

    @property
    def retry_policy(self) -> Optional[RetryPolicy]:
        if self.retries is None:
            return None
        return RetryPolicy(max_attempts=self.retries)


def action(wait: Optional[WaitCondition] = None, retries: Optional[int] = None,
           require_window: bool = True):
    """Wrap a controller method in its wait step and retry policy.

    For element conditions the method's first positional argument is the
    locator to wait for. The wrapped method reads the resolved element from
    the session.
    """
    spec = ActionSpec(wait=wait, retries=retries, require_window=require_window)
    policy = spec.retry_policy

    def decorator(func):
        name = func.__name__
        signature = inspect.signature(func)
        target_param = list(signature.parameters)[1] if len(signature.parameters) > 1 else None

        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            target = None
            if spec.wait is not None and spec.wait is not WaitCondition.ALERT:
                target = signature.bind(self, *args, **kwargs).arguments[target_param]

            def attempt():
                session = self._session(require_window=spec.require_window)
                if spec.wait is not None:
                    self._resolve(session, target, spec.wait)
                return func(self, *args, **kwargs)

            if policy is None:
                return self.time_operation(name, attempt)
            return self.time_operation(name, lambda: policy.run(attempt, name=name))

        wrapper.action_spec = spec
        return wrapper

    return decorator
