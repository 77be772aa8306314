"""
Presence wait - the element exists in the DOM
"""

from ..base import WaitCondition, WaitContext, WaitStrategy


class PresenceWait(WaitStrategy):
    """Satisfied as soon as the locator matches an element"""

    def __init__(self):
        super().__init__(priority=10)

    def can_handle(self, context: WaitContext) -> bool:
        return context.condition == WaitCondition.PRESENCE

    def is_satisfied(self, candidate, context: WaitContext) -> bool:
        return True
