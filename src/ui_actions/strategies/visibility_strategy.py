"""
Visibility wait - the element exists and is rendered
"""

from ..base import WaitCondition, WaitContext, WaitStrategy


class VisibilityWait(WaitStrategy):
    """Element has a non-zero rendered size and no CSS-hidden ancestor"""

    def __init__(self):
        super().__init__(priority=20)

    def can_handle(self, context: WaitContext) -> bool:
        return context.condition == WaitCondition.VISIBILITY

    def is_satisfied(self, candidate, context: WaitContext) -> bool:
        return candidate.is_displayed()
