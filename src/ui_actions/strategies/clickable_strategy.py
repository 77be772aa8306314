"""
Clickable wait - the element is visible, enabled and not covered
"""

from ..base import WaitCondition, WaitContext
from .visibility_strategy import VisibilityWait


class ClickableWait(VisibilityWait):
    """Visible, enabled and not obscured by another element"""

    def __init__(self):
        super().__init__()
        self.priority = 30

    def can_handle(self, context: WaitContext) -> bool:
        return context.condition == WaitCondition.CLICKABLE

    def is_satisfied(self, candidate, context: WaitContext) -> bool:
        # Cheapest checks first; is_obscured costs a script round-trip
        return (
            super().is_satisfied(candidate, context)
            and candidate.is_enabled()
            and not candidate.is_obscured()
        )
