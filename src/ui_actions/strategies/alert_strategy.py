"""
Alert wait - an alert, confirm or prompt dialog is open
"""

from ..base import WaitCondition, WaitContext, WaitStrategy


class AlertWait(WaitStrategy):
    """Resolves the open dialog instead of an element"""

    def __init__(self):
        super().__init__(priority=40)

    def can_handle(self, context: WaitContext) -> bool:
        return context.condition == WaitCondition.ALERT

    def locate(self, context: WaitContext):
        return context.driver.get_alert()

    def is_satisfied(self, candidate, context: WaitContext) -> bool:
        return True
