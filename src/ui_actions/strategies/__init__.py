"""
Wait strategies, one per wait condition
"""

from .presence_strategy import PresenceWait
from .visibility_strategy import VisibilityWait
from .clickable_strategy import ClickableWait
from .alert_strategy import AlertWait

__all__ = [
    'PresenceWait',
    'VisibilityWait',
    'ClickableWait',
    'AlertWait'
]
