"""Notifications infrastructure: live UI broadcast and guest chat fan-out"""

from .websocket_manager import WebSocketManager
from .notification_service import NotificationService
from .fanout import FanoutResult, NotificationFanout

__all__ = [
    "WebSocketManager",
    "NotificationService",
    "FanoutResult",
    "NotificationFanout",
]
