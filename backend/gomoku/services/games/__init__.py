"""Game domain services: room registry and participant sessions.

This package contains pure domain logic that is driven by the socket
handlers, keeping transport concerns separated from core game mechanics.
"""

from .registry import RoomRegistry
from .session import Notification, SessionManager

__all__ = ['Notification', 'RoomRegistry', 'SessionManager']
