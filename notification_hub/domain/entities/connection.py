"""Health status of the change-feed subscription."""

from enum import Enum


class ConnectionStatus(str, Enum):
    """Process-wide status of the active session's feed subscription."""

    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"


__all__ = ["ConnectionStatus"]
