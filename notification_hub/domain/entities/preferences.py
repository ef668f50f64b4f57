"""User preferences governing native notification display."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class QuietHours:
    """Daily window, expressed as ``HH:MM`` strings, where only urgent prompts show."""

    enabled: bool = False
    start: str = "22:00"
    end: str = "07:00"


@dataclass(frozen=True)
class NotificationPreferences:
    enabled: bool = True
    transactions: bool = True
    security: bool = True
    system: bool = False
    messages: bool = True
    quiet_hours: QuietHours = field(default_factory=QuietHours)
    vibration: bool = True
    sound: bool = True


__all__ = ["NotificationPreferences", "QuietHours"]
