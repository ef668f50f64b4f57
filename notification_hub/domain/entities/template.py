"""Domain entities describing notification presentation templates."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NotificationAction:
    """Button offered on a native notification prompt."""

    action: str
    title: str
    icon: str | None = None


@dataclass(frozen=True)
class NotificationTemplate:
    """Reusable presentation definition referenced by id from a notification.

    ``variables`` lists the metadata keys that ``body`` interpolates through
    ``{{name}}`` placeholders.
    """

    id: str
    type: str
    title: str
    body: str
    icon: str | None = None
    color: str | None = None
    sound: str | None = None
    vibration: tuple[int, ...] = ()
    actions: tuple[NotificationAction, ...] = ()
    variables: tuple[str, ...] = field(default_factory=tuple)


__all__ = ["NotificationAction", "NotificationTemplate"]
