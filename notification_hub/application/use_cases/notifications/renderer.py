"""Render visible notifications as native OS prompts."""

from __future__ import annotations

import asyncio
import logging
from typing import Final

from notification_hub.application.ports import (
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    NativeNotificationHandle,
    NativeNotificationOptions,
    NativeNotifier,
)
from notification_hub.domain.entities import (
    PRIORITY_URGENT,
    Notification,
    NotificationTemplate,
)

from .policy import NotificationPolicy
from .signals import AppSignals
from .templates import TemplateCatalog, render_body

logger = logging.getLogger(__name__)

DEFAULT_VIBRATION: Final[tuple[int, ...]] = (200, 100, 200)
VALIDATION_TYPES: Final[frozenset[str]] = frozenset({"validation", "transaction_validation"})


def icon_url(icon: str) -> str:
    return f"/icons/{icon}.png"


def is_validation_type(
    notification: Notification, template: NotificationTemplate | None = None
) -> bool:
    """Return whether ``notification`` asks the user to validate something."""

    candidates = (
        notification.category,
        notification.type,
        notification.template,
        template.type if template else None,
    )
    return any(value in VALIDATION_TYPES for value in candidates if value)


class NativeNotificationRenderer:
    """Negotiate permission and display native prompts for visible notifications.

    Once the platform reports ``denied`` the renderer stops prompting for
    the rest of the process; it only displays again if the platform later
    reports ``granted`` on its own.
    """

    def __init__(
        self,
        notifier: NativeNotifier,
        templates: TemplateCatalog,
        signals: AppSignals,
        *,
        app_name: str = "SecureTrans",
        default_icon: str = "/vite.svg",
        auto_dismiss_seconds: float = 5.0,
        urgent_auto_dismiss_seconds: float = 10.0,
        policy: NotificationPolicy | None = None,
    ) -> None:
        self._notifier = notifier
        self._templates = templates
        self._signals = signals
        self._app_name = app_name
        self._default_icon = default_icon
        self._auto_dismiss = auto_dismiss_seconds
        self._urgent_auto_dismiss = urgent_auto_dismiss_seconds
        self._policy = policy
        self._permission_denied = False
        self._open: dict[str, tuple[NativeNotificationHandle, asyncio.TimerHandle | None]] = {}
        self._pending: dict[str, asyncio.TimerHandle] = {}

    @property
    def permission_denied(self) -> bool:
        return self._permission_denied

    @property
    def open_tags(self) -> list[str]:
        return list(self._open)

    @property
    def pending_tags(self) -> list[str]:
        return list(self._pending)

    async def render(self, notification: Notification) -> bool:
        """Display ``notification`` if allowed. Never raises."""

        try:
            return await self._render(notification)
        except Exception:
            logger.exception("Native notification for %s failed", notification.id)
            return False

    async def _render(self, notification: Notification) -> bool:
        if not self._notifier.is_supported:
            logger.info("Native notifications are not supported on this platform")
            return False
        if not notification.text:
            return False
        if self._policy is not None and not self._policy.should_show(notification):
            logger.debug("Preferences suppress native prompt for %s", notification.id)
            return False

        permission = self._notifier.permission
        if permission == PERMISSION_GRANTED:
            return self._show(notification)
        if permission == PERMISSION_DENIED or self._permission_denied:
            self._permission_denied = True
            logger.info("Native notifications blocked by the user")
            return False

        logger.info("Requesting native notification permission")
        result = await self._notifier.request_permission()
        if result == PERMISSION_GRANTED:
            return self._show(notification)
        if result == PERMISSION_DENIED:
            self._permission_denied = True
        logger.info("Native notification permission not granted: %s", result)
        return False

    def _show(self, notification: Notification) -> bool:
        delay = self._policy.recommended_delay(notification) if self._policy else 0.0
        if delay <= 0:
            return self.display(notification)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return self.display(notification)

        self.cancel_pending(notification.id)
        self._pending[notification.id] = loop.call_later(
            delay, self._display_pending, notification
        )
        logger.debug("Native notification %s deferred by %.0fs", notification.id, delay)
        return True

    def _display_pending(self, notification: Notification) -> None:
        self._pending.pop(notification.id, None)
        try:
            self.display(notification)
        except Exception:
            logger.exception("Deferred native notification for %s failed", notification.id)

    def cancel_pending(self, tag: str) -> None:
        timer = self._pending.pop(tag, None)
        if timer is not None:
            timer.cancel()

    def build_options(self, notification: Notification) -> NativeNotificationOptions:
        template = self._templates.resolve(notification.template)

        if template is not None and notification.metadata:
            body = render_body(template, notification.metadata)
        else:
            body = notification.text or (template.body if template else "") or "New notification"

        vibrate = list(template.vibration) if template and template.vibration else list(DEFAULT_VIBRATION)
        silent = False
        if self._policy is not None:
            if not self._policy.preferences.vibration:
                vibrate = []
            silent = not self._policy.preferences.sound

        actions = [
            {
                "action": action.action,
                "title": action.title,
                "icon": icon_url(action.icon) if action.icon else None,
            }
            for action in (template.actions if template else ())
        ]

        return NativeNotificationOptions(
            title=template.title if template else self._app_name,
            body=body,
            icon=icon_url(template.icon) if template and template.icon else self._default_icon,
            tag=notification.id,
            badge=self._default_icon,
            require_interaction=self._is_urgent(notification, template),
            silent=silent,
            vibrate=vibrate,
            actions=actions,
            data={
                "notification_id": notification.id,
                "template": template.id if template else None,
                "link": notification.link,
            },
        )

    def display(self, notification: Notification) -> bool:
        """Show the prompt now, replacing any open prompt with the same tag."""

        template = self._templates.resolve(notification.template)
        options = self.build_options(notification)
        tag = options.tag
        options.on_click = lambda: self.handle_click(notification)

        self.close(tag)
        handle = self._notifier.show(options)
        delay = (
            self._urgent_auto_dismiss
            if self._is_urgent(notification, template)
            else self._auto_dismiss
        )
        self._open[tag] = (handle, self._schedule_close(tag, delay))
        logger.debug("Native notification %s displayed", tag)
        return True

    def handle_click(self, notification: Notification) -> None:
        try:
            self._notifier.focus_application()
        except Exception:
            logger.exception("Could not focus the application")
        if notification.link:
            self._signals.navigate(notification.link, notification_id=notification.id)
        self.close(notification.id)

    def close(self, tag: str) -> None:
        entry = self._open.pop(tag, None)
        if entry is None:
            return
        handle, timer = entry
        if timer is not None:
            timer.cancel()
        try:
            handle.close()
        except Exception:
            logger.debug("Closing native notification %s failed", tag, exc_info=True)

    def close_all(self) -> None:
        for tag in list(self._pending):
            self.cancel_pending(tag)
        for tag in list(self._open):
            self.close(tag)

    def _schedule_close(self, tag: str, delay: float) -> asyncio.TimerHandle | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None
        return loop.call_later(delay, self.close, tag)

    @staticmethod
    def _is_urgent(notification: Notification, template: NotificationTemplate | None) -> bool:
        return notification.priority == PRIORITY_URGENT or is_validation_type(
            notification, template
        )


__all__ = [
    "DEFAULT_VIBRATION",
    "NativeNotificationRenderer",
    "icon_url",
    "is_validation_type",
]
