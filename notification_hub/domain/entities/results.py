"""Outcome objects returned across component boundaries instead of raising."""

from __future__ import annotations

from dataclasses import dataclass

from .push_subscription import PushSubscription


@dataclass(frozen=True)
class ReadUpdateResult:
    """Result of a read-state write-through."""

    ok: bool
    notification_ids: tuple[str, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class PushResult:
    """Result of a push lifecycle operation with a human-readable reason."""

    ok: bool
    reason: str | None = None
    subscription: PushSubscription | None = None


__all__ = ["ReadUpdateResult", "PushResult"]
