"""Ephemeral event produced from silent change-feed records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

MANUAL_REFRESH_EVENT: Final[str] = "manual_refresh"
DATA_REFRESH_EVENT: Final[str] = "data_refresh"


@dataclass(frozen=True)
class SystemEvent:
    """Internal signal delivered to in-process subscribers."""

    type: str
    action: str
    target: str
    timestamp: datetime
    data: Any = None


__all__ = ["SystemEvent", "MANUAL_REFRESH_EVENT", "DATA_REFRESH_EVENT"]
