from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import NotificationKind


class NotificationSink(Protocol):
    """Where user-facing notifications go. Callers treat delivery as best effort."""

    def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        kind: NotificationKind = NotificationKind.INFO,
        link: Optional[str] = None,
    ) -> None:
        raise NotImplementedError
