"""Notifications - Canal de toasts para o usuario (fire-and-forget)."""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Protocol

from .models.enums import NotificationKind
from .models.schemas import NotificationView

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, kind: NotificationKind, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier que apenas registra no log."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind is NotificationKind.ERROR:
            logger.warning(f"[notify:error] {message}")
        else:
            logger.info(f"[notify:{kind.value}] {message}")


class NotificationInbox:
    """Filas de notificacoes por usuario, consumidas pelo cliente web.

    Example:
        >>> inbox = NotificationInbox()
        >>> inbox.for_user("u1").notify(NotificationKind.SUCCESS, "Quiz saved as draft!")
        >>> inbox.drain("u1")
    """

    def __init__(self, max_per_user: int = 50):
        self._queues: dict[str, deque[NotificationView]] = defaultdict(
            lambda: deque(maxlen=max_per_user)
        )

    def push(self, user_id: str, kind: NotificationKind, message: str) -> None:
        self._queues[user_id].append(
            NotificationView(kind=kind, message=message, created_at=datetime.now(timezone.utc))
        )

    def drain(self, user_id: str) -> list[NotificationView]:
        """Retorna e remove as notificacoes pendentes do usuario."""
        queue = self._queues.pop(user_id, None)
        return list(queue) if queue else []

    def for_user(self, user_id: str) -> "UserNotifier":
        return UserNotifier(self, user_id)


class UserNotifier:
    """Notifier ligado a um usuario da inbox (tambem registra no log)."""

    def __init__(self, inbox: NotificationInbox, user_id: str):
        self._inbox = inbox
        self.user_id = user_id
        self._log = LoggingNotifier()

    def notify(self, kind: NotificationKind, message: str) -> None:
        self._inbox.push(self.user_id, kind, message)
        self._log.notify(kind, message)
