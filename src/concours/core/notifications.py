"\"\"\"Notification dispatch for status transitions.\"\"\""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Callable

import pendulum
import structlog

from ..errors import ApplicantNotFoundError
from ..schemas import ACCEPTED, PENDING, REJECTED, ApplicantStatus, Notification, Severity

_TEMPLATES: dict[ApplicantStatus, tuple[Severity, str, str]] = {
    ACCEPTED: (
        "success",
        "Application accepted",
        "Your application for position {position} has been accepted and now takes part in the ranking.",
    ),
    REJECTED: (
        "danger",
        "Application rejected",
        "Your application for position {position} was rejected: requirements not met or dossier incomplete.",
    ),
    PENDING: (
        "info",
        "Application under review",
        "The decision on your application for position {position} has been withdrawn and is under review again.",
    ),
}


class NotificationDispatcher:
    """Turns status transitions into per-applicant notifications.

    Called once per actual state change by the workflow. Resets to
    ``pending`` are silent unless ``notify_on_reset`` is set.
    """

    def __init__(
        self,
        store,
        *,
        feed=None,
        notify_on_reset: bool | None = False,
        now_provider: Callable[[], Any] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._feed = feed
        self._notify_on_reset = bool(notify_on_reset)
        self._now_provider = now_provider or pendulum.now
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._logger = structlog.get_logger(__name__)

    def on_transition(
        self,
        applicant_id: str,
        from_status: ApplicantStatus,
        to_status: ApplicantStatus,
        *,
        position_code: str = "",
        at: datetime | None = None,
    ) -> Notification | None:
        if from_status == to_status:
            return None
        if to_status == PENDING and not self._notify_on_reset:
            return None

        severity, title, message = _TEMPLATES[to_status]
        created_at = at or self._now_provider()
        notification = Notification(
            id=self._id_factory(),
            applicant_id=applicant_id,
            title=title,
            message=message.format(position=position_code or "-"),
            severity=severity,
            created_at=created_at,
        )
        with self._store.transaction():
            self._store.append_notification(notification)
            if self._feed is not None:
                self._feed.publish("notification.created", applicant_id, created_at)
        self._logger.info(
            "notification.created",
            applicant_id=applicant_id,
            notification_id=notification.id,
            severity=severity,
        )
        return notification

    def list(self, applicant_id: str, *, since: datetime | None = None) -> list[Notification]:
        """Notifications ordered by creation instant, oldest first."""
        self._require_applicant(applicant_id)
        entries = sorted(self._store.notifications_for(applicant_id), key=lambda n: n.created_at)
        if since is not None:
            entries = [n for n in entries if n.created_at > since]
        return entries

    def unread_count(self, applicant_id: str) -> int:
        return sum(1 for n in self._store.notifications_for(applicant_id) if not n.is_read)

    def mark_all_read(self, applicant_id: str) -> int:
        """Flip every unread entry in one unit of work; return how many."""
        self._require_applicant(applicant_id)
        with self._store.transaction():
            entries = self._store.notifications_for(applicant_id)
            unread = [n for n in entries if not n.is_read]
            if not unread:
                return 0
            self._store.replace_notifications(
                applicant_id,
                [n.model_copy(update={"is_read": True}) for n in entries],
            )
            if self._feed is not None:
                self._feed.publish("notifications.read", applicant_id, self._now_provider())
        return len(unread)

    def _require_applicant(self, applicant_id: str) -> None:
        if self._store.get_applicant(applicant_id) is None:
            raise ApplicantNotFoundError(applicant_id)
