"\"\"\"Applicant status state machine.\"\"\""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, get_args

import pendulum
import structlog

from ..errors import AdmissionValidationError, ApplicantNotFoundError
from ..schemas import ACCEPTED, PENDING, REJECTED, Applicant, ApplicantStatus, Notification
from .notifications import NotificationDispatcher

STATUSES: tuple[ApplicantStatus, ...] = get_args(ApplicantStatus)

TRANSITIONS: frozenset[tuple[ApplicantStatus, ApplicantStatus]] = frozenset(
    {
        (PENDING, ACCEPTED),
        (PENDING, REJECTED),
        (ACCEPTED, PENDING),
        (REJECTED, PENDING),
    }
)


@dataclass(slots=True)
class TransitionRecord:
    """One edge taken by an applicant, with the notification it produced."""

    applicant_id: str
    from_status: ApplicantStatus
    to_status: ApplicantStatus
    at: datetime
    notification: Notification | None


def plan_transition(
    current: ApplicantStatus,
    target: ApplicantStatus,
) -> list[tuple[ApplicantStatus, ApplicantStatus]]:
    """Edges needed to move from ``current`` to ``target``.

    A decision flipped between accepted and rejected goes through pending.
    """
    if current == target:
        return []
    if (current, target) in TRANSITIONS:
        return [(current, target)]
    return [(current, PENDING), (PENDING, target)]


class StatusWorkflow:
    """Applies administrator decisions and bulk acceptance.

    The deadline does not apply here: decisions are allowed at any time.
    """

    def __init__(
        self,
        store,
        dispatcher: NotificationDispatcher,
        *,
        feed=None,
        audit_logger=None,
        now_provider: Callable[[], Any] | None = None,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._feed = feed
        self._audit_logger = audit_logger
        self._now_provider = now_provider or pendulum.now
        self._logger = structlog.get_logger(__name__)

    def set_status(
        self,
        applicant_id: str,
        new_status: ApplicantStatus,
        *,
        actor: str = "admin",
    ) -> list[TransitionRecord]:
        if new_status not in STATUSES:
            raise AdmissionValidationError(f"Unknown status: {new_status!r}")

        with self._store.transaction():
            applicant = self._store.get_applicant(applicant_id)
            if applicant is None:
                raise ApplicantNotFoundError(applicant_id)
            at = self._now_provider()
            records = [
                self._record(applicant, from_status, to_status, at, actor)
                for from_status, to_status in plan_transition(applicant.status, new_status)
            ]
            if records:
                self._store.upsert_applicant(applicant.model_copy(update={"status": new_status}))
        return records

    def bulk_accept_pending(self, *, actor: str = "admin") -> list[TransitionRecord]:
        """Accept every pending applicant as one unit of work."""
        with self._store.transaction():
            applicants = self._store.all_applicants()
            pending = [applicant for applicant in applicants if applicant.status == PENDING]
            if not pending:
                return []
            self._store.replace_applicants(
                applicant.model_copy(update={"status": ACCEPTED})
                if applicant.status == PENDING
                else applicant
                for applicant in applicants
            )
            at = self._now_provider()
            records = [
                self._record(applicant, PENDING, ACCEPTED, at, actor) for applicant in pending
            ]
        self._logger.info("applicants.bulk_accepted", count=len(records), actor=actor)
        return records

    def _record(
        self,
        applicant: Applicant,
        from_status: ApplicantStatus,
        to_status: ApplicantStatus,
        at: datetime,
        actor: str,
    ) -> TransitionRecord:
        notification = self._dispatcher.on_transition(
            applicant.id,
            from_status,
            to_status,
            position_code=applicant.target_position_number,
            at=at,
        )
        if self._feed is not None:
            self._feed.publish("applicant.status_changed", applicant.id, at)
        if self._audit_logger is not None:
            entry = {
                "applicant_id": applicant.id,
                "from_status": from_status,
                "to_status": to_status,
                "actor": actor,
                "at": pendulum.instance(at).to_iso8601_string(),
                "notification_id": notification.id if notification else None,
            }
            self._store.after_commit(lambda: self._audit_logger.append(entry))
        self._logger.info(
            "applicant.status_changed",
            applicant_id=applicant.id,
            from_status=from_status,
            to_status=to_status,
            actor=actor,
        )
        return TransitionRecord(
            applicant_id=applicant.id,
            from_status=from_status,
            to_status=to_status,
            at=at,
            notification=notification,
        )
