from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

Severity = Literal["success", "danger", "info"]

ChangeKind = Literal[
    "applicant.submitted",
    "applicant.updated",
    "applicant.status_changed",
    "notification.created",
    "notifications.read",
]


class Notification(BaseModel):
    """One-way message attached to a single applicant."""

    id: str
    applicant_id: str
    title: str
    message: str
    severity: Severity
    is_read: bool = False
    created_at: datetime

    model_config = ConfigDict(extra="forbid")


class ChangeEvent(BaseModel):
    """Entry of the committed change feed consumed by pollers and subscribers."""

    sequence: int
    kind: ChangeKind
    applicant_id: str
    at: datetime

    model_config = ConfigDict(extra="forbid")
