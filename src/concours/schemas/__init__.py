"\"\"\"Pydantic schema definitions for dossiers, catalogs and configuration.\"\"\""

from __future__ import annotations

from .applicant import (
    ACCEPTED,
    EDITABLE_FIELDS,
    PENDING,
    REJECTED,
    Applicant,
    ApplicantDraft,
    ApplicantStatus,
    email_key,
    parse_average,
)
from .config import AppConfig, ScoreConfig, load_config
from .notification import ChangeEvent, ChangeKind, Notification, Severity
from .reference import CATALOGS, CatalogName, ListItem, Position

__all__ = [
    "ACCEPTED",
    "PENDING",
    "REJECTED",
    "EDITABLE_FIELDS",
    "Applicant",
    "ApplicantDraft",
    "ApplicantStatus",
    "email_key",
    "parse_average",
    "AppConfig",
    "ScoreConfig",
    "load_config",
    "ChangeEvent",
    "ChangeKind",
    "Notification",
    "Severity",
    "CATALOGS",
    "CatalogName",
    "ListItem",
    "Position",
]
