from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

ApplicantStatus = Literal["pending", "accepted", "rejected"]

PENDING: ApplicantStatus = "pending"
ACCEPTED: ApplicantStatus = "accepted"
REJECTED: ApplicantStatus = "rejected"

SocialSecurityType = Literal["cnss", "cnrps", "none", ""]


def parse_average(value: Any) -> float | None:
    """Read an average the way applicants type it ("15.5", "15,5", 15.5).

    Blank, non-numeric and non-finite inputs yield ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


class ApplicantDraft(BaseModel):
    """Dossier fields an applicant fills in at submission."""

    # personal
    full_name: str = ""
    gender: Literal["male", "female", ""] = ""
    birth_date: str = ""
    birth_place: str = ""
    address: str = ""
    governorate: str = ""
    postal_code: str = ""
    cin: str = ""
    cin_date: str = ""
    social_security_type: SocialSecurityType = ""
    cnss_number: str = ""
    mobile: str = ""
    email: str

    # civil status
    marital_status: str = ""
    military_status: str = ""
    spouse_name: str = ""
    spouse_profession: str = ""
    spouse_workplace: str = ""
    children_count: str = ""

    # education
    degree: str = ""
    specialty: str = ""
    graduation_year: str = ""
    equivalence_decision: str = ""
    equivalence_date: str = ""
    bac_average: float | None = None
    bac_specialty: str = ""
    bac_year: str = ""
    grad_average: float | None = None

    target_position_number: str

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        email = value.strip()
        if "@" not in email:
            raise ValueError("email must contain '@'")
        return email

    @field_validator("target_position_number")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        return value.strip()

    @field_validator("bac_average", "grad_average", mode="before")
    @classmethod
    def _coerce_average(cls, value: Any) -> float | None:
        return parse_average(value)

    @model_validator(mode="after")
    def _clear_unused_cnss(self) -> "ApplicantDraft":
        if self.social_security_type == "none" and self.cnss_number:
            self.cnss_number = ""
        return self


class Applicant(ApplicantDraft):
    """Stored dossier with account data and workflow status."""

    id: str
    password: str
    status: ApplicantStatus = PENDING
    submitted_at: datetime


IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id", "email", "password", "status", "submitted_at"})

EDITABLE_FIELDS: frozenset[str] = frozenset(ApplicantDraft.model_fields) - IMMUTABLE_FIELDS


def email_key(email: str) -> str:
    """Normalized form used for the unique email index."""
    return email.strip().lower()
