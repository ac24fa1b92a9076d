"\"\"\"Pydantic schemas for the score configuration and YAML settings.\"\"\""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ScoreConfig(BaseModel):
    """Weights, funnel capacities and submission deadline.

    A single record is persisted; callers pass it explicitly to every
    scoring, ranking and deadline computation.
    """

    bac_weight: float = Field(default=40.0, ge=0, allow_inf_nan=False)
    grad_weight: float = Field(default=60.0, ge=0, allow_inf_nan=False)
    written_exam_count: int = Field(default=20, ge=0, strict=True)
    oral_exam_count: int = Field(default=10, ge=0, strict=True)
    deadline: datetime | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("deadline", mode="before")
    @classmethod
    def _blank_deadline(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("deadline")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class StoreSettings(BaseModel):
    path: Path | None = None


class WorkflowSettings(BaseModel):
    notify_on_reset: bool = False


class AuditSettings(BaseModel):
    path: Path | None = None


class PortalSettings(BaseModel):
    poll_interval_seconds: float = Field(default=2.0, gt=0)


class CredentialSettings(BaseModel):
    password_length: int = Field(default=8, ge=6, le=64)


class AppConfig(BaseModel):
    store: StoreSettings = Field(default_factory=StoreSettings)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
    portal: PortalSettings = Field(default_factory=PortalSettings)
    credentials: CredentialSettings = Field(default_factory=CredentialSettings)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("store", "workflow", "audit", "portal", "credentials"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
