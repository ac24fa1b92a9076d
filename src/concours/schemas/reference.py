from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CatalogName = Literal["degrees", "bac_specialties"]

CATALOGS: tuple[CatalogName, ...] = ("degrees", "bac_specialties")


class Position(BaseModel):
    """A numbered opening with its intake capacity."""

    code: str
    title: str
    open_positions: int = Field(default=1, ge=1)
    published: bool = True

    model_config = ConfigDict(extra="forbid")

    @field_validator("code", "title")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ListItem(BaseModel):
    """Entry of a classification catalog (degrees, bac specialties)."""

    value: str
    label: str
    published: bool = True

    model_config = ConfigDict(extra="forbid")

    @field_validator("value", "label")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
