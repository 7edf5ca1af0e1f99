"""Roster entries as published by the authoritative registries.

Each provider has its own variant, discriminated on ``provider``; one JSON object
per line in a roster file.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class RosterBaseModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    first_name: str | None = None
    last_name: str | None = None
    birth_date: date | None = None
    death_date: date | None = None
    mandate_start: date
    mandate_end: date | None = None

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class AssembleeRosterEntry(RosterBaseModel):
    provider: Literal["assemblee_nationale"]
    uid: str = Field(pattern=r"^PA\d+$")
    department_code: str | None = None
    constituency: str | None = None


class SenatRosterEntry(RosterBaseModel):
    provider: Literal["senat"]
    matricule: str
    department_code: str | None = None
    constituency: str | None = None


class EuroparlRosterEntry(RosterBaseModel):
    provider: Literal["parlement_europeen"]
    mep_id: str
    full_name: str | None = None
    country: str | None = None

    @property
    def display_name(self) -> str:
        return self.full_name or super().display_name


RosterEntry = Annotated[
    AssembleeRosterEntry | SenatRosterEntry | EuroparlRosterEntry,
    Field(discriminator="provider"),
]

ROSTER_ENTRY_ADAPTER: TypeAdapter[RosterEntry] = TypeAdapter(RosterEntry)
