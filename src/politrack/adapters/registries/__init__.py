"""Roster files of the authoritative registries: Assemblée nationale, Sénat, Europarl."""

from __future__ import annotations

from .reader import RosterFormatError, read_roster
from .schema import AssembleeRosterEntry, EuroparlRosterEntry, RosterEntry, SenatRosterEntry
from .translator import MANDATE_TYPE_BY_SOURCE, entry_external_id, to_candidate, to_seat

__all__ = [
    "MANDATE_TYPE_BY_SOURCE",
    "AssembleeRosterEntry",
    "EuroparlRosterEntry",
    "RosterEntry",
    "RosterFormatError",
    "SenatRosterEntry",
    "entry_external_id",
    "read_roster",
    "to_candidate",
    "to_seat",
]
