"""Domain models for the daily ledger."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID


class EntryType(StrEnum):
    """Kind of ledger entry."""

    FOOD = "FOOD"
    EXERCISE = "EXERCISE"


@dataclass(frozen=True)
class LedgerEntry:
    """A food or exercise entry logged on a day.

    ``calories`` is the per-occurrence value (positive for food, non-positive
    for exercise) and ``count`` multiplies it in every total.
    """

    id: UUID
    day: date
    type: EntryType
    name: str
    calories: int
    minutes: int = 0
    count: int = 1
    description: str = ""
    deleted: bool = False
    library_id: UUID | None = None


@dataclass(frozen=True)
class NewLedgerEntry:
    """Entry payload before the store assigns an id."""

    day: date
    type: EntryType
    name: str
    calories: int
    minutes: int = 0
    count: int = 1
    description: str = ""
    library_id: UUID | None = None


@dataclass(frozen=True)
class DayStatus:
    """Per-day completion flag."""

    day: date
    is_complete: bool = False
