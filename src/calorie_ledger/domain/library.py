"""Domain models for the reusable item library."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from calorie_ledger.domain.ledger import EntryType

DEFAULT_EXERCISE_MINUTES = 30


def normalize_name(name: str) -> str:
    """Return the uniqueness key for an item name."""
    return name.strip().casefold()


@dataclass(frozen=True)
class LibraryItem:
    """A user-curated template that can be adopted into a day."""

    id: UUID
    name: str
    norm_name: str
    type: EntryType
    calories: int
    minutes: int = DEFAULT_EXERCISE_MINUTES
    description: str = ""
    last_used: datetime | None = None
    usage_count: int = 0


@dataclass(frozen=True)
class HistoryItem:
    """Most recent use of a distinct item name, derived from past entries."""

    name: str
    norm_name: str
    type: EntryType
    calories: int
    minutes: int
    description: str
    last_day: date


@dataclass(frozen=True)
class FieldChange:
    """Difference between an existing library item and a replacement."""

    label: str
    old: str
    new: str
