"""Pydantic request models for the ledger API."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from calorie_ledger.domain.ledger import EntryType
from calorie_ledger.domain.library import DEFAULT_EXERCISE_MINUTES
from calorie_ledger.domain.settings import ActivityLevel, Gender


class EntryCreate(BaseModel):
    """Quick-add payload."""

    name: str
    type: EntryType = EntryType.FOOD
    calories: int = 0
    minutes: int = Field(default=0, ge=0)
    description: str = ""


class EntryUpdate(BaseModel):
    """Partial edit of a ledger entry."""

    type: EntryType | None = None
    name: str | None = None
    calories: int | None = None
    minutes: int | None = Field(default=None, ge=0)
    count: int | None = Field(default=None, ge=1)
    description: str | None = None


class CountChange(BaseModel):
    """Step applied to an entry's count."""

    delta: int


class DayStatusUpdate(BaseModel):
    """Completion flag for a day."""

    is_complete: bool


class SettingsUpdate(BaseModel):
    """Settings values written for a day."""

    weight: float | None = Field(default=None, ge=0)
    height: float | None = Field(default=None, ge=0)
    gender: Gender | None = None
    dob: date | None = None
    activity_level: ActivityLevel | None = None
    rmr: int | None = Field(default=None, ge=0)
    deficit: int | None = None


class LibraryItemCreate(BaseModel):
    """New or replacement library item."""

    name: str
    type: EntryType = EntryType.FOOD
    calories: int = 0
    minutes: int = Field(default=DEFAULT_EXERCISE_MINUTES, ge=0)
    description: str = ""


class LibraryItemUpdate(BaseModel):
    """Partial edit of a library item."""

    name: str | None = None
    type: EntryType | None = None
    calories: int | None = None
    minutes: int | None = Field(default=None, ge=0)
    description: str | None = None


class LibrarySelection(BaseModel):
    """Library item chosen for adoption."""

    item_id: UUID
    count: int = Field(default=1, ge=1)
    minutes: int | None = Field(default=None, ge=1)


class HistorySelection(BaseModel):
    """History item chosen for adoption, addressed by name."""

    name: str
    count: int = Field(default=1, ge=1)
    minutes: int | None = Field(default=None, ge=1)


class LibraryAdoption(BaseModel):
    """Selections adopted from the library."""

    selections: list[LibrarySelection] = Field(default_factory=list)


class HistoryAdoption(BaseModel):
    """Selections adopted from the history feed."""

    selections: list[HistorySelection] = Field(default_factory=list)
