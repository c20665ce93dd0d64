"""Domain models for the time-versioned settings history."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from uuid import UUID

DEFAULT_RMR = 2000
DEFAULT_DEFICIT = 0


class Gender(StrEnum):
    """Sex used by the Mifflin-St Jeor equation."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(StrEnum):
    """Activity level for the TDEE multiplier."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    EXTRA = "extra"


@dataclass(frozen=True)
class DaySettings:
    """Settings effective from ``day`` until the next recorded day."""

    id: UUID | None
    day: date | None
    weight: float | None = None
    height: float | None = None
    gender: Gender | None = None
    dob: date | None = None
    activity_level: ActivityLevel | None = None
    rmr: int | None = DEFAULT_RMR
    deficit: int | None = DEFAULT_DEFICIT

    @classmethod
    def defaults(cls) -> "DaySettings":
        """Settings used when no record exists on or before a day."""
        return cls(id=None, day=None)

    @property
    def effective_rmr(self) -> int:
        """RMR with the default applied when unset or zero."""
        return self.rmr or DEFAULT_RMR

    @property
    def effective_deficit(self) -> int:
        """Deficit with the default applied when unset."""
        return self.deficit or DEFAULT_DEFICIT

    @property
    def goal(self) -> int:
        """Daily calorie target."""
        return self.effective_rmr - self.effective_deficit
