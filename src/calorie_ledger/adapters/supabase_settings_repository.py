"""Supabase repository for the settings history."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from calorie_ledger.domain.errors import StoreError
from calorie_ledger.domain.settings import ActivityLevel, DaySettings, Gender
from calorie_ledger.services.settings_history import SettingsRepository


@dataclass
class SupabaseSettingsRepository(SettingsRepository):
    """Supabase implementation for date-keyed settings records."""

    client: Client

    def list_settings(self) -> list[DaySettings]:
        """Return every settings record ordered by day."""
        response = (
            self.client.table("day_settings")
            .select("*")
            .order("day", desc=False)
            .execute()
        )
        return [_parse_settings(row) for row in response.data or []]

    def create_settings(self, settings: DaySettings) -> DaySettings:
        """Insert a settings record."""
        response = (
            self.client.table("day_settings").insert(_serialize(settings)).execute()
        )
        if not response.data:
            raise StoreError("Failed to create settings")
        return _parse_settings(response.data[0])

    def update_settings(self, settings_id: UUID, settings: DaySettings) -> DaySettings:
        """Replace a settings record in place."""
        response = (
            self.client.table("day_settings")
            .update(_serialize(settings))
            .eq("id", str(settings_id))
            .execute()
        )
        if not response.data:
            raise StoreError("Failed to update settings")
        return _parse_settings(response.data[0])


def _serialize(settings: DaySettings) -> dict[str, object]:
    return {
        "day": settings.day.isoformat() if settings.day else None,
        "weight": settings.weight,
        "height": settings.height,
        "gender": settings.gender.value if settings.gender else None,
        "dob": settings.dob.isoformat() if settings.dob else None,
        "activity_level": (
            settings.activity_level.value if settings.activity_level else None
        ),
        "rmr": settings.rmr,
        "deficit": settings.deficit,
    }


def _parse_settings(row: dict[str, object]) -> DaySettings:
    gender = row.get("gender")
    activity = row.get("activity_level")
    dob = row.get("dob")
    weight = row.get("weight")
    height = row.get("height")
    rmr = row.get("rmr")
    deficit = row.get("deficit")
    return DaySettings(
        id=UUID(str(row["id"])),
        day=date.fromisoformat(str(row["day"])),
        weight=float(weight) if weight is not None else None,
        height=float(height) if height is not None else None,
        gender=Gender(str(gender)) if gender else None,
        dob=date.fromisoformat(str(dob)) if dob else None,
        activity_level=ActivityLevel(str(activity)) if activity else None,
        rmr=int(rmr) if rmr is not None else None,
        deficit=int(deficit) if deficit is not None else None,
    )
