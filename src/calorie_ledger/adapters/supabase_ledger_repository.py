"""Supabase repository for ledger entries and day status."""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from supabase import Client

from calorie_ledger.domain.errors import StoreError
from calorie_ledger.domain.ledger import (
    DayStatus,
    EntryType,
    LedgerEntry,
    NewLedgerEntry,
)
from calorie_ledger.services.ledger import LedgerRepository

ENTRY_COLUMNS = (
    "id, day, type, name, calories, minutes, count, description, deleted, library_id"
)


@dataclass
class SupabaseLedgerRepository(LedgerRepository):
    """Supabase implementation of the ledger store."""

    client: Client

    def list_entries(self, day: date) -> list[LedgerEntry]:
        """Return non-deleted entries for a day."""
        response = (
            self.client.table("ledger_entries")
            .select(ENTRY_COLUMNS)
            .eq("day", day.isoformat())
            .eq("deleted", False)
            .order("created_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def list_entries_before(self, day: date, limit: int) -> list[LedgerEntry]:
        """Return non-deleted entries before a day, newest first."""
        response = (
            self.client.table("ledger_entries")
            .select(ENTRY_COLUMNS)
            .lt("day", day.isoformat())
            .eq("deleted", False)
            .order("day", desc=True)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def get_entry(self, entry_id: UUID) -> LedgerEntry | None:
        """Return an entry by id."""
        response = (
            self.client.table("ledger_entries")
            .select(ENTRY_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def create_entries(self, entries: list[NewLedgerEntry]) -> list[LedgerEntry]:
        """Insert entries in one batch."""
        if not entries:
            return []
        payload = [
            {
                "day": entry.day.isoformat(),
                "type": entry.type.value,
                "name": entry.name,
                "calories": entry.calories,
                "minutes": entry.minutes,
                "count": entry.count,
                "description": entry.description,
                "deleted": False,
                "library_id": str(entry.library_id) if entry.library_id else None,
            }
            for entry in entries
        ]
        response = self.client.table("ledger_entries").insert(payload).execute()
        if not response.data:
            raise StoreError("Failed to create ledger entries")
        return [_parse_entry(row) for row in response.data]

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> LedgerEntry:
        """Apply a partial update to an entry."""
        payload = {
            key: value.value if isinstance(value, EntryType) else value
            for key, value in changes.items()
        }
        response = (
            self.client.table("ledger_entries")
            .update(payload)
            .eq("id", str(entry_id))
            .execute()
        )
        if not response.data:
            raise StoreError("Failed to update ledger entry")
        return _parse_entry(response.data[0])

    def get_day_status(self, day: date) -> DayStatus | None:
        """Return the stored completion flag for a day."""
        response = (
            self.client.table("day_status")
            .select("day, is_complete")
            .eq("day", day.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return DayStatus(
            day=date.fromisoformat(str(row["day"])),
            is_complete=bool(row.get("is_complete")),
        )

    def set_day_status(self, status: DayStatus) -> None:
        """Upsert the completion flag keyed by day."""
        self.client.table("day_status").upsert(
            {"day": status.day.isoformat(), "is_complete": status.is_complete},
            on_conflict="day",
        ).execute()


def _parse_entry(row: dict[str, object]) -> LedgerEntry:
    library_id = row.get("library_id")
    return LedgerEntry(
        id=UUID(str(row["id"])),
        day=date.fromisoformat(str(row["day"])),
        type=EntryType(str(row.get("type", EntryType.FOOD.value))),
        name=str(row.get("name") or ""),
        calories=int(row.get("calories") or 0),
        minutes=int(row.get("minutes") or 0),
        count=int(row.get("count") or 1),
        description=str(row.get("description") or ""),
        deleted=bool(row.get("deleted")),
        library_id=UUID(str(library_id)) if library_id else None,
    )
