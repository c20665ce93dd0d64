"""Supabase implementation for the item library."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from calorie_ledger.domain.errors import StoreError
from calorie_ledger.domain.ledger import EntryType
from calorie_ledger.domain.library import DEFAULT_EXERCISE_MINUTES, LibraryItem
from calorie_ledger.services.library import LibraryRepository


@dataclass
class SupabaseLibraryRepository(LibraryRepository):
    """Supabase-backed repository for library items."""

    client: Client

    def list_items(self) -> list[LibraryItem]:
        """Return every library item."""
        response = self.client.table("library_items").select("*").execute()
        return [_parse_item(row) for row in response.data or []]

    def get_item(self, item_id: UUID) -> LibraryItem | None:
        """Return an item by id, if present."""
        response = (
            self.client.table("library_items")
            .select("*")
            .eq("id", str(item_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def find_by_norm_name(self, norm_name: str) -> LibraryItem | None:
        """Return the item with a normalized name, if present."""
        response = (
            self.client.table("library_items")
            .select("*")
            .eq("norm_name", norm_name)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_item(response.data[0])

    def create_item(self, payload: dict[str, object]) -> LibraryItem:
        """Create an item and return it."""
        response = (
            self.client.table("library_items").insert(_serialize(payload)).execute()
        )
        if not response.data:
            raise StoreError("Failed to create library item")
        return _parse_item(response.data[0])

    def update_item(self, item_id: UUID, payload: dict[str, object]) -> LibraryItem:
        """Update an item and return it."""
        response = (
            self.client.table("library_items")
            .update(_serialize(payload))
            .eq("id", str(item_id))
            .execute()
        )
        if not response.data:
            raise StoreError("Failed to update library item")
        return _parse_item(response.data[0])

    def delete_item(self, item_id: UUID) -> None:
        """Remove an item."""
        self.client.table("library_items").delete().eq("id", str(item_id)).execute()

    def increment_usage(self, item_id: UUID, used_at: datetime) -> None:
        """Increment usage counters for an item."""
        response = (
            self.client.table("library_items")
            .select("usage_count")
            .eq("id", str(item_id))
            .limit(1)
            .execute()
        )
        current = 0
        if response.data:
            current = int(response.data[0].get("usage_count") or 0)
        updated = (
            self.client.table("library_items")
            .update({"usage_count": current + 1, "last_used": used_at.isoformat()})
            .eq("id", str(item_id))
            .execute()
        )
        if not updated.data:
            raise StoreError("Failed to record library usage")


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    return {
        key: value.value if isinstance(value, EntryType) else value
        for key, value in payload.items()
    }


def _parse_item(row: dict[str, object]) -> LibraryItem:
    last_used_raw = row.get("last_used")
    last_used = (
        datetime.fromisoformat(last_used_raw)
        if isinstance(last_used_raw, str) and last_used_raw
        else None
    )
    name = str(row.get("name") or "")
    return LibraryItem(
        id=UUID(str(row["id"])),
        name=name,
        norm_name=str(row.get("norm_name") or name.strip().casefold()),
        type=EntryType(str(row.get("type", EntryType.FOOD.value))),
        calories=int(row.get("calories") or 0),
        minutes=int(row.get("minutes") or DEFAULT_EXERCISE_MINUTES),
        description=str(row.get("description") or ""),
        last_used=last_used,
        usage_count=int(row.get("usage_count") or 0),
    )
