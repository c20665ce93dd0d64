"""Services for the reusable item library and adoption into a day."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from calorie_ledger.domain.errors import (
    DuplicateLibraryItemError,
    NotFoundError,
    StoreError,
)
from calorie_ledger.domain.ledger import EntryType, LedgerEntry, NewLedgerEntry
from calorie_ledger.domain.library import (
    DEFAULT_EXERCISE_MINUTES,
    FieldChange,
    HistoryItem,
    LibraryItem,
    normalize_name,
)
from calorie_ledger.numbers import round_half_up, to_int
from calorie_ledger.services.history import (
    HISTORY_FEED_LIMIT,
    HISTORY_SCAN_LIMIT,
    build_history_feed,
)
from calorie_ledger.services.ledger import LedgerService, signed_calories

logger = logging.getLogger(__name__)

TYPE_FILTERS = {"ALL", EntryType.FOOD.value, EntryType.EXERCISE.value}


class LibraryRepository(Protocol):
    """Persistence interface for library items."""

    def list_items(self) -> list[LibraryItem]:
        """Return every library item."""

    def get_item(self, item_id: UUID) -> LibraryItem | None:
        """Return an item by id, if present."""

    def find_by_norm_name(self, norm_name: str) -> LibraryItem | None:
        """Return the item with a normalized name, if present."""

    def create_item(self, payload: dict[str, object]) -> LibraryItem:
        """Create an item and return it."""

    def update_item(self, item_id: UUID, payload: dict[str, object]) -> LibraryItem:
        """Update an item and return it."""

    def delete_item(self, item_id: UUID) -> None:
        """Remove an item."""

    def increment_usage(self, item_id: UUID, used_at: datetime) -> None:
        """Add one to the usage count and refresh the last-used time."""


@dataclass(frozen=True)
class Selection:
    """An item chosen for adoption with its adjustments."""

    item: LibraryItem | HistoryItem
    count: int = 1
    minutes: int | None = None


@dataclass
class LibraryService:
    """Application service for library and history operations."""

    repository: LibraryRepository
    ledger_service: LedgerService
    history_scan_limit: int = HISTORY_SCAN_LIMIT
    history_feed_limit: int = HISTORY_FEED_LIMIT

    def list_items(
        self, query: str | None = None, type_filter: str = "ALL"
    ) -> list[LibraryItem]:
        """Return items matching a name search and type filter, ranked."""
        needle = (query or "").strip().casefold()
        kind = type_filter.upper() if type_filter.upper() in TYPE_FILTERS else "ALL"
        items = [
            item
            for item in self.repository.list_items()
            if needle in item.name.casefold() and (kind == "ALL" or item.type == kind)
        ]
        return rank_items(items)

    def get_item(self, item_id: UUID) -> LibraryItem:
        """Return an item or raise NotFoundError."""
        item = self.repository.get_item(item_id)
        if item is None:
            raise NotFoundError(f"Library item {item_id} not found")
        return item

    def library_names(self) -> set[str]:
        """Return the normalized names already saved to the library."""
        return {item.norm_name for item in self.repository.list_items()}

    def create_item(  # noqa: PLR0913
        self,
        name: str,
        entry_type: EntryType,
        calories: object,
        minutes: object = DEFAULT_EXERCISE_MINUTES,
        description: str = "",
    ) -> LibraryItem:
        """Create an item, refusing to overwrite one with the same name."""
        payload = _item_payload(name, entry_type, calories, minutes, description)
        existing = self.repository.find_by_norm_name(str(payload["norm_name"]))
        if existing is not None:
            changes = library_changes(existing, payload)
            raise DuplicateLibraryItemError(existing, changes)
        return self.repository.create_item(payload)

    def save_entry_to_library(self, entry: LedgerEntry) -> LibraryItem:
        """Save a ledger entry as a reusable item."""
        return self.create_item(
            name=entry.name,
            entry_type=entry.type,
            calories=entry.calories,
            minutes=entry.minutes or DEFAULT_EXERCISE_MINUTES,
            description=entry.description,
        )

    def replace_item(  # noqa: PLR0913
        self,
        item_id: UUID,
        name: str,
        entry_type: EntryType,
        calories: object,
        minutes: object = DEFAULT_EXERCISE_MINUTES,
        description: str = "",
    ) -> LibraryItem:
        """Overwrite an existing item's details, keeping its usage history."""
        self.get_item(item_id)
        payload = _item_payload(name, entry_type, calories, minutes, description)
        return self.repository.update_item(item_id, payload)

    def update_item(self, item_id: UUID, changes: dict[str, object]) -> LibraryItem:
        """Edit an item; renaming onto another item's name is refused."""
        current = self.get_item(item_id)
        payload = _item_payload(
            str(changes.get("name", current.name)),
            EntryType(changes.get("type", current.type)),
            changes.get("calories", current.calories),
            changes.get("minutes", current.minutes),
            str(changes.get("description", current.description) or ""),
        )
        clash = self.repository.find_by_norm_name(str(payload["norm_name"]))
        if clash is not None and clash.id != item_id:
            raise DuplicateLibraryItemError(clash, library_changes(clash, payload))
        return self.repository.update_item(item_id, payload)

    def delete_item(self, item_id: UUID) -> None:
        """Remove an item from the library."""
        self.get_item(item_id)
        self.repository.delete_item(item_id)

    def history_feed(self, day: date) -> list[HistoryItem]:
        """Return distinct recently logged items from days before ``day``."""
        raw = self.ledger_service.repository.list_entries_before(
            day, self.history_scan_limit
        )
        return build_history_feed(raw, day, limit=self.history_feed_limit)

    def adopt(
        self,
        day: date,
        selections: list[Selection],
        now: datetime | None = None,
    ) -> list[LedgerEntry]:
        """Copy selected items into a day and record library usage."""
        if not selections:
            return []
        used_at = now or datetime.now(tz=UTC)
        entries = [adoption_entry(selection, day) for selection in selections]
        created = self.ledger_service.add_entries(entries)
        for selection in selections:
            if not isinstance(selection.item, LibraryItem):
                continue
            try:
                self.repository.increment_usage(selection.item.id, used_at=used_at)
            except StoreError:
                logger.exception(
                    "Failed to record library usage",
                    extra={"library_id": str(selection.item.id)},
                )
        logger.info("Adopted %s item(s) into %s", len(created), day.isoformat())
        return created


def rank_items(items: list[LibraryItem]) -> list[LibraryItem]:
    """Order by usage count, then most recent use, then case-insensitive name."""
    return sorted(
        items,
        key=lambda item: (
            -item.usage_count,
            -(item.last_used.timestamp() if item.last_used else 0.0),
            item.name.casefold(),
        ),
    )


def adoption_entry(selection: Selection, day: date) -> NewLedgerEntry:
    """Build the ledger entry produced by adopting a selection."""
    item = selection.item
    library_id = item.id if isinstance(item, LibraryItem) else None
    if item.type == EntryType.EXERCISE:
        base_minutes = item.minutes if item.minutes > 0 else DEFAULT_EXERCISE_MINUTES
        requested = selection.minutes if selection.minutes else base_minutes
        requested = max(requested, 1)
        calories = item.calories
        if requested != base_minutes:
            calories = round_half_up(item.calories * requested / base_minutes)
        return NewLedgerEntry(
            day=day,
            type=EntryType.EXERCISE,
            name=item.name,
            calories=signed_calories(EntryType.EXERCISE, calories),
            minutes=requested,
            count=1,
            description=item.description,
            library_id=library_id,
        )
    return NewLedgerEntry(
        day=day,
        type=EntryType.FOOD,
        name=item.name,
        calories=item.calories,
        minutes=0,
        count=max(selection.count, 1),
        description=item.description,
        library_id=library_id,
    )


def library_changes(
    existing: LibraryItem, candidate: dict[str, object]
) -> list[FieldChange]:
    """List the fields a replacement would change."""
    changes: list[FieldChange] = []
    if existing.name != candidate["name"]:
        changes.append(FieldChange("Name", existing.name, str(candidate["name"])))
    if existing.calories != candidate["calories"]:
        changes.append(
            FieldChange("Calories", str(existing.calories), str(candidate["calories"]))
        )
    if existing.type == EntryType.EXERCISE and existing.minutes != candidate["minutes"]:
        changes.append(
            FieldChange("Minutes", f"{existing.minutes}m", f"{candidate['minutes']}m")
        )
    if existing.description != candidate["description"]:
        changes.append(
            FieldChange(
                "Description",
                existing.description or "(none)",
                str(candidate["description"]) or "(none)",
            )
        )
    return changes


def _item_payload(
    name: str,
    entry_type: EntryType,
    calories: object,
    minutes: object,
    description: str,
) -> dict[str, object]:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Library item name is required")
    return {
        "name": cleaned,
        "norm_name": normalize_name(cleaned),
        "type": entry_type,
        "calories": signed_calories(entry_type, calories),
        "minutes": to_int(minutes) or DEFAULT_EXERCISE_MINUTES,
        "description": description or "",
    }
