"""Daily ledger service and calorie aggregation."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from calorie_ledger.domain.errors import NotFoundError
from calorie_ledger.domain.ledger import (
    DayStatus,
    EntryType,
    LedgerEntry,
    NewLedgerEntry,
)
from calorie_ledger.domain.settings import DaySettings
from calorie_ledger.numbers import round_half_up, to_int
from calorie_ledger.services.goals import (
    GoalStatus,
    ProgressBar,
    classify,
    progress_bar,
)
from calorie_ledger.services.settings_history import SettingsService

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 1440


class LedgerRepository(Protocol):
    """Persistence interface for ledger entries and day status."""

    def list_entries(self, day: date) -> list[LedgerEntry]:
        """Return non-deleted entries for a day."""

    def list_entries_before(self, day: date, limit: int) -> list[LedgerEntry]:
        """Return non-deleted entries before ``day``, newest first."""

    def get_entry(self, entry_id: UUID) -> LedgerEntry | None:
        """Return an entry by id, deleted or not."""

    def create_entries(self, entries: list[NewLedgerEntry]) -> list[LedgerEntry]:
        """Insert entries and return them with ids."""

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> LedgerEntry:
        """Apply a partial update and return the entry."""

    def get_day_status(self, day: date) -> DayStatus | None:
        """Return the completion flag for a day, if stored."""

    def set_day_status(self, status: DayStatus) -> None:
        """Upsert the completion flag for a day."""


@dataclass(frozen=True)
class DailyTotals:
    """Food, exercise and net calories for a day."""

    food_total: int
    exercise_direct_burn: int
    exercise_minutes: int
    rmr_credit: int
    burned_total: int
    net_calories: int


@dataclass(frozen=True)
class DaySummary:
    """Everything the presentation layer needs to render a day."""

    day: date
    entries: list[LedgerEntry]
    settings: DaySettings
    totals: DailyTotals
    goal_status: GoalStatus
    progress: ProgressBar
    is_complete: bool


def aggregate(entries: Iterable[LedgerEntry], rmr: int) -> DailyTotals:
    """Total a day's entries, crediting back resting burn for exercise time."""
    food_total = 0
    exercise_direct_burn = 0
    exercise_minutes = 0
    for entry in entries:
        if entry.deleted:
            continue
        count = entry.count or 1
        if entry.type == EntryType.FOOD:
            food_total += entry.calories * count
        else:
            exercise_direct_burn += entry.calories * count
            exercise_minutes += (entry.minutes or 0) * count
    rmr_credit = round_half_up(exercise_minutes / MINUTES_PER_DAY * rmr)
    burned_total = exercise_direct_burn + rmr_credit
    return DailyTotals(
        food_total=food_total,
        exercise_direct_burn=exercise_direct_burn,
        exercise_minutes=exercise_minutes,
        rmr_credit=rmr_credit,
        burned_total=burned_total,
        net_calories=food_total + burned_total,
    )


def signed_calories(entry_type: EntryType, calories: object) -> int:
    """Store food as positive and exercise as non-positive calories."""
    value = abs(to_int(calories))
    return -value if entry_type == EntryType.EXERCISE else value


@dataclass
class LedgerService:
    """Application service for a day's ledger."""

    repository: LedgerRepository
    settings_service: SettingsService

    def get_day(self, day: date) -> DaySummary:
        """Return entries, totals and goal progress for a day."""
        entries = [
            entry for entry in self.repository.list_entries(day) if not entry.deleted
        ]
        settings = self.settings_service.resolve(day)
        rmr = settings.effective_rmr
        totals = aggregate(entries, rmr)
        goal_status = classify(totals.net_calories, rmr, settings.effective_deficit)
        return DaySummary(
            day=day,
            entries=entries,
            settings=settings,
            totals=totals,
            goal_status=goal_status,
            progress=progress_bar(totals.net_calories, rmr, goal_status.goal),
            is_complete=self.get_day_status(day).is_complete,
        )

    def add_entry(  # noqa: PLR0913
        self,
        day: date,
        name: str,
        entry_type: EntryType,
        calories: object,
        minutes: object = 0,
        description: str = "",
    ) -> LedgerEntry | None:
        """Quick-add an entry; an empty name adds nothing."""
        cleaned = (name or "").strip()
        if not cleaned:
            return None
        entry = NewLedgerEntry(
            day=day,
            type=entry_type,
            name=cleaned,
            calories=signed_calories(entry_type, calories),
            minutes=(
                max(to_int(minutes), 0) if entry_type == EntryType.EXERCISE else 0
            ),
            description=description or "",
        )
        return self.repository.create_entries([entry])[0]

    def add_entries(self, entries: list[NewLedgerEntry]) -> list[LedgerEntry]:
        """Insert several prepared entries."""
        if not entries:
            return []
        return self.repository.create_entries(entries)

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> LedgerEntry:
        """Apply edits to an entry, keeping calorie signs consistent."""
        current = self._require(entry_id)
        payload = dict(changes)
        entry_type = EntryType(payload.get("type", current.type))
        if "type" in payload or "calories" in payload:
            payload["type"] = entry_type
            payload["calories"] = signed_calories(
                entry_type, payload.get("calories", current.calories)
            )
        if "minutes" in payload:
            payload["minutes"] = max(to_int(payload["minutes"]), 0)
        if entry_type == EntryType.FOOD and "type" in payload:
            payload["minutes"] = 0
        if "count" in payload:
            payload["count"] = max(to_int(payload["count"], default=1), 1)
        return self.repository.update_entry(entry_id, payload)

    def change_count(self, entry_id: UUID, delta: int) -> LedgerEntry:
        """Step an entry's count, never below one."""
        current = self._require(entry_id)
        count = current.count or 1
        new_count = max(1, count + delta)
        if new_count == count:
            return current
        return self.repository.update_entry(entry_id, {"count": new_count})

    def delete_entry(self, entry_id: UUID) -> UUID:
        """Soft-delete an entry and return the id used to undo it."""
        self._require(entry_id)
        self.repository.update_entry(entry_id, {"deleted": True})
        logger.info("Deleted entry %s", entry_id)
        return entry_id

    def restore_entry(self, entry_id: UUID) -> LedgerEntry:
        """Undo a soft delete."""
        self._require(entry_id)
        return self.repository.update_entry(entry_id, {"deleted": False})

    def get_day_status(self, day: date) -> DayStatus:
        """Return the completion flag, defaulting to incomplete."""
        return self.repository.get_day_status(day) or DayStatus(day=day)

    def set_day_complete(self, day: date, is_complete: bool) -> DayStatus:
        """Mark a day complete or incomplete."""
        status = DayStatus(day=day, is_complete=is_complete)
        self.repository.set_day_status(status)
        return status

    def _require(self, entry_id: UUID) -> LedgerEntry:
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        return entry
