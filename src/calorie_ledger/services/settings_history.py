"""Time-versioned settings resolution and updates."""

import bisect
import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol
from uuid import UUID

from calorie_ledger.domain.settings import ActivityLevel, DaySettings, Gender
from calorie_ledger.numbers import round_half_up, to_float
from calorie_ledger.services.energy import estimate_rmr

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = (
    "weight",
    "height",
    "gender",
    "dob",
    "activity_level",
    "rmr",
    "deficit",
)


class SettingsRepository(Protocol):
    """Persistence interface for the settings history."""

    def list_settings(self) -> list[DaySettings]:
        """Return every settings record."""

    def create_settings(self, settings: DaySettings) -> DaySettings:
        """Insert a settings record and return it with its id."""

    def update_settings(self, settings_id: UUID, settings: DaySettings) -> DaySettings:
        """Replace the stored fields of a settings record."""


@dataclass
class SettingsHistory:
    """Sorted view of the settings records with floor lookup by day."""

    records: list[DaySettings]
    _days: list[date]

    def __init__(self, records: Iterable[DaySettings] = ()) -> None:
        self.records = sorted(
            (record for record in records if record.day is not None),
            key=lambda record: record.day,
        )
        self._days = [record.day for record in self.records]

    def resolve(self, day: date) -> DaySettings:
        """Return the record with the greatest day on or before ``day``."""
        index = bisect.bisect_right(self._days, day)
        if index == 0:
            return DaySettings.defaults()
        return self.records[index - 1]

    def exact(self, day: date) -> DaySettings | None:
        """Return the record stored for exactly ``day``, if any."""
        index = bisect.bisect_left(self._days, day)
        if index < len(self._days) and self._days[index] == day:
            return self.records[index]
        return None


@dataclass
class SettingsService:
    """Service resolving and versioning user settings by day."""

    repository: SettingsRepository

    def history(self) -> SettingsHistory:
        """Load the settings history."""
        return SettingsHistory(self.repository.list_settings())

    def resolve(self, day: date) -> DaySettings:
        """Return the settings in effect on ``day``."""
        return self.history().resolve(day)

    def update_settings(
        self, day: date, changes: dict[str, object], today: date | None = None
    ) -> DaySettings:
        """Apply changes to the settings of ``day``, versioning as needed."""
        history = self.history()
        existing = history.exact(day)
        base = existing or history.resolve(day)
        updated = apply_changes(base, day, changes, today=today)
        if existing is not None and existing.id is not None:
            logger.info("Updating settings for %s", day.isoformat())
            return self.repository.update_settings(existing.id, updated)
        logger.info("Creating settings for %s", day.isoformat())
        return self.repository.create_settings(replace(updated, id=None))


def apply_changes(
    base: DaySettings,
    day: date,
    changes: dict[str, object],
    today: date | None = None,
) -> DaySettings:
    """Return ``base`` carried forward to ``day`` with ``changes`` applied.

    A complete body profile recomputes ``rmr`` unless the changes set it
    explicitly; an incomplete profile keeps the carried-forward value.
    """
    values = {name: getattr(base, name) for name in SETTINGS_FIELDS}
    for name, raw in changes.items():
        if name not in SETTINGS_FIELDS:
            continue
        values[name] = _coerce_field(name, raw)
    updated = DaySettings(id=base.id, day=day, **values)
    if "rmr" in changes and updated.rmr:
        return updated
    estimated = estimate_rmr(updated, today)
    if estimated is None:
        return updated
    return replace(updated, rmr=estimated)


def _coerce_field(name: str, raw: object) -> object:
    if raw is None or raw == "":
        return None
    if name in {"weight", "height"}:
        return to_float(raw)
    if name in {"rmr", "deficit"}:
        value = to_float(raw)
        return round_half_up(value) if value is not None else None
    if name == "gender":
        try:
            return Gender(str(raw).lower())
        except ValueError:
            return None
    if name == "activity_level":
        try:
            return ActivityLevel(str(raw).lower())
        except ValueError:
            return None
    if name == "dob":
        if isinstance(raw, date):
            return raw
        try:
            return date.fromisoformat(str(raw))
        except ValueError:
            return None
    return raw
