"""Tests for the library service and adoption."""

import logging
from datetime import UTC, date, datetime, timedelta
from uuid import uuid4

import pytest

from calorie_ledger.domain.errors import DuplicateLibraryItemError, NotFoundError
from calorie_ledger.domain.ledger import EntryType
from calorie_ledger.domain.library import FieldChange, LibraryItem
from calorie_ledger.services.library import LibraryService, Selection, rank_items
from tests.conftest import (
    InMemoryLedgerRepository,
    InMemoryLibraryRepository,
    make_library_item,
)

DAY = date(2024, 3, 10)
NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


def _seed(
    repository: InMemoryLibraryRepository, *items: LibraryItem
) -> tuple[LibraryItem, ...]:
    for item in items:
        repository.items[item.id] = item
    return items


def test_rank_items_orders_by_usage_then_recency_then_name() -> None:
    earlier = NOW - timedelta(days=2)
    items = [
        make_library_item("zucchini", usage_count=0),
        make_library_item("Toast", usage_count=2, last_used=earlier),
        make_library_item("Banana", usage_count=5, last_used=earlier),
        make_library_item("apple", usage_count=0),
        make_library_item("Eggs", usage_count=2, last_used=NOW),
    ]

    ranked = rank_items(items)

    assert [item.name for item in ranked] == [
        "Banana",
        "Eggs",
        "Toast",
        "apple",
        "zucchini",
    ]


def test_list_items_filters_by_query_and_type(
    library_repository: InMemoryLibraryRepository, library_service: LibraryService
) -> None:
    _seed(
        library_repository,
        make_library_item("Peanut Butter", calories=190),
        make_library_item("Butter", calories=100, usage_count=1),
        make_library_item("Butterfly stroke", EntryType.EXERCISE, calories=-300),
    )

    names = [item.name for item in library_service.list_items("BUTTER")]
    food = library_service.list_items("butter", type_filter="food")
    exercise = library_service.list_items(None, type_filter="EXERCISE")

    assert names[0] == "Butter"
    assert len(names) == 3
    assert {item.name for item in food} == {"Butter", "Peanut Butter"}
    assert [item.name for item in exercise] == ["Butterfly stroke"]


def test_create_item_normalizes_and_signs(library_service: LibraryService) -> None:
    item = library_service.create_item(" Swim ", EntryType.EXERCISE, 400, minutes=45)

    assert item.name == "Swim"
    assert item.norm_name == "swim"
    assert item.calories == -400
    assert item.minutes == 45
    assert item.usage_count == 0


def test_create_item_rejects_blank_name(library_service: LibraryService) -> None:
    with pytest.raises(ValueError, match="name is required"):
        library_service.create_item("  ", EntryType.FOOD, 100)


def test_create_duplicate_reports_changes(
    library_repository: InMemoryLibraryRepository, library_service: LibraryService
) -> None:
    (existing,) = _seed(library_repository, make_library_item("Oatmeal", calories=150))

    with pytest.raises(DuplicateLibraryItemError) as excinfo:
        library_service.create_item(
            "oatmeal", EntryType.FOOD, 180, description="with milk"
        )

    assert excinfo.value.existing == existing
    assert excinfo.value.changes == [
        FieldChange("Name", "Oatmeal", "oatmeal"),
        FieldChange("Calories", "150", "180"),
        FieldChange("Description", "(none)", "with milk"),
    ]
    assert len(library_repository.items) == 1


def test_replace_item_keeps_usage(
    library_repository: InMemoryLibraryRepository, library_service: LibraryService
) -> None:
    (existing,) = _seed(
        library_repository,
        make_library_item("Oatmeal", calories=150, usage_count=4, last_used=NOW),
    )

    replaced = library_service.replace_item(
        existing.id, "Oatmeal", EntryType.FOOD, 180
    )

    assert replaced.calories == 180
    assert replaced.usage_count == 4
    assert replaced.last_used == NOW


def test_update_item_rename_onto_other_item_is_refused(
    library_repository: InMemoryLibraryRepository, library_service: LibraryService
) -> None:
    first, _ = _seed(
        library_repository, make_library_item("Tea"), make_library_item("Coffee")
    )

    with pytest.raises(DuplicateLibraryItemError):
        library_service.update_item(first.id, {"name": "coffee"})

    renamed = library_service.update_item(first.id, {"name": "Green Tea"})
    assert renamed.norm_name == "green tea"


def test_delete_missing_item_raises(library_service: LibraryService) -> None:
    with pytest.raises(NotFoundError):
        library_service.delete_item(uuid4())


def test_save_entry_to_library(
    ledger_repository: InMemoryLedgerRepository, library_service: LibraryService
) -> None:
    entry = ledger_repository.add(
        day=DAY, type=EntryType.EXERCISE, name="Row", calories=-200, minutes=20
    )

    item = library_service.save_entry_to_library(entry)

    assert item.calories == -200
    assert item.minutes == 20
    assert library_service.library_names() == {"row"}


def test_adopt_food_uses_count_and_records_usage(
    library_repository: InMemoryLibraryRepository,
    ledger_repository: InMemoryLedgerRepository,
    library_service: LibraryService,
) -> None:
    (item,) = _seed(library_repository, make_library_item("Egg", calories=70))

    created = library_service.adopt(DAY, [Selection(item=item, count=3)], now=NOW)

    assert len(created) == 1
    assert created[0].calories == 70
    assert created[0].count == 3
    assert created[0].library_id == item.id
    assert library_repository.items[item.id].usage_count == 1
    assert library_repository.items[item.id].last_used == NOW
    assert len(ledger_repository.entries) == 1


def test_adopt_exercise_rescales_calories_to_minutes(
    library_repository: InMemoryLibraryRepository, library_service: LibraryService
) -> None:
    item, no_minutes = _seed(
        library_repository,
        make_library_item("Run", EntryType.EXERCISE, calories=-300, minutes=30),
        make_library_item("Yoga", EntryType.EXERCISE, calories=-90, minutes=0),
    )

    created = library_service.adopt(
        DAY,
        [
            Selection(item=item, minutes=45),
            Selection(item=item),
            Selection(item=no_minutes, minutes=10),
        ],
        now=NOW,
    )

    assert [(e.minutes, e.calories, e.count) for e in created] == [
        (45, -450, 1),
        (30, -300, 1),
        (10, -30, 1),
    ]
    assert library_repository.items[item.id].usage_count == 2


def test_adopt_nothing_is_a_no_op(
    ledger_repository: InMemoryLedgerRepository, library_service: LibraryService
) -> None:
    ledger_repository.fail_writes = True

    assert library_service.adopt(DAY, []) == []


def test_adopt_logs_usage_failures_without_raising(
    library_repository: InMemoryLibraryRepository,
    library_service: LibraryService,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(logging.getLogger("calorie_ledger"), "propagate", True)
    (item,) = _seed(library_repository, make_library_item("Rice", calories=200))
    library_repository.fail_usage = True

    with caplog.at_level(logging.ERROR):
        created = library_service.adopt(DAY, [Selection(item=item)], now=NOW)

    assert len(created) == 1
    assert library_repository.items[item.id].usage_count == 0
    assert "Failed to record library usage" in caplog.text


def test_adopt_from_history_does_not_touch_usage(
    ledger_repository: InMemoryLedgerRepository,
    library_repository: InMemoryLibraryRepository,
    library_service: LibraryService,
) -> None:
    (item,) = _seed(library_repository, make_library_item("Soup", calories=250))
    ledger_repository.add(
        day=date(2024, 3, 8), type=EntryType.FOOD, name="Soup", calories=250
    )
    (history_item,) = library_service.history_feed(DAY)

    created = library_service.adopt(
        DAY, [Selection(item=history_item, count=2)], now=NOW
    )

    assert created[0].count == 2
    assert created[0].library_id is None
    assert library_repository.items[item.id].usage_count == 0
