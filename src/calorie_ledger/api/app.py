"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from calorie_ledger.api.models import (
    CountChange,
    DayStatusUpdate,
    EntryCreate,
    EntryUpdate,
    HistoryAdoption,
    LibraryAdoption,
    LibraryItemCreate,
    LibraryItemUpdate,
    SettingsUpdate,
)
from calorie_ledger.app_logging import configure_logging
from calorie_ledger.containers import AppContainer
from calorie_ledger.domain.errors import (
    DuplicateLibraryItemError,
    NotFoundError,
    StoreError,
)
from calorie_ledger.domain.library import normalize_name
from calorie_ledger.domain.settings import DaySettings
from calorie_ledger.services.ledger import DaySummary
from calorie_ledger.services.library import Selection


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.exception("Storage operation failed", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage operation failed"},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(DuplicateLibraryItemError)
    async def duplicate_handler(
        request: Request, exc: DuplicateLibraryItemError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "existing_id": str(exc.existing.id),
                "changes": [asdict(change) for change in exc.changes],
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/days/{day}")
    async def get_day(day: date, request: Request) -> dict[str, object]:
        """Return a day's entries, totals, goal zone and progress geometry."""
        state_container: AppContainer = request.app.state.container
        summary = state_container.ledger_service.get_day(day)
        saved = state_container.library_service.library_names()
        return _serialize_day(summary, saved)

    @app.post("/days/{day}/entries", status_code=status.HTTP_201_CREATED)
    async def add_entry(
        day: date, payload: EntryCreate, request: Request
    ) -> dict[str, object]:
        """Quick-add an entry to a day."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.ledger_service.add_entry(
            day,
            name=payload.name,
            entry_type=payload.type,
            calories=payload.calories,
            minutes=payload.minutes,
            description=payload.description,
        )
        return {"entry": asdict(entry) if entry else None}

    @app.patch("/entries/{entry_id}")
    async def update_entry(
        entry_id: UUID, payload: EntryUpdate, request: Request
    ) -> dict[str, object]:
        """Apply edits to an entry."""
        state_container: AppContainer = request.app.state.container
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        entry = state_container.ledger_service.update_entry(entry_id, changes)
        return {"entry": asdict(entry)}

    @app.post("/entries/{entry_id}/count")
    async def change_count(
        entry_id: UUID, payload: CountChange, request: Request
    ) -> dict[str, object]:
        """Step an entry's count."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.ledger_service.change_count(entry_id, payload.delta)
        return {"entry": asdict(entry)}

    @app.delete("/entries/{entry_id}")
    async def delete_entry(entry_id: UUID, request: Request) -> dict[str, object]:
        """Soft-delete an entry and return its undo token."""
        state_container: AppContainer = request.app.state.container
        undo_id = state_container.ledger_service.delete_entry(entry_id)
        return {"status": "deleted", "undo_id": str(undo_id)}

    @app.post("/entries/{entry_id}/restore")
    async def restore_entry(entry_id: UUID, request: Request) -> dict[str, object]:
        """Undo a soft delete."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.ledger_service.restore_entry(entry_id)
        return {"entry": asdict(entry)}

    @app.post("/entries/{entry_id}/library", status_code=status.HTTP_201_CREATED)
    async def save_entry_to_library(
        entry_id: UUID, request: Request
    ) -> dict[str, object]:
        """Save an entry as a library item."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.ledger_service.repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        item = state_container.library_service.save_entry_to_library(entry)
        return {"item": asdict(item)}

    @app.put("/days/{day}/status")
    async def set_day_status(
        day: date, payload: DayStatusUpdate, request: Request
    ) -> dict[str, object]:
        """Mark a day complete or incomplete."""
        state_container: AppContainer = request.app.state.container
        day_status = state_container.ledger_service.set_day_complete(
            day, payload.is_complete
        )
        return asdict(day_status)

    @app.get("/days/{day}/settings")
    async def get_settings(day: date, request: Request) -> dict[str, object]:
        """Return the settings in effect on a day."""
        state_container: AppContainer = request.app.state.container
        return _serialize_settings(state_container.settings_service.resolve(day))

    @app.put("/days/{day}/settings")
    async def update_settings(
        day: date, payload: SettingsUpdate, request: Request
    ) -> dict[str, object]:
        """Write settings for a day, carrying forward earlier values."""
        state_container: AppContainer = request.app.state.container
        updated = state_container.settings_service.update_settings(
            day, payload.model_dump(exclude_unset=True)
        )
        return _serialize_settings(updated)

    @app.get("/library")
    async def list_library(
        request: Request,
        query: str | None = None,
        type_filter: str = Query(default="ALL", alias="type"),
    ) -> dict[str, object]:
        """Return library items in ranked order."""
        state_container: AppContainer = request.app.state.container
        items = state_container.library_service.list_items(query, type_filter)
        return {"items": [asdict(item) for item in items]}

    @app.post("/library", status_code=status.HTTP_201_CREATED)
    async def create_library_item(
        payload: LibraryItemCreate, request: Request
    ) -> dict[str, object]:
        """Create a library item."""
        state_container: AppContainer = request.app.state.container
        item = state_container.library_service.create_item(
            name=payload.name,
            entry_type=payload.type,
            calories=payload.calories,
            minutes=payload.minutes,
            description=payload.description,
        )
        return {"item": asdict(item)}

    @app.put("/library/{item_id}")
    async def update_library_item(
        item_id: UUID, payload: LibraryItemUpdate, request: Request
    ) -> dict[str, object]:
        """Edit a library item."""
        state_container: AppContainer = request.app.state.container
        item = state_container.library_service.update_item(
            item_id, payload.model_dump(exclude_unset=True, exclude_none=True)
        )
        return {"item": asdict(item)}

    @app.put("/library/{item_id}/replace")
    async def replace_library_item(
        item_id: UUID, payload: LibraryItemCreate, request: Request
    ) -> dict[str, object]:
        """Explicitly overwrite an existing library item."""
        state_container: AppContainer = request.app.state.container
        item = state_container.library_service.replace_item(
            item_id,
            name=payload.name,
            entry_type=payload.type,
            calories=payload.calories,
            minutes=payload.minutes,
            description=payload.description,
        )
        return {"item": asdict(item)}

    @app.delete("/library/{item_id}")
    async def delete_library_item(item_id: UUID, request: Request) -> dict[str, str]:
        """Remove a library item."""
        state_container: AppContainer = request.app.state.container
        state_container.library_service.delete_item(item_id)
        return {"status": "deleted"}

    @app.post("/days/{day}/adopt")
    async def adopt_from_library(
        day: date, payload: LibraryAdoption, request: Request
    ) -> dict[str, object]:
        """Add selected library items to a day."""
        state_container: AppContainer = request.app.state.container
        library_service = state_container.library_service
        selections = [
            Selection(
                item=library_service.get_item(choice.item_id),
                count=choice.count,
                minutes=choice.minutes,
            )
            for choice in payload.selections
        ]
        created = library_service.adopt(day, selections)
        return {"added": len(created), "entries": [asdict(e) for e in created]}

    @app.get("/days/{day}/history")
    async def history_feed(day: date, request: Request) -> dict[str, object]:
        """Return distinct items logged before a day, most recent first."""
        state_container: AppContainer = request.app.state.container
        feed = state_container.library_service.history_feed(day)
        return {"items": [asdict(item) for item in feed]}

    @app.post("/days/{day}/adopt-history")
    async def adopt_from_history(
        day: date, payload: HistoryAdoption, request: Request
    ) -> dict[str, object]:
        """Add selected history items to a day."""
        state_container: AppContainer = request.app.state.container
        library_service = state_container.library_service
        by_name = {item.norm_name: item for item in library_service.history_feed(day)}
        selections = []
        for choice in payload.selections:
            item = by_name.get(normalize_name(choice.name))
            if item is None:
                raise NotFoundError(f"History item {choice.name!r} not found")
            selections.append(
                Selection(item=item, count=choice.count, minutes=choice.minutes)
            )
        created = library_service.adopt(day, selections)
        return {"added": len(created), "entries": [asdict(e) for e in created]}

    return app


def _serialize_settings(settings: DaySettings) -> dict[str, object]:
    data = asdict(settings)
    data["effective_rmr"] = settings.effective_rmr
    data["effective_deficit"] = settings.effective_deficit
    data["goal"] = settings.goal
    return data


def _serialize_day(summary: DaySummary, saved_names: set[str]) -> dict[str, object]:
    return {
        "day": summary.day,
        "entries": [
            {
                **asdict(entry),
                "total_calories": entry.calories * (entry.count or 1),
                "in_library": normalize_name(entry.name) in saved_names,
            }
            for entry in summary.entries
        ],
        "settings": _serialize_settings(summary.settings),
        "totals": asdict(summary.totals),
        "goal_status": asdict(summary.goal_status),
        "progress": asdict(summary.progress),
        "is_complete": summary.is_complete,
    }
