"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from calorie_ledger.adapters.supabase_ledger_repository import (
    SupabaseLedgerRepository,
)
from calorie_ledger.adapters.supabase_library_repository import (
    SupabaseLibraryRepository,
)
from calorie_ledger.adapters.supabase_settings_repository import (
    SupabaseSettingsRepository,
)
from calorie_ledger.config import Settings
from calorie_ledger.services.ledger import LedgerService
from calorie_ledger.services.library import LibraryService
from calorie_ledger.services.settings_history import SettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    settings_service: SettingsService
    ledger_service: LedgerService
    library_service: LibraryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    settings_service = SettingsService(SupabaseSettingsRepository(supabase_client))
    ledger_service = LedgerService(
        repository=SupabaseLedgerRepository(supabase_client),
        settings_service=settings_service,
    )
    library_service = LibraryService(
        repository=SupabaseLibraryRepository(supabase_client),
        ledger_service=ledger_service,
        history_scan_limit=resolved_settings.history_scan_limit,
        history_feed_limit=resolved_settings.history_feed_limit,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        settings_service=settings_service,
        ledger_service=ledger_service,
        library_service=library_service,
        close_resources=close_resources,
    )
