"""Domain errors surfaced to callers."""

from calorie_ledger.domain.library import FieldChange, LibraryItem


class StoreError(RuntimeError):
    """A Ledger Store write did not apply."""


class NotFoundError(LookupError):
    """A referenced record does not exist."""


class DuplicateLibraryItemError(ValueError):
    """A library item with the same normalized name already exists."""

    def __init__(self, existing: LibraryItem, changes: list[FieldChange]) -> None:
        super().__init__(f"Library item already exists: {existing.name}")
        self.existing = existing
        self.changes = changes
