"""Per-entry edit sessions with proportional minute/calorie linking.

An entry is either being viewed or edited. While editing an exercise entry
the minutes and calories fields can be linked: the ratio between them is
captured once when the link is switched on and reused for every later edit,
so repeated edits do not accumulate rounding drift.
"""

from dataclasses import dataclass, field, replace

from calorie_ledger.domain.ledger import EntryType, LedgerEntry
from calorie_ledger.numbers import round_half_up, to_int

DRAFT_FIELDS = ("type", "name", "calories", "minutes", "count", "description")


@dataclass(frozen=True)
class LinkState:
    """Whether minutes and calories move together, and at what ratio."""

    linked: bool = False
    ratio: float | None = None


@dataclass(frozen=True)
class EntryDraft:
    """Editable copy of an entry's fields."""

    type: EntryType
    name: str
    calories: int
    minutes: int = 0
    count: int = 1
    description: str = ""

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "EntryDraft":
        return cls(
            type=entry.type,
            name=entry.name,
            calories=entry.calories,
            minutes=entry.minutes,
            count=entry.count,
            description=entry.description,
        )


@dataclass(frozen=True)
class Viewing:
    """Entry shown read-only."""

    entry: LedgerEntry


@dataclass(frozen=True)
class Editing:
    """Entry being edited with its own draft and link state."""

    entry: LedgerEntry
    draft: EntryDraft
    link: LinkState = field(default_factory=LinkState)


EditSession = Viewing | Editing


def link_on(minutes: int, calories: int) -> LinkState:
    """Link the fields, capturing the ratio when both values are usable."""
    if minutes > 0 and abs(calories) > 0:
        return LinkState(linked=True, ratio=calories / minutes)
    return LinkState(linked=True, ratio=None)


def propagate_minutes(link: LinkState, minutes: int, calories: int) -> tuple[int, int]:
    """Return (minutes, calories) after minutes were edited."""
    if link.linked and link.ratio is not None and minutes > 0:
        calories = round_half_up(minutes * link.ratio)
    return minutes, calories


def propagate_calories(link: LinkState, calories: int, minutes: int) -> tuple[int, int]:
    """Return (minutes, calories) after calories were edited."""
    if link.linked and link.ratio:
        minutes = abs(round_half_up(calories / link.ratio))
    return minutes, calories


def start_editing(session: EditSession) -> Editing:
    """Open an edit session, linking exercise entries that have both values."""
    if isinstance(session, Editing):
        return session
    draft = EntryDraft.from_entry(session.entry)
    link = LinkState()
    if draft.type == EntryType.EXERCISE:
        link = link_on(draft.minutes, draft.calories)
        if link.ratio is None:
            link = LinkState()
    return Editing(entry=session.entry, draft=draft, link=link)


def set_linked(session: Editing, linked: bool) -> Editing:
    """Switch linking on or off; switching on recaptures the ratio."""
    if not linked or session.draft.type != EntryType.EXERCISE:
        return replace(session, link=LinkState())
    link = link_on(session.draft.minutes, session.draft.calories)
    return replace(session, link=link)


def toggle_link(session: Editing) -> Editing:
    """Flip the link state."""
    return set_linked(session, not session.link.linked)


def edit_minutes(session: Editing, minutes: object) -> Editing:
    """Set minutes, updating calories through the cached ratio when linked."""
    new_minutes, new_calories = propagate_minutes(
        session.link, to_int(minutes), session.draft.calories
    )
    draft = replace(session.draft, minutes=new_minutes, calories=new_calories)
    return replace(session, draft=draft)


def edit_calories(session: Editing, calories: object) -> Editing:
    """Set calories, updating minutes through the cached ratio when linked."""
    new_minutes, new_calories = propagate_calories(
        session.link, to_int(calories), session.draft.minutes
    )
    draft = replace(session.draft, minutes=new_minutes, calories=new_calories)
    return replace(session, draft=draft)


def set_type(session: Editing, entry_type: EntryType) -> Editing:
    """Change the draft type; leaving exercise always unlinks."""
    draft = replace(session.draft, type=entry_type)
    if entry_type != EntryType.EXERCISE:
        return replace(session, draft=draft, link=LinkState())
    if session.link.linked:
        return replace(session, draft=draft)
    link = link_on(draft.minutes, draft.calories)
    if link.ratio is None:
        link = LinkState()
    return replace(session, draft=draft, link=link)


def edit_text(
    session: Editing, name: str | None = None, description: str | None = None
) -> Editing:
    """Update the free-text fields of the draft."""
    draft = session.draft
    if name is not None:
        draft = replace(draft, name=name)
    if description is not None:
        draft = replace(draft, description=description)
    return replace(session, draft=draft)


def pending_changes(session: Editing) -> dict[str, object]:
    """Return the draft fields that differ from the stored entry."""
    original = EntryDraft.from_entry(session.entry)
    return {
        name: getattr(session.draft, name)
        for name in DRAFT_FIELDS
        if getattr(session.draft, name) != getattr(original, name)
    }


def cancel(session: EditSession) -> Viewing:
    """Discard the draft."""
    return Viewing(entry=session.entry)


def commit(session: Editing) -> tuple[Viewing, dict[str, object]]:
    """Close the session, returning the edited entry and the changes to store."""
    changes = pending_changes(session)
    if not changes:
        return Viewing(entry=session.entry), {}
    updated = replace(session.entry, **changes)
    return Viewing(entry=updated), changes
