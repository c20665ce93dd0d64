"""Recent-history feed derived from past ledger entries."""

from collections.abc import Iterable
from datetime import date

from calorie_ledger.domain.ledger import LedgerEntry
from calorie_ledger.domain.library import HistoryItem, normalize_name

HISTORY_SCAN_LIMIT = 500
HISTORY_FEED_LIMIT = 100


def build_history_feed(
    entries: Iterable[LedgerEntry],
    before: date,
    limit: int = HISTORY_FEED_LIMIT,
) -> list[HistoryItem]:
    """Return the most recent use of each distinct name logged before a day."""
    ordered = sorted(entries, key=lambda entry: entry.day, reverse=True)
    seen: set[str] = set()
    feed: list[HistoryItem] = []
    for entry in ordered:
        if len(feed) >= limit:
            break
        if entry.deleted or entry.day >= before:
            continue
        key = normalize_name(entry.name)
        if not key or key in seen:
            continue
        seen.add(key)
        feed.append(
            HistoryItem(
                name=entry.name.strip(),
                norm_name=key,
                type=entry.type,
                calories=entry.calories,
                minutes=entry.minutes,
                description=entry.description,
                last_day=entry.day,
            )
        )
    return feed
