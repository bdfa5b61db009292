"""Queue building for SRS review sessions.

Selects the cards a user can study right now and orders them by priority:
new cards, then forgotten cards, then overdue cards, then everything else
by due date.
"""

import contextlib
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import cmp_to_key
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.models.card import Card
from backend.srs.errors import InvalidQueueLimit
from backend.srs.store import CardStore

logger = logging.getLogger(__name__)


class Schedulable(Protocol):
    """Anything carrying the scheduling fields the comparator reads."""

    repetitions: int
    interval: int
    next_review_date: datetime


@dataclass
class QueueItem:
    """A card ready to be shown, with its phrase and deck denormalized."""

    card_id: int
    phrase_id: int
    phrase: str
    author: str | None
    deck_id: int
    deck_name: str
    easiness_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: datetime | None
    is_new: bool
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_card(cls, card: Card) -> "QueueItem":
        tags: list[str] = []
        if card.phrase.tags:
            with contextlib.suppress(json.JSONDecodeError):
                tags = json.loads(card.phrase.tags)

        return cls(
            card_id=card.id,
            phrase_id=card.phrase_id,
            phrase=card.phrase.text,
            author=card.phrase.author,
            tags=tags,
            deck_id=card.deck_id,
            deck_name=card.deck.name,
            easiness_factor=card.easiness_factor,
            interval=card.interval,
            repetitions=card.repetitions,
            next_review_date=card.next_review_date,
            last_reviewed_at=card.last_reviewed_at,
            is_new=is_new(card),
        )


def is_new(card: Schedulable) -> bool:
    return card.repetitions == 0


def is_forgotten(card: Schedulable) -> bool:
    """A card that was just reset by an Again/Hard grade."""
    return card.interval == 1 and card.repetitions <= 1


def is_overdue(card: Schedulable, now: datetime) -> bool:
    return card.next_review_date < now


def _by_due_date(a: Schedulable, b: Schedulable) -> int:
    if a.next_review_date < b.next_review_date:
        return -1
    if a.next_review_date > b.next_review_date:
        return 1
    return 0


def compare_queue_priority(a: Schedulable, b: Schedulable, now: datetime) -> int:
    """Order two cards for review; negative means ``a`` comes first.

    Falls through each tier and returns at the first one that tells the
    pair apart:

    1. New cards first (two new cards: earliest due first).
    2. Forgotten cards.
    3. Overdue cards.
    4. Earliest due date.
    """
    a_new, b_new = is_new(a), is_new(b)
    if a_new != b_new:
        return -1 if a_new else 1
    if a_new:
        return _by_due_date(a, b)

    a_forgotten, b_forgotten = is_forgotten(a), is_forgotten(b)
    if a_forgotten != b_forgotten:
        return -1 if a_forgotten else 1

    a_overdue, b_overdue = is_overdue(a, now), is_overdue(b, now)
    if a_overdue != b_overdue:
        return -1 if a_overdue else 1

    return _by_due_date(a, b)


def prioritize(cards: list[Card], now: datetime) -> list[Card]:
    """Return ``cards`` sorted by review priority (stable)."""
    return sorted(cards, key=cmp_to_key(lambda a, b: compare_queue_priority(a, b, now)))


async def build_review_queue(
    session: AsyncSession,
    user_id: int,
    deck_id: int | None = None,
    limit: int = settings.default_queue_limit,
    now: datetime | None = None,
) -> list[QueueItem]:
    """Build the ordered review queue for a user.

    Over-fetches eligible candidates, re-sorts them in memory with
    ``compare_queue_priority`` and keeps the first ``limit``.

    Args:
        session: Database session.
        user_id: The user to build the queue for.
        deck_id: Restrict to one deck. Ownership is not checked here.
        limit: Maximum number of items returned.
        now: Current time (defaults to utcnow).

    Returns:
        Queue items, highest priority first. Empty if nothing is eligible.
    """
    if limit < 1:
        raise InvalidQueueLimit(limit)
    now = now or utcnow()

    store = CardStore(session)
    candidates = await store.find_eligible_cards(
        user_id,
        deck_id,
        now,
        limit=limit * settings.queue_overfetch_factor,
    )
    ordered = prioritize(candidates, now)[:limit]
    items = [QueueItem.from_card(card) for card in ordered]

    logger.info(
        "Built queue for user %d (deck %s): %d candidates, %d queued, %d new",
        user_id,
        deck_id,
        len(candidates),
        len(items),
        sum(1 for item in items if item.is_new),
    )
    return items
