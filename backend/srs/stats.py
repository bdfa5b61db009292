"""Review statistics for a user or one of their decks."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.models.card import Card
from backend.srs.errors import InvalidTimezone
from backend.srs.sm2 import Grade
from backend.srs.store import CardStore, ReviewHistoryStore

logger = logging.getLogger(__name__)


@dataclass
class ReviewStats:
    total_cards: int = 0
    new_cards: int = 0
    due_cards: int = 0  # next review falls today
    overdue_cards: int = 0  # next review was before today
    grade_stats: dict[str, int] = field(default_factory=lambda: {g.name: 0 for g in Grade})


def resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimezone(name) from None


def day_bounds(now: datetime, tz: ZoneInfo | None = None) -> tuple[datetime, datetime]:
    """Return the first and last instant of the calendar day containing ``now``.

    ``now`` and both bounds are naive UTC; the day itself is the one seen on
    the wall clock of ``tz`` (UTC when omitted).
    """
    tz = tz or ZoneInfo("UTC")
    local_day = now.replace(tzinfo=UTC).astimezone(tz).date()
    start = datetime.combine(local_day, time.min, tzinfo=tz)
    next_start = datetime.combine(local_day + timedelta(days=1), time.min, tzinfo=tz)
    end = next_start - timedelta(microseconds=1)
    return (
        start.astimezone(UTC).replace(tzinfo=None),
        end.astimezone(UTC).replace(tzinfo=None),
    )


async def get_review_stats(
    session: AsyncSession,
    user_id: int,
    deck_id: int | None = None,
    now: datetime | None = None,
    timezone: str | None = None,
) -> ReviewStats:
    """Count cards by state and reviews by grade.

    Read-only. Grade counts are a lifetime tally over all history. Due and
    overdue use the calendar day of ``timezone`` (defaults to the configured
    zone).

    Raises:
        InvalidTimezone: ``timezone`` is not a known IANA zone name.
    """
    tz = resolve_timezone(timezone or settings.timezone)
    now = now or utcnow()
    start_of_day, end_of_day = day_bounds(now, tz)

    cards = CardStore(session)
    history = ReviewHistoryStore(session)

    total_cards = await cards.count_cards(user_id, deck_id)
    new_cards = await cards.count_cards(user_id, deck_id, Card.repetitions == 0)
    due_cards = await cards.count_cards(
        user_id,
        deck_id,
        Card.next_review_date >= start_of_day,
        Card.next_review_date <= end_of_day,
    )
    overdue_cards = await cards.count_cards(user_id, deck_id, Card.next_review_date < start_of_day)
    by_grade = await history.count_by_grade(user_id, deck_id)

    stats = ReviewStats(
        total_cards=total_cards,
        new_cards=new_cards,
        due_cards=due_cards,
        overdue_cards=overdue_cards,
        grade_stats={grade.name: by_grade.get(grade, 0) for grade in Grade},
    )
    logger.debug("Stats for user %d (deck %s): %s", user_id, deck_id, stats)
    return stats
