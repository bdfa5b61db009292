"""Persistence collaborators for the review engine.

``CardStore`` and ``ReviewHistoryStore`` wrap an ``AsyncSession`` and expose
only the reads and writes the scheduler needs. Neither commits: transaction
boundaries belong to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement, and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backend.models.card import Card
from backend.models.review import Review
from backend.srs.sm2 import Grade

logger = logging.getLogger(__name__)


@dataclass
class ScheduleUpdate:
    """New scheduling fields written to a card after a review."""

    easiness_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: datetime


def _scope(user_id: int, deck_id: int | None) -> list[ColumnElement[bool]]:
    criteria = [Card.user_id == user_id]
    if deck_id is not None:
        criteria.append(Card.deck_id == deck_id)
    return criteria


class CardStore:
    """Reads and schedule writes against the ``cards`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_card(self, card_id: int) -> Card | None:
        stmt = (
            select(Card)
            .where(Card.id == card_id)
            .options(selectinload(Card.phrase), selectinload(Card.deck))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_eligible_cards(
        self,
        user_id: int,
        deck_id: int | None,
        now: datetime,
        limit: int,
    ) -> list[Card]:
        """Fetch cards that are new or due at ``now``.

        Rows come back new-first, then soonest due, which is only a rough
        approximation of queue priority.
        """
        stmt = (
            select(Card)
            .where(
                and_(
                    *_scope(user_id, deck_id),
                    or_(Card.repetitions == 0, Card.next_review_date <= now),
                )
            )
            .order_by(Card.repetitions.asc(), Card.next_review_date.asc())
            .limit(limit)
            .options(selectinload(Card.phrase), selectinload(Card.deck))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_card_schedule(self, card: Card, update: ScheduleUpdate) -> Card:
        """Write new scheduling fields and flush the UPDATE.

        Raises:
            sqlalchemy.orm.exc.StaleDataError: If the card's version changed
                since it was loaded.
        """
        card.easiness_factor = update.easiness_factor
        card.interval = update.interval
        card.repetitions = update.repetitions
        card.next_review_date = update.next_review_date
        card.last_reviewed_at = update.last_reviewed_at
        await self.session.flush()
        return card

    async def count_cards(
        self,
        user_id: int,
        deck_id: int | None = None,
        *criteria: ColumnElement[bool],
    ) -> int:
        """Count the user's (optionally deck's) cards matching extra criteria."""
        stmt = select(func.count(Card.id)).where(and_(*_scope(user_id, deck_id), *criteria))
        return (await self.session.execute(stmt)).scalar() or 0


class ReviewHistoryStore:
    """Append-only access to the ``reviews`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append_review_record(self, record: Review) -> Review:
        self.session.add(record)
        await self.session.flush()
        return record

    async def count_by_grade(self, user_id: int, deck_id: int | None = None) -> dict[Grade, int]:
        """Lifetime review counts per grade for the user's (or deck's) cards."""
        stmt = (
            select(Review.grade, func.count(Review.id))
            .join(Card, Review.card_id == Card.id)
            .where(and_(*_scope(user_id, deck_id)))
            .group_by(Review.grade)
        )
        result = await self.session.execute(stmt)
        counts = {grade: 0 for grade in Grade}
        for grade, count in result.all():
            counts[Grade.parse(grade)] = count
        return counts
