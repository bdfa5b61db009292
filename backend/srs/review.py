"""Review processing: grade one card and record the event.

Loads the card, checks ownership, applies SM-2 and writes the new schedule
plus one history row in a single transaction.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from backend.config import utcnow
from backend.models.card import Card
from backend.models.review import Review
from backend.srs.errors import CardNotFound, NotAuthorized, ReviewConflict
from backend.srs.sm2 import SM2, CardState, Grade
from backend.srs.store import CardStore, ReviewHistoryStore, ScheduleUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Change(Generic[T]):
    old: T
    new: T


@dataclass
class ReviewChanges:
    """Before/after values for UI feedback ("interval went from 6 to 14 days")."""

    easiness_factor: Change[float]
    interval: Change[int]
    repetitions: Change[int]
    next_review_date: datetime


@dataclass
class ReviewOutcome:
    card: Card
    changes: ReviewChanges


async def process_review(
    session: AsyncSession,
    card_id: int,
    grade: Grade | str | int,
    user_id: int,
    now: datetime | None = None,
    sm2: SM2 | None = None,
) -> ReviewOutcome:
    """Grade a card and persist the result.

    Args:
        session: Database session. Committed on success, rolled back on failure.
        card_id: The card being reviewed.
        grade: Again, Hard, Good or Easy (enum, name or 1-4).
        user_id: The user submitting the grade.
        now: Review time (defaults to utcnow).
        sm2: Scheduler instance (defaults to one built from settings).

    Returns:
        The updated card and a summary of what changed.

    Raises:
        InvalidGrade: The grade is not one of the four known values.
        CardNotFound: No card with ``card_id``.
        NotAuthorized: The card belongs to another user.
        ReviewConflict: The card was updated concurrently.
    """
    grade = Grade.parse(grade)
    now = now or utcnow()
    sm2 = sm2 or SM2()

    cards = CardStore(session)
    history = ReviewHistoryStore(session)

    card = await cards.find_card(card_id)
    if card is None:
        logger.warning("Review rejected: card %d not found", card_id)
        raise CardNotFound(card_id)
    if card.user_id != user_id:
        logger.warning("Review rejected: user %d does not own card %d", user_id, card_id)
        raise NotAuthorized()

    old = CardState(
        easiness_factor=card.easiness_factor,
        interval=card.interval,
        repetitions=card.repetitions,
    )
    result = sm2.review(old, grade, review_time=now)
    new = result.new_state

    try:
        # Card first: a failure here must leave no history row behind
        await cards.update_card_schedule(
            card,
            ScheduleUpdate(
                easiness_factor=new.easiness_factor,
                interval=new.interval,
                repetitions=new.repetitions,
                next_review_date=result.next_review_date,
                last_reviewed_at=now,
            ),
        )
        await history.append_review_record(
            Review(
                card_id=card.id,
                grade=grade,
                old_easiness_factor=old.easiness_factor,
                new_easiness_factor=new.easiness_factor,
                old_interval=old.interval,
                new_interval=new.interval,
                created_at=now,
            )
        )
        await session.commit()
    except StaleDataError as exc:
        await session.rollback()
        logger.warning("Review rejected: card %d changed concurrently", card_id)
        raise ReviewConflict(card_id) from exc
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Reviewed card %d as %s: EF %.2f -> %.2f, interval %d -> %d, due %s",
        card_id,
        grade.name,
        old.easiness_factor,
        new.easiness_factor,
        old.interval,
        new.interval,
        result.next_review_date.isoformat(),
    )

    return ReviewOutcome(
        card=card,
        changes=ReviewChanges(
            easiness_factor=Change(old.easiness_factor, new.easiness_factor),
            interval=Change(old.interval, new.interval),
            repetitions=Change(old.repetitions, new.repetitions),
            next_review_date=result.next_review_date,
        ),
    )
