"""API routes for the review queue, grading and review statistics."""

import logging

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import (
    CardResponse,
    ErrorResponse,
    FloatChange,
    IntChange,
    QueueItemResponse,
    QueueResponse,
    ReviewChangesResponse,
    ReviewRequest,
    ReviewResponse,
    ReviewStatsResponse,
)
from backend.config import settings
from backend.database import get_session
from backend.srs.errors import CardNotFound, NotAuthenticated, NotAuthorized
from backend.srs.queue import build_review_queue
from backend.srs.review import process_review
from backend.srs.stats import get_review_stats
from backend.srs.store import CardStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reviews", tags=["reviews"])

_error_responses = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def get_current_user_id(x_user_id: int | None = Header(default=None)) -> int:
    """Return the authenticated user id set by the upstream auth layer."""
    if x_user_id is None:
        raise NotAuthenticated()
    return x_user_id


@router.get("/queue", response_model=QueueResponse, responses=_error_responses)
async def review_queue(
    deck_id: int | None = None,
    limit: int = Query(default=settings.default_queue_limit, ge=1, le=settings.max_queue_limit),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> QueueResponse:
    """Get the ordered review queue for the current user."""
    items = await build_review_queue(db, user_id, deck_id=deck_id, limit=limit)
    return QueueResponse(
        queue=[QueueItemResponse.model_validate(item) for item in items],
        count=len(items),
    )


@router.post("", response_model=ReviewResponse, responses=_error_responses)
async def submit_review(
    request: ReviewRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ReviewResponse:
    """Grade a card and return its new schedule."""
    if request.user_id is not None and request.user_id != user_id:
        # Keep the processor's order: a missing card is reported before ownership
        if await CardStore(db).find_card(request.card_id) is None:
            raise CardNotFound(request.card_id)
        raise NotAuthorized("Request user does not match the authenticated user")

    outcome = await process_review(db, request.card_id, request.grade, user_id)
    changes = outcome.changes

    return ReviewResponse(
        card=CardResponse.model_validate(outcome.card),
        changes=ReviewChangesResponse(
            easiness_factor=FloatChange(
                old=changes.easiness_factor.old, new=changes.easiness_factor.new
            ),
            interval=IntChange(old=changes.interval.old, new=changes.interval.new),
            repetitions=IntChange(old=changes.repetitions.old, new=changes.repetitions.new),
            next_review_date=changes.next_review_date,
        ),
    )


@router.get("/stats", response_model=ReviewStatsResponse, responses=_error_responses)
async def review_stats(
    deck_id: int | None = None,
    tz: str | None = Query(default=None, description="IANA zone for the due/overdue day"),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ReviewStatsResponse:
    """Get card counts and grade tallies for the current user."""
    stats = await get_review_stats(db, user_id, deck_id=deck_id, timezone=tz)
    return ReviewStatsResponse.model_validate(stats)
