"""Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

GradeName = Literal["AGAIN", "HARD", "GOOD", "EASY"]

# --- Queue ---


class QueueItemResponse(BaseModel):
    """One card in the review queue, with display fields."""

    model_config = ConfigDict(from_attributes=True)

    card_id: int
    phrase_id: int
    phrase: str
    author: str | None = None
    tags: list[str] = []
    deck_id: int
    deck_name: str
    easiness_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: datetime | None = None
    is_new: bool


class QueueResponse(BaseModel):
    """Ordered review queue for the current user."""

    queue: list[QueueItemResponse]
    count: int


# --- Review ---


class ReviewRequest(BaseModel):
    """Request to grade a card."""

    card_id: int = Field(ge=1)
    grade: GradeName
    user_id: int | None = None  # Must match the authenticated user if sent


class CardResponse(BaseModel):
    """A card's scheduling state after a review."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    deck_id: int
    phrase_id: int
    easiness_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: datetime | None = None


class FloatChange(BaseModel):
    old: float
    new: float


class IntChange(BaseModel):
    old: int
    new: int


class ReviewChangesResponse(BaseModel):
    """Before/after values of the fields a review touched."""

    easiness_factor: FloatChange
    interval: IntChange
    repetitions: IntChange
    next_review_date: datetime


class ReviewResponse(BaseModel):
    """Response after processing a review."""

    success: bool = True
    card: CardResponse
    changes: ReviewChangesResponse


# --- Stats ---


class ReviewStatsResponse(BaseModel):
    """Card counts and lifetime grade tally for a user or deck."""

    model_config = ConfigDict(from_attributes=True)

    total_cards: int
    new_cards: int
    due_cards: int
    overdue_cards: int
    grade_stats: dict[GradeName, int]


# --- Errors ---


class ErrorResponse(BaseModel):
    error: str
    code: str
