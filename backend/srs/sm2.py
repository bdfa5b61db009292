"""SM-2 spaced repetition algorithm.

A grade-driven variant of SuperMemo 2 for the Phrase SRS system.
Reference: https://super-memory.com/english/ol/sm2.htm

Key concepts:
- Easiness factor (EF): Multiplier governing interval growth, floored at 1.3.
- Interval: Days until the card is next due.
- Repetitions: Consecutive successful reviews since the last reset.
- Grade: 1=Again, 2=Hard, 3=Good, 4=Easy (used directly as SM-2 quality).

Again and Hard both reset the card to a one-day interval; they differ only
in how much the easiness factor drops.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import IntEnum

from backend.config import settings, utcnow
from backend.srs.errors import InvalidGrade

# SM-2 quality ceiling used by the easiness update formula
MAX_QUALITY = 5

# Fixed intervals for the first two successful repetitions
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6

# Interval after a failed (Again/Hard) review
RESET_INTERVAL = 1

# Lowest grade that counts as a successful recall
PASSING_GRADE = 3


class Grade(IntEnum):
    """Recall quality reported by the reviewer."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def parse(cls, value: "Grade | str | int") -> "Grade":
        """Resolve a grade from its name or numeric value.

        Raises:
            InvalidGrade: If the value names no grade. There is no fallback.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidGrade(value) from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise InvalidGrade(value) from None
        raise InvalidGrade(value)


@dataclass
class CardState:
    """The SM-2 scheduling state of a card."""

    easiness_factor: float
    interval: int  # days
    repetitions: int  # consecutive successful reviews


@dataclass
class ReviewResult:
    """The result of applying a grade to a card."""

    new_state: CardState
    next_review_date: datetime
    reviewed_at: datetime


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up rather than to even."""
    return int(math.floor(value + 0.5))


class SM2:
    """SuperMemo 2 scheduler."""

    def __init__(self, min_easiness_factor: float | None = None) -> None:
        self.min_easiness_factor = (
            min_easiness_factor if min_easiness_factor is not None else settings.min_easiness_factor
        )

    def review(
        self,
        state: CardState,
        grade: Grade,
        review_time: datetime | None = None,
    ) -> ReviewResult:
        """Apply a grade to update the card state.

        Args:
            state: Current card state.
            grade: Review grade (Again, Hard, Good, Easy).
            review_time: When the review happened (defaults to now).

        Returns:
            ReviewResult with the new state and next review date.
        """
        grade = Grade.parse(grade)
        review_time = review_time or utcnow()

        new_ef = self.update_easiness(state.easiness_factor, grade)

        if grade < PASSING_GRADE:
            new_repetitions = 0
            new_interval = RESET_INTERVAL
        else:
            new_repetitions = state.repetitions + 1
            if new_repetitions == 1:
                new_interval = FIRST_INTERVAL
            elif new_repetitions == 2:
                new_interval = SECOND_INTERVAL
            else:
                new_interval = round_half_up(state.interval * new_ef)

        return ReviewResult(
            new_state=CardState(
                easiness_factor=new_ef,
                interval=new_interval,
                repetitions=new_repetitions,
            ),
            next_review_date=review_time + timedelta(days=new_interval),
            reviewed_at=review_time,
        )

    def update_easiness(self, easiness_factor: float, grade: Grade) -> float:
        """EF' = max(min, EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))"""
        distance = MAX_QUALITY - int(grade)
        delta = 0.1 - distance * (0.08 + distance * 0.02)
        return max(self.min_easiness_factor, easiness_factor + delta)
