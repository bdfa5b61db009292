"""SRS card model linking a user's deck to a phrase."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.config import settings, utcnow
from backend.models.base import Base, TimestampMixin


class Card(Base, TimestampMixin):
    """A flashcard with SM-2 scheduling state for a user-deck-phrase triple."""

    __tablename__ = "cards"
    __table_args__ = (UniqueConstraint("user_id", "phrase_id", "deck_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    deck_id: Mapped[int] = mapped_column(ForeignKey("decks.id"), nullable=False, index=True)
    phrase_id: Mapped[int] = mapped_column(ForeignKey("phrases.id"), nullable=False)
    easiness_factor: Mapped[float] = mapped_column(
        Float, nullable=False, default=lambda: settings.initial_easiness_factor
    )
    interval: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # days
    repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_review_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    user: Mapped["User"] = relationship(back_populates="cards")  # type: ignore[name-defined] # noqa: F821
    deck: Mapped["Deck"] = relationship(back_populates="cards")  # type: ignore[name-defined] # noqa: F821
    phrase: Mapped["Phrase"] = relationship(back_populates="cards")  # type: ignore[name-defined] # noqa: F821
    reviews: Mapped[list["Review"]] = relationship(back_populates="card")  # type: ignore[name-defined] # noqa: F821

    # UPDATEs carry "WHERE version = :old" so concurrent graders can't both win
    __mapper_args__ = {"version_id_col": version}
