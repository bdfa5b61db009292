from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.config import utcnow
from backend.models.base import Base
from backend.srs.sm2 import Grade


class Review(Base):
    """Immutable record of one grading event."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    card_id: Mapped[int] = mapped_column(ForeignKey("cards.id"), nullable=False, index=True)
    grade: Mapped[Grade] = mapped_column(
        Enum(Grade, native_enum=False, length=10), nullable=False
    )  # stored by name: AGAIN, HARD, GOOD, EASY
    old_easiness_factor: Mapped[float] = mapped_column(Float, nullable=False)
    new_easiness_factor: Mapped[float] = mapped_column(Float, nullable=False)
    old_interval: Mapped[int] = mapped_column(Integer, nullable=False)
    new_interval: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    card: Mapped["Card"] = relationship(back_populates="reviews")  # type: ignore[name-defined] # noqa: F821
