"""SQLAlchemy ORM models for the Phrase SRS database."""

from backend.models.base import Base
from backend.models.card import Card
from backend.models.deck import Deck
from backend.models.phrase import Phrase
from backend.models.review import Review
from backend.models.user import User

__all__ = ["Base", "Card", "Deck", "Phrase", "Review", "User"]
