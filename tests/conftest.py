"""Shared fixtures: a throwaway SQLite database and seeded users, decks and cards."""

import os
import tempfile
from collections.abc import AsyncGenerator
from datetime import datetime
from pathlib import Path

_DB_DIR = tempfile.mkdtemp(prefix="phrase_srs_test_")
os.environ.setdefault(
    "PHRASE_SRS_DATABASE_URL", f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'app.db'}"
)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from backend.models import Base, Card, Deck, Phrase, User  # noqa: E402

# Fixed clock for every scheduling test
NOW = datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """A session on a fresh schema, one database file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest_asyncio.fixture
async def user(db: AsyncSession) -> User:
    user = User(name="Ana", email="ana@example.com")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def other_user(db: AsyncSession) -> User:
    user = User(name="Bruno", email="bruno@example.com")
    db.add(user)
    await db.commit()
    return user


@pytest_asyncio.fixture
async def deck(db: AsyncSession, user: User) -> Deck:
    deck = Deck(user_id=user.id, name="Stoics")
    db.add(deck)
    await db.commit()
    return deck


async def make_card(
    db: AsyncSession,
    deck: Deck,
    text: str = "The obstacle is the way.",
    *,
    easiness_factor: float = 2.5,
    interval: int = 0,
    repetitions: int = 0,
    next_review_date: datetime = NOW,
    author: str | None = "Marcus Aurelius",
    tags: str | None = '["stoicism"]',
) -> Card:
    """Insert a phrase plus a card for it in ``deck`` and return the card."""
    phrase = Phrase(text=text, author=author, tags=tags)
    db.add(phrase)
    await db.flush()
    card = Card(
        user_id=deck.user_id,
        deck_id=deck.id,
        phrase_id=phrase.id,
        easiness_factor=easiness_factor,
        interval=interval,
        repetitions=repetitions,
        next_review_date=next_review_date,
    )
    db.add(card)
    await db.commit()
    return card


@pytest.fixture
def add_card(db: AsyncSession, deck: Deck):
    """Card factory bound to the test session; defaults to the user's deck."""

    async def _add(text: str = "The obstacle is the way.", *, in_deck: Deck | None = None, **fields):
        return await make_card(db, in_deck or deck, text, **fields)

    return _add
