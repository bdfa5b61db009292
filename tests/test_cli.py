"""Tests for CLI commands (non-interactive paths)."""

import asyncio

import pytest

from backend.database import async_session, engine
from backend.models import Card, Deck, Phrase, User
from phrase_srs.__main__ import build_parser, ensure_db, main


async def _seed_card() -> tuple[int, int]:
    """Create a user with one new card in the configured database."""
    await ensure_db()
    try:
        async with async_session() as db:
            user = User(name="Cli")
            db.add(user)
            await db.flush()
            deck = Deck(user_id=user.id, name="CLI deck")
            phrase = Phrase(text="Less is more.", author="Mies")
            db.add_all([deck, phrase])
            await db.flush()
            card = Card(user_id=user.id, deck_id=deck.id, phrase_id=phrase.id)
            db.add(card)
            await db.commit()
            return user.id, card.id
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_ensure_db() -> None:
    """Database tables can be created."""
    await ensure_db()
    await engine.dispose()


def test_grade_argument_is_case_insensitive() -> None:
    args = build_parser().parse_args(["review", "--user", "1", "7", "good"])
    assert args.grade == "GOOD"
    assert args.card_id == 7


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_queue_review_and_stats(capsys) -> None:
    user_id, card_id = asyncio.run(_seed_card())

    assert main(["queue", "--user", str(user_id)]) == 0
    assert "Less is more. (Mies)" in capsys.readouterr().out

    assert main(["review", "--user", str(user_id), str(card_id), "GOOD"]) == 0
    out = capsys.readouterr().out
    assert "graded GOOD" in out
    assert "0 -> 1 days" in out

    assert main(["stats", "--user", str(user_id)]) == 0
    assert "GOOD=1" in capsys.readouterr().out


def test_review_unknown_card_reports_code(capsys) -> None:
    assert main(["init-db"]) == 0
    assert main(["review", "--user", "1", "999999", "EASY"]) == 1
    assert "CARD_NOT_FOUND" in capsys.readouterr().err
