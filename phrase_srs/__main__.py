"""CLI interface for Phrase SRS.

Usage:
    python -m phrase_srs init-db                 Create the database tables
    python -m phrase_srs queue --user 1          Show the review queue
    python -m phrase_srs review --user 1 7 GOOD  Grade card 7
    python -m phrase_srs stats --user 1          Show review statistics
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable

from backend.config import settings
from backend.database import async_session, engine
from backend.models import Base
from backend.srs.errors import ReviewError
from backend.srs.queue import build_review_queue
from backend.srs.review import process_review
from backend.srs.sm2 import Grade
from backend.srs.stats import get_review_stats


async def ensure_db() -> None:
    """Create tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def cmd_init_db(args: argparse.Namespace) -> None:
    await ensure_db()
    print(f"  Database ready at {settings.database_url}")


async def cmd_queue(args: argparse.Namespace) -> None:
    """Print the ordered review queue."""
    await ensure_db()
    async with async_session() as db:
        items = await build_review_queue(db, args.user, deck_id=args.deck, limit=args.limit)

    if not items:
        print("\n  Nothing to review. You're all caught up!\n")
        return

    print(f"\n  Review queue ({len(items)} cards)\n")
    for item in items:
        label = "new" if item.is_new else f"due {item.next_review_date:%Y-%m-%d}"
        author = f" ({item.author})" if item.author else ""
        print(f"  [{item.card_id:>5}] {item.deck_name}: {item.phrase}{author}  <{label}>")
    print()


async def cmd_review(args: argparse.Namespace) -> None:
    """Grade a single card."""
    await ensure_db()
    async with async_session() as db:
        outcome = await process_review(db, args.card_id, args.grade, args.user)

    changes = outcome.changes
    print(f"\n  Card {outcome.card.id} graded {Grade.parse(args.grade).name}")
    print(
        f"  {'Easiness:':<14} {changes.easiness_factor.old:.2f} -> {changes.easiness_factor.new:.2f}"
    )
    print(f"  {'Interval:':<14} {changes.interval.old} -> {changes.interval.new} days")
    print(f"  {'Repetitions:':<14} {changes.repetitions.old} -> {changes.repetitions.new}")
    print(f"  {'Next review:':<14} {changes.next_review_date:%Y-%m-%d %H:%M}\n")


async def cmd_stats(args: argparse.Namespace) -> None:
    """Show review statistics."""
    await ensure_db()
    async with async_session() as db:
        stats = await get_review_stats(db, args.user, deck_id=args.deck, timezone=args.tz)

    print("\n  Phrase SRS Statistics")
    print(f"  {'Total cards:':<20} {stats.total_cards}")
    print(f"  {'New (unseen):':<20} {stats.new_cards}")
    print(f"  {'Due today:':<20} {stats.due_cards}")
    print(f"  {'Overdue:':<20} {stats.overdue_cards}")
    grades = "  ".join(f"{name}={count}" for name, count in stats.grade_stats.items())
    print(f"  {'Grades:':<20} {grades}")
    print()


async def _run(
    command: Callable[[argparse.Namespace], Awaitable[None]],
    args: argparse.Namespace,
) -> None:
    # Pooled connections belong to this event loop; drop them before it closes
    try:
        await command(args)
    finally:
        await engine.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phrase_srs",
        description="Phrase SRS review engine",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db
    subparsers.add_parser("init-db", help="Create the database tables")

    # queue
    queue_parser = subparsers.add_parser("queue", help="Show the review queue")
    queue_parser.add_argument("--user", type=int, required=True, help="User id")
    queue_parser.add_argument("--deck", type=int, default=None, help="Restrict to one deck")
    queue_parser.add_argument(
        "--limit", type=int, default=settings.default_queue_limit, help="Max cards to show"
    )

    # review
    review_parser = subparsers.add_parser("review", help="Grade a card")
    review_parser.add_argument("--user", type=int, required=True, help="User id")
    review_parser.add_argument("card_id", type=int, help="Card to grade")
    review_parser.add_argument(
        "grade",
        type=str.upper,
        choices=[g.name for g in Grade],
        help="AGAIN, HARD, GOOD or EASY",
    )

    # stats
    stats_parser = subparsers.add_parser("stats", help="Show your statistics")
    stats_parser.add_argument("--user", type=int, required=True, help="User id")
    stats_parser.add_argument("--deck", type=int, default=None, help="Restrict to one deck")
    stats_parser.add_argument("--tz", default=None, help="IANA zone for the due/overdue day")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the Phrase SRS CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return 0

    cmd_map = {
        "init-db": cmd_init_db,
        "queue": cmd_queue,
        "review": cmd_review,
        "stats": cmd_stats,
    }

    try:
        asyncio.run(_run(cmd_map[args.command], args))
    except ReviewError as exc:
        print(f"  Error [{exc.code}]: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
