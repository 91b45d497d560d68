"""CLI interface for memodeck.

Usage:
    python -m memodeck decks                          List your decks
    python -m memodeck add-deck "Spanish"             Create a deck
    python -m memodeck add 1 "hola" "hello"           Add a card to deck 1
    python -m memodeck due [DECK_ID]                  Show how many cards are due
    python -m memodeck review 1                       Study deck 1
"""

import argparse
import asyncio
import logging

from sqlalchemy import select

from backend.config import settings, utcnow
from backend.database import async_session, engine
from backend.models import Base
from backend.models.user import User
from backend.services import card_service, deck_service
from backend.srs.errors import SchedulerError
from backend.srs.scheduler import Rating
from backend.srs.session import CardMismatchError, start_study_session

logger = logging.getLogger(__name__)

DEFAULT_USER_EMAIL = "me@localhost"

KEY_TO_RATING = {
    "1": Rating.AGAIN,
    "2": Rating.HARD,
    "3": Rating.GOOD,
    "4": Rating.EASY,
}


async def ensure_db() -> None:
    """Create tables if they don't exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ensure_user() -> int:
    """Ensure there's a default local user and return the ID."""
    async with async_session() as db:
        stmt = select(User).where(User.email == DEFAULT_USER_EMAIL)
        result = await db.execute(stmt)
        user = result.scalar_one_or_none()
        if user:
            return user.id

        user = User(email=DEFAULT_USER_EMAIL, nickname="me")
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user.id


async def cmd_decks(args: argparse.Namespace) -> None:
    """List decks with card and due counts."""
    await ensure_db()
    user_id = await ensure_user()
    now = utcnow()

    async with async_session() as db:
        decks = await deck_service.list_decks(db, user_id)
        if not decks:
            print("\n  No decks yet. Create one with: add-deck NAME\n")
            return

        print()
        print(f"  {'ID':>4}  {'Name':<30} {'Cards':>6} {'Due':>5}")
        for deck in decks:
            cards = await card_service.list_cards(db, deck.id)
            due = await card_service.count_due(db, deck.id, now)
            print(f"  {deck.id:>4}  {deck.name:<30} {len(cards):>6} {due:>5}")
        print()


async def cmd_add_deck(args: argparse.Namespace) -> None:
    """Create a new deck."""
    await ensure_db()
    user_id = await ensure_user()

    async with async_session() as db:
        try:
            deck = await deck_service.create_deck(db, user_id, args.name, args.description)
        except ValueError as e:
            print(f"  {e}")
            return
    print(f"  Created deck '{deck.name}' (id={deck.id}).")


async def cmd_add(args: argparse.Namespace) -> None:
    """Add a card to a deck."""
    await ensure_db()

    async with async_session() as db:
        deck = await deck_service.get_deck(db, args.deck_id)
        if deck is None:
            print(f"  No deck with id {args.deck_id}.")
            return
        try:
            card = await card_service.create_card(
                db, deck.id, front=args.front, back=args.back, memo=args.memo
            )
        except ValueError as e:
            print(f"  {e}")
            return
    print(f"  Added card {card.id} to '{deck.name}' (ready for review).")


async def cmd_due(args: argparse.Namespace) -> None:
    """Show how many cards are due."""
    await ensure_db()
    user_id = await ensure_user()
    now = utcnow()

    async with async_session() as db:
        if args.deck_id is not None:
            deck_ids = [args.deck_id]
        else:
            deck_ids = [d.id for d in await deck_service.list_decks(db, user_id)]
        due = 0
        for deck_id in deck_ids:
            due += await card_service.count_due(db, deck_id, now)

    print(f"  {due} cards due")


async def cmd_review(args: argparse.Namespace) -> None:
    """Run an interactive study session."""
    if args.max_cards < 1:
        print("  --max-cards must be at least 1.")
        return
    await ensure_db()
    user_id = await ensure_user()

    async with async_session() as db:
        deck = await deck_service.get_deck(db, args.deck_id)
        if deck is None:
            print(f"  No deck with id {args.deck_id}.")
            return

        session = await start_study_session(db, user_id, deck, max_cards=args.max_cards)
        if session.queue.total == 0:
            print("\n  This deck has no cards yet.")
            return

        print(f"\n  Studying '{deck.name}'")
        print(f"  {session.queue.due_count} due, {session.queue.total} cards in this session\n")
        print("  Ratings: 1=Again  2=Hard  3=Good  4=Easy")
        print("  Type 'q' to quit\n")

        while not session.is_complete:
            card = session.current_card
            prompt, answer = (card.back, card.front) if args.reverse else (card.front, card.back)
            position = session.queue.total - session.remaining + 1
            print(f"  [{position}/{session.queue.total}]")
            print(f"  {prompt}")

            if input("\n  (enter to reveal) ").strip().lower() == "q":
                print("\n  Session ended early.")
                break
            print(f"  {answer}")
            if card.memo:
                print(f"  Memo: {card.memo}")

            key = input("  Rate [1-4]: ").strip().lower()
            while key not in KEY_TO_RATING and key != "q":
                key = input("  Please enter 1, 2, 3 or 4: ").strip().lower()
            if key == "q":
                print("\n  Session ended early.")
                break

            try:
                outcome = await session.submit_rating(db, card.id, KEY_TO_RATING[key])
            except (SchedulerError, CardMismatchError) as e:
                logger.warning("Skipping card %d: %s", card.id, e)
                print(f"  Could not schedule this card: {e}\n")
                break
            days = outcome.new_state.interval
            print(f"  Next review in {days:.1f} days ({outcome.new_state.next_review_date:%Y-%m-%d})\n")

        await session.finish(db)

    t = session.tally
    print("\n  Session Complete!")
    print(f"  Reviewed: {t.total}  Again: {t.again}  Hard: {t.hard}  Good: {t.good}  Easy: {t.easy}\n")


def main() -> None:
    """Entry point for the memodeck CLI application."""
    parser = argparse.ArgumentParser(
        prog="memodeck",
        description="Flashcard decks with spaced repetition review",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # decks
    subparsers.add_parser("decks", help="List your decks")

    # add-deck
    deck_parser = subparsers.add_parser("add-deck", help="Create a deck")
    deck_parser.add_argument("name", help="Deck name")
    deck_parser.add_argument("-d", "--description", default="", help="Deck description")

    # add
    add_parser = subparsers.add_parser("add", help="Add a card to a deck")
    add_parser.add_argument("deck_id", type=int, help="Deck to add the card to")
    add_parser.add_argument("front", help="Word or sentence to learn")
    add_parser.add_argument("back", help="Meaning")
    add_parser.add_argument("-m", "--memo", default="", help="Memo shown with the answer")

    # due
    due_parser = subparsers.add_parser("due", help="Show cards due for review")
    due_parser.add_argument("deck_id", type=int, nargs="?", default=None)

    # review
    review_parser = subparsers.add_parser("review", help="Study a deck")
    review_parser.add_argument("deck_id", type=int, help="Deck to study")
    review_parser.add_argument(
        "--max-cards",
        type=int,
        default=settings.max_cards_per_session,
        help="Max cards per session",
    )
    review_parser.add_argument(
        "--reverse", action="store_true", help="Show the back first and recall the front"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    cmd_map = {
        "decks": cmd_decks,
        "add-deck": cmd_add_deck,
        "add": cmd_add,
        "due": cmd_due,
        "review": cmd_review,
    }

    asyncio.run(cmd_map[args.command](args))


if __name__ == "__main__":
    main()
