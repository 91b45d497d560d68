"""Study session orchestrator.

Coordinates the queue, the scheduler, card persistence and the daily study
record into one session flow.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.models.card import Card
from backend.models.deck import Deck
from backend.models.study_record import StudyRecord
from backend.services.study_record_service import RatingTally, save_study_record
from backend.srs.queue import StudyQueue, build_study_queue
from backend.srs.scheduler import (
    Rating,
    ReviewState,
    SchedulingPolicy,
    compute_next_review,
    policy_from_settings,
)

logger = logging.getLogger(__name__)


class CardMismatchError(Exception):
    """Raised when an answer is submitted for a card that is not the current one."""


@dataclass
class ReviewOutcome:
    """A rating applied to a card, with the state before and after."""

    card: Card
    rating: Rating
    previous_state: ReviewState
    new_state: ReviewState


@dataclass
class StudySession:
    """Manages an active study session over one deck."""

    user_id: int
    deck_id: int
    deck_name: str
    queue: StudyQueue
    policy: SchedulingPolicy
    started_at: datetime = field(default_factory=utcnow)
    tally: RatingTally = field(default_factory=RatingTally)
    _card_index: int = 0
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def remaining(self) -> int:
        """Return the number of cards left to rate."""
        return max(0, self.queue.total - self._card_index)

    @property
    def is_complete(self) -> bool:
        return self._card_index >= self.queue.total

    @property
    def current_card(self) -> Card | None:
        """Return the current card or None if the session is complete."""
        if self._card_index < self.queue.total:
            return self.queue.cards[self._card_index]
        return None

    @property
    def cards_reviewed(self) -> int:
        return self.tally.total

    def is_expired(self, now: datetime, ttl_seconds: int = settings.session_ttl_seconds) -> bool:
        return (now - self.started_at).total_seconds() > ttl_seconds

    async def submit_rating(
        self,
        db: AsyncSession,
        card_id: int,
        rating: Rating,
        now: datetime | None = None,
    ) -> ReviewOutcome:
        """Rate the current card, persist its new state, and advance.

        Args:
            db: Database session.
            card_id: The card the learner answered; must be the current card.
            rating: The learner's rating.
            now: When the rating was given (defaults to utcnow).

        Returns:
            The outcome with the card's state before and after.

        Raises:
            CardMismatchError: If ``card_id`` is not the current card, the
                session is already complete, or the card was deleted since the
                session started (the session then skips it).
            SchedulerError: If the rating or the stored state is invalid. The
                session does not advance.
        """
        # One rating at a time per session
        async with self._lock:
            return await self._apply_rating(db, card_id, rating, now)

    async def _apply_rating(
        self,
        db: AsyncSession,
        card_id: int,
        rating: Rating,
        now: datetime | None,
    ) -> ReviewOutcome:
        current = self.current_card
        if current is None or current.id != card_id:
            raise CardMismatchError(f"Card {card_id} is not the current card")

        # Re-read the row: the queued instance may belong to an earlier db session.
        card = await db.get(Card, card_id, populate_existing=True)
        if card is None:
            self._card_index += 1
            raise CardMismatchError(f"Card {card_id} no longer exists")
        self.queue.cards[self._card_index] = card

        now = now or utcnow()
        previous = card.review_state()
        new_state = compute_next_review(previous, rating, self.policy, now=now)

        card.apply_review_state(new_state)
        await db.commit()

        setattr(self.tally, rating.value, getattr(self.tally, rating.value) + 1)
        self._card_index += 1

        logger.debug(
            "Card %d rated %s: interval %.2f -> %.2f, ease %.2f -> %.2f",
            card.id,
            rating.value,
            previous.interval,
            new_state.interval,
            previous.ease_factor,
            new_state.ease_factor,
        )
        return ReviewOutcome(
            card=card,
            rating=rating,
            previous_state=previous,
            new_state=new_state,
        )

    async def refresh_current(self, db: AsyncSession) -> Card | None:
        """Reload the current card from the database, skipping deleted cards.

        Returns None once the session is complete.
        """
        async with self._lock:
            while not self.is_complete:
                card_id = self.queue.cards[self._card_index].id
                card = await db.get(Card, card_id, populate_existing=True)
                if card is not None:
                    self.queue.cards[self._card_index] = card
                    return card
                logger.info("Skipping deleted card %d", card_id)
                self._card_index += 1
            return None

    async def finish(self, db: AsyncSession, now: datetime | None = None) -> StudyRecord | None:
        """Fold this session into the user's study record for the day.

        Returns None when nothing was rated.
        """
        if self.cards_reviewed == 0:
            logger.info("Session for deck %d ended with no ratings", self.deck_id)
            return None

        now = now or utcnow()
        duration = max(0, int((now - self.started_at).total_seconds()))
        return await save_study_record(
            db,
            user_id=self.user_id,
            deck_id=self.deck_id,
            deck_name=self.deck_name,
            cards_studied=self.cards_reviewed,
            duration_seconds=duration,
            tally=self.tally,
            study_date=now.date(),
        )


async def start_study_session(
    db: AsyncSession,
    user_id: int,
    deck: Deck,
    max_cards: int | None = None,
    now: datetime | None = None,
) -> StudySession:
    """Start a new study session on a deck.

    Args:
        db: Database session.
        user_id: The user studying.
        deck: The deck to study.
        max_cards: Session size limit (defaults to the configured maximum).
        now: Current time (defaults to utcnow).

    Returns:
        A StudySession ready for use.
    """
    now = now or utcnow()
    queue = await build_study_queue(db, deck.id, max_cards=max_cards, now=now)

    session = StudySession(
        user_id=user_id,
        deck_id=deck.id,
        deck_name=deck.name,
        queue=queue,
        policy=policy_from_settings(settings),
        started_at=now,
    )

    logger.info(
        "Started session for user %d on deck %d: %d cards queued",
        user_id,
        deck.id,
        queue.total,
    )
    return session
