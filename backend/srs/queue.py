"""Queue building for study sessions.

Loads a deck's cards, hands snapshots of them to ``select_study_cards``, and
returns the ORM rows in the order they should be shown.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.models.card import Card
from backend.srs.selection import CardSnapshot, select_study_cards

logger = logging.getLogger(__name__)


@dataclass
class StudyQueue:
    """A prepared, ordered list of cards for one study session."""

    cards: list[Card] = field(default_factory=list)
    due_count: int = 0

    @property
    def total(self) -> int:
        return len(self.cards)


async def build_study_queue(
    session: AsyncSession,
    deck_id: int,
    max_cards: int | None = None,
    now: datetime | None = None,
) -> StudyQueue:
    """Build the study queue for a deck.

    Args:
        session: Database session.
        deck_id: The deck to study.
        max_cards: Session size limit (defaults to the configured maximum).
        now: Current time (defaults to utcnow).

    Returns:
        A StudyQueue whose cards are due-first, then newest.
    """
    max_cards = settings.max_cards_per_session if max_cards is None else max_cards
    now = now or utcnow()

    result = await session.execute(select(Card).where(Card.deck_id == deck_id))
    by_id = {card.id: card for card in result.scalars().all()}

    snapshots = [
        CardSnapshot(card_id=card.id, state=card.review_state(), created_at=card.created_at)
        for card in by_id.values()
    ]
    ordered_ids = select_study_cards(snapshots, max_cards, now)
    cards = [by_id[card_id] for card_id in ordered_ids]
    due_count = sum(1 for card in cards if card.next_review_date <= now)

    logger.info(
        "Built queue for deck %d: %d due + %d ahead of schedule = %d total",
        deck_id,
        due_count,
        len(cards) - due_count,
        len(cards),
    )
    return StudyQueue(cards=cards, due_count=due_count)
