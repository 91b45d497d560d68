"""Card storage.

New cards start with the scheduler's initial review state, so they are due
immediately. Scheduling fields are only ever changed through
``Card.apply_review_state``.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import settings, utcnow
from backend.models.card import Card
from backend.srs.scheduler import ReviewState, policy_from_settings

logger = logging.getLogger(__name__)


def _require_text(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"Invalid card data: {field_name} is required")
    return value


async def create_card(
    db: AsyncSession,
    deck_id: int,
    front: str,
    back: str,
    memo: str = "",
    now: datetime | None = None,
) -> Card:
    """Create a card in a deck, ready for review.

    Raises:
        ValueError: If front or back is missing or blank.
    """
    front = _require_text(front, "front")
    back = _require_text(back, "back")
    state = ReviewState.initial(now or utcnow(), policy_from_settings(settings))

    card = Card(deck_id=deck_id, front=front, back=back, memo=memo or "")
    card.apply_review_state(state)
    db.add(card)
    await db.commit()
    await db.refresh(card)
    logger.debug("Created card %d in deck %d", card.id, deck_id)
    return card


async def get_card(db: AsyncSession, card_id: int) -> Card | None:
    return await db.get(Card, card_id)


async def list_cards(db: AsyncSession, deck_id: int) -> list[Card]:
    stmt = select(Card).where(Card.deck_id == deck_id).order_by(Card.id.asc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_cards_for_decks(db: AsyncSession, deck_ids: Sequence[int]) -> list[Card]:
    if not deck_ids:
        return []
    stmt = select(Card).where(Card.deck_id.in_(deck_ids)).order_by(Card.id.asc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_due(db: AsyncSession, deck_id: int, now: datetime) -> int:
    stmt = select(func.count(Card.id)).where(
        and_(Card.deck_id == deck_id, Card.next_review_date <= now)
    )
    return (await db.execute(stmt)).scalar() or 0


async def update_card(
    db: AsyncSession,
    card: Card,
    front: str | None = None,
    back: str | None = None,
    memo: str | None = None,
) -> Card:
    """Edit card content. ``None`` leaves a field unchanged."""
    if front is not None:
        card.front = _require_text(front, "front")
    if back is not None:
        card.back = _require_text(back, "back")
    if memo is not None:
        card.memo = memo
    await db.commit()
    await db.refresh(card)
    return card


async def delete_card(db: AsyncSession, card: Card) -> None:
    await db.delete(card)
    await db.commit()
