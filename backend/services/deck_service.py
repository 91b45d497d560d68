"""Deck storage."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.deck import Deck

logger = logging.getLogger(__name__)


async def create_deck(
    db: AsyncSession,
    user_id: int,
    name: str,
    description: str = "",
) -> Deck:
    if not name or not name.strip():
        raise ValueError("Deck name is required")
    deck = Deck(user_id=user_id, name=name.strip(), description=description or "")
    db.add(deck)
    await db.commit()
    await db.refresh(deck)
    logger.info("Created deck %d for user %d", deck.id, user_id)
    return deck


async def get_deck(db: AsyncSession, deck_id: int) -> Deck | None:
    return await db.get(Deck, deck_id)


async def list_decks(db: AsyncSession, user_id: int) -> list[Deck]:
    stmt = select(Deck).where(Deck.user_id == user_id).order_by(Deck.id.asc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_deck(
    db: AsyncSession,
    deck: Deck,
    name: str | None = None,
    description: str | None = None,
) -> Deck:
    if name is not None:
        if not name.strip():
            raise ValueError("Deck name is required")
        deck.name = name.strip()
    if description is not None:
        deck.description = description
    await db.commit()
    await db.refresh(deck)
    return deck


async def delete_deck(db: AsyncSession, deck: Deck) -> None:
    """Delete a deck together with its cards."""
    deck_id = deck.id
    await db.delete(deck)
    await db.commit()
    logger.info("Deleted deck %d", deck_id)
