"""User profile storage. Authentication lives outside this application."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.user import User

logger = logging.getLogger(__name__)


async def create_user(
    db: AsyncSession,
    email: str,
    nickname: str,
    phone_number: str | None = None,
) -> User:
    user = User(email=email, nickname=nickname, phone_number=phone_number)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %d (%s)", user.id, email)
    return user


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def update_user(
    db: AsyncSession,
    user: User,
    nickname: str | None = None,
    phone_number: str | None = None,
) -> User:
    """Update the editable profile fields; ``None`` leaves a field unchanged."""
    if nickname is not None:
        user.nickname = nickname
    if phone_number is not None:
        user.phone_number = phone_number
    await db.commit()
    await db.refresh(user)
    return user
