"""API routes for user profiles."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import UserCreate, UserResponse, UserUpdate
from backend.database import get_session
from backend.services import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    request: UserCreate,
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Create a user profile."""
    try:
        user = await user_service.create_user(
            db,
            email=request.email,
            nickname=request.nickname,
            phone_number=request.phone_number,
        )
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    user = await user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    request: UserUpdate,
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Update nickname and/or phone number."""
    user = await user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    user = await user_service.update_user(
        db, user, nickname=request.nickname, phone_number=request.phone_number
    )
    return UserResponse.model_validate(user)
