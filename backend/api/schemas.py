"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from backend.srs.scheduler import Rating


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


NonBlank = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


# --- Users ---


class UserCreate(BaseModel):
    email: str = Field(pattern=r"^\S+@\S+\.\S+$")
    nickname: str = Field(min_length=1, max_length=100)
    phone_number: str | None = Field(default=None, pattern=r"^[0-9]{2,3}-[0-9]{3,4}-[0-9]{4}$")


class UserUpdate(BaseModel):
    nickname: str | None = Field(default=None, min_length=1, max_length=100)
    phone_number: str | None = Field(default=None, pattern=r"^[0-9]{2,3}-[0-9]{3,4}-[0-9]{4}$")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    nickname: str
    phone_number: str | None
    created_at: datetime


# --- Decks ---


class DeckCreate(BaseModel):
    user_id: int
    name: Annotated[NonBlank, Field(max_length=200)]
    description: str = ""


class DeckUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None


class DeckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    description: str
    created_at: datetime
    updated_at: datetime


# --- Cards ---


class CardCreate(BaseModel):
    front: NonBlank
    back: NonBlank
    memo: str = ""


class CardUpdate(BaseModel):
    front: str | None = Field(default=None, min_length=1)
    back: str | None = Field(default=None, min_length=1)
    memo: str | None = None


class CardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deck_id: int
    front: str
    back: str
    memo: str
    interval: float
    ease_factor: float
    next_review_date: datetime
    review_count: int
    created_at: datetime
    updated_at: datetime


# --- Study sessions ---


class StudyStartResponse(BaseModel):
    """Response when starting a new study session."""

    session_id: str
    deck_id: int
    total_cards: int
    due_cards: int


class StudyCardResponse(BaseModel):
    """The card currently up for rating."""

    card_id: int
    front: str
    back: str
    memo: str
    review_count: int
    remaining: int
    interval_preview: dict[str, float]  # Rating value -> interval in days


class AnswerRequest(BaseModel):
    """Request to rate the current card."""

    card_id: int
    rating: Rating


class AnswerResponse(BaseModel):
    """Response after rating a card with its new scheduling state."""

    card_id: int
    rating: Rating
    interval: float
    ease_factor: float
    next_review_date: datetime
    review_count: int
    remaining: int
    session_complete: bool


class StudyStatsResponse(BaseModel):
    """Per-rating tallies for the current session."""

    cards_reviewed: int
    again: int
    hard: int
    good: int
    easy: int
    remaining: int


class StudyEndResponse(BaseModel):
    status: str
    cards_reviewed: int
    record_saved: bool


# --- Study records ---


class StudyRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    study_date: date
    deck_id: int | None
    deck_name: str
    cards_studied: int
    duration_seconds: int
    again: int
    hard: int
    good: int
    easy: int
