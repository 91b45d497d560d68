"""API routes for study sessions."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import (
    AnswerRequest,
    AnswerResponse,
    StudyCardResponse,
    StudyEndResponse,
    StudyStartResponse,
    StudyStatsResponse,
)
from backend.config import utcnow
from backend.database import get_session
from backend.services import deck_service, user_service
from backend.srs.errors import SchedulerError
from backend.srs.scheduler import preview_intervals
from backend.srs.session import CardMismatchError, StudySession, start_study_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/study", tags=["study"])

# In-memory session store, swept of expired sessions on every start
_active_sessions: dict[str, StudySession] = {}


def _sweep_expired() -> None:
    now = utcnow()
    expired = [sid for sid, s in _active_sessions.items() if s.is_expired(now)]
    for sid in expired:
        del _active_sessions[sid]
    if expired:
        logger.info("Dropped %d expired study sessions", len(expired))


def _get_active(session_id: str) -> StudySession:
    study_session = _active_sessions.get(session_id)
    if study_session is None or study_session.is_expired(utcnow()):
        _active_sessions.pop(session_id, None)
        raise HTTPException(status_code=404, detail="Session not found")
    return study_session


@router.post("/start", response_model=StudyStartResponse)
async def study_start(
    deck_id: int,
    user_id: int,
    max_cards: int | None = None,
    db: AsyncSession = Depends(get_session),
) -> StudyStartResponse:
    """Start a new study session on a deck."""
    _sweep_expired()
    if max_cards is not None and max_cards < 1:
        raise HTTPException(status_code=422, detail="max_cards must be >= 1")

    if await user_service.get_user(db, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    deck = await deck_service.get_deck(db, deck_id)
    if deck is None:
        raise HTTPException(status_code=404, detail="Deck not found")

    study_session = await start_study_session(db, user_id, deck, max_cards=max_cards)
    if study_session.queue.total == 0:
        raise HTTPException(status_code=404, detail="No cards available for study")

    session_id = str(uuid.uuid4())
    _active_sessions[session_id] = study_session

    return StudyStartResponse(
        session_id=session_id,
        deck_id=deck_id,
        total_cards=study_session.queue.total,
        due_cards=study_session.queue.due_count,
    )


@router.get("/next/{session_id}", response_model=StudyCardResponse)
async def study_next(
    session_id: str,
    db: AsyncSession = Depends(get_session),
) -> StudyCardResponse:
    """Get the card currently up for rating, as currently stored."""
    study_session = _get_active(session_id)
    card = await study_session.refresh_current(db)
    if card is None:
        raise HTTPException(status_code=410, detail="Session is complete")

    try:
        preview = preview_intervals(card.review_state(), study_session.policy, now=utcnow())
    except SchedulerError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return StudyCardResponse(
        card_id=card.id,
        front=card.front,
        back=card.back,
        memo=card.memo,
        review_count=card.review_count,
        remaining=study_session.remaining,
        interval_preview={rating.value: interval for rating, interval in preview.items()},
    )


@router.post("/answer/{session_id}", response_model=AnswerResponse)
async def study_answer(
    session_id: str,
    request: AnswerRequest,
    db: AsyncSession = Depends(get_session),
) -> AnswerResponse:
    """Rate the current card and persist its new schedule."""
    study_session = _get_active(session_id)
    if study_session.is_complete:
        raise HTTPException(status_code=410, detail="Session is complete")

    try:
        outcome = await study_session.submit_rating(db, request.card_id, request.rating)
    except CardMismatchError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SchedulerError as e:
        logger.warning("Rejected rating for card %d: %s", request.card_id, e)
        raise HTTPException(status_code=422, detail=str(e))

    state = outcome.new_state
    return AnswerResponse(
        card_id=outcome.card.id,
        rating=outcome.rating,
        interval=state.interval,
        ease_factor=state.ease_factor,
        next_review_date=state.next_review_date,
        review_count=state.review_count,
        remaining=study_session.remaining,
        session_complete=study_session.is_complete,
    )


@router.get("/stats/{session_id}", response_model=StudyStatsResponse)
async def study_stats(session_id: str) -> StudyStatsResponse:
    """Get per-rating tallies for the current session."""
    study_session = _get_active(session_id)
    t = study_session.tally
    return StudyStatsResponse(
        cards_reviewed=t.total,
        again=t.again,
        hard=t.hard,
        good=t.good,
        easy=t.easy,
        remaining=study_session.remaining,
    )


@router.post("/end/{session_id}", response_model=StudyEndResponse)
async def study_end(
    session_id: str,
    db: AsyncSession = Depends(get_session),
) -> StudyEndResponse:
    """End a session, saving its results to the day's study record."""
    study_session = _get_active(session_id)
    del _active_sessions[session_id]

    record = await study_session.finish(db)
    return StudyEndResponse(
        status="ended",
        cards_reviewed=study_session.cards_reviewed,
        record_saved=record is not None,
    )

