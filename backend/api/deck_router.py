"""API routes for decks and the cards inside them."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import CardCreate, CardResponse, DeckCreate, DeckResponse, DeckUpdate
from backend.database import get_session
from backend.services import card_service, deck_service, user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/decks", tags=["decks"])


@router.post("", response_model=DeckResponse, status_code=201)
async def create_deck(
    request: DeckCreate,
    db: AsyncSession = Depends(get_session),
) -> DeckResponse:
    if await user_service.get_user(db, request.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    deck = await deck_service.create_deck(
        db, user_id=request.user_id, name=request.name, description=request.description
    )
    return DeckResponse.model_validate(deck)


@router.get("", response_model=list[DeckResponse])
async def list_decks(
    user_id: int,
    db: AsyncSession = Depends(get_session),
) -> list[DeckResponse]:
    decks = await deck_service.list_decks(db, user_id)
    return [DeckResponse.model_validate(d) for d in decks]


@router.get("/{deck_id}", response_model=DeckResponse)
async def get_deck(
    deck_id: int,
    db: AsyncSession = Depends(get_session),
) -> DeckResponse:
    deck = await deck_service.get_deck(db, deck_id)
    if deck is None:
        raise HTTPException(status_code=404, detail="Deck not found")
    return DeckResponse.model_validate(deck)


@router.patch("/{deck_id}", response_model=DeckResponse)
async def update_deck(
    deck_id: int,
    request: DeckUpdate,
    db: AsyncSession = Depends(get_session),
) -> DeckResponse:
    deck = await deck_service.get_deck(db, deck_id)
    if deck is None:
        raise HTTPException(status_code=404, detail="Deck not found")
    try:
        deck = await deck_service.update_deck(
            db, deck, name=request.name, description=request.description
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return DeckResponse.model_validate(deck)


@router.delete("/{deck_id}", status_code=204)
async def delete_deck(
    deck_id: int,
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete a deck and all of its cards."""
    deck = await deck_service.get_deck(db, deck_id)
    if deck is None:
        raise HTTPException(status_code=404, detail="Deck not found")
    await deck_service.delete_deck(db, deck)
    return Response(status_code=204)


@router.get("/{deck_id}/cards", response_model=list[CardResponse])
async def list_deck_cards(
    deck_id: int,
    db: AsyncSession = Depends(get_session),
) -> list[CardResponse]:
    if await deck_service.get_deck(db, deck_id) is None:
        raise HTTPException(status_code=404, detail="Deck not found")
    cards = await card_service.list_cards(db, deck_id)
    return [CardResponse.model_validate(c) for c in cards]


@router.post("/{deck_id}/cards", response_model=CardResponse, status_code=201)
async def create_deck_card(
    deck_id: int,
    request: CardCreate,
    db: AsyncSession = Depends(get_session),
) -> CardResponse:
    if await deck_service.get_deck(db, deck_id) is None:
        raise HTTPException(status_code=404, detail="Deck not found")
    card = await card_service.create_card(
        db, deck_id=deck_id, front=request.front, back=request.back, memo=request.memo
    )
    return CardResponse.model_validate(card)
