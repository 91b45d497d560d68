"""API routes for individual cards."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import CardResponse, CardUpdate
from backend.database import get_session
from backend.services import card_service

router = APIRouter(prefix="/api/cards", tags=["cards"])


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: int,
    db: AsyncSession = Depends(get_session),
) -> CardResponse:
    card = await card_service.get_card(db, card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    return CardResponse.model_validate(card)


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: int,
    request: CardUpdate,
    db: AsyncSession = Depends(get_session),
) -> CardResponse:
    """Edit a card's front, back or memo. Scheduling state is not editable here."""
    card = await card_service.get_card(db, card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    try:
        card = await card_service.update_card(
            db, card, front=request.front, back=request.back, memo=request.memo
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return CardResponse.model_validate(card)


@router.delete("/{card_id}", status_code=204)
async def delete_card(
    card_id: int,
    db: AsyncSession = Depends(get_session),
) -> Response:
    card = await card_service.get_card(db, card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    await card_service.delete_card(db, card)
    return Response(status_code=204)
