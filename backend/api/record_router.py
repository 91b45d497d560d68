"""API routes for daily study records."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.api.schemas import StudyRecordResponse
from backend.database import get_session
from backend.services import study_record_service

router = APIRouter(prefix="/api/records", tags=["records"])


@router.get("/{user_id}", response_model=list[StudyRecordResponse])
async def get_study_records(
    user_id: int,
    year: int | None = Query(default=None, ge=1, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: AsyncSession = Depends(get_session),
) -> list[StudyRecordResponse]:
    """List a user's study records, newest first, optionally for one month."""
    if (year is None) != (month is None):
        raise HTTPException(status_code=422, detail="year and month must be given together")
    if year is not None and month is not None:
        records = await study_record_service.get_monthly_records(db, user_id, year, month)
    else:
        records = await study_record_service.get_all_records(db, user_id)
    return [StudyRecordResponse.model_validate(r) for r in records]
