"""Daily study records.

Every session a user finishes on the same calendar day is folded into one
record: counts and durations add up, and the deck fields follow the latest
session.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.config import utcnow
from backend.models.study_record import StudyRecord

logger = logging.getLogger(__name__)


@dataclass
class RatingTally:
    """How many times each rating was given in a session."""

    again: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0

    @property
    def total(self) -> int:
        return self.again + self.hard + self.good + self.easy


async def save_study_record(
    db: AsyncSession,
    user_id: int,
    deck_id: int | None,
    deck_name: str,
    cards_studied: int,
    duration_seconds: int,
    tally: RatingTally,
    study_date: date | None = None,
) -> StudyRecord:
    """Add a finished session to the user's record for the day."""
    study_date = study_date or utcnow().date()
    stmt = select(StudyRecord).where(
        and_(StudyRecord.user_id == user_id, StudyRecord.study_date == study_date)
    )
    record = (await db.execute(stmt)).scalar_one_or_none()

    if record is None:
        record = StudyRecord(
            user_id=user_id,
            study_date=study_date,
            cards_studied=0,
            duration_seconds=0,
            again=0,
            hard=0,
            good=0,
            easy=0,
        )
        db.add(record)

    record.deck_id = deck_id
    record.deck_name = deck_name
    record.cards_studied += cards_studied
    record.duration_seconds += duration_seconds
    record.again += tally.again
    record.hard += tally.hard
    record.good += tally.good
    record.easy += tally.easy

    await db.commit()
    await db.refresh(record)
    logger.info(
        "Saved study record for user %d on %s: %d cards (%d total today)",
        user_id,
        study_date,
        cards_studied,
        record.cards_studied,
    )
    return record


async def get_monthly_records(
    db: AsyncSession,
    user_id: int,
    year: int,
    month: int,
) -> list[StudyRecord]:
    """Return a month's records, newest first."""
    last_day = calendar.monthrange(year, month)[1]
    stmt = (
        select(StudyRecord)
        .where(
            and_(
                StudyRecord.user_id == user_id,
                StudyRecord.study_date >= date(year, month, 1),
                StudyRecord.study_date <= date(year, month, last_day),
            )
        )
        .order_by(StudyRecord.study_date.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_all_records(db: AsyncSession, user_id: int) -> list[StudyRecord]:
    stmt = (
        select(StudyRecord)
        .where(StudyRecord.user_id == user_id)
        .order_by(StudyRecord.study_date.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())
