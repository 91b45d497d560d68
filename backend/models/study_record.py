"""Per-user, per-day accumulation of study session results."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class StudyRecord(Base, TimestampMixin):
    __tablename__ = "study_records"
    __table_args__ = (UniqueConstraint("user_id", "study_date", name="uq_study_record_day"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    study_date: Mapped[date] = mapped_column(Date, nullable=False)
    deck_id: Mapped[int | None] = mapped_column(Integer, nullable=True)  # Latest session's deck
    deck_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    cards_studied: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    again: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hard: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    good: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    easy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped["User"] = relationship(back_populates="study_records")  # type: ignore[name-defined] # noqa: F821
