"""Flashcard model carrying its spaced repetition state."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.config import utcnow
from backend.models.base import Base, TimestampMixin
from backend.srs.scheduler import DEFAULT_EASE_FACTOR, ReviewState


class Card(Base, TimestampMixin):
    """A front/back/memo flashcard with its scheduling state."""

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    deck_id: Mapped[int] = mapped_column(ForeignKey("decks.id"), nullable=False, index=True)
    front: Mapped[str] = mapped_column(Text, nullable=False)  # Word or sentence to learn
    back: Mapped[str] = mapped_column(Text, nullable=False)  # Meaning
    memo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    interval: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)  # Days
    ease_factor: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_EASE_FACTOR)
    next_review_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    deck: Mapped["Deck"] = relationship(back_populates="cards")  # type: ignore[name-defined] # noqa: F821

    def review_state(self) -> ReviewState:
        return ReviewState(
            interval=self.interval,
            ease_factor=self.ease_factor,
            next_review_date=self.next_review_date,
            review_count=self.review_count,
        )

    def apply_review_state(self, state: ReviewState) -> None:
        """Copy a scheduler result onto the row."""
        self.interval = state.interval
        self.ease_factor = state.ease_factor
        self.next_review_date = state.next_review_date
        self.review_count = state.review_count
