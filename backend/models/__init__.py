"""SQLAlchemy ORM models for the memodeck database."""

from backend.models.base import Base
from backend.models.card import Card
from backend.models.deck import Deck
from backend.models.study_record import StudyRecord
from backend.models.user import User

__all__ = ["Base", "Card", "Deck", "StudyRecord", "User"]
