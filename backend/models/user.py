from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    nickname: Mapped[str] = mapped_column(String(100), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)

    decks: Mapped[list["Deck"]] = relationship(back_populates="user")  # type: ignore[name-defined] # noqa: F821
    study_records: Mapped[list["StudyRecord"]] = relationship(back_populates="user")  # type: ignore[name-defined] # noqa: F821
