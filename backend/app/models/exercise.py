"""Exercise catalog entry. Referenced by template exercises and logged exercises."""

from sqlalchemy import String
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base


class Exercise(Base):
    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    body_part: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)  # e.g. chest, back
    target: Mapped[str | None] = mapped_column(String(64), nullable=True)
    equipment: Mapped[str | None] = mapped_column(String(64), nullable=True)
    instructions: Mapped[list | None] = mapped_column(JSON, nullable=True)
