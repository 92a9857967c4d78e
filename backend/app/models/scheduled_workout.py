"""Calendar commitment: one template on one day. At most one per (user, date)."""

from __future__ import annotations

from datetime import date, datetime
from sqlalchemy import Boolean, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base


class ScheduledWorkout(Base):
    __tablename__ = "scheduled_workouts"
    __table_args__ = (UniqueConstraint("user_id", "scheduled_date", name="uq_scheduled_workouts_user_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id: Mapped[int] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    user: Mapped["User"] = relationship("User", back_populates="scheduled_workouts")
    template: Mapped["WorkoutTemplate"] = relationship("WorkoutTemplate")
    # Link is owned by workout_logs.scheduled_workout_id (unique), set once when the session starts
    workout_log: Mapped["WorkoutLog | None"] = relationship(
        "WorkoutLog", back_populates="scheduled_workout", uselist=False
    )
