"""
Active / completed workout session and what was logged in it.
WorkoutLog -> LoggedExercise (one per exercise) -> LoggedSet (one per set number).
"""

from __future__ import annotations

from datetime import date, datetime
from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base


class WorkoutLog(Base):
    __tablename__ = "workout_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id: Mapped[int | None] = mapped_column(
        ForeignKey("workout_templates.id", ondelete="SET NULL"), nullable=True
    )
    # unique: exactly one session may ever be linked to a scheduled workout
    scheduled_workout_id: Mapped[int | None] = mapped_column(
        ForeignKey("scheduled_workouts.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    user: Mapped["User"] = relationship("User", back_populates="workout_logs")
    scheduled_workout: Mapped["ScheduledWorkout | None"] = relationship(
        "ScheduledWorkout", back_populates="workout_log"
    )
    exercises: Mapped[list["LoggedExercise"]] = relationship(
        "LoggedExercise",
        back_populates="workout_log",
        cascade="all, delete-orphan",
        order_by="LoggedExercise.order",
    )


class LoggedExercise(Base):
    __tablename__ = "logged_exercises"
    __table_args__ = (
        UniqueConstraint("workout_log_id", "exercise_id", name="uq_logged_exercises_log_exercise"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    workout_log_id: Mapped[int] = mapped_column(
        ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id: Mapped[int] = mapped_column(ForeignKey("exercises.id"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    workout_log: Mapped["WorkoutLog"] = relationship("WorkoutLog", back_populates="exercises")
    sets: Mapped[list["LoggedSet"]] = relationship(
        "LoggedSet",
        back_populates="logged_exercise",
        cascade="all, delete-orphan",
        order_by="LoggedSet.set_number",
    )


class LoggedSet(Base):
    __tablename__ = "logged_sets"
    __table_args__ = (
        UniqueConstraint("logged_exercise_id", "set_number", name="uq_logged_sets_exercise_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    logged_exercise_id: Mapped[int] = mapped_column(
        ForeignKey("logged_exercises.id", ondelete="CASCADE"), nullable=False, index=True
    )
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-based
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    logged_exercise: Mapped["LoggedExercise"] = relationship("LoggedExercise", back_populates="sets")
