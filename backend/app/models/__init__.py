from app.models.user import User
from app.models.exercise import Exercise
from app.models.workout_template import WorkoutTemplate, WorkoutTemplateExercise
from app.models.scheduled_workout import ScheduledWorkout
from app.models.workout_log import LoggedExercise, LoggedSet, WorkoutLog
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Exercise",
    "WorkoutTemplate",
    "WorkoutTemplateExercise",
    "ScheduledWorkout",
    "WorkoutLog",
    "LoggedExercise",
    "LoggedSet",
    "AuditLog",
]
