"""
Active-workout client: walks the template exercises in order against the workout-logs API.

Everything here is local state derived from server responses. The cursor is the first
planned exercise whose logged exercise is missing or has fewer completed sets than
planned; when there is none the workout is done and completion is sent once.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: str, retry_after: int | None = None):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.retry_after = retry_after

    @classmethod
    def from_response(cls, resp: httpx.Response) -> "ApiError":
        try:
            body = resp.json()
        except ValueError:
            body = {}
        detail = body.get("detail") if isinstance(body, dict) else None
        retry_after = resp.headers.get("Retry-After")
        return cls(
            resp.status_code,
            str(detail or resp.reason_phrase),
            int(retry_after) if retry_after and retry_after.isdigit() else None,
        )


class ExerciseNotStartedError(Exception):
    """A set was logged before the current exercise was started."""


class WorkoutFinishedError(Exception):
    """No planned exercise is left to log."""


@dataclass(frozen=True)
class PlannedExercise:
    exercise_id: int
    exercise_name: str | None
    order: int
    sets: int
    reps: int
    rest_time: int
    notes: str | None


@dataclass(frozen=True)
class Cursor:
    exercise_index: int
    planned: PlannedExercise
    logged: dict | None
    completed_sets: int

    @property
    def next_set_number(self) -> int:
        return len(self.logged["sets"]) + 1 if self.logged else 1


def _completed_sets(logged: dict | None) -> int:
    if not logged:
        return 0
    return sum(1 for s in logged["sets"] if s.get("completed"))


class ActiveWorkoutView:
    """One active workout screen for one scheduled workout."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        scheduled_workout_id: int,
        *,
        api_prefix: str = "/api/v1",
        clock: Callable[[], float] = time.monotonic,
    ):
        self._http = http
        self._prefix = api_prefix
        self._clock = clock
        self.scheduled_workout_id = scheduled_workout_id
        self.session: dict | None = None
        self.plan: list[PlannedExercise] = []
        self._logged: dict[int, dict] = {}
        self._started_at: float | None = None
        # Guards: effects may re-run, the requests must not
        self._start_requested = False
        self._complete_requested = False

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> dict:
        resp = await self._http.request(method, f"{self._prefix}{path}", json=payload)
        if resp.status_code >= 400:
            raise ApiError.from_response(resp)
        return resp.json()

    @property
    def workout_log_id(self) -> int:
        if self.session is None:
            raise RuntimeError("Workout not loaded; call load() first")
        return self.session["id"]

    async def load(self) -> dict | None:
        """
        StartSession once. A failed start clears the guard so the user can retry.
        A resumed session with nothing left to log is completed here.
        """
        if self._start_requested:
            return self.session
        self._start_requested = True
        try:
            data = await self._send(
                "POST", "/workout-logs/start", {"scheduledWorkoutId": self.scheduled_workout_id}
            )
        except Exception:
            self._start_requested = False
            raise
        self._started_at = self._clock()
        self.plan = sorted(
            (PlannedExercise(**te) for te in data["template_exercises"]),
            key=lambda p: p.order,
        )
        self._apply_session(data["session"])
        if self.is_done:
            # reload after the last set: complete it now, or never again if already completed
            if self.session.get("completed"):
                self._complete_requested = True
            else:
                await self.finish()
        return self.session

    def _apply_session(self, session: dict) -> None:
        self.session = session
        self._logged = {ex["exercise_id"]: ex for ex in session.get("exercises", [])}

    @property
    def cursor(self) -> Cursor | None:
        for index, planned in enumerate(self.plan):
            logged = self._logged.get(planned.exercise_id)
            done = _completed_sets(logged)
            if logged is None or done < planned.sets:
                return Cursor(index, planned, logged, done)
        return None

    @property
    def is_done(self) -> bool:
        return self.session is not None and self.cursor is None

    @property
    def needs_exercise_start(self) -> bool:
        cursor = self.cursor
        return cursor is not None and cursor.logged is None

    def logged_exercise(self, exercise_id: int) -> dict | None:
        return self._logged.get(exercise_id)

    async def start_current_exercise(self) -> dict:
        cursor = self.cursor
        if cursor is None:
            raise WorkoutFinishedError("All exercises are logged")
        data = await self._send(
            "POST",
            "/workout-logs/exercise",
            {
                "workoutLogId": self.workout_log_id,
                "exerciseId": cursor.planned.exercise_id,
                "order": cursor.exercise_index,
                "notes": cursor.planned.notes,
            },
        )
        logged = data["logged_exercise"]
        self._logged[logged["exercise_id"]] = logged
        return logged

    def _merge_set(self, logged_set: dict) -> None:
        for logged in self._logged.values():
            if logged["id"] != logged_set["logged_exercise_id"]:
                continue
            sets = [s for s in logged["sets"] if s["id"] != logged_set["id"]]
            sets.append(logged_set)
            logged["sets"] = sorted(sets, key=lambda s: s["set_number"])
            return

    async def log_set(self, reps: int, weight: float | None = None) -> dict:
        """Record the next set of the current exercise; completes the workout after the last set."""
        cursor = self.cursor
        if cursor is None:
            raise WorkoutFinishedError("All exercises are logged")
        if cursor.logged is None:
            raise ExerciseNotStartedError(
                f"Start exercise {cursor.planned.exercise_id} before logging sets"
            )
        logged_set = await self._send(
            "POST",
            "/workout-logs/sets",
            {
                "loggedExerciseId": cursor.logged["id"],
                "setNumber": cursor.next_set_number,
                "reps": reps,
                "weight": weight,
            },
        )
        self._merge_set(logged_set)
        if self.cursor is None:
            await self.finish()
        return logged_set

    async def correct_set(
        self, set_id: int, reps: int, weight: float | None = None, completed: bool | None = None
    ) -> dict:
        payload: dict[str, Any] = {"setId": set_id, "reps": reps, "weight": weight}
        if completed is not None:
            payload["completed"] = completed
        logged_set = await self._send("PATCH", "/workout-logs/sets", payload)
        self._merge_set(logged_set)
        return logged_set

    def elapsed_minutes(self) -> int:
        if self._started_at is None:
            return 0
        return max(0, int((self._clock() - self._started_at) // 60))

    async def finish(self, notes: str | None = None) -> dict | None:
        """CompleteSession once, with minutes elapsed since the start response."""
        if self._complete_requested:
            return self.session
        self._complete_requested = True
        payload: dict[str, Any] = {"workoutLogId": self.workout_log_id, "duration": self.elapsed_minutes()}
        if notes is not None:
            payload["notes"] = notes
        try:
            data = await self._send("POST", "/workout-logs/complete", payload)
        except Exception:
            # manual retry stays possible
            self._complete_requested = False
            raise
        self._apply_session(data)
        logger.info("Workout log %s completed in %s min", data["id"], data.get("duration"))
        return self.session
