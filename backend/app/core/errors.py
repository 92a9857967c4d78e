"""
Typed failures raised by the workout-logging services and the generation quota.
The app-level handler in app.main turns them into JSON responses.
"""

from __future__ import annotations


class WorkoutLogError(Exception):
    status_code = 500
    code = "error"

    def __init__(self, detail: str, headers: dict[str, str] | None = None):
        super().__init__(detail)
        self.detail = detail
        self.headers = headers or {}


class NotFoundError(WorkoutLogError):
    status_code = 404
    code = "not_found"


class ForbiddenError(WorkoutLogError):
    status_code = 403
    code = "forbidden"


class ConflictError(WorkoutLogError):
    status_code = 409
    code = "conflict"


class RateLimitedError(WorkoutLogError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, detail: str, retry_after: int, headers: dict[str, str] | None = None):
        super().__init__(detail, headers=headers)
        self.retry_after = retry_after


class UpstreamError(WorkoutLogError):
    """AI collaborator failed: bad status, unparseable content or timeout. Never retried here."""

    status_code = 502
    code = "upstream_failure"
