"""
Quota gate: one admission decision from an ordered list of rate limiters.
Stops at the first denial so later (slower-resetting) limiters are not consumed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from prometheus_client import Counter

from app.core.errors import RateLimitedError
from app.core.rate_limit import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

QUOTA_DENIALS = Counter(
    "lift_log_quota_denials_total",
    "Requests denied by the quota gate",
    ["limiter"],
)


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": datetime.fromtimestamp(result.reset_at, tz=timezone.utc).isoformat(),
    }


@dataclass
class QuotaDecision:
    allowed: bool
    results: dict[str, RateLimitResult] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    denied_by: str | None = None
    retry_after_seconds: int | None = None

    def raise_for_denial(self, operation: str = "AI workout generation") -> None:
        """Raise RateLimitedError (429) when the decision is a denial."""
        if self.allowed:
            return
        raise RateLimitedError(
            f"Rate limit exceeded for {operation}. "
            f"Too many requests. Please try again in {self.retry_after_seconds} seconds.",
            retry_after=self.retry_after_seconds or 1,
            headers=self.headers,
        )


def admit(identifier: str, limiters: list[RateLimiter]) -> QuotaDecision:
    """Check `limiters` in order for `identifier`; the first denial wins."""
    results: dict[str, RateLimitResult] = {}
    headers: dict[str, str] = {}
    for limiter in limiters:
        result = limiter.check(identifier)
        results[limiter.name] = result
        headers = rate_limit_headers(result)
        if not result.allowed:
            retry_after = max(1, math.ceil(result.reset_at - limiter.now()))
            headers["Retry-After"] = str(retry_after)
            QUOTA_DENIALS.labels(limiter=limiter.name).inc()
            logger.warning(
                "Quota denied by %s for %s (retry after %ss)", limiter.name, identifier, retry_after
            )
            return QuotaDecision(
                allowed=False,
                results=results,
                headers=headers,
                denied_by=limiter.name,
                retry_after_seconds=retry_after,
            )
    return QuotaDecision(allowed=True, results=results, headers=headers)
