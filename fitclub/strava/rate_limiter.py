"""Async rate limiter for Strava API."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from fitclub.strava.exceptions import RateLimitExceeded
from fitclub.strava.schemas import RateLimitInfo

logger = logging.getLogger(__name__)


def seconds_until_short_reset(now: datetime) -> float:
    """Seconds until the next quarter hour (UTC), when the 15-minute window resets."""
    window_start = now.replace(minute=now.minute - now.minute % 15, second=0, microsecond=0)
    return (window_start + timedelta(minutes=15) - now).total_seconds()


def seconds_until_daily_reset(now: datetime) -> float:
    """Seconds until UTC midnight, when the daily window resets."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
    return (midnight - now).total_seconds()


class AsyncRateLimiter:
    """Throttle requests using the usage Strava reports on every response.

    Strava rate limits:
    - Short-term: 200 (read: 100) requests per 15 minutes
    - Long-term: 2,000 (read: 1,000) requests per day

    Priorities:
    - 'interactive': only sleep once a limit is exhausted
    - 'sync': also spread the remaining short-window budget evenly, so a
      full history sync does not starve interactive requests
    """

    def __init__(
        self,
        priority: Literal["interactive", "sync"] = "interactive",
        max_spread_delay: float = 2.0,
    ):
        self.priority = priority
        self.max_spread_delay = max_spread_delay
        self.current_limits: Optional[RateLimitInfo] = None

    def update_limits(self, headers: dict[str, str]) -> None:
        """Read ``X-RateLimit-Usage`` / ``X-RateLimit-Limit`` from a response."""
        headers_lower = {k.lower(): v for k, v in headers.items()}

        usage_header = headers_lower.get("x-ratelimit-usage")
        limit_header = headers_lower.get("x-ratelimit-limit")
        if not usage_header or not limit_header:
            return

        usage = [int(x) for x in usage_header.split(",")]
        limit = [int(x) for x in limit_header.split(",")]
        self.current_limits = RateLimitInfo(
            short_usage=usage[0],
            long_usage=usage[1],
            short_limit=limit[0],
            long_limit=limit[1],
        )

    def delay(self, now: Optional[datetime] = None) -> float:
        """Seconds to wait before the next request (0 when free to go)."""
        limits = self.current_limits
        if limits is None:
            return 0.0

        now = now or datetime.now(timezone.utc)

        if limits.long_usage >= limits.long_limit:
            return seconds_until_daily_reset(now)
        if limits.short_usage >= limits.short_limit:
            return seconds_until_short_reset(now)

        if self.priority == "sync":
            remaining = limits.short_limit - limits.short_usage
            return min(seconds_until_short_reset(now) / remaining, self.max_spread_delay)

        return 0.0

    async def wait_if_needed(self) -> None:
        """Sleep as required by the last reported usage.

        Raises
        ------
        RateLimitExceeded
            When the daily budget is exhausted; waiting for it is left to the caller
        """
        limits = self.current_limits
        if limits is not None and limits.long_usage >= limits.long_limit:
            raise RateLimitExceeded(
                f"Daily rate limit exhausted: {limits.long_usage}/{limits.long_limit}",
                retry_after=seconds_until_daily_reset(datetime.now(timezone.utc)),
            )

        delay = self.delay()
        if delay <= 0:
            return

        if self.priority == "interactive" or delay > self.max_spread_delay:
            logger.warning(
                f"Strava rate limit reached, sleeping {delay:.1f}s: {self.current_limits}"
            )
        await asyncio.sleep(delay)
