"""Async Strava API client."""

import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

import httpx

from fitclub.strava.exceptions import (
    AccessUnauthorized,
    ObjectNotFound,
    RateLimitExceeded,
    StravaException,
)
from fitclub.strava.rate_limiter import AsyncRateLimiter
from fitclub.strava.schemas import ActivitySchema, AthleteSchema, AthleteStatsSchema

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200
REQUEST_TIMEOUT = 30.0


class AsyncStravaClient:
    """Async HTTP client for the parts of Strava API v3 the club reads.

    One instance per athlete token. Every response feeds the rate limiter,
    which may sleep (or raise once the daily budget is gone) before the
    next call returns.
    """

    BASE_URL = "https://www.strava.com/api/v3"

    def __init__(
        self,
        access_token: str,
        rate_limiter: Optional[AsyncRateLimiter] = None,
    ):
        """Initialize Strava API client.

        Parameters
        ----------
        access_token : str
            Valid Strava access token for the athlete
        rate_limiter : AsyncRateLimiter, optional
            Shared limiter; a fresh interactive one when omitted
        """
        self.access_token = access_token
        self.rate_limiter = rate_limiter or AsyncRateLimiter(priority="interactive")

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send one authenticated request and decode the JSON body.

        Raises
        ------
        ObjectNotFound, AccessUnauthorized, RateLimitExceeded, StravaException
            Mapped from the response status (see ``_handle_errors``)
        """
        url = f"{self.BASE_URL}{endpoint}"
        headers = {"Authorization": f"Bearer {self.access_token}"}

        logger.debug(f"{method} {endpoint} {params or ''}")

        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            response = await client.request(method, url, params=params, headers=headers)

        self.rate_limiter.update_limits(dict(response.headers))
        await self._handle_errors(response)
        await self.rate_limiter.wait_if_needed()

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def _handle_errors(self, response: httpx.Response) -> None:
        """Raise the exception matching a failed response; no-op on success.

        Parameters
        ----------
        response : httpx.Response
            HTTP response object

        Raises
        ------
        ObjectNotFound
            404
        AccessUnauthorized
            401
        RateLimitExceeded
            429, with ``retry_after`` when the limiter knows the reset time
        StravaException
            Any other error status
        """
        if response.is_success:
            return

        try:
            error_msg = response.json().get("message", response.text)
        except ValueError:
            error_msg = response.text

        status = response.status_code
        if status == 404:
            raise ObjectNotFound(f"Not found: {error_msg}")
        if status == 401:
            raise AccessUnauthorized(f"Unauthorized: {error_msg}")
        if status == 429:
            raise RateLimitExceeded(
                f"Rate limit exceeded: {error_msg}",
                retry_after=self.rate_limiter.delay() or None,
            )

        kind = "Client" if 400 <= status < 500 else "Server" if 500 <= status < 600 else "Unknown"
        raise StravaException(f"{kind} error {status}: {error_msg}", status)

    # =========================================================================
    # Athlete Endpoints
    # =========================================================================

    async def get_athlete(self) -> AthleteSchema:
        """Profile of the athlete the token belongs to."""
        data = await self._request("GET", "/athlete")
        return AthleteSchema.model_validate(data)

    async def get_athlete_stats(self, athlete_id: int) -> AthleteStatsSchema:
        """Recent, year-to-date and all-time ride/run/swim totals.

        Strava only answers this for the token's own athlete.
        """
        data = await self._request("GET", f"/athletes/{athlete_id}/stats")
        return AthleteStatsSchema.model_validate(data)

    async def deauthorize(self) -> None:
        """Revoke the token on Strava's side."""
        await self._request("POST", "/oauth/deauthorize")

    # =========================================================================
    # Activity Endpoints
    # =========================================================================

    async def get_activities(
        self,
        after: Optional[int] = None,
        page: int = 1,
        per_page: int = 30,
    ) -> list[ActivitySchema]:
        """One page of ``/athlete/activities``.

        Parameters
        ----------
        after : int, optional
            Epoch seconds; only activities starting later are listed
        page : int
            1-based page number
        per_page : int
            Page size, capped at 200

        Returns
        -------
        list[ActivitySchema]
            Activities on that page
        """
        params = {"page": page, "per_page": min(per_page, MAX_PAGE_SIZE)}
        if after:
            params["after"] = after

        data = await self._request("GET", "/athlete/activities", params=params)
        return [ActivitySchema.model_validate(item) for item in data]

    async def iter_activity_pages(
        self, after: Optional[int] = None, per_page: int = MAX_PAGE_SIZE
    ) -> AsyncIterator[list[ActivitySchema]]:
        """Yield pages until Strava returns a short (or empty) one."""
        page_size = min(per_page, MAX_PAGE_SIZE)
        page = 1
        while True:
            batch = await self.get_activities(after=after, page=page, per_page=page_size)
            if batch:
                yield batch
            if len(batch) < page_size:
                return
            page += 1

    async def get_all_activities(
        self, after: Optional[int] = None, per_page: int = MAX_PAGE_SIZE
    ) -> list[ActivitySchema]:
        """Every activity after ``after`` (the whole history when None)."""
        activities: list[ActivitySchema] = []
        async for batch in self.iter_activity_pages(after=after, per_page=per_page):
            activities.extend(batch)
            logger.debug(f"Fetched {len(activities)} activities so far")
        return activities
