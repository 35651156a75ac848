"""Strava service layer for managing athlete clients."""

from typing import Literal

from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.auth.service import auth_service
from fitclub.strava.client import AsyncStravaClient
from fitclub.strava.rate_limiter import AsyncRateLimiter


class StravaService:
    """Builds authenticated clients, refreshing tokens as needed."""

    async def get_client_for_athlete(
        self,
        db: AsyncSession,
        athlete_id: int,
        priority: Literal["interactive", "sync"] = "interactive",
    ) -> AsyncStravaClient:
        """Get an authenticated Strava client for a specific athlete.

        Parameters
        ----------
        db : AsyncSession
            Database session
        athlete_id : int
            Strava athlete ID
        priority : str
            Rate limiter priority ('interactive', 'sync')

        Returns
        -------
        AsyncStravaClient
            Authenticated client for the athlete

        Raises
        ------
        ValueError
            If the athlete is not connected
        TokenExpired
            If token is expired and cannot be refreshed
        """
        access_token = await auth_service.get_valid_access_token(db, athlete_id)
        return AsyncStravaClient(
            access_token=access_token, rate_limiter=AsyncRateLimiter(priority=priority)
        )


strava_service = StravaService()
