"""Strava OAuth: code exchange, token refresh and disconnect."""

from typing import Optional

import httpx
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from stravalib import Client

from fitclub.athletes.models import Athlete
from fitclub.athletes.service import athlete_service
from fitclub.config import get_settings
from fitclub.strava.client import AsyncStravaClient
from fitclub.strava.exceptions import StravaException, TokenExpired

SCOPES = ["read", "activity:read_all", "profile:read_all"]


class AuthService:
    def __init__(self):
        settings = get_settings()
        self.client_id = settings.STRAVA_CLIENT_ID
        self.client_secret = settings.STRAVA_CLIENT_SECRET
        self.redirect_uri = settings.STRAVA_REDIRECT_URI

    def authorization_url(self) -> str:
        return Client().authorization_url(
            client_id=self.client_id,
            redirect_uri=self.redirect_uri,
            scope=SCOPES,
        )

    def exchange_code(self, code: str) -> dict:
        """Exchange an OAuth code for ``access_token``/``refresh_token``/``expires_at``."""
        return Client().exchange_code_for_token(
            client_id=self.client_id,
            client_secret=self.client_secret,
            code=code,
        )

    async def refresh_token_if_needed(self, db: AsyncSession, athlete: Athlete) -> Athlete:
        """Refresh an expired access token in place.

        Raises
        ------
        TokenExpired
            If Strava refuses the refresh token
        """
        if not athlete.is_token_expired():
            return athlete

        logger.info("Refreshing expired token", athlete_id=athlete.id)
        try:
            token_response = Client().refresh_access_token(
                client_id=self.client_id,
                client_secret=self.client_secret,
                refresh_token=athlete.refresh_token,
            )
        except Exception as e:
            raise TokenExpired(f"Failed to refresh token for athlete {athlete.id}") from e

        return await athlete_service.update_tokens(
            db=db,
            athlete=athlete,
            access_token=token_response["access_token"],
            refresh_token=token_response["refresh_token"],
            expires_at=token_response["expires_at"],
        )

    async def get_valid_access_token(self, db: AsyncSession, athlete_id: int) -> str:
        """Access token for an athlete, refreshed first if expired.

        Raises
        ------
        ValueError
            If the athlete is not connected
        TokenExpired
            If the token cannot be refreshed
        """
        athlete = await athlete_service.get_athlete(db, athlete_id)
        if athlete is None:
            raise ValueError(f"Athlete {athlete_id} not found")

        athlete = await self.refresh_token_if_needed(db, athlete)
        return athlete.access_token

    async def deauthorize_athlete(
        self, db: AsyncSession, athlete_id: int
    ) -> Optional[Athlete]:
        """Disconnect an athlete from the club.

        This will:
        1. Revoke the token on Strava's side (best effort)
        2. Delete the athlete's activities, stats snapshot and sync logs
        3. Delete the athlete

        Returns
        -------
        Athlete | None
            The deleted athlete, or None if not found
        """
        athlete = await athlete_service.get_athlete(db, athlete_id)
        if athlete is None:
            return None

        try:
            await AsyncStravaClient(access_token=athlete.access_token).deauthorize()
        except (StravaException, httpx.HTTPError) as e:
            # Token may already be revoked or expired; disconnect locally anyway
            logger.warning(
                "Strava deauthorize failed", athlete_id=athlete_id, error=str(e)
            )

        return await athlete_service.delete_athlete(db, athlete_id)


auth_service = AuthService()
