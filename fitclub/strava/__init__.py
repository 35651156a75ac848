"""Async Strava API client."""

from fitclub.strava.client import AsyncStravaClient
from fitclub.strava.exceptions import StravaException

__all__ = ["AsyncStravaClient", "StravaException"]
