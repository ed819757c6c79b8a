"""
Pydantic models for Strava activity payloads.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict


class ActivityType:
    """Activity types the analytic tools filter on. Anything else is kept as-is."""
    RIDE = "Ride"
    RUN = "Run"
    SWIM = "Swim"


class Activity(BaseModel):
    """One recorded exercise session as returned by /athlete/activities."""
    id: int
    name: str = ""
    type: str = ""
    distance: float = 0.0  # meters
    moving_time: int = 0  # seconds
    average_speed: float = 0.0  # m/s
    max_speed: float = 0.0  # m/s
    total_elevation_gain: float = 0.0  # meters
    start_date_local: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra="ignore")


# Ordered, immutable snapshot handed to every tool
ActivityCollection = Tuple[Activity, ...]


class CredentialPair(BaseModel):
    """Strava OAuth access/refresh token pair."""
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    model_config = ConfigDict(frozen=True)
