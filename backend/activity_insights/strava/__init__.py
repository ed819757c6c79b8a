"""
Strava data access: paginated client and the activity TTL cache.
"""
from .cache import ActivityCache, CacheEntry
from .client import TelemetryClient
from .schemas import Activity, ActivityCollection, ActivityType, CredentialPair

__all__ = [
    "Activity",
    "ActivityCache",
    "ActivityCollection",
    "ActivityType",
    "CacheEntry",
    "CredentialPair",
    "TelemetryClient",
]
