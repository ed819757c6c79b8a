"""
Exception hierarchy for the activity insights engine.

Fatal errors (UpstreamError, AuthError) propagate to the HTTP layer.
ToolParseError is recovered once by the orchestrator's tool-free fallback.
"""
from typing import Any, Dict, Optional


class ActivityInsightsError(Exception):
    """Base exception for all activity insights errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.details}


class UpstreamError(ActivityInsightsError):
    """Non-auth failure talking to the Strava API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__(message, details=details)
        self.status_code = status_code


class AuthError(ActivityInsightsError):
    """Strava credential could not be used or refreshed."""


class ToolParseError(ActivityInsightsError):
    """The model emitted a tool invocation that cannot be interpreted."""
