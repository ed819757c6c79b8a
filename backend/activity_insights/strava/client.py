"""
Strava API client: full activity history with one-shot token refresh.
"""
import logging
import threading
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import requests

from ..config import settings
from ..errors import AuthError, UpstreamError
from .schemas import Activity, ActivityCollection, CredentialPair

logger = logging.getLogger(__name__)

STRAVA_AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"


def get_authorize_url(client_id: str, redirect_uri: str = "http://localhost", scope: str = "activity:read_all") -> str:
    """URL the athlete opens once to grant read access and obtain an authorization code."""
    query = urlencode({
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "approval_prompt": "force",
        "scope": scope,
    })
    return f"{STRAVA_AUTHORIZE_URL}?{query}"


def exchange_authorization_code(
    code: str,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    token_url: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> CredentialPair:
    """Exchange a one-time authorization code for the initial token pair."""
    data = {
        "client_id": client_id or settings.strava_client_id,
        "client_secret": client_secret or settings.strava_client_secret,
        "code": code,
        "grant_type": "authorization_code",
    }
    http = session or requests
    try:
        r = http.post(token_url or settings.strava_token_url, json=data, timeout=settings.strava_request_timeout)
    except requests.RequestException as e:
        raise AuthError(f"Strava code exchange failed: {e}") from e
    if not r.ok:
        raise AuthError(f"Strava code exchange failed: {r.status_code}")
    token = r.json()
    if not token.get("access_token"):
        raise AuthError("Strava code exchange returned no access token")
    return CredentialPair(
        access_token=token["access_token"],
        refresh_token=token.get("refresh_token"),
        expires_at=token.get("expires_at"),
    )


class TelemetryClient:
    """
    Fetches every activity of the authenticated athlete.

    Pages are requested until one comes back empty. A 401 on the first page
    triggers a single refresh round trip and one retry of that page; a 401
    anywhere else is fatal.
    """

    def __init__(
        self,
        credentials: CredentialPair,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        api_url: Optional[str] = None,
        token_url: Optional[str] = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self._credentials = credentials
        self._credentials_lock = threading.Lock()
        self.client_id = client_id if client_id is not None else settings.strava_client_id
        self.client_secret = client_secret if client_secret is not None else settings.strava_client_secret
        self.api_url = (api_url or settings.strava_api_url).rstrip("/")
        self.token_url = token_url or settings.strava_token_url
        self.page_size = page_size or settings.strava_page_size
        self.timeout = timeout or settings.strava_request_timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> "TelemetryClient":
        if not settings.strava_access_token:
            raise RuntimeError("STRAVA_ACCESS_TOKEN not configured")
        creds = CredentialPair(
            access_token=settings.strava_access_token,
            refresh_token=settings.strava_refresh_token,
        )
        return cls(creds)

    @property
    def credentials(self) -> CredentialPair:
        with self._credentials_lock:
            return self._credentials

    def fetch_all_activities(self) -> ActivityCollection:
        activities: List[Activity] = []
        page = 1
        while True:
            response = self._get_page(page)
            if response.status_code == 401 and page == 1:
                logger.info("Strava access token rejected, refreshing")
                self.refresh_credentials()
                response = self._get_page(page)
                if response.status_code == 401:
                    raise AuthError("Strava rejected the refreshed access token")
            elif response.status_code == 401:
                # Only page 1 gets a refresh; a token expiring mid-pagination is fatal
                raise AuthError(f"Strava access token rejected on page {page}")

            if not response.ok:
                raise UpstreamError(f"Strava API error: {response.status_code}", status_code=response.status_code)

            batch = self._decode_page(response)
            if not batch:
                break
            activities.extend(Activity.model_validate(a) for a in batch)
            page += 1

        logger.info(f"Fetched {len(activities)} activities from Strava in {page - 1} page(s)")
        return tuple(activities)

    def refresh_credentials(self) -> CredentialPair:
        """Exchange the refresh token for a new pair and keep it for later calls."""
        current = self.credentials
        if not current.refresh_token:
            raise AuthError("No Strava refresh token configured")
        data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": current.refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            r = self.session.post(self.token_url, json=data, timeout=self.timeout)
        except requests.RequestException as e:
            raise AuthError(f"Strava token refresh failed: {e}") from e
        if not r.ok:
            raise AuthError(f"Strava token refresh failed: {r.status_code}")
        token = r.json()
        if not token.get("access_token"):
            raise AuthError("Strava token refresh returned no access token")

        refreshed = CredentialPair(
            access_token=token["access_token"],
            # Strava may rotate the refresh token; keep the old one if it did not
            refresh_token=token.get("refresh_token") or current.refresh_token,
            expires_at=token.get("expires_at"),
        )
        with self._credentials_lock:
            self._credentials = refreshed
        logger.info("Strava access token refreshed")
        return refreshed

    def _get_page(self, page: int) -> requests.Response:
        url = f"{self.api_url}/athlete/activities"
        headers = {"Authorization": f"Bearer {self.credentials.access_token}"}
        params = {"per_page": self.page_size, "page": page}
        try:
            return self.session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"Strava request failed: {e}") from e

    @staticmethod
    def _decode_page(response: requests.Response) -> List[Dict[str, Any]]:
        try:
            batch = response.json()
        except ValueError as e:
            raise UpstreamError("Strava returned a non-JSON page", status_code=response.status_code) from e
        if not isinstance(batch, list):
            raise UpstreamError("Strava returned an unexpected page payload", status_code=response.status_code)
        return batch
