"""
Marketplace Integration API authentication using the client credentials grant.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class IntegrationAuthenticator:
    """
    Handles authentication with the marketplace Integration API.

    Tokens are requested with client id and secret and kept in memory until
    shortly before they expire. Token state is guarded by a lock shared by
    the client's worker threads.
    """

    SCOPE = "integ"

    # Refresh this many seconds before the reported expiry
    EXPIRY_MARGIN_SECONDS = 60

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        auth_url: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize the authenticator.

        Args:
            client_id: Integration API client ID
            client_secret: Integration API client secret
            auth_url: Token endpoint URL
            timeout: Request timeout in seconds
            session: Optional requests session to reuse
        """
        if not client_id or not client_secret:
            raise AuthenticationError(
                "Integration API credentials missing: set client_id and client_secret in config.yaml"
            )

        self.client_id = client_id
        self.client_secret = client_secret
        self.auth_url = auth_url
        self.timeout = timeout
        self.session = session or requests.Session()

        self._access_token: Optional[str] = None
        self._expires_at: Optional[DateTime] = None
        self._lock = threading.Lock()

    def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Get a valid access token, using the cached one when still fresh.

        Args:
            force_refresh: Request a new token even if a cached one exists

        Returns:
            Access token string

        Raises:
            AuthenticationError: If the token request fails
        """
        with self._lock:
            if not force_refresh and self._is_token_fresh():
                return self._access_token

            return self._request_token()

    def _is_token_fresh(self) -> bool:
        if self._access_token is None or self._expires_at is None:
            return False
        return pendulum.now("UTC") < self._expires_at

    def _request_token(self) -> str:
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "client_credentials",
            "scope": self.SCOPE,
        }

        try:
            response = self.session.post(self.auth_url, data=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as exc:
            raise AuthenticationError(f"Token request failed: {exc}") from exc
        except ValueError as exc:
            raise AuthenticationError(f"Token response is not valid JSON: {exc}") from exc

        if "access_token" not in data:
            error = data.get("error_description") or data.get("error") or "Unknown error"
            raise AuthenticationError(f"Authentication failed: {error}")

        expires_in = int(data.get("expires_in", 0))
        self._access_token = data["access_token"]
        self._expires_at = pendulum.now("UTC").add(
            seconds=max(expires_in - self.EXPIRY_MARGIN_SECONDS, 0)
        )
        logger.debug("Obtained Integration API token valid for %ss", expires_in)

        return self._access_token

    def clear_cache(self) -> None:
        """Forget the cached token (force re-authentication next time)."""
        with self._lock:
            self._access_token = None
            self._expires_at = None
