"""
OAuth2 Client Credentials
=========================

Bearer-token authentication for the client-credentials grant.

``ClientCredentials.session()`` yields a ``requests.Session`` whose auth
hook obtains a token from the token endpoint on first use, reuses it
until shortly before it expires, and attaches it to every request.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import requests
from oauthlib.oauth2 import BackendApplicationClient
from requests.auth import AuthBase
from requests_oauthlib import OAuth2Session

from relax.core.logger import get_logger

logger = get_logger(__name__)

# Tokens are refetched this many seconds before they expire
EXPIRY_LEEWAY = 10.0


@dataclass(frozen=True)
class ClientCredentials:
    """
    OAuth2 client-credentials configuration.

    Args:
        client_id: Client identifier (API key).
        client_secret: Client secret (API key secret).
        token_url: Token endpoint URL.
        scopes: Optional scopes to request.
    """

    client_id: str
    client_secret: str = field(repr=False)
    token_url: str
    scopes: Tuple[str, ...] = ()

    def session(self) -> requests.Session:
        """Create a session that authenticates every request with these credentials."""
        session = requests.Session()
        session.auth = ClientCredentialsAuth(self)
        return session


class ClientCredentialsAuth(AuthBase):
    """
    ``requests`` auth hook that attaches a client-credentials bearer token.

    Thread Safety:
        Token fetches are serialised with ``threading.Lock``; concurrent
        requests share one token.

    Args:
        credentials: Credentials to exchange for tokens.
        token_session: OAuth2 session used against the token endpoint.
            Built from ``credentials`` when not given.
    """

    def __init__(
        self,
        credentials: ClientCredentials,
        token_session: Optional[OAuth2Session] = None,
    ):
        self.credentials = credentials
        if token_session is None:
            token_session = OAuth2Session(
                client=BackendApplicationClient(client_id=credentials.client_id),
                scope=list(credentials.scopes) or None,
            )
        self.token_session = token_session
        self._token: Optional[Dict[str, Any]] = None
        self._lock = threading.Lock()

    @staticmethod
    def _expired(token: Dict[str, Any]) -> bool:
        expires_at = token.get("expires_at")
        if expires_at is None:
            return False
        return time.time() >= float(expires_at) - EXPIRY_LEEWAY

    def token(self) -> Dict[str, Any]:
        """
        Return a valid token, fetching a new one if needed.

        Raises:
            requests.RequestException: If the token endpoint cannot be reached.
            oauthlib.oauth2.OAuth2Error: If the endpoint rejects the credentials.
        """
        with self._lock:
            if self._token is None or self._expired(self._token):
                logger.debug(f"Fetching client credentials token from {self.credentials.token_url}")
                # An expired token left on the session would be attached to the fetch itself
                self.token_session.token = {}
                self._token = self.token_session.fetch_token(
                    token_url=self.credentials.token_url,
                    client_secret=self.credentials.client_secret,
                )
            return self._token

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self.token()['access_token']}"
        return r
