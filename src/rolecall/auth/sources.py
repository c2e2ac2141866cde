"""
Token sources: where fresh access tokens come from.

A source turns (scopes, session) into a TokenGrant or raises one of the
TokenAcquisitionError subclasses. The CredentialProvider maps those
errors to an Unauthenticated outcome.
"""

import logging
from abc import ABC, abstractmethod

import httpx

from rolecall.auth.models import AuthSession, TokenGrant

logger = logging.getLogger(__name__)

# OAuth2 error codes that mean the user has to go through sign-in again
REAUTH_ERROR_CODES = frozenset(
    {"invalid_grant", "interaction_required", "consent_required", "login_required"}
)


class TokenAcquisitionError(Exception):
    """Base error for token acquisition failures."""

    pass


class ReauthRequiredError(TokenAcquisitionError):
    """The user must sign in (or consent) again before a token can be issued."""

    pass


class TransientTokenError(TokenAcquisitionError):
    """The token service could not be reached or failed; a later turn may succeed."""

    pass


class TokenSource(ABC):
    """Abstract source of access tokens for a signed-in user."""

    @abstractmethod
    async def acquire(self, scopes: list[str], session: AuthSession) -> TokenGrant:
        """
        Obtain a fresh access token.

        Args:
            scopes: Scopes the token must carry.
            session: Session of the user the token is issued for.

        Returns:
            The granted token.

        Raises:
            ReauthRequiredError: If the user must sign in again.
            TransientTokenError: If the token service failed.
        """
        pass


class StaticTokenSource(TokenSource):
    """Hands out a preconfigured token. Used for local development and the CLI."""

    def __init__(self, token: str | None):
        self._token = token

    async def acquire(self, scopes: list[str], session: AuthSession) -> TokenGrant:
        if not self._token:
            raise ReauthRequiredError("No access token configured")
        return TokenGrant(access_token=self._token)


class RefreshTokenSource(TokenSource):
    """
    OAuth2 refresh-token grant against a Microsoft identity style endpoint.

    The refresh token is read from the session, and a rotated refresh
    token in the response is written back to it.
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self._transport = transport

    async def acquire(self, scopes: list[str], session: AuthSession) -> TokenGrant:
        if not session.refresh_token:
            raise ReauthRequiredError(f"No refresh token for user {session.user_id}")

        data = {
            "client_id": self.client_id,
            "grant_type": "refresh_token",
            "refresh_token": session.refresh_token,
            "scope": " ".join(scopes),
        }
        if self.client_secret:
            data["client_secret"] = self.client_secret

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.token_url, data=data, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise TransientTokenError(f"Token request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise TransientTokenError(f"Token request failed: {e}") from e

        payload = _json_or_empty(response)

        if response.status_code != 200:
            error_code = str(payload.get("error", "")).lower()
            description = payload.get("error_description") or response.text[:200]
            if response.status_code in (400, 401) and error_code in REAUTH_ERROR_CODES:
                raise ReauthRequiredError(f"{error_code}: {description}")
            raise TransientTokenError(
                f"Token endpoint returned {response.status_code}: {description}"
            )

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise TransientTokenError("Token response did not include an access_token")

        expires_in = payload.get("expires_in")
        try:
            expires_in = int(expires_in) if expires_in is not None else None
        except (TypeError, ValueError):
            expires_in = None

        rotated = payload.get("refresh_token")
        if isinstance(rotated, str) and rotated:
            session.refresh_token = rotated

        logger.info(f"Access token refreshed for user {session.user_id}")
        return TokenGrant(access_token=access_token, expires_in=expires_in, refresh_token=rotated)


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}
