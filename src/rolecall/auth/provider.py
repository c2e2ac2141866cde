"""
Credential provider.

Resolves the bearer credential for one remote call:

    cached token on the session, if still valid
    otherwise a fresh token from the token source
    otherwise Unauthenticated

`acquire` never raises; every failure becomes an Unauthenticated outcome
that the invoker answers with simulated data.
"""

import logging
from datetime import datetime, timedelta, timezone

from rolecall.auth.models import AuthSession, Credential, Unauthenticated
from rolecall.auth.sources import (
    RefreshTokenSource,
    ReauthRequiredError,
    StaticTokenSource,
    TokenSource,
    TransientTokenError,
)
from rolecall.auth.tokens import DEFAULT_REFRESH_MARGIN, is_token_valid, token_expiry
from rolecall.config.schema import AuthConfig

logger = logging.getLogger(__name__)


class CredentialProvider:
    """Obtains, validates and refreshes bearer tokens for a session."""

    def __init__(
        self,
        source: TokenSource,
        scopes: list[str],
        margin: timedelta = DEFAULT_REFRESH_MARGIN,
    ):
        self.source = source
        self.scopes = list(scopes)
        self.margin = margin

    async def acquire(self, session: AuthSession) -> Credential | Unauthenticated:
        """
        Get a credential for the session's user.

        Args:
            session: The conversation's auth session. A fresh token is
                cached on it for later turns.

        Returns:
            A Credential, or Unauthenticated describing why none is available.
        """
        if not session.signed_in:
            logger.info(f"User {session.user_id} is not signed in")
            return Unauthenticated(reason="not signed in", reauth_required=True)

        if session.access_token and is_token_valid(
            session.access_token, session.expires_at, margin=self.margin
        ):
            return Credential(
                token=session.access_token,
                expires_at=token_expiry(session.access_token, session.expires_at),
            )

        if session.access_token:
            logger.info(f"Cached token for {session.user_id} is near expiry, acquiring a new one")
            session.invalidate()

        try:
            grant = await self.source.acquire(self.scopes, session)
        except ReauthRequiredError as e:
            logger.warning(f"Re-authentication required for {session.user_id}: {e}")
            return Unauthenticated(reason=f"sign-in required: {e}", reauth_required=True)
        except TransientTokenError as e:
            logger.warning(f"Token acquisition failed for {session.user_id}: {e}")
            return Unauthenticated(reason=f"token service unavailable: {e}", reauth_required=False)
        except Exception as e:
            logger.error(f"Unexpected token acquisition error for {session.user_id}: {e}")
            return Unauthenticated(reason=f"token acquisition failed: {e}", reauth_required=False)

        expires_at = None
        if grant.expires_in is not None:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=grant.expires_in)
        expires_at = token_expiry(grant.access_token, expires_at)

        session.store(grant.access_token, expires_at)
        logger.debug(f"Fresh token for {session.user_id} ({len(grant.access_token)} chars)")
        return Credential(token=grant.access_token, expires_at=expires_at)


def build_token_source(config: AuthConfig) -> TokenSource:
    """Pick the token source a deployment is configured for."""
    if config.client_id and config.token_url:
        return RefreshTokenSource(
            token_url=config.resolved_token_url(),
            client_id=config.client_id,
            client_secret=config.client_secret,
            timeout=config.token_timeout,
        )
    return StaticTokenSource(config.access_token)


def build_credential_provider(config: AuthConfig) -> CredentialProvider:
    """Create a CredentialProvider from the auth configuration."""
    return CredentialProvider(
        source=build_token_source(config),
        scopes=config.scopes,
        margin=timedelta(minutes=config.refresh_margin_minutes),
    )


def session_from_config(config: AuthConfig) -> AuthSession:
    """Seed an auth session from configured tokens (CLI and local runs)."""
    return AuthSession(
        user_id=config.user_id,
        signed_in=bool(config.access_token or config.refresh_token),
        access_token=config.access_token,
        refresh_token=config.refresh_token,
    )
