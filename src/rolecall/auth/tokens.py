"""
Token expiry inspection.

Signatures are never checked here; the remote service verifies tokens.
We only read `exp` to decide whether a cached token is worth sending.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MARGIN = timedelta(minutes=5)


def decode_expiry(token: str) -> datetime | None:
    """
    Read the `exp` claim of a JWT without verifying it.

    Args:
        token: Raw bearer token.

    Returns:
        Expiry as an aware UTC datetime, or None if the token is not a JWT
        or carries no usable numeric `exp`.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.debug(f"Token expiry not readable: {e}")
        return None

    exp = claims.get("exp")
    if isinstance(exp, bool):
        return None
    if isinstance(exp, str) and exp.strip().isdigit():
        exp = int(exp)
    if not isinstance(exp, (int, float)):
        return None

    try:
        return datetime.fromtimestamp(exp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def token_expiry(token: str, expires_at: datetime | None = None) -> datetime | None:
    """Best known expiry: an explicit hint first, then the JWT claim."""
    if expires_at is not None:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at
    return decode_expiry(token)


def is_token_valid(
    token: str | None,
    expires_at: datetime | None = None,
    margin: timedelta = DEFAULT_REFRESH_MARGIN,
    now: datetime | None = None,
) -> bool:
    """
    Decide whether a token can still be sent.

    A token is valid when at least `margin` remains before it expires.
    When the expiry cannot be determined at all the token is treated as
    valid and the remote service has the final say.

    Args:
        token: Raw bearer token (None or empty is never valid).
        expires_at: Expiry hint recorded when the token was obtained.
        margin: Minimum remaining lifetime.
        now: Current time, for tests.

    Returns:
        True if the token should be used as is.
    """
    if not token:
        return False

    expiry = token_expiry(token, expires_at)
    if expiry is None:
        logger.debug("Token expiry unknown, treating token as valid")
        return True

    now = now or datetime.now(timezone.utc)
    remaining = expiry - now
    if remaining < margin:
        logger.info(f"Cached token expires in {remaining}, refresh needed")
        return False
    return True
