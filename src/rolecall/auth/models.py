"""
Credential and session models.

Tokens live only on the AuthSession of the conversation that uses them;
nothing here is written to disk.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Credential:
    """A bearer token ready to attach to a remote call."""

    token: str
    expires_at: datetime | None = None

    def authorization_header(self) -> dict[str, str]:
        """The Authorization header carrying this token."""
        return {"Authorization": f"Bearer {self.token}"}

    def __repr__(self) -> str:
        return f"Credential(token=<{len(self.token)} chars>, expires_at={self.expires_at!r})"


@dataclass(frozen=True)
class Unauthenticated:
    """No usable credential for this attempt; the user may need to sign in again."""

    reason: str = "not signed in"
    reauth_required: bool = True
    kind: str = field(default="unauthenticated", init=False)
    ok: bool = field(default=False, init=False)


@dataclass(frozen=True)
class TokenGrant:
    """What a token source hands back after a successful acquisition."""

    access_token: str
    expires_in: int | None = None
    refresh_token: str | None = None


@dataclass
class AuthSession:
    """
    The signed-in user behind one conversation.

    Holds the only token cache in the system. Signing out clears it, so a
    token can never outlive the session that obtained it.
    """

    user_id: str
    signed_in: bool = True
    access_token: str | None = None
    expires_at: datetime | None = None
    refresh_token: str | None = None

    def store(self, token: str, expires_at: datetime | None = None) -> None:
        """Cache a freshly acquired access token."""
        self.access_token = token
        self.expires_at = expires_at

    def invalidate(self) -> None:
        """Drop the cached access token but stay signed in."""
        self.access_token = None
        self.expires_at = None

    def sign_out(self) -> None:
        """End the session and forget every token."""
        self.signed_in = False
        self.access_token = None
        self.expires_at = None
        self.refresh_token = None

    def __repr__(self) -> str:
        cached = "yes" if self.access_token else "no"
        return f"AuthSession(user_id={self.user_id!r}, signed_in={self.signed_in}, cached_token={cached})"
