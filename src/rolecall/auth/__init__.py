"""
Bearer credential handling for Rolecall.
"""

from rolecall.auth.models import AuthSession, Credential, TokenGrant, Unauthenticated
from rolecall.auth.provider import (
    CredentialProvider,
    build_credential_provider,
    build_token_source,
    session_from_config,
)
from rolecall.auth.sources import (
    RefreshTokenSource,
    ReauthRequiredError,
    StaticTokenSource,
    TokenAcquisitionError,
    TokenSource,
    TransientTokenError,
)
from rolecall.auth.tokens import decode_expiry, is_token_valid, token_expiry

__all__ = [
    "AuthSession",
    "Credential",
    "CredentialProvider",
    "ReauthRequiredError",
    "RefreshTokenSource",
    "StaticTokenSource",
    "TokenAcquisitionError",
    "TokenGrant",
    "TokenSource",
    "TransientTokenError",
    "Unauthenticated",
    "build_credential_provider",
    "build_token_source",
    "decode_expiry",
    "is_token_valid",
    "session_from_config",
    "token_expiry",
]
