"""
Unit tests for bearer credential handling.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from urllib.parse import parse_qs

import httpx
import pytest

from rolecall.auth import (
    AuthSession,
    Credential,
    CredentialProvider,
    ReauthRequiredError,
    RefreshTokenSource,
    StaticTokenSource,
    TokenGrant,
    TransientTokenError,
    Unauthenticated,
    build_credential_provider,
    build_token_source,
    decode_expiry,
    is_token_valid,
    session_from_config,
)
from rolecall.config.schema import AuthConfig

TOKEN_URL = "https://login.example.com/contoso/oauth2/v2.0/token"


def _refresh_source(handler) -> RefreshTokenSource:
    return RefreshTokenSource(
        token_url=TOKEN_URL,
        client_id="client-123",
        client_secret="s3cret",
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# Expiry Tests
# =============================================================================


class TestTokenExpiry:
    """Tests for JWT expiry inspection and the validity margin."""

    def test_decode_expiry(self, make_jwt):
        token = make_jwt(expires_in=timedelta(hours=1))
        expiry = decode_expiry(token)
        assert expiry is not None
        assert timedelta(minutes=59) < expiry - datetime.now(timezone.utc) <= timedelta(hours=1)

    def test_decode_expiry_digit_string(self, make_jwt):
        token = make_jwt(expires_in=None, exp="4102444800")
        assert decode_expiry(token) == datetime(2100, 1, 1, tzinfo=timezone.utc)

    def test_opaque_token_has_no_expiry(self):
        assert decode_expiry("opaque-token-value") is None

    def test_jwt_without_exp(self, make_jwt):
        assert decode_expiry(make_jwt(expires_in=None)) is None

    def test_valid_with_plenty_of_time(self, make_jwt):
        assert is_token_valid(make_jwt(expires_in=timedelta(hours=1)))

    def test_invalid_within_margin(self, make_jwt):
        """A token expiring in under 5 minutes must be refreshed."""
        assert not is_token_valid(make_jwt(expires_in=timedelta(minutes=4)))

    def test_expired(self, make_jwt):
        assert not is_token_valid(make_jwt(expires_in=timedelta(minutes=-10)))

    def test_unknown_expiry_treated_as_valid(self):
        assert is_token_valid("opaque-token-value")

    def test_empty_token_invalid(self):
        assert not is_token_valid(None)
        assert not is_token_valid("")

    def test_hint_takes_precedence(self, make_jwt):
        token = make_jwt(expires_in=timedelta(hours=1))
        soon = datetime.now(timezone.utc) + timedelta(minutes=2)
        assert not is_token_valid(token, expires_at=soon)

    def test_naive_hint_is_utc(self):
        now = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert is_token_valid("opaque", expires_at=datetime(2030, 1, 1, 12, 10), now=now)
        assert not is_token_valid("opaque", expires_at=datetime(2030, 1, 1, 12, 3), now=now)


# =============================================================================
# Token Source Tests
# =============================================================================


class TestStaticTokenSource:
    @pytest.mark.asyncio
    async def test_returns_configured_token(self):
        grant = await StaticTokenSource("abc").acquire([], AuthSession(user_id="u"))
        assert grant.access_token == "abc"

    @pytest.mark.asyncio
    async def test_missing_token_requires_sign_in(self):
        with pytest.raises(ReauthRequiredError):
            await StaticTokenSource(None).acquire([], AuthSession(user_id="u"))


class TestRefreshTokenSource:
    """Tests for the OAuth2 refresh-token grant."""

    @pytest.mark.asyncio
    async def test_successful_refresh(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(
                200,
                json={"access_token": "new-token", "expires_in": 3600, "refresh_token": "rotated"},
            )

        session = AuthSession(user_id="u", refresh_token="old-refresh")
        grant = await _refresh_source(handler).acquire(["api://x/.default", "offline_access"], session)

        assert grant == TokenGrant(access_token="new-token", expires_in=3600, refresh_token="rotated")
        assert session.refresh_token == "rotated"
        assert seen["url"] == TOKEN_URL
        assert seen["form"] == {
            "client_id": ["client-123"],
            "grant_type": ["refresh_token"],
            "refresh_token": ["old-refresh"],
            "scope": ["api://x/.default offline_access"],
            "client_secret": ["s3cret"],
        }

    @pytest.mark.asyncio
    async def test_no_refresh_token(self):
        source = _refresh_source(lambda request: httpx.Response(500))
        with pytest.raises(ReauthRequiredError):
            await source.acquire([], AuthSession(user_id="u"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["invalid_grant", "interaction_required", "consent_required"])
    async def test_reauth_errors(self, code):
        source = _refresh_source(
            lambda request: httpx.Response(400, json={"error": code, "error_description": "nope"})
        )
        with pytest.raises(ReauthRequiredError, match=code):
            await source.acquire([], AuthSession(user_id="u", refresh_token="r"))

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        source = _refresh_source(lambda request: httpx.Response(503, text="busy"))
        with pytest.raises(TransientTokenError, match="503"):
            await source.acquire([], AuthSession(user_id="u", refresh_token="r"))

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(TransientTokenError):
            await _refresh_source(handler).acquire([], AuthSession(user_id="u", refresh_token="r"))

    @pytest.mark.asyncio
    async def test_missing_access_token_is_transient(self):
        source = _refresh_source(lambda request: httpx.Response(200, json={"token_type": "Bearer"}))
        with pytest.raises(TransientTokenError):
            await source.acquire([], AuthSession(user_id="u", refresh_token="r"))


# =============================================================================
# Credential Provider Tests
# =============================================================================


class TestCredentialProvider:
    """Tests for the acquire state machine."""

    def _provider(self, source) -> CredentialProvider:
        return CredentialProvider(source=source, scopes=["api://x/.default"])

    @pytest.mark.asyncio
    async def test_not_signed_in(self):
        source = AsyncMock()
        session = AuthSession(user_id="u", signed_in=False)

        outcome = await self._provider(source).acquire(session)

        assert outcome == Unauthenticated(reason="not signed in", reauth_required=True)
        source.acquire.assert_not_called()

    @pytest.mark.asyncio
    async def test_cached_token_reused(self, make_jwt):
        token = make_jwt(expires_in=timedelta(hours=1))
        source = AsyncMock()
        session = AuthSession(user_id="u", access_token=token)

        outcome = await self._provider(source).acquire(session)

        assert isinstance(outcome, Credential)
        assert outcome.token == token
        source.acquire.assert_not_called()

    @pytest.mark.asyncio
    async def test_near_expiry_token_refreshed(self, make_jwt):
        """A token with under 5 minutes left is replaced before use."""
        stale = make_jwt(expires_in=timedelta(minutes=3))
        fresh = make_jwt(expires_in=timedelta(hours=1))
        source = AsyncMock()
        source.acquire.return_value = TokenGrant(access_token=fresh, expires_in=3600)
        session = AuthSession(user_id="u", access_token=stale, refresh_token="r")

        outcome = await self._provider(source).acquire(session)

        assert outcome.token == fresh
        assert session.access_token == fresh
        assert session.expires_at is not None
        source.acquire.assert_awaited_once_with(["api://x/.default"], session)

    @pytest.mark.asyncio
    async def test_reauth_required(self):
        source = AsyncMock()
        source.acquire.side_effect = ReauthRequiredError("invalid_grant")
        session = AuthSession(user_id="u", refresh_token="r")

        outcome = await self._provider(source).acquire(session)

        assert isinstance(outcome, Unauthenticated)
        assert outcome.reauth_required is True
        assert session.access_token is None

    @pytest.mark.asyncio
    async def test_transient_failure(self):
        source = AsyncMock()
        source.acquire.side_effect = TransientTokenError("timeout")

        outcome = await self._provider(source).acquire(AuthSession(user_id="u"))

        assert isinstance(outcome, Unauthenticated)
        assert outcome.reauth_required is False

    @pytest.mark.asyncio
    async def test_unexpected_error_never_raises(self):
        source = AsyncMock()
        source.acquire.side_effect = KeyError("boom")

        outcome = await self._provider(source).acquire(AuthSession(user_id="u"))

        assert isinstance(outcome, Unauthenticated)
        assert outcome.reauth_required is False

    @pytest.mark.asyncio
    async def test_sign_out_forgets_tokens(self, make_jwt):
        session = AuthSession(user_id="u", access_token=make_jwt(), refresh_token="r")
        session.sign_out()

        outcome = await self._provider(AsyncMock()).acquire(session)

        assert isinstance(outcome, Unauthenticated)
        assert session.access_token is None
        assert session.refresh_token is None


class TestFactories:
    """Tests for building auth components from configuration."""

    def test_static_source_by_default(self):
        assert isinstance(build_token_source(AuthConfig(access_token="t")), StaticTokenSource)

    def test_refresh_source_with_client_id(self):
        source = build_token_source(AuthConfig(client_id="client-123", tenant="contoso"))
        assert isinstance(source, RefreshTokenSource)
        assert source.token_url == "https://login.microsoftonline.com/contoso/oauth2/v2.0/token"

    def test_provider_margin(self):
        provider = build_credential_provider(AuthConfig(refresh_margin_minutes=10))
        assert provider.margin == timedelta(minutes=10)

    def test_session_from_config(self):
        session = session_from_config(AuthConfig(access_token="t"))
        assert session.signed_in is True
        assert session.access_token == "t"
        assert session_from_config(AuthConfig()).signed_in is False

    def test_credential_repr_hides_token(self):
        assert "secret-token" not in repr(Credential(token="secret-token"))
