"""Tests for the remote invoker and its fallbacks."""

import json
from datetime import date

import httpx
import pytest

from rolecall.auth import Credential, Unauthenticated
from rolecall.config.schema import RemoteServiceConfig
from rolecall.invoker import (
    FallbackGenerator,
    RemoteError,
    RemoteInvoker,
    Success,
    TransportError,
    Unauthorized,
    build_url,
    failure_reason,
)

BASE_URL = "http://localhost:5156"
USERS_BODY = '[{"id":"1","dispalyName":"Ada Lovelace","email":"ada@contoso.com","type":"User"}]'


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | Exception):
        self.response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return httpx.Response(self.response.status_code, content=self.response.content)


def _invoker(handler) -> RemoteInvoker:
    return RemoteInvoker(
        base_url=BASE_URL,
        fallbacks=FallbackGenerator(today=lambda: date(2030, 6, 1)),
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def credential():
    return Credential(token="token-abc")


# =============================================================================
# URL Building
# =============================================================================


class TestBuildUrl:
    def test_declared_parameters_in_order(self, catalog):
        tool = catalog.lookup("ManageRoles")
        params = {"roleName": "Admin", "action": "assign-role", "username": "john@example.com", "appName": "MyApp"}
        assert build_url(BASE_URL, tool, params) == (
            "http://localhost:5156/Roles/manage?action=assign-role&appName=MyApp"
            "&username=john%40example.com&roleName=Admin"
        )

    def test_blank_and_undeclared_dropped(self, catalog):
        tool = catalog.lookup("GetB2CUsers")
        params = {"action": "all", "roleName": " ", "extra": "x"}
        assert build_url(BASE_URL, tool, params) == "http://localhost:5156/User/manage?action=all"

    def test_values_fully_encoded(self, catalog):
        tool = catalog.lookup("GetADB2CApplicationRole")
        url = build_url(BASE_URL + "/", tool, {"appName": "My App/2 & more"})
        assert url == "http://localhost:5156/Roles?appName=My%20App%2F2%20%26%20more"

    def test_no_parameters(self, catalog):
        tool = catalog.lookup("GetWeatherAuthAPI")
        assert build_url(BASE_URL, tool, {}) == "http://localhost:5156/WeatherForecast"


# =============================================================================
# Invocation and Classification
# =============================================================================


class TestRemoteInvoker:
    @pytest.mark.asyncio
    async def test_success_body_verbatim(self, catalog, credential):
        """A 2xx body comes back unchanged."""
        recorder = Recorder(httpx.Response(200, text=USERS_BODY))

        result = await _invoker(recorder).invoke(catalog.lookup("GetB2CUsers"), {"action": "all"}, credential)

        assert result == Success(body=USERS_BODY, status_code=200)
        request = recorder.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "http://localhost:5156/User/manage?action=all"
        assert request.headers["Authorization"] == "Bearer token-abc"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_unauthorized(self, catalog, credential):
        recorder = Recorder(httpx.Response(401, text="expired"))
        result = await _invoker(recorder).invoke(catalog.lookup("GetB2CUsers"), {"action": "all"}, credential)
        assert result == Unauthorized(body="expired")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 403, 404, 500, 503])
    async def test_remote_error(self, catalog, credential, status):
        recorder = Recorder(httpx.Response(status, text="bad"))
        result = await _invoker(recorder).invoke(catalog.lookup("GetB2CApplications"), {}, credential)
        assert result == RemoteError(status_code=status, body="bad")

    @pytest.mark.asyncio
    async def test_timeout(self, catalog, credential):
        recorder = Recorder(httpx.ReadTimeout("slow"))
        result = await _invoker(recorder).invoke(catalog.lookup("GetB2CUsers"), {"action": "all"}, credential)
        assert isinstance(result, TransportError)
        assert result.timed_out is True

    @pytest.mark.asyncio
    async def test_connection_failure(self, catalog, credential):
        recorder = Recorder(httpx.ConnectError("refused"))
        result = await _invoker(recorder).invoke(catalog.lookup("GetB2CUsers"), {"action": "all"}, credential)
        assert isinstance(result, TransportError)
        assert result.timed_out is False

    @pytest.mark.asyncio
    async def test_timeout_class_applied(self, catalog, credential):
        recorder = Recorder(httpx.Response(200, text="[]"))
        invoker = _invoker(recorder)

        await invoker.invoke(catalog.lookup("GetB2CUsers"), {"action": "all"}, credential)
        await invoker.invoke(catalog.lookup("GetWeatherAuthAPI"), {}, credential)

        assert recorder.requests[0].extensions["timeout"]["read"] == 30.0
        assert recorder.requests[1].extensions["timeout"]["read"] == 10.0

    @pytest.mark.asyncio
    async def test_identical_calls_are_independent(self, catalog, credential):
        """Two identical reads are two HTTP calls; nothing is cached."""
        recorder = Recorder(httpx.Response(200, text="[]"))
        invoker = _invoker(recorder)
        tool = catalog.lookup("GetB2CUsers")

        await invoker.invoke(tool, {"action": "all"}, credential)
        await invoker.invoke(tool, {"action": "all"}, credential)

        assert len(recorder.requests) == 2

    def test_from_config(self):
        invoker = RemoteInvoker.from_config(
            RemoteServiceConfig(base_url="https://dir.example.com", read_timeout=12, simple_timeout=4)
        )
        assert invoker.base_url == "https://dir.example.com"
        assert invoker.read_timeout == 12
        assert invoker.simple_timeout == 4


# =============================================================================
# Fallbacks
# =============================================================================


class TestInvokeOrFallback:
    @pytest.mark.asyncio
    async def test_live_payload(self, catalog, credential):
        recorder = Recorder(httpx.Response(200, text=USERS_BODY))
        outcome = await _invoker(recorder).invoke_or_fallback(
            catalog.lookup("GetB2CUsers"), {"action": "all"}, credential
        )
        assert outcome.payload == USERS_BODY
        assert outcome.simulated is False

    @pytest.mark.asyncio
    async def test_unauthenticated_read_skips_network(self, catalog):
        """Simulated users carry the same field set as live ones."""
        recorder = Recorder(httpx.Response(200, text=USERS_BODY))

        outcome = await _invoker(recorder).invoke_or_fallback(
            catalog.lookup("GetB2CUsers"), {"action": "all"}, Unauthenticated()
        )

        assert recorder.requests == []
        assert outcome.simulated is True
        assert outcome.reason == "sign-in required"
        users = json.loads(outcome.payload)
        live_fields = set(json.loads(USERS_BODY)[0])
        assert users
        assert all(set(user) == live_fields for user in users)
        assert all("(Simulated)" in user["dispalyName"] for user in users)

    @pytest.mark.asyncio
    async def test_unauthorized_mutation_is_not_faked(self, catalog, credential):
        """A 401 on assign gives a failed acknowledgment naming every slot."""
        recorder = Recorder(httpx.Response(401))
        params = {
            "action": "assign-role",
            "roleName": "Admin",
            "username": "john@example.com",
            "appName": "MyApp",
        }

        outcome = await _invoker(recorder).invoke_or_fallback(catalog.lookup("ManageRoles"), params, credential)

        ack = json.loads(outcome.payload)
        assert outcome.simulated is True
        assert ack["success"] is False
        assert ack["simulated"] is True
        assert ack["action"] == "assign-role"
        for value in ("Admin", "john@example.com", "MyApp"):
            assert value in ack["message"]
        assert ack["username"] == "john@example.com"
        assert ack["appName"] == "MyApp"
        assert ack["roleName"] == "Admin"
        assert "access denied" in ack["message"]


class TestFallbackGenerator:
    """Tests for simulated payload selection."""

    @pytest.fixture
    def generator(self):
        return FallbackGenerator(today=lambda: date(2030, 6, 1))

    @pytest.mark.parametrize(
        "result, reason",
        [
            (Unauthenticated(), "sign-in required"),
            (Unauthenticated(reauth_required=False), "credentials unavailable"),
            (Unauthorized(), "access denied by the remote service"),
            (RemoteError(status_code=502), "remote service error 502"),
            (TransportError(cause="x", timed_out=True), "remote service timed out"),
            (TransportError(cause="x"), "remote service unreachable"),
        ],
    )
    def test_reason_labels(self, result, reason):
        assert failure_reason(result) == reason

    def test_deterministic(self, catalog, generator):
        tool = catalog.lookup("ManageRoles")
        params = {"action": "get-roles", "appName": "MyApp"}
        first = generator.generate(tool, params, Unauthenticated())
        second = generator.generate(tool, params, Unauthenticated())
        assert first.body == second.body

    def test_app_roles_shape(self, catalog, generator):
        body = generator.generate(
            catalog.lookup("ManageRoles"), {"action": "get-roles", "appName": "MyApp"}, Unauthenticated()
        ).body
        roles = json.loads(body)
        assert {tuple(sorted(r)) for r in roles} == {("appId", "appName", "id", "name")}
        assert all(r["appName"] == "MyApp" for r in roles)

    def test_owned_applications(self, catalog, generator):
        tool = catalog.lookup("GetB2CApplications")
        owned = json.loads(generator.generate(tool, {"ownedOnly": "true"}, Unauthorized()).body)
        every = json.loads(generator.generate(tool, {"ownedOnly": "false"}, Unauthorized()).body)
        assert len(owned) == 1
        assert len(every) == 2
        assert set(owned[0]) == {"id", "name", "appId"}

    def test_user_roles_shape(self, catalog, generator):
        body = generator.generate(
            catalog.lookup("GetUserRolesFromAllApplications"),
            {"username": "john.doe@example.com"},
            RemoteError(status_code=500),
        ).body
        entries = json.loads(body)
        assert set(entries[0]) == {
            "userId",
            "userDisplayName",
            "userEmail",
            "applicationId",
            "applicationName",
            "roleId",
            "roleName",
            "assignedDate",
        }
        assert entries[0]["userEmail"] == "john.doe@example.com"
        assert entries[0]["userDisplayName"].startswith("John Doe")

    def test_weather_uses_current_date(self, catalog, generator):
        body = generator.generate(
            catalog.lookup("GetWeatherAuthAPI"), {}, TransportError(cause="down")
        ).body
        forecasts = json.loads(body)
        assert len(forecasts) == 5
        assert forecasts[0]["date"] == "2030-06-02"
        assert set(forecasts[0]) == {"date", "temperatureC", "temperatureF", "summary"}

    @pytest.mark.parametrize(
        "tool_name, params",
        [
            ("ManageRoles", {"action": "revoke-role", "username": "u", "appName": "A", "roleName": "R"}),
            ("ManageRoles", {"action": "create-role", "appName": "A", "roleName": "R"}),
            ("AssignRoletoUser", {"username": "u", "appName": "A", "roleName": "R"}),
            ("CreateAppRole", {"appName": "A", "appRole": "R"}),
        ],
    )
    def test_mutations_never_succeed(self, catalog, generator, tool_name, params):
        simulated = generator.generate(catalog.lookup(tool_name), params, Unauthenticated())
        ack = json.loads(simulated.body)
        assert simulated.mutation is True
        assert ack["success"] is False
        assert "No change was made" in ack["message"]
