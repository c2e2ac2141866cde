"""
Simulated payloads for calls that could not produce live data.

Selection is table driven: the failed result's type picks the reason
label, and the (tool, action) pair picks the generator. Read generators
return the same JSON shape as the live endpoint, with names marked
"(Simulated)". Mutation generators always return a `success: false`
acknowledgment; a mutation is never reported as done.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from rolecall.invoker.results import (
    InvocationResult,
    RemoteError,
    TransportError,
    Unauthenticated,
    Unauthorized,
)
from rolecall.invoker.schemas import (
    Application,
    ApplicationList,
    AppRole,
    AppRoleList,
    DirectoryUser,
    DirectoryUserList,
    MutationAck,
    UserRoleInfo,
    UserRoleInfoList,
    WeatherForecast,
    WeatherForecastList,
    dump_payload,
)
from rolecall.tools.models import ToolDefinition

logger = logging.getLogger(__name__)

SIMULATED = " (Simulated)"

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "rolecall.simulated")

_REASONS: dict[type, Callable[[InvocationResult], str]] = {
    Unauthenticated: lambda r: (
        "sign-in required" if r.reauth_required else "credentials unavailable"
    ),
    Unauthorized: lambda r: "access denied by the remote service",
    RemoteError: lambda r: f"remote service error {r.status_code}",
    TransportError: lambda r: (
        "remote service timed out" if r.timed_out else "remote service unreachable"
    ),
}


@dataclass(frozen=True)
class SimulatedResponse:
    """A fallback payload and why it was served."""

    body: str
    reason: str
    mutation: bool = False


def failure_reason(result: InvocationResult) -> str:
    """User-facing reason a result carries no live data."""
    describe = _REASONS.get(type(result))
    return describe(result) if describe else "live data unavailable"


def _sim_id(*parts: str) -> str:
    return str(uuid.uuid5(_ID_NAMESPACE, "/".join(parts)))


def _email_for(username: str) -> str:
    return username if "@" in username else f"{username or 'user'}@contoso.com"


def _display_name_for(username: str) -> str:
    local = username.split("@", 1)[0]
    words = [w for w in local.replace("_", ".").replace("-", ".").split(".") if w]
    return " ".join(w.capitalize() for w in words) or "Unknown User"


# =============================================================================
# Read generators
# =============================================================================


def _all_users(params: dict[str, str], today: date) -> str:
    users = [
        DirectoryUser(
            id=_sim_id("user", str(n)),
            display_name=f"Sample User {n}{SIMULATED}",
            email=f"sampleuser{n}@contoso.com",
        )
        for n in (1, 2, 3)
    ]
    return dump_payload(DirectoryUserList, users)


def _users_by_role(params: dict[str, str], today: date) -> str:
    role = params.get("roleName", "")
    app = params.get("appName", "")
    users = [
        DirectoryUser(
            id=_sim_id("role-user", app, role, str(n)),
            display_name=f"App User {n} - {role or 'role'} in {app or 'app'}{SIMULATED}",
            email=f"appuser{n}@contoso.com",
        )
        for n in (1, 2)
    ]
    return dump_payload(DirectoryUserList, users)


def _applications(params: dict[str, str], today: date) -> str:
    if params.get("ownedOnly", "").lower() == "true":
        names = ["My App 1"]
    else:
        names = ["Sample App 1", "Sample App 2"]
    apps = [
        Application(id=_sim_id("app", name), name=f"{name}{SIMULATED}", app_id=_sim_id("appid", name))
        for name in names
    ]
    return dump_payload(ApplicationList, apps)


def _app_roles(params: dict[str, str], today: date) -> str:
    app = params.get("appName", "")
    roles = [
        AppRole(
            id=_sim_id("role", app, role),
            name=f"{role}{SIMULATED}",
            app_id=_sim_id("appid", app),
            app_name=app,
        )
        for role in ("Admin", "User")
    ]
    return dump_payload(AppRoleList, roles)


def _user_roles(params: dict[str, str], today: date) -> str:
    username = params.get("username", "")
    assigned = datetime.combine(today - timedelta(days=30), time(), tzinfo=timezone.utc)
    entries = [
        UserRoleInfo(
            user_id=_sim_id("user", username),
            user_display_name=f"{_display_name_for(username)}{SIMULATED}",
            user_email=_email_for(username),
            application_id=_sim_id("appid", app),
            application_name=f"{app}{SIMULATED}",
            role_id=_sim_id("role", app, role),
            role_name=role,
            assigned_date=assigned.isoformat(),
        )
        for app, role in (("Sample App 1", "Admin"), ("Sample App 2", "Reader"))
    ]
    return dump_payload(UserRoleInfoList, entries)


_WEATHER = ((-2, "Freezing"), (8, "Chilly"), (15, "Mild"), (22, "Warm"), (31, "Hot"))


def _weather(params: dict[str, str], today: date) -> str:
    forecasts = [
        WeatherForecast(
            date=(today + timedelta(days=offset)).isoformat(),
            temperature_c=celsius,
            temperature_f=32 + int(celsius / 0.5556),
            summary=f"{summary}{SIMULATED}",
        )
        for offset, (celsius, summary) in enumerate(_WEATHER, start=1)
    ]
    return dump_payload(WeatherForecastList, forecasts)


_READ_GENERATORS: dict[tuple[str, str | None], Callable[[dict[str, str], date], str]] = {
    ("GetB2CUsers", "all"): _all_users,
    ("GetB2CUsers", "by-role"): _users_by_role,
    ("GetB2CApplications", None): _applications,
    ("ManageRoles", "get-roles"): _app_roles,
    ("GetADB2CApplicationRole", None): _app_roles,
    ("ManageRoles", "get-user-roles"): _user_roles,
    ("GetUserRolesFromAllApplications", None): _user_roles,
    ("GetWeatherAuthAPI", None): _weather,
}


# =============================================================================
# Mutation acknowledgments
# =============================================================================


def _assign_ack(params: dict[str, str], reason: str) -> MutationAck:
    username, app, role = params.get("username"), params.get("appName"), params.get("roleName")
    return MutationAck(
        action="assign-role",
        message=f"Fallback: Unable to assign role '{role}' to user '{username}' for "
        f"application '{app}' ({reason}). No change was made.",
        username=username,
        app_name=app,
        role_name=role,
    )


def _revoke_ack(params: dict[str, str], reason: str) -> MutationAck:
    username, app, role = params.get("username"), params.get("appName"), params.get("roleName")
    return MutationAck(
        action="revoke-role",
        message=f"Fallback: Unable to revoke role '{role}' from user '{username}' for "
        f"application '{app}' ({reason}). No change was made.",
        username=username,
        app_name=app,
        role_name=role,
    )


def _create_ack(params: dict[str, str], reason: str) -> MutationAck:
    app = params.get("appName")
    role = params.get("roleName") or params.get("appRole")
    return MutationAck(
        action="create-role",
        message=f"Fallback: Unable to create role '{role}' for application '{app}' "
        f"({reason}). No change was made.",
        app_name=app,
        role_name=role,
    )


_MUTATION_GENERATORS: dict[tuple[str, str | None], Callable[[dict[str, str], str], MutationAck]] = {
    ("ManageRoles", "assign-role"): _assign_ack,
    ("AssignRoletoUser", None): _assign_ack,
    ("ManageRoles", "revoke-role"): _revoke_ack,
    ("RevokeUserRole", None): _revoke_ack,
    ("ManageRoles", "create-role"): _create_ack,
    ("CreateAppRole", None): _create_ack,
}


class FallbackGenerator:
    """Builds the simulated response for a tool call that did not succeed."""

    def __init__(self, today: Callable[[], date] = date.today):
        self._today = today

    def generate(
        self,
        tool: ToolDefinition,
        params: dict[str, str],
        result: InvocationResult,
    ) -> SimulatedResponse:
        """
        Build the fallback for a failed call.

        Args:
            tool: The tool that was invoked.
            params: Parameters of the call.
            result: The non-success result.

        Returns:
            The simulated payload with its reason label.
        """
        reason = failure_reason(result)
        action = params.get("action") if tool.actions else None
        key = (tool.name, action)

        if key in _MUTATION_GENERATORS:
            ack = _MUTATION_GENERATORS[key](params, reason)
            logger.info(f"Serving failed-mutation acknowledgment for {tool.name} ({reason})")
            return SimulatedResponse(
                body=ack.model_dump_json(by_alias=True, exclude_none=True, indent=2),
                reason=reason,
                mutation=True,
            )

        if key in _READ_GENERATORS:
            logger.info(f"Serving simulated data for {tool.name} ({reason})")
            return SimulatedResponse(body=_READ_GENERATORS[key](params, self._today()), reason=reason)

        logger.warning(f"No fallback generator for {tool.name} action={action!r}")
        ack = MutationAck(
            action=action or tool.name,
            message=f"Fallback: {tool.name} could not be completed ({reason}).",
        )
        return SimulatedResponse(
            body=ack.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            reason=reason,
            mutation=tool.is_mutating(action),
        )
