"""
Tool catalog for Rolecall.

The fixed set of remote operations the agent can invoke. Routes and
query parameter names mirror the deployed directory service exactly.
"""

import logging
from collections.abc import Iterable, Iterator

from rolecall.tools.models import ToolAction, ToolDefinition, ToolParameter

logger = logging.getLogger(__name__)


class ToolNotFoundError(KeyError):
    """Raised when looking up a tool name that is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown tool: {self.name}"


class ToolCatalog:
    """
    Read-only registry of tool definitions.

    Populated once at construction; there is no API to add or remove
    tools afterwards.
    """

    def __init__(self, tools: Iterable[ToolDefinition]):
        self._tools: dict[str, ToolDefinition] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Tool '{tool.name}' is already registered")
            self._tools[tool.name] = tool
        logger.debug(f"Tool catalog ready with {len(self._tools)} tools")

    def lookup(self, name: str) -> ToolDefinition:
        """
        Get a tool by name.

        Raises:
            ToolNotFoundError: If no tool has that name.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def get(self, name: str) -> ToolDefinition | None:
        """Get a tool by name, or None."""
        return self._tools.get(name)

    def all(self) -> list[ToolDefinition]:
        """All tools in declaration order."""
        return list(self._tools.values())

    def names(self) -> list[str]:
        """All tool names in declaration order."""
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())


# =============================================================================
# Default catalog
# =============================================================================

_ASSIGN_EXAMPLE = "Example: 'Assign role Admin to user john@example.com in app MyApp'"
_REVOKE_EXAMPLE = "Example: 'Revoke role Admin from user john@example.com in app MyApp'"

DEFAULT_TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="GetB2CUsers",
        description="Unified user lookup. 'all' lists every directory user; "
        "'by-role' lists users holding a role in an application.",
        route="/User/manage",
        parameters=(
            ToolParameter(name="action", required=True, description="all | by-role"),
            ToolParameter(name="roleName", description="Role name (by-role)"),
            ToolParameter(name="appName", description="Application name (by-role)"),
        ),
        actions=(
            ToolAction(name="all", description="Get all directory users"),
            ToolAction(
                name="by-role",
                description="Get users assigned to an application role",
                required=("roleName", "appName"),
                clarification="Please specify the role name and app name. "
                "Example: 'Get users with role Manager in app MyApp'",
            ),
        ),
        clarification="Please specify the action. Available actions: all, by-role",
        default_action="all",
    ),
    ToolDefinition(
        name="GetB2CApplications",
        description="List directory applications; ownedOnly=true limits the list "
        "to applications the signed-in user owns.",
        route="/Application",
        parameters=(
            ToolParameter(name="ownedOnly", description="true for owned applications only"),
        ),
    ),
    ToolDefinition(
        name="ManageRoles",
        description="Unified role management for application roles.",
        route="/Roles/manage",
        parameters=(
            ToolParameter(
                name="action",
                required=True,
                description="get-roles | assign-role | revoke-role | get-user-roles | create-role",
            ),
            ToolParameter(name="appName", description="Application name"),
            ToolParameter(name="username", description="User name or email"),
            ToolParameter(name="roleName", description="Role name"),
        ),
        actions=(
            ToolAction(
                name="get-roles",
                description="Get the roles defined for an application",
                required=("appName",),
                clarification="Please specify the application name. "
                "Example: 'Show roles for app MyApp'",
            ),
            ToolAction(
                name="assign-role",
                description="Assign a role to a user",
                required=("username", "appName", "roleName"),
                mutating=True,
                clarification=f"Please specify username, app name, and role name. {_ASSIGN_EXAMPLE}",
            ),
            ToolAction(
                name="revoke-role",
                description="Revoke a role from a user",
                required=("username", "appName", "roleName"),
                mutating=True,
                clarification=f"Please specify username, app name, and role name. {_REVOKE_EXAMPLE}",
            ),
            ToolAction(
                name="get-user-roles",
                description="Get a user's roles across all applications",
                required=("username",),
                clarification="Please specify the username. "
                "Example: 'Get all roles for user john@example.com'",
            ),
            ToolAction(
                name="create-role",
                description="Create a new role for an application",
                required=("appName", "roleName"),
                mutating=True,
                clarification="Please specify both app name and role name. "
                "Example: 'Create role Manager for app MyApp'",
            ),
        ),
        clarification="Please specify the action and its details. Available actions: "
        "get-roles, assign-role, revoke-role, get-user-roles, create-role",
    ),
    ToolDefinition(
        name="AssignRoletoUser",
        description="Assign an application role to a user.",
        route="/Roles/assign",
        parameters=(
            ToolParameter(name="username", required=True, description="User name or email"),
            ToolParameter(name="appName", required=True, description="Application name"),
            ToolParameter(name="roleName", required=True, description="Role name"),
        ),
        mutating=True,
        timeout_class="simple",
        clarification=f"Please specify username, app name, and role name. {_ASSIGN_EXAMPLE}",
    ),
    ToolDefinition(
        name="RevokeUserRole",
        description="Revoke an application role from a user.",
        route="/Roles/revoke",
        parameters=(
            ToolParameter(name="username", required=True, description="User name or email"),
            ToolParameter(name="appName", required=True, description="Application name"),
            ToolParameter(name="roleName", required=True, description="Role name"),
        ),
        mutating=True,
        timeout_class="simple",
        clarification=f"Please specify username, app name, and role name. {_REVOKE_EXAMPLE}",
    ),
    ToolDefinition(
        name="CreateAppRole",
        description="Create a new role for an application.",
        route="/Roles/create",
        parameters=(
            ToolParameter(name="appName", required=True, description="Application name"),
            ToolParameter(name="appRole", required=True, description="Name of the new role"),
        ),
        mutating=True,
        timeout_class="simple",
        clarification="Please specify both app name and role name. "
        "Example: 'Create role Manager for app MyApp'",
    ),
    ToolDefinition(
        name="GetUserRolesFromAllApplications",
        description="Get every role a user holds across all applications.",
        route="/Roles/user-roles",
        parameters=(
            ToolParameter(name="username", required=True, description="User name or email"),
        ),
        clarification="Please specify the username. "
        "Example: 'Get all roles for user john@example.com'",
    ),
    ToolDefinition(
        name="GetADB2CApplicationRole",
        description="Get the roles defined for an application.",
        route="/Roles",
        parameters=(
            ToolParameter(name="appName", required=True, description="Application name"),
        ),
        clarification="Please specify the application name. Example: 'Show roles for app MyApp'",
    ),
    ToolDefinition(
        name="GetWeatherAuthAPI",
        description="Get the demo weather forecast (authenticated connectivity check).",
        route="/WeatherForecast",
        timeout_class="simple",
    ),
)

# Retired tool names the classifier may still produce:
# old name -> (current tool, fixed parameters, parameter renames)
LEGACY_TOOL_NAMES: dict[str, tuple[str, dict[str, str], dict[str, str]]] = {
    "GetADB2CUser": ("GetB2CUsers", {"action": "all"}, {}),
    "GetADB2CUsersByAppRole": ("GetB2CUsers", {"action": "by-role"}, {"appRole": "roleName"}),
}


def translate_legacy_tool(name: str, params: dict[str, str]) -> tuple[str, dict[str, str]]:
    """
    Map a retired tool name and its parameters onto the current catalog.

    Names that are not retired are returned unchanged.
    """
    if name not in LEGACY_TOOL_NAMES:
        return name, params

    target, fixed, renames = LEGACY_TOOL_NAMES[name]
    translated = {renames.get(key, key): value for key, value in params.items()}
    translated.update(fixed)
    logger.info(f"Translated retired tool '{name}' to '{target}'")
    return target, translated


# Singleton instance
_catalog: ToolCatalog | None = None


def get_tool_catalog() -> ToolCatalog:
    """Get the process-wide tool catalog."""
    global _catalog
    if _catalog is None:
        _catalog = ToolCatalog(DEFAULT_TOOLS)
    return _catalog
