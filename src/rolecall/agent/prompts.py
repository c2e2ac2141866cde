"""Prompt text for the intent classifier."""

import json

from rolecall.tools.models import ToolDefinition

CLASSIFIER_INTRO = (
    "You are an assistant that analyzes user requests to decide which directory "
    "management tool to call and to extract its parameters."
)

CLASSIFIER_RULES = """Rules:
- Only set shouldCallTool to true if you are confident (above 0.7) about the tool selection
- Use tool names and parameter names exactly as listed
- Extract parameter values exactly as they appear in the user message (preserve case)
- For all users, use GetB2CUsers with action=all
- For users holding a specific role, use GetB2CUsers with action=by-role
- For the roles of an application, use ManageRoles with action=get-roles
- For applications, use GetB2CApplications (ownedOnly=false for all, ownedOnly=true for owned)
- For assigning roles, use ManageRoles with action=assign-role
- For revoking or removing roles, use ManageRoles with action=revoke-role
- For all roles of a specific user, use ManageRoles with action=get-user-roles
- For creating new roles, use ManageRoles with action=create-role
- For weather requests, use GetWeatherAuthAPI
- For anything else, set shouldCallTool to false"""

RESPONSE_FORMAT = """Respond with a single JSON object in this exact format and nothing else:
{"shouldCallTool": true/false, "toolName": "ToolName" or null, "parameters": {"key": "value"}, "confidence": 0.0-1.0}"""

# (utterance, tool, parameters, confidence)
CLASSIFIER_EXAMPLES: list[tuple[str, str | None, dict[str, str], float]] = [
    ("Get all users", "GetB2CUsers", {"action": "all"}, 0.95),
    (
        "Get users with Manager role in MyApp",
        "GetB2CUsers",
        {"action": "by-role", "roleName": "Manager", "appName": "MyApp"},
        0.9,
    ),
    ("Get roles for MyApp application", "ManageRoles", {"action": "get-roles", "appName": "MyApp"}, 0.95),
    (
        "Assign admin role to john@example.com for MyApp",
        "ManageRoles",
        {"action": "assign-role", "username": "john@example.com", "appName": "MyApp", "roleName": "admin"},
        0.95,
    ),
    ("Show the applications I own", "GetB2CApplications", {"ownedOnly": "true"}, 0.9),
    ("Thanks, that's all for now", None, {}, 0.9),
]

TOOL_CONTEXT_TEMPLATE = "Tool Result ({tool_name}): {payload}"

SIMULATED_NOTICE = (
    "[Simulated data: {reason}. Tell the user this is placeholder data, "
    "not live directory data.]"
)

FORMAT_INSTRUCTION = (
    "Please format the above data in a well-structured, readable format "
    "(tables, lists, or formatted text as appropriate)."
)

ERROR_REPLY = "I encountered an error while processing your request: {error}"


def describe_tool(index: int, tool: ToolDefinition) -> str:
    """One numbered catalog entry for the classifier prompt."""
    lines = [f"{index}. {tool.name} - {tool.description}"]

    if tool.parameters:
        params = ", ".join(
            f"{p.name} ({'required' if p.required else 'optional'})" for p in tool.parameters
        )
        lines.append(f"   Parameters: {params}")
    else:
        lines.append("   Parameters: none")

    if tool.actions:
        lines.append("   Actions:")
        for action in tool.actions:
            needs = f" (requires {', '.join(action.required)})" if action.required else ""
            lines.append(f"   - {action.name}: {action.description}{needs}")

    return "\n".join(lines)


def build_classifier_prompt(tools: list[ToolDefinition]) -> str:
    """
    Build the classifier system prompt from the tool catalog.

    Args:
        tools: Catalog entries, in catalog order.

    Returns:
        Prompt listing every tool, the response format, rules and examples.
    """
    catalog = "\n".join(describe_tool(i, tool) for i, tool in enumerate(tools, start=1))

    examples = []
    for utterance, tool_name, params, confidence in CLASSIFIER_EXAMPLES:
        reply = {
            "shouldCallTool": tool_name is not None,
            "toolName": tool_name,
            "parameters": params,
            "confidence": confidence,
        }
        examples.append(f'User: "{utterance}"\nResponse: {json.dumps(reply)}')

    return "\n\n".join(
        [
            CLASSIFIER_INTRO,
            f"Available tools:\n{catalog}",
            RESPONSE_FORMAT,
            CLASSIFIER_RULES,
            "Examples:\n" + "\n\n".join(examples),
        ]
    )


def classifier_user_message(utterance: str) -> str:
    """User turn sent to the classifier."""
    return f"Analyze this request: {utterance}"
