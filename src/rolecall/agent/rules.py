"""
Keyword rules for intent resolution.

Used when the LLM classifier is disabled or its reply is unusable. Rule
groups are checked in a fixed order against the lower-cased utterance and
the first group that matches decides the tool. Slot values are then
scanned from the original tokens so they keep their casing.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from rolecall.agent.models import ResolutionSource, ToolInvocationRequest

logger = logging.getLogger(__name__)

TRAILING_PUNCTUATION = ",.!?;:'\""

# Generic words that are never slot values
STOP_WORDS = frozenset(
    {
        "get", "list", "of", "roles", "assigned", "to", "for", "in", "with", "the",
        "a", "an", "and", "or", "but", "show", "display", "find", "all",
        "application", "applications", "role", "user", "users", "from", "by",
        "on", "at", "is", "are", "was", "were", "associate", "associated",
        "management", "admin", "system", "me", "my",
    }
)

# Words that can sit next to an anchor but never name a role
_NOT_A_ROLE = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "to", "for", "in", "of", "with",
        "from", "by", "on", "at", "is", "are", "was", "were", "app", "application",
        "applications", "role", "roles", "user", "users", "assigned", "associate",
        "associated", "called", "named", "get", "list", "show", "display", "find",
        "all", "assign", "give", "add", "remove", "revoke", "unassign", "take",
        "away", "create", "new", "which", "what", "who", "that", "this", "these",
        "those", "any", "every", "each",
    }
)

APP_ANCHORS = frozenset({"app", "application"})
APP_NAME_ANCHORS = frozenset(
    {"for", "in", "of", "with", "to", "assigned", "associate", "associated"}
)
LOOKAHEAD = 3


def clean_token(token: str) -> str:
    """Strip trailing punctuation from a token."""
    return token.rstrip(TRAILING_PUNCTUATION)


def is_stop_word(token: str) -> bool:
    return clean_token(token).lower() in STOP_WORDS


def _tokens(utterance: str) -> list[str]:
    return [t for t in (clean_token(w) for w in utterance.split()) if t]


def _first_hyphenated(words: list[str], exclude: set[str]) -> str | None:
    for word in words:
        if (
            "-" in word
            and not word.startswith("-")
            and not word.endswith("-")
            and not is_stop_word(word)
            and word not in exclude
        ):
            return word
    return None


def _usable_role(token: str | None) -> bool:
    return bool(token) and token.lower() not in _NOT_A_ROLE


# =============================================================================
# Slot extractors
# =============================================================================


def extract_role_and_app(utterance: str) -> dict[str, str]:
    """
    Extract roleName and appName, e.g. "users with role Manager in app MyApp".

    "role X" is preferred, "X role" is used when the word after "role" is
    not a role name. "app X" / "application X" gives the app. A hyphenated
    word is the last-resort role guess.
    """
    words = _tokens(utterance)
    lowered = [w.lower() for w in words]
    params: dict[str, str] = {}

    for i, word in enumerate(lowered):
        after = words[i + 1] if i + 1 < len(words) else None
        before = words[i - 1] if i > 0 else None

        if word == "role" and "roleName" not in params:
            if _usable_role(after):
                params["roleName"] = after
            elif _usable_role(before):
                params["roleName"] = before
        elif word in ("called", "named") and _usable_role(after) and "roleName" not in params:
            params["roleName"] = after
        elif word in APP_ANCHORS and after and after.lower() not in STOP_WORDS:
            params["appName"] = after

    if "roleName" not in params:
        guess = _first_hyphenated(words, {params.get("appName", "")})
        if guess:
            logger.debug(f"Using hyphenated word as role guess: {guess}")
            params["roleName"] = guess

    return params


def extract_role_assignment(utterance: str) -> dict[str, str]:
    """
    Extract username, appName and roleName for assign/revoke requests.

    "role X", "user X" and "app X" fill their slot; a later anchor of the
    same kind wins. "to X" / "from X" fill the username only when no
    "user X" appears, and "for X" / "in X" fill the app only when no
    "app X" appears.
    """
    words = _tokens(utterance)
    lowered = [w.lower() for w in words]
    explicit: dict[str, str] = {}
    implied: dict[str, str] = {}

    for i, word in enumerate(lowered):
        after = words[i + 1] if i + 1 < len(words) else None
        before = words[i - 1] if i > 0 else None

        if word == "role":
            if _usable_role(after):
                explicit["roleName"] = after
            elif _usable_role(before):
                explicit["roleName"] = before
        elif word == "user" and after and not is_stop_word(after):
            explicit["username"] = after
        elif word in APP_ANCHORS and after and not is_stop_word(after):
            explicit["appName"] = after
        elif word in ("to", "from") and "username" not in implied:
            for candidate in words[i + 1 : i + 1 + LOOKAHEAD]:
                if candidate.lower() in APP_ANCHORS:
                    break
                if not is_stop_word(candidate):
                    implied["username"] = candidate
                    break
        elif word in ("for", "in") and after and "appName" not in implied:
            if not is_stop_word(after) and after.lower() not in APP_ANCHORS:
                implied["appName"] = after

    return {**implied, **explicit}


def extract_app_name(utterance: str) -> dict[str, str]:
    """
    Extract appName for application-role lookups, e.g. "roles for MyApp application".

    Looks after the first preposition-like anchor (up to three words ahead),
    then at "X application", then at any hyphenated word.
    """
    words = _tokens(utterance)
    lowered = [w.lower() for w in words]

    for i, word in enumerate(lowered[:-1]):
        if word not in APP_NAME_ANCHORS:
            continue

        nxt = lowered[i + 1]
        if nxt in APP_ANCHORS:
            # "for app MyApp" or "MyApp for application ..."
            if i + 2 < len(words) and not is_stop_word(words[i + 2]):
                return {"appName": words[i + 2]}
            for j in range(i - 1, max(i - 1 - LOOKAHEAD, -1), -1):
                if not is_stop_word(words[j]):
                    return {"appName": words[j]}
        else:
            if i + 2 < len(words) and lowered[i + 2] in APP_ANCHORS:
                return {"appName": words[i + 1]}
            for candidate in words[i + 1 : i + 1 + LOOKAHEAD]:
                if candidate.lower() in APP_ANCHORS:
                    break
                if not is_stop_word(candidate):
                    return {"appName": candidate}
        break

    for i, word in enumerate(lowered):
        if word in APP_ANCHORS and i > 0 and not is_stop_word(words[i - 1]):
            return {"appName": words[i - 1]}

    guess = _first_hyphenated(words, set())
    return {"appName": guess} if guess else {}


def extract_username(utterance: str) -> dict[str, str]:
    """Extract username from "user X", else the first email-like word."""
    words = _tokens(utterance)
    for i, word in enumerate(words[:-1]):
        if word.lower() == "user" and not is_stop_word(words[i + 1]):
            return {"username": words[i + 1]}
    for word in words:
        if "@" in word:
            return {"username": word}
    return {}


# =============================================================================
# Rule groups
# =============================================================================


@dataclass(frozen=True)
class RuleGroup:
    """One keyword group: if any keyword matches, route to `tool_name`."""

    name: str
    tool_name: str
    keywords: tuple[str, ...]
    fixed: dict[str, str] = field(default_factory=dict)
    extractor: Callable[[str], dict[str, str]] | None = None
    also_matches: Callable[[str], bool] | None = None
    unless: tuple[str, ...] = ()

    def matches(self, lowered: str) -> bool:
        """Whether the lower-cased utterance selects this group."""
        if any(word in lowered for word in self.unless):
            return False
        if any(keyword in lowered for keyword in self.keywords):
            return True
        return self.also_matches is not None and self.also_matches(lowered)

    def build(self, utterance: str) -> dict[str, str]:
        """Slot values for a matched utterance."""
        params = self.extractor(utterance) if self.extractor else {}
        params.update(self.fixed)
        return params


def _roles_with_app(lowered: str) -> bool:
    return "roles" in lowered and ("application" in lowered or "app" in lowered)


def _roles_for_email(lowered: str) -> bool:
    return "roles" in lowered and any("@" in word for word in lowered.split())


# First match wins
RULE_GROUPS: tuple[RuleGroup, ...] = (
    RuleGroup(
        name="users-all",
        tool_name="GetB2CUsers",
        keywords=(
            "all users", "list users", "get users", "show users", "user details",
            "user profile", "azure ad users", "b2c users",
        ),
        fixed={"action": "all"},
    ),
    RuleGroup(
        name="users-by-role",
        tool_name="GetB2CUsers",
        keywords=(
            "users by role", "users in role", "role users", "app role users",
            "application role users", "users assigned to", "users with role",
        ),
        fixed={"action": "by-role"},
        extractor=extract_role_and_app,
    ),
    RuleGroup(
        name="assign-role",
        tool_name="ManageRoles",
        keywords=("assign role", "assign user", "give role", "add role", "role assignment"),
        fixed={"action": "assign-role"},
        extractor=extract_role_assignment,
    ),
    RuleGroup(
        name="revoke-role",
        tool_name="ManageRoles",
        keywords=(
            "revoke role", "remove role", "unassign role", "revoke user", "remove user",
            "take away role", "role revocation", "role removal",
        ),
        fixed={"action": "revoke-role"},
        extractor=extract_role_assignment,
    ),
    RuleGroup(
        name="create-role",
        tool_name="ManageRoles",
        keywords=("create role", "new role", "add app role", "create app role"),
        fixed={"action": "create-role"},
        extractor=extract_role_and_app,
    ),
    RuleGroup(
        name="user-roles",
        tool_name="ManageRoles",
        keywords=("roles for user", "user roles", "roles of user", "roles assigned to user"),
        fixed={"action": "get-user-roles"},
        extractor=extract_username,
        also_matches=_roles_for_email,
    ),
    RuleGroup(
        name="app-roles",
        tool_name="ManageRoles",
        keywords=(
            "application roles", "app roles", "roles for", "get roles", "show roles",
            "list roles", "roles associate",
        ),
        fixed={"action": "get-roles"},
        extractor=extract_app_name,
        also_matches=_roles_with_app,
        unless=("users",),
    ),
    RuleGroup(
        name="owned-applications",
        tool_name="GetB2CApplications",
        keywords=("my applications", "applications i own", "owned applications", "apps i own", "my apps"),
        fixed={"ownedOnly": "true"},
    ),
    RuleGroup(
        name="applications",
        tool_name="GetB2CApplications",
        keywords=(
            "all applications", "list applications", "get applications",
            "show applications", "app list", "applications",
        ),
        fixed={"ownedOnly": "false"},
    ),
    RuleGroup(
        name="weather",
        tool_name="GetWeatherAuthAPI",
        keywords=("weather", "forecast", "temperature"),
    ),
)


class RuleBasedResolver:
    """Deterministic keyword resolver."""

    def __init__(self, groups: tuple[RuleGroup, ...] = RULE_GROUPS):
        self.groups = groups

    def match(self, utterance: str) -> RuleGroup | None:
        """The first rule group the utterance selects, if any."""
        lowered = utterance.lower()
        for group in self.groups:
            if group.matches(lowered):
                return group
        return None

    def resolve(self, utterance: str) -> ToolInvocationRequest | None:
        """
        Resolve an utterance by keyword rules.

        Returns:
            A rules-sourced request (confidence 1.0), or None if no group matches.
        """
        if not utterance or not utterance.strip():
            return None

        group = self.match(utterance)
        if group is None:
            logger.debug("No keyword rule matched")
            return None

        params = group.build(utterance)
        logger.info(f"Keyword rule '{group.name}' selected {group.tool_name} with {params}")
        return ToolInvocationRequest(
            tool_name=group.tool_name,
            parameters=params,
            confidence=1.0,
            source=ResolutionSource.RULES,
        )
