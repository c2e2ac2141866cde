"""
Data models for the remote tool catalog.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ToolParameter(BaseModel):
    """A named slot of a remote tool. Values always travel as strings."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Query parameter name, exactly as the remote service expects it")
    required: bool = Field(default=False, description="Whether the slot must be filled")
    description: str = Field(default="", description="Slot description for the classifier prompt")


class ToolAction(BaseModel):
    """One action of a unified, action-routed tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    required: tuple[str, ...] = ()
    mutating: bool = False
    clarification: str = ""


class ToolDefinition(BaseModel):
    """
    Immutable description of one remote operation.

    Tools with `actions` take an `action` parameter that selects which
    slots are required and whether the call mutates directory state.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique tool name")
    description: str = Field(description="What the tool does, used as classifier context")
    route: str = Field(description="Fixed path on the remote service, e.g. /Roles/manage")
    parameters: tuple[ToolParameter, ...] = ()
    actions: tuple[ToolAction, ...] = ()
    mutating: bool = False
    timeout_class: Literal["read", "simple"] = "read"
    clarification: str = ""
    default_action: str | None = Field(
        default=None, description="Action used when a call names none"
    )

    @property
    def parameter_names(self) -> list[str]:
        """Declared parameter names, in query order."""
        return [p.name for p in self.parameters]

    def action(self, name: str | None) -> ToolAction | None:
        """Get an action by name."""
        for action in self.actions:
            if action.name == name:
                return action
        return None

    def required_slots(self, action: str | None = None) -> list[str]:
        """
        Slots that must be filled for a call.

        Args:
            action: Action name for action-routed tools.

        Returns:
            Required slot names in declaration order.
        """
        required = [p.name for p in self.parameters if p.required]
        selected = self.action(action)
        if selected is not None:
            required.extend(slot for slot in selected.required if slot not in required)
        return required

    def with_defaults(self, params: dict[str, str]) -> dict[str, str]:
        """Copy of `params` with the default action filled in when none was given."""
        if self.default_action is None or (params.get("action") or "").strip():
            return dict(params)
        return {"action": self.default_action, **{k: v for k, v in params.items() if k != "action"}}

    def missing_slots(self, params: dict[str, str]) -> list[str]:
        """
        Required slots that are absent or blank in `params`.

        For action-routed tools an unknown action is reported as a
        missing `action` slot.
        """
        action = params.get("action")
        missing = [
            slot for slot in self.required_slots(action) if not (params.get(slot) or "").strip()
        ]
        if self.actions and action and self.action(action) is None and "action" not in missing:
            missing.insert(0, "action")
        return missing

    def clarification_for(self, action: str | None = None) -> str:
        """Message asking the user for the slots a call is missing."""
        selected = self.action(action)
        if selected is not None and selected.clarification:
            return selected.clarification
        if self.clarification:
            return self.clarification
        return f"Please provide: {', '.join(self.required_slots(action))}"

    def is_mutating(self, action: str | None = None) -> bool:
        """Whether a call (with the given action) changes directory state."""
        if self.mutating:
            return True
        selected = self.action(action)
        return selected.mutating if selected is not None else False
