"""Data models for intent resolution."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResolutionSource(str, Enum):
    """Which resolver path produced a request."""

    LLM = "llm"
    RULES = "rules"


class ToolInvocationRequest(BaseModel):
    """A resolved tool call: which tool, with which slot values, how sure."""

    tool_name: str
    parameters: dict[str, str] = Field(default_factory=dict)
    confidence: float = Field(ge=0.0, le=1.0)
    source: ResolutionSource = ResolutionSource.LLM

    def should_execute(self, threshold: float = 0.7) -> bool:
        """
        Whether this request may be executed.

        Rule-based requests are keyword matches and always pass. LLM
        requests need a confidence strictly above the threshold.
        """
        if self.source is ResolutionSource.RULES:
            return True
        return self.confidence > threshold


class ClassificationFailure(ValueError):
    """The classifier reply could not be turned into a valid decision."""

    pass


class ClassifierResponse(BaseModel):
    """Decision returned by the LLM classifier."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    should_call_tool: bool = Field(alias="shouldCallTool")
    tool_name: str | None = Field(default=None, alias="toolName")
    parameters: dict[str, str] = Field(default_factory=dict)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @field_validator("parameters", mode="before")
    @classmethod
    def _stringify_parameters(cls, value: Any) -> Any:
        # Slot values travel as strings; drop nulls, stringify scalars
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        cleaned = {}
        for key, item in value.items():
            if item is None:
                continue
            if isinstance(item, bool):
                cleaned[str(key)] = "true" if item else "false"
            elif isinstance(item, (str, int, float)):
                cleaned[str(key)] = str(item)
            else:
                raise ValueError(f"Parameter '{key}' must be a scalar value")
        return cleaned
