"""
Pydantic configuration schema for Rolecall.

This module defines all configuration models with validation.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SYSTEM_PROMPT = """You are a helpful assistant with access to directory management tools.

You can look up users, applications and application roles, and you can
assign, revoke and create application roles on behalf of the signed-in user.

When a tool result is provided as context, present that data clearly using
tables or lists. Results marked as simulated must be presented as simulated
and never as live directory data. If a request is missing details a tool
needs, ask the user for them."""


# =============================================================================
# General Configuration
# =============================================================================


class GeneralConfig(BaseModel):
    """General settings."""

    model_config = ConfigDict(extra="allow")

    default_profile: str | None = None


# =============================================================================
# Remote Service Configuration
# =============================================================================


class RemoteServiceConfig(BaseModel):
    """HTTP surface of the directory management service."""

    model_config = ConfigDict(extra="allow")

    base_url: str = "http://localhost:5156"
    read_timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for read-heavy calls"
    )
    simple_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for simple calls"
    )
    verify_tls: bool = True


# =============================================================================
# Credential Configuration
# =============================================================================


class AuthConfig(BaseModel):
    """Bearer credential acquisition settings."""

    model_config = ConfigDict(extra="allow")

    scopes: list[str] = Field(
        default_factory=lambda: ["https://graph.microsoft.com/.default"]
    )
    refresh_margin_minutes: int = Field(default=5, ge=0)

    # OAuth2 refresh-token grant
    token_url: str = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"
    tenant: str = "common"
    client_id: str | None = None
    client_secret: str | None = None
    token_timeout: float = Field(default=10.0, gt=0)

    # Seed tokens for CLI sessions
    access_token: str | None = None
    refresh_token: str | None = None
    user_id: str = "local-user"

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(cls, value):
        # A single env value arrives as one space- or comma-separated string
        if isinstance(value, str):
            return [s for s in value.replace(",", " ").split() if s]
        return value

    def resolved_token_url(self) -> str:
        """Token endpoint with the tenant filled in."""
        return self.token_url.replace("{tenant}", self.tenant)


# =============================================================================
# Intent Resolver Configuration
# =============================================================================


class ResolverConfig(BaseModel):
    """Intent resolution settings."""

    model_config = ConfigDict(extra="allow")

    use_llm: bool = True
    confidence_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="LLM classifications must score strictly above this to run a tool",
    )
    model: str = "default"
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)


# =============================================================================
# Provider Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Provider and model configuration."""

    model_config = ConfigDict(extra="allow")

    default: str = "openai/gpt-4o-mini"
    fallback: list[str] = Field(default_factory=list)
    aliases: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# Conversation Configuration
# =============================================================================


class ConversationConfig(BaseModel):
    """Conversation and turn settings."""

    model_config = ConfigDict(extra="allow")

    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    turn_timeout: float = Field(default=120.0, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    model_config = ConfigDict(extra="allow")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value):
        return value.upper() if isinstance(value, str) else value


# =============================================================================
# Root Configuration
# =============================================================================


class Config(BaseModel):
    """Root configuration model for Rolecall."""

    model_config = ConfigDict(extra="allow")

    general: GeneralConfig = Field(default_factory=GeneralConfig)
    remote: RemoteServiceConfig = Field(default_factory=RemoteServiceConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    conversation: ConversationConfig = Field(default_factory=ConversationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def timeout_for(self, timeout_class: str) -> float:
        """Return the remote call timeout for a tool timeout class."""
        if timeout_class == "read":
            return self.remote.read_timeout
        return self.remote.simple_timeout
