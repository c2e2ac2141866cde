"""Configuration system for Rolecall."""

from rolecall.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    clear_config_cache,
    get_config,
    load_config,
    load_yaml_file,
    set_config,
)
from rolecall.config.merger import deep_merge, get_nested_value, set_nested_value
from rolecall.config.schema import (
    AuthConfig,
    Config,
    ConversationConfig,
    ProviderConfig,
    RemoteServiceConfig,
    ResolverConfig,
)

__all__ = [
    "AuthConfig",
    "Config",
    "ConfigurationError",
    "ConversationConfig",
    "ProviderConfig",
    "RemoteServiceConfig",
    "ResolverConfig",
    "apply_env_overrides",
    "clear_config_cache",
    "deep_merge",
    "get_config",
    "get_nested_value",
    "load_config",
    "load_yaml_file",
    "set_config",
    "set_nested_value",
]
