"""
Rolecall Provider Layer.

Chat completion access via LiteLLM with model aliases and a fallback chain.
"""

from rolecall.providers.exceptions import (
    AllProvidersFailedError,
    AuthenticationError,
    FailureType,
    InvalidRequestError,
    NetworkError,
    ProviderError,
    RateLimitError,
    ServerError,
    classify_error,
    should_retry,
)
from rolecall.providers.manager import (
    ProviderManager,
    clear_provider_manager,
    get_provider_manager,
)
from rolecall.providers.models import CompletionResponse, Message, MessageRole, TokenUsage

__all__ = [
    "AllProvidersFailedError",
    "AuthenticationError",
    "CompletionResponse",
    "FailureType",
    "InvalidRequestError",
    "Message",
    "MessageRole",
    "NetworkError",
    "ProviderError",
    "ProviderManager",
    "RateLimitError",
    "ServerError",
    "TokenUsage",
    "classify_error",
    "clear_provider_manager",
    "get_provider_manager",
    "should_retry",
]
