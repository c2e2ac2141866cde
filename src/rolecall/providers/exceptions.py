"""
Provider exceptions for Rolecall.

Errors raised by the completion service, plus the classification used
to decide whether the next model in the fallback chain should be tried.
"""

from enum import Enum


class FailureType(Enum):
    """Classification of provider failures for fallback decisions."""

    RATE_LIMIT = "rate_limit"
    AUTH_ERROR = "auth_error"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN = "unknown"


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class AuthenticationError(ProviderError):
    """API key invalid or missing."""

    pass


class RateLimitError(ProviderError):
    """Provider rate limit exceeded."""

    pass


class NetworkError(ProviderError):
    """Connection or timeout talking to the provider."""

    pass


class ServerError(ProviderError):
    """Provider returned a 5xx."""

    pass


class InvalidRequestError(ProviderError):
    """Provider rejected the request as malformed."""

    pass


class AllProvidersFailedError(ProviderError):
    """Every model in the fallback chain failed."""

    def __init__(self, message: str, failed_providers: list[str]):
        super().__init__(message)
        self.failed_providers = failed_providers


def classify_error(error: Exception) -> FailureType:
    """
    Classify an exception into a failure type for fallback decisions.

    Args:
        error: The exception to classify.

    Returns:
        The failure type classification.
    """
    from litellm.exceptions import (
        APIConnectionError,
        APIError,
        AuthenticationError as LiteLLMAuthError,
        BadRequestError,
        RateLimitError as LiteLLMRateLimitError,
        ServiceUnavailableError,
        Timeout,
    )

    if isinstance(error, (LiteLLMRateLimitError, RateLimitError)):
        return FailureType.RATE_LIMIT
    if isinstance(error, (LiteLLMAuthError, AuthenticationError)):
        return FailureType.AUTH_ERROR
    if isinstance(error, (APIConnectionError, ServiceUnavailableError, Timeout, NetworkError)):
        return FailureType.NETWORK_ERROR
    if isinstance(error, (BadRequestError, InvalidRequestError)):
        return FailureType.INVALID_REQUEST
    if isinstance(error, ServerError):
        return FailureType.SERVER_ERROR
    if isinstance(error, APIError):
        status = getattr(error, "status_code", None)
        if status and 500 <= status < 600:
            return FailureType.SERVER_ERROR
        if status and 400 <= status < 500:
            return FailureType.INVALID_REQUEST

    return FailureType.UNKNOWN


def should_retry(failure_type: FailureType) -> bool:
    """
    Determine if a failure type should trigger fallback to the next model.

    Auth errors and malformed requests would fail the same way on every
    model, so they stop the chain.
    """
    return failure_type not in {FailureType.AUTH_ERROR, FailureType.INVALID_REQUEST}
