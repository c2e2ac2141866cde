"""
Provider manager for Rolecall.

Chat completion access via LiteLLM, with model aliases and a fallback chain.
The rest of the system only sees `complete_text(messages) -> str`.
"""

import logging
from typing import Any

import litellm
from litellm import acompletion

from rolecall.config.schema import ProviderConfig
from rolecall.providers.exceptions import (
    AllProvidersFailedError,
    AuthenticationError,
    FailureType,
    InvalidRequestError,
    classify_error,
    should_retry,
)
from rolecall.providers.models import CompletionResponse, Message, TokenUsage

logger = logging.getLogger(__name__)

# Drop unsupported params per-provider
litellm.drop_params = True


class ProviderManager:
    """
    Manages chat completions via LiteLLM.

    The configured default model is tried first, then each fallback model
    in order, as long as the failure is one another model could avoid.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config

    def _resolve_model(self, model: str | None) -> str:
        """Resolve a model alias, or None/"default", to a full model name."""
        if model is None or model == "default":
            return self.config.default

        if model in self.config.aliases:
            resolved = self.config.aliases[model]
            logger.debug(f"Resolved alias '{model}' to '{resolved}'")
            return resolved

        return model

    def _model_chain(self, model: str | None) -> list[str]:
        """Primary model followed by unique fallbacks."""
        chain: list[str] = []
        for name in [self._resolve_model(model), *self.config.fallback]:
            resolved = self._resolve_model(name)
            if resolved not in chain:
                chain.append(resolved)
        return chain

    async def complete(
        self,
        messages: list[Message],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> CompletionResponse:
        """
        Send a completion request, walking the fallback chain on failure.

        Args:
            messages: Conversation messages.
            model: Model to use (name, alias, or None for default).
            temperature: Sampling temperature.
            max_tokens: Maximum tokens in response.
            **kwargs: Additional parameters passed to LiteLLM.

        Returns:
            The first successful CompletionResponse.

        Raises:
            AuthenticationError: If the provider rejects the credentials.
            InvalidRequestError: If the request itself is malformed.
            AllProvidersFailedError: If every model in the chain fails.
        """
        request_kwargs: dict[str, Any] = {
            "messages": [msg.to_dict() for msg in messages],
            "temperature": temperature,
            **kwargs,
        }
        if max_tokens:
            request_kwargs["max_tokens"] = max_tokens

        chain = self._model_chain(model)
        failed: list[str] = []
        last_error: Exception | None = None

        for candidate in chain:
            if failed:
                logger.warning(f"Falling back to model: {candidate}")
            else:
                logger.info(f"Completing with model: {candidate}")

            try:
                response = await acompletion(model=candidate, **request_kwargs)
                return self._parse_response(response, candidate)
            except Exception as e:
                failure = classify_error(e)
                logger.warning(f"Model {candidate} failed ({failure.value}): {e}")
                if not should_retry(failure):
                    if failure is FailureType.AUTH_ERROR:
                        raise AuthenticationError(str(e), provider=candidate) from e
                    raise InvalidRequestError(str(e), provider=candidate) from e
                failed.append(candidate)
                last_error = e

        raise AllProvidersFailedError(
            f"All providers failed. Last error: {last_error}",
            failed_providers=failed,
        )

    async def complete_text(self, messages: list[Message], **kwargs: Any) -> str:
        """Complete and return only the reply text."""
        response = await self.complete(messages, **kwargs)
        return response.content

    def _parse_response(self, response: Any, model: str) -> CompletionResponse:
        """Parse a LiteLLM response into the unified format."""
        usage = getattr(response, "usage", None)
        choice = response.choices[0]

        return CompletionResponse(
            content=choice.message.content or "",
            model=model,
            provider=model.split("/")[0] if "/" in model else "unknown",
            usage=TokenUsage(
                input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                output_tokens=getattr(usage, "completion_tokens", 0) or 0,
            ),
            finish_reason=choice.finish_reason or "unknown",
        )


# Singleton instance
_provider_manager: ProviderManager | None = None


def get_provider_manager(reload: bool = False) -> ProviderManager:
    """
    Get the global provider manager instance.

    Args:
        reload: Force recreation of the manager.

    Returns:
        ProviderManager instance.
    """
    global _provider_manager

    if _provider_manager is None or reload:
        from rolecall.config import get_config

        _provider_manager = ProviderManager(get_config(reload=reload).providers)

    return _provider_manager


def clear_provider_manager() -> None:
    """Clear the global provider manager instance."""
    global _provider_manager
    _provider_manager = None
